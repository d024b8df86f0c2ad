"""
Import Injection Mixin.

Runs when the module is left: adds a ``from module import Name`` line for
every required name that the rewritten code references but no import binds,
then removes import lines that became exact duplicates. A required name that
an import already binds to a different path is recorded in ``conflicts`` and
left alone.
"""

from typing import List, Set

import libcst as cst

from api_migrator.core.import_fixer.utils import get_signature, header_length, import_from_line, is_import_line
from api_migrator.core.scanners import SimpleNameScanner


class InjectionMixin(cst.CSTTransformer):
  """
  Mixin adding the replacement imports at module level.
  """

  def leave_Module(self, original_node: cst.Module, updated_node: cst.Module) -> cst.Module:
    """
    Inserts missing imports below the module header.

    Args:
        original_node: Original module.
        updated_node: Module after pruning.

    Returns:
        The module with injected and de-duplicated imports.
    """
    injections = self._pending_injections(updated_node)

    body = list(updated_node.body)
    at = header_length(body)
    body[at:at] = injections

    return updated_node.with_changes(body=self._drop_duplicate_imports(body))

  def _pending_injections(self, module: cst.Module) -> List[cst.SimpleStatementLine]:
    lines: List[cst.SimpleStatementLine] = []
    for module_path, name in self.required:
      if name in self._bindings:
        if self._bindings[name] != f"{module_path}.{name}" and self._references(module, name):
          self.conflicts.add((module_path, name))
        continue
      if not self._references(module, name):
        continue

      line = import_from_line(module_path, name)
      signature = get_signature(line)
      if signature in self._injected_code_sigs:
        continue

      self._injected_code_sigs.add(signature)
      self._bindings[name] = f"{module_path}.{name}"
      self.added.add((module_path, name))
      lines.append(line)
    return lines

  @staticmethod
  def _references(module: cst.Module, name: str) -> bool:
    scanner = SimpleNameScanner(name)
    module.visit(scanner)
    return scanner.found

  @staticmethod
  def _drop_duplicate_imports(body: List[cst.BaseStatement]) -> List[cst.BaseStatement]:
    seen: Set[str] = set()
    kept: List[cst.BaseStatement] = []
    for statement in body:
      if is_import_line(statement):
        signature = get_signature(statement)
        if signature in seen:
          continue
        seen.add(signature)
      kept.append(statement)
    return kept
