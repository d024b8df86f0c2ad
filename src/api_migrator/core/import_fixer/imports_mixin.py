"""
Import Pruning Mixin.

Handles ``Import`` and ``ImportFrom`` nodes: drops aliases listed as prunable
whose bound name is no longer referenced, and records every name the
remaining imports bind.
"""

from typing import List, Union

import libcst as cst

from api_migrator.core.import_fixer.utils import get_signature
from api_migrator.core.scanners import get_full_name


class ImportMixin(cst.CSTTransformer):
  """
  Mixin for processing Import statements.
  """

  def _is_unused(self, bound_name: str) -> bool:
    return bound_name not in self._used_names

  def leave_Import(self, original_node: cst.Import, updated_node: cst.Import) -> Union[cst.Import, cst.RemovalSentinel]:
    """
    Prunes ``import module.Name [as alias]`` and ``import module [as alias]``
    statements that point at a prunable reference and are no longer used.
    """
    prunable_paths = {f"{module}.{name}": (module, name) for module, name in self.prunable}
    prunable_paths.update({module: (module, name) for module, name in self.prunable})

    kept: List[cst.ImportAlias] = []
    for alias in updated_node.names:
      full_name = get_full_name(alias.name)
      ref = prunable_paths.get(full_name)
      if ref is not None and self._is_unused(self._bound_name(alias)):
        self.removed.add(ref)
        continue
      self._track_definition(alias)
      kept.append(alias)

    if not kept:
      return cst.RemoveFromParent()
    if len(kept) == len(updated_node.names):
      self._injected_code_sigs.add(get_signature(updated_node))
      return updated_node

    kept[-1] = kept[-1].with_changes(comma=cst.MaybeSentinel.DEFAULT)
    result = updated_node.with_changes(names=kept)
    self._injected_code_sigs.add(get_signature(result))
    return result

  def leave_ImportFrom(
    self, original_node: cst.ImportFrom, updated_node: cst.ImportFrom
  ) -> Union[cst.ImportFrom, cst.RemovalSentinel]:
    """
    Prunes ``from module import Name [as alias]`` entries that are no longer used.
    """
    if isinstance(updated_node.names, cst.ImportStar):
      return updated_node
    if not updated_node.module or updated_node.relative:
      prefix = "." * len(updated_node.relative) + (get_full_name(updated_node.module) if updated_node.module else "")
      for alias in updated_node.names:
        self._track_definition(alias, module=prefix)
      return updated_node

    module_name = get_full_name(updated_node.module)

    kept: List[cst.ImportAlias] = []
    for alias in updated_node.names:
      ref = (module_name, get_full_name(alias.name))
      if ref in self.prunable and self._is_unused(self._bound_name(alias)):
        self.removed.add(ref)
        continue
      self._track_definition(alias, module=module_name)
      kept.append(alias)

    if not kept:
      return cst.RemoveFromParent()
    if len(kept) == len(updated_node.names):
      self._injected_code_sigs.add(get_signature(updated_node))
      return updated_node

    kept[-1] = kept[-1].with_changes(comma=cst.MaybeSentinel.DEFAULT)
    result = updated_node.with_changes(names=kept)
    self._injected_code_sigs.add(get_signature(result))
    return result
