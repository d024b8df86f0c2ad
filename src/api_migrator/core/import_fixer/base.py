"""
Base Import Fixer Logic.

Defines the base class for the ImportFixer, holding the requested additions
and removals and the state collected while the module is traversed.
"""

from typing import Dict, Iterable, Optional, Set, Tuple

import libcst as cst

from api_migrator.core.scanners import collect_used_names, get_full_name

# (module, name) as in ``from module import name``.
ImportRef = Tuple[str, str]


class BaseImportFixer(cst.CSTTransformer):
  """
  Base class for import manipulation.

  Attributes:
      required: Imports that must be present after the fix.
      prunable: Imports to remove when their bound name is no longer used.
      conflicts: Required imports whose name is already bound to something else.
  """

  def __init__(self, required: Iterable[ImportRef] = (), prunable: Iterable[ImportRef] = ()) -> None:
    """
    Initializes the fixer state.

    Args:
        required: ``(module, name)`` pairs to import if not already bound.
        prunable: ``(module, name)`` pairs to drop if unused.
    """
    super().__init__()
    self.required = list(dict.fromkeys(required))
    self.prunable: Set[ImportRef] = set(prunable)

    # State Tracking
    self._used_names: Set[str] = set()
    self._bindings: Dict[str, str] = {}
    self._injected_code_sigs: Set[str] = set()
    self.removed: Set[ImportRef] = set()
    self.added: Set[ImportRef] = set()
    self.conflicts: Set[ImportRef] = set()

  def visit_Module(self, node: cst.Module) -> Optional[bool]:
    self._used_names = collect_used_names(node)
    return True

  def _track_definition(self, alias_node: cst.ImportAlias, module: Optional[str] = None) -> None:
    """
    Records the name an import binds and the dotted path it binds to.

    ``from m import N as x`` records x -> m.N; ``import a.b as c`` records
    c -> a.b; ``import a.b`` records a -> a.

    Args:
        alias_node: The CST ImportAlias node.
        module: Source module for ``from`` imports.
    """
    bound = self._bound_name(alias_node)
    full_name = get_full_name(alias_node.name)
    if module is not None:
      self._bindings[bound] = f"{module}.{full_name}"
    elif alias_node.asname:
      self._bindings[bound] = full_name
    else:
      self._bindings[bound] = bound

  @staticmethod
  def _bound_name(alias_node: cst.ImportAlias) -> str:
    if alias_node.asname:
      target = alias_node.asname.name
      if isinstance(target, cst.Name):
        return target.value
    return get_full_name(alias_node.name).split(".")[0]
