"""
AST Scanners for Symbol Usage Detection.

LibCST visitors that determine whether names are actively referenced in the
module body. The ``ImportFixer`` relies on them to decide whether an import
may be pruned and whether an injected import is actually needed.
"""

from typing import Set, Union

import libcst as cst


def get_full_name(node: Union[cst.Name, cst.Attribute]) -> str:
  """
  Recursively resolves a CST Name or Attribute chain to a dot-separated string.

  Args:
    node: The CST node representing the identifier.

  Returns:
    str: The dotted representation (e.g., "testkit.env"), or an empty string
    if the node is not a Name/Attribute chain.

  Example:
    >>> get_full_name(cst.Attribute(value=cst.Name("testkit"), attr=cst.Name("env")))
    'testkit.env'
  """
  if isinstance(node, cst.Name):
    return node.value
  elif isinstance(node, cst.Attribute):
    return f"{get_full_name(node.value)}.{node.attr.value}"
  return ""


class _ImportAwareVisitor(cst.CSTVisitor):
  """Tracks whether traversal is inside an import statement."""

  def __init__(self) -> None:
    self._in_import = False

  def visit_Import(self, node: cst.Import) -> None:
    self._in_import = True

  def leave_Import(self, original_node: cst.Import) -> None:
    self._in_import = False

  def visit_ImportFrom(self, node: cst.ImportFrom) -> None:
    self._in_import = True

  def leave_ImportFrom(self, original_node: cst.ImportFrom) -> None:
    self._in_import = False


class SimpleNameScanner(_ImportAwareVisitor):
  """
  Scans for the usage of a specific identifier outside import statements.

  Attributes:
    target_name (str): The identifier to search for (e.g., "TestPropertyValues").
    found (bool): Set to True as soon as a usage is seen.
  """

  def __init__(self, target_name: str) -> None:
    super().__init__()
    self.target_name = target_name
    self.found = False

  def visit_Name(self, node: cst.Name) -> None:
    if not self._in_import and not self.found:
      if node.value == self.target_name:
        self.found = True


class NameUsageCollector(_ImportAwareVisitor):
  """
  Collects every identifier referenced outside import statements.

  Attribute names (the ``b`` in ``a.b``) are not bindings and are skipped.

  Attributes:
    used (Set[str]): Identifiers seen in the module body.
  """

  def __init__(self) -> None:
    super().__init__()
    self.used: Set[str] = set()

  def visit_Attribute(self, node: cst.Attribute) -> bool:
    node.value.visit(self)
    return False

  def visit_Name(self, node: cst.Name) -> None:
    if not self._in_import:
      self.used.add(node.value)


def collect_used_names(node: cst.CSTNode) -> Set[str]:
  """
  Returns the identifiers referenced outside imports within ``node``.
  """
  collector = NameUsageCollector()
  node.visit(collector)
  return collector.used
