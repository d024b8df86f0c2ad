"""
Helpers shared by the import fixer mixins.
"""

from typing import Sequence

import libcst as cst

from api_migrator.utils.node_diff import capture_node_source


def import_from_line(module: str, name: str) -> cst.SimpleStatementLine:
  """
  Builds ``from module import name`` as a standalone statement line.

  Args:
      module (str): Dotted module path, e.g. ``boot.test.util``.
      name (str): Imported identifier.

  Returns:
      cst.SimpleStatementLine: The import statement.
  """
  module_node = cst.parse_expression(module)
  if not isinstance(module_node, (cst.Name, cst.Attribute)):
    raise ValueError(f"Not a dotted module path: {module!r}")
  alias = cst.ImportAlias(name=cst.Name(name))
  return cst.SimpleStatementLine(body=[cst.ImportFrom(module=module_node, names=[alias])])


def get_signature(node: cst.CSTNode) -> str:
  """
  Whitespace-insensitive text of an import, used to detect duplicates.

  Leading comments and blank lines of a statement line are not part of the
  signature.
  """
  if isinstance(node, cst.SimpleStatementLine):
    node = node.with_changes(leading_lines=[])
  return " ".join(capture_node_source(node).split())


def _is_string_statement(node: cst.BaseStatement) -> bool:
  return (
    isinstance(node, cst.SimpleStatementLine)
    and len(node.body) == 1
    and isinstance(node.body[0], cst.Expr)
    and isinstance(node.body[0].value, (cst.SimpleString, cst.ConcatenatedString))
  )


def _is_future_line(node: cst.BaseStatement) -> bool:
  if not isinstance(node, cst.SimpleStatementLine):
    return False
  return any(
    isinstance(small, cst.ImportFrom) and isinstance(small.module, cst.Name) and small.module.value == "__future__"
    for small in node.body
  )


def header_length(body: Sequence[cst.BaseStatement]) -> int:
  """
  Counts the statements that must stay above injected imports.

  That is the module docstring (first statement only) followed by any
  ``from __future__ import ...`` lines.

  Args:
      body: Module body statements.

  Returns:
      int: Index at which new imports are inserted.
  """
  index = 1 if body and _is_string_statement(body[0]) else 0
  while index < len(body) and _is_future_line(body[index]):
    index += 1
  return index


def is_import_line(node: cst.CSTNode) -> bool:
  """True for a simple statement line made only of imports."""
  if not isinstance(node, cst.SimpleStatementLine) or not node.body:
    return False
  return all(isinstance(small, (cst.Import, cst.ImportFrom)) for small in node.body)
