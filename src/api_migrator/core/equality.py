"""
Semantic Equality of Expressions.

Decides whether two expression subtrees from the same module denote the same
value regardless of surface syntax. Formatting (whitespace, parentheses,
trailing commas) is ignored, literals compare by their evaluated value, and
variable references compare by the declarations LibCST's ``ScopeProvider``
resolves them to rather than by spelling.

The check is total: it never raises. A reference that cannot be resolved is
unequal to everything except the very same node object.
"""

import dataclasses
from typing import Any, FrozenSet, Mapping, Optional

import libcst as cst
from libcst.metadata import BaseAssignment, Scope

# Fields that only carry formatting.
_FORMATTING_FIELDS = frozenset(
  {
    "lpar",
    "rpar",
    "comma",
    "equal",
    "semicolon",
    "leading_lines",
    "header",
    "footer",
  }
)


class SemanticEquality:
  """
  Binding-aware structural comparison of LibCST expressions.

  Attributes:
      scopes: Scope metadata for the module the expressions belong to, as
          returned by ``MetadataWrapper.resolve(ScopeProvider)``.
  """

  def __init__(self, scopes: Mapping[cst.CSTNode, Optional[Scope]]) -> None:
    self.scopes = scopes

  def __call__(self, a: cst.CSTNode, b: cst.CSTNode) -> bool:
    return self.equal(a, b)

  def equal(self, a: cst.CSTNode, b: cst.CSTNode) -> bool:
    """
    Compares two subtrees.

    Args:
        a: First expression.
        b: Second expression.

    Returns:
        bool: True if both denote the same value.
    """
    if a is b:
      return True
    if type(a) is not type(b):
      return False

    if isinstance(a, cst.Name):
      return self._same_binding(a, b)  # type: ignore[arg-type]

    if isinstance(a, cst.Attribute):
      return a.attr.value == b.attr.value and self.equal(a.value, b.value)  # type: ignore[attr-defined]

    if isinstance(a, cst.Arg):
      if _keyword(a) != _keyword(b) or a.star != b.star:  # type: ignore[attr-defined]
        return False
      return self.equal(a.value, b.value)  # type: ignore[attr-defined]

    if isinstance(a, (cst.SimpleString, cst.Integer, cst.Float, cst.Imaginary)):
      return a.evaluated_value == b.evaluated_value  # type: ignore[attr-defined]

    if isinstance(a, cst.ConcatenatedString):
      left, right = a.evaluated_value, b.evaluated_value  # type: ignore[attr-defined]
      if left is not None and right is not None:
        return left == right

    return self._equal_fields(a, b)

  def _equal_fields(self, a: cst.CSTNode, b: cst.CSTNode) -> bool:
    for field in dataclasses.fields(a):
      if field.name in _FORMATTING_FIELDS or field.name.startswith("whitespace"):
        continue
      if not self._equal_values(getattr(a, field.name), getattr(b, field.name)):
        return False
    return True

  def _equal_values(self, left: Any, right: Any) -> bool:
    if isinstance(left, cst.CSTNode) and isinstance(right, cst.CSTNode):
      return self.equal(left, right)
    if isinstance(left, (list, tuple)) and isinstance(right, (list, tuple)):
      if len(left) != len(right):
        return False
      return all(self._equal_values(x, y) for x, y in zip(left, right))
    if isinstance(left, cst.CSTNode) or isinstance(right, cst.CSTNode):
      return False
    return left == right

  def _same_binding(self, a: cst.Name, b: cst.Name) -> bool:
    left = self._referents(a)
    if not left:
      return False
    return left == self._referents(b)

  def _referents(self, node: cst.Name) -> FrozenSet[BaseAssignment]:
    scope = self.scopes.get(node)
    if scope is None:
      return frozenset()

    found = set()
    for access in scope.accesses[node]:
      if access.node is node:
        found.update(access.referents)
    return frozenset(found)


def _keyword(arg: cst.Arg) -> Optional[str]:
  return arg.keyword.value if arg.keyword is not None else None
