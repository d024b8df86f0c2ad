"""
Statement Scanner.

Walks the statement list of one function body and collapses each run of
consecutive deprecated calls that share a context argument into its first
member, recording a :class:`RewriteMarker` for the later expansion pass.

The scanner is a pure function over statements: matching and equality are
supplied by the caller so that it can run against any resolution strategy.
"""

from dataclasses import dataclass, field
from typing import Callable, List, Optional, Sequence

import libcst as cst

from api_migrator.core.errors import MalformedCallError
from api_migrator.core.markers import MarkerTable, RewriteMarker
from api_migrator.rules.schema import CoalesceRule

CallMatcher = Callable[[cst.Call], bool]
Equality = Callable[[cst.CSTNode, cst.CSTNode], bool]
LineLookup = Callable[[cst.CSTNode], Optional[int]]


@dataclass
class ScanResult:
  """
  Output of :func:`scan_statements`.

  Attributes:
      statements: New statement list; each coalesced run is reduced to its first member.
      markers: Markers keyed by the first call of each run.
      coalesced_any: True if at least one run was flushed.
  """

  statements: List[cst.BaseStatement] = field(default_factory=list)
  markers: MarkerTable = field(default_factory=MarkerTable)
  coalesced_any: bool = False


def statement_call(statement: cst.CSTNode) -> Optional[cst.Call]:
  """
  Returns the call if the statement consists of a single call expression.

  ``foo(a, b)`` qualifies; ``x = foo(a, b)`` and ``foo(a); bar(b)`` do not.
  """
  if isinstance(statement, cst.SimpleStatementLine) and len(statement.body) == 1:
    small = statement.body[0]
    if isinstance(small, cst.Expr) and isinstance(small.value, cst.Call):
      return small.value
  return None


def context_argument(call: cst.Call) -> cst.BaseExpression:
  """
  Extracts the argument naming the object the call mutates.

  The three-argument shape carries it at index 1, the two-argument shape at index 0.

  Raises:
      MalformedCallError: If the call is not a plain positional 2- or 3-argument call.
  """
  _require_shape(call)
  return call.args[1 if len(call.args) == 3 else 0].value


def value_argument(call: cst.Call) -> cst.BaseExpression:
  """
  Extracts the argument carrying the contributed datum.

  The three-argument shape carries it at index 2, the two-argument shape at index 1.

  Raises:
      MalformedCallError: If the call is not a plain positional 2- or 3-argument call.
  """
  _require_shape(call)
  return call.args[2 if len(call.args) == 3 else 1].value


def _require_shape(call: cst.Call) -> None:
  if len(call.args) < 2:
    raise MalformedCallError(
      f"Deprecated call has {len(call.args)} argument(s); at least 2 are required",
      call=call,
    )
  if len(call.args) > 3:
    raise MalformedCallError(
      f"Deprecated call has {len(call.args)} arguments; only the 2- and 3-argument forms can be migrated",
      call=call,
    )
  for arg in call.args:
    if arg.star or arg.keyword is not None:
      raise MalformedCallError(
        "Deprecated call uses keyword or unpacked arguments; only positional arguments can be migrated",
        call=call,
      )


def build_marker(batch: Sequence[cst.Call], rule: CoalesceRule, line: Optional[int] = None) -> RewriteMarker:
  """
  Creates the marker for a flushed batch.

  Parameters are the value argument of every member followed by the context
  argument of the first member.
  """
  if not batch:
    raise ValueError("Cannot build a marker for an empty batch")
  parameters = [value_argument(call) for call in batch]
  parameters.append(context_argument(batch[0]))
  return RewriteMarker(
    template=rule.template_for(len(batch)),
    parameters=tuple(parameters),
    size=len(batch),
    line=line,
  )


def scan_statements(
  statements: Sequence[cst.BaseStatement],
  matches: CallMatcher,
  equal: Equality,
  rule: CoalesceRule,
  line_of: Optional[LineLookup] = None,
) -> ScanResult:
  """
  Coalesces runs of matching calls within one statement list.

  Args:
      statements: Statements of a function body, in order.
      matches: Predicate identifying calls of the deprecated signature family.
      equal: Semantic equality used to compare context arguments.
      rule: Rule providing the replacement template.
      line_of: Optional lookup of a statement's source line, stored on markers.

  Returns:
      ScanResult: The collapsed statement list and its markers.

  Raises:
      MalformedCallError: If a matching call is not a recognized argument shape.
  """
  result = ScanResult()
  batch: List[cst.Call] = []
  owners: List[cst.BaseStatement] = []

  def flush() -> None:
    line = line_of(owners[0]) if line_of else None
    result.markers.attach(batch[0], build_marker(batch, rule, line))
    result.statements.append(owners[0])
    result.coalesced_any = True
    batch.clear()
    owners.clear()

  for statement in statements:
    call = statement_call(statement)
    if call is not None and matches(call):
      context = context_argument(call)
      if batch and not equal(context, context_argument(batch[0])):
        flush()
      batch.append(call)
      owners.append(statement)
    else:
      if batch:
        flush()
      result.statements.append(statement)

  if batch:
    flush()

  return result
