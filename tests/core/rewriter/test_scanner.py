"""
Tests for the Statement Scanner.

Runs :func:`scan_statements` on plain function bodies with a spelling-based
matcher and structural equality, independent of metadata resolution.
"""

import textwrap
from typing import List

import libcst as cst
import pytest

from api_migrator.core.errors import MalformedCallError
from api_migrator.core.rewriter.scanner import (
  build_marker,
  context_argument,
  scan_statements,
  statement_call,
  value_argument,
)
from api_migrator.core.scanners import get_full_name


def _body(code: str) -> List[cst.BaseStatement]:
  module = cst.parse_module(textwrap.dedent(code))
  return list(module.body[0].body.body)


def _matches(call: cst.Call) -> bool:
  return get_full_name(call.func) == "Utils.add"


def _equal(a: cst.CSTNode, b: cst.CSTNode) -> bool:
  return a.deep_equals(b)


def _scan(statements, rule, **kwargs):
  return scan_statements(statements, _matches, _equal, rule, **kwargs)


def test_run_of_three_collapses_to_first_statement(env_rule):
  body = _body(
    """
    def f(ctx):
        Utils.add(ctx, "a=1")
        Utils.add(ctx, "b=2")
        Utils.add(ctx, "c=3")
    """
  )
  result = _scan(body, env_rule)

  assert result.coalesced_any
  assert result.statements == [body[0]]
  assert len(result.markers) == 1

  first_call = statement_call(body[0])
  marker = result.markers.get(first_call)
  assert marker.size == 3
  assert marker.template == "TestPropertyValues.of(#{}).and_(#{}).and_(#{}).apply_to(#{})"
  assert len(marker.parameters) == 4
  assert marker.parameters[0] is first_call.args[1].value
  assert marker.parameters[2] is statement_call(body[2]).args[1].value
  assert marker.parameters[3] is first_call.args[0].value


def test_non_matching_statement_breaks_the_run(env_rule):
  body = _body(
    """
    def f(ctx):
        Utils.add(ctx, "a=1")
        x = 1
        Utils.add(ctx, "b=2")
    """
  )
  result = _scan(body, env_rule)

  assert result.statements == body
  assert len(result.markers) == 2
  sizes = sorted(marker.size for _, marker in result.markers.items())
  assert sizes == [1, 1]


def test_distinct_contexts_are_not_merged(env_rule):
  body = _body(
    """
    def f(a, b):
        Utils.add(a, "x=1")
        Utils.add(a, "y=1")
        Utils.add(b, "z=1")
    """
  )
  result = _scan(body, env_rule)

  assert result.statements == [body[0], body[2]]
  assert result.markers.get(statement_call(body[0])).size == 2
  assert result.markers.get(statement_call(body[2])).size == 1


def test_no_matching_calls_leaves_body_untouched(env_rule):
  body = _body(
    """
    def f(ctx):
        other(ctx, "a=1")
        x = Utils.add(ctx, "b=2")
        return x
    """
  )
  result = _scan(body, env_rule)

  assert not result.coalesced_any
  assert result.statements == body
  assert all(a is b for a, b in zip(result.statements, body))
  assert len(result.markers) == 0


def test_three_argument_shape_uses_middle_context(env_rule):
  body = _body(
    """
    def f(loader, ctx):
        Utils.add(ctx, "a=1")
        Utils.add(loader, ctx, "b=2")
    """
  )
  result = _scan(body, env_rule)

  marker = result.markers.get(statement_call(body[0]))
  assert marker.size == 2
  values = [cst.Module([]).code_for_node(p) for p in marker.parameters]
  assert values == ['"a=1"', '"b=2"', "ctx"]


def test_single_argument_call_is_malformed(env_rule):
  body = _body(
    """
    def f(ctx):
        Utils.add(ctx, "a=1")
        Utils.add(ctx)
    """
  )
  with pytest.raises(MalformedCallError) as excinfo:
    _scan(body, env_rule)

  assert excinfo.value.call is statement_call(body[1])


def test_line_lookup_is_stored_on_marker(env_rule):
  body = _body(
    """
    def f(ctx):
        Utils.add(ctx, "a=1")
    """
  )
  result = _scan(body, env_rule, line_of=lambda node: 42)
  assert result.markers.get(statement_call(body[0])).line == 42


def test_statement_call_shapes():
  body = _body(
    """
    def f(ctx):
        Utils.add(ctx, "a")
        Utils.add(ctx, "a"); Utils.add(ctx, "b")
        y = Utils.add(ctx, "a")
    """
  )
  assert isinstance(statement_call(body[0]), cst.Call)
  assert statement_call(body[1]) is None
  assert statement_call(body[2]) is None


def test_argument_helpers():
  call = cst.parse_expression("add(loader, ctx, value)")
  assert context_argument(call).value == "ctx"
  assert value_argument(call).value == "value"

  two = cst.parse_expression("add(ctx, value)")
  assert context_argument(two).value == "ctx"
  assert value_argument(two).value == "value"

  with pytest.raises(MalformedCallError):
    value_argument(cst.parse_expression("add()"))


@pytest.mark.parametrize(
  "source",
  [
    "add(ctx, *pairs)",
    "add(ctx, **pairs)",
    "add(*args)",
    'add(pair="a=1", context=ctx)',
    'add(ctx, pair="a=1")',
    'add(loader, ctx, value="a=1")',
    'add(ctx, "a=1", "b=2", "c=3")',
  ],
)
def test_unrecognized_argument_shapes_are_malformed(source):
  call = cst.parse_expression(source)
  with pytest.raises(MalformedCallError) as excinfo:
    context_argument(call)
  assert excinfo.value.call is call
  with pytest.raises(MalformedCallError):
    value_argument(call)


def test_build_marker_rejects_empty_batch(env_rule):
  with pytest.raises(ValueError):
    build_marker([], env_rule)
