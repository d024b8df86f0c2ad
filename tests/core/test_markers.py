"""
Tests for the marker side-table.
"""

import libcst as cst

from api_migrator.core.markers import MarkerTable, RewriteMarker


def _marker(size: int = 1) -> RewriteMarker:
  return RewriteMarker(template="T.of(#{}).apply_to(#{})", parameters=(cst.Name("a"), cst.Name("ctx")), size=size)


def test_markers_are_keyed_by_identity():
  first = cst.parse_expression("add(ctx, a)")
  twin = cst.parse_expression("add(ctx, a)")
  table = MarkerTable()
  table.attach(first, _marker())

  assert first in table
  assert twin not in table
  assert table.get(twin) is None


def test_pop_and_clear():
  call = cst.parse_expression("add(ctx, a)")
  other = cst.parse_expression("add(ctx, b)")
  table = MarkerTable()
  table.attach(call, _marker(1))
  table.attach(other, _marker(2))

  assert len(table) == 2
  assert table.pop(call).size == 1
  assert table.pop(call) is None
  assert [marker.size for _, marker in table.items()] == [2]

  table.clear()
  assert not table


def test_update_merges_tables():
  call = cst.parse_expression("add(ctx, a)")
  source = MarkerTable()
  source.attach(call, _marker())
  target = MarkerTable()
  target.update(source)
  assert call in target
