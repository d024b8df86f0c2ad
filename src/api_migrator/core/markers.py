"""
Pending-rewrite markers.

LibCST nodes cannot carry opaque metadata, so markers are stored in a
side-table keyed by the identity of the marked ``cst.Call``. LibCST nodes
hash and compare by identity, which makes the node itself a safe key as long
as the tree that owns it is alive.
"""

from dataclasses import dataclass
from typing import Dict, Iterator, Optional, Tuple

import libcst as cst


@dataclass(frozen=True)
class RewriteMarker:
  """
  Describes the replacement for one coalesced batch.

  Attributes:
      template: Positional template, e.g. ``T.of(#{}).and_(#{}).apply_to(#{})``.
      parameters: Value argument of each batch member, then the shared context.
      size: Number of calls absorbed by the marker.
      line: Source line of the first batch member, if known.
  """

  template: str
  parameters: Tuple[cst.BaseExpression, ...]
  size: int
  line: Optional[int] = None


class MarkerTable:
  """
  Side-table mapping marked call nodes to their markers.
  """

  def __init__(self) -> None:
    self._markers: Dict[cst.Call, RewriteMarker] = {}

  def attach(self, call: cst.Call, marker: RewriteMarker) -> None:
    self._markers[call] = marker

  def get(self, call: cst.CSTNode) -> Optional[RewriteMarker]:
    return self._markers.get(call)  # type: ignore[call-overload]

  def pop(self, call: cst.CSTNode) -> Optional[RewriteMarker]:
    return self._markers.pop(call, None)  # type: ignore[call-overload]

  def update(self, other: "MarkerTable") -> None:
    self._markers.update(other._markers)

  def clear(self) -> None:
    self._markers.clear()

  def items(self) -> Iterator[Tuple[cst.Call, RewriteMarker]]:
    return iter(list(self._markers.items()))

  def __len__(self) -> int:
    return len(self._markers)

  def __bool__(self) -> bool:
    return bool(self._markers)

  def __contains__(self, call: object) -> bool:
    return call in self._markers
