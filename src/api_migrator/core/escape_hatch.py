"""
Escape Hatch Mechanism for Unmigratable Code.

Statements that match a deprecated API but cannot be migrated are kept
verbatim and wrapped in marker comments, so that a partial migration is never
emitted silently and the remaining work is easy to grep for.
"""

from typing import Union

import libcst as cst


class EscapeHatch:
  """
  Wraps unmigrated statements with standardized comment flags.
  """

  START_MARKER = "# <API_MIGRATOR_SKIPPED>"
  END_MARKER = "# </API_MIGRATOR_SKIPPED>"

  @staticmethod
  def is_marked(node: cst.CSTNode) -> bool:
    """
    Checks whether a statement already carries the start marker.

    Args:
        node: Statement node.

    Returns:
        bool: True if one of its leading lines is the start marker.
    """
    for line in getattr(node, "leading_lines", ()):
      if line.comment is not None and line.comment.value == EscapeHatch.START_MARKER:
        return True
    return False

  @staticmethod
  def mark_failure(node: cst.CSTNode, reason: str) -> Union[cst.CSTNode, cst.FlattenSentinel]:
    """
    Attaches warning comments to the node and appends an end marker.

    Transformation:
        original_stmt()
    Becomes:
        # <API_MIGRATOR_SKIPPED>
        # Reason: ...
        original_stmt()
        # </API_MIGRATOR_SKIPPED>
        ...

    Args:
        node: The statement node to preserve.
        reason: Human-readable explanation of the failure.

    Returns:
        A FlattenSentinel holding the marked node and a footer statement
        carrying the end marker, or the node unchanged if it is already marked
        or cannot carry leading lines.
    """
    if EscapeHatch.is_marked(node) or not hasattr(node, "leading_lines"):
      return node

    header_lines = [
      cst.EmptyLine(comment=cst.Comment(EscapeHatch.START_MARKER)),
      cst.EmptyLine(comment=cst.Comment(f"# Reason: {reason}")),
    ]
    marked_node = node.with_changes(leading_lines=[*header_lines, *node.leading_lines])

    # The Ellipsis statement is a no-op that carries the end marker.
    footer_node = cst.SimpleStatementLine(
      body=[cst.Expr(value=cst.Ellipsis())],
      leading_lines=[cst.EmptyLine(comment=cst.Comment(EscapeHatch.END_MARKER))],
    )

    return cst.FlattenSentinel([marked_node, footer_node])
