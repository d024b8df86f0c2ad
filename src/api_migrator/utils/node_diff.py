"""
Detached Node Rendering.

Renders individual LibCST nodes to source text without serializing the whole
module. Used for diagnostics (showing the offending statement) and for import
deduplication signatures.
"""

import libcst as cst

# Empty module supplying default formatting for detached nodes.
_RENDER_CTX = cst.parse_module("")


def capture_node_source(node: cst.CSTNode) -> str:
  """Source text of a node that may be detached from any module."""
  return _RENDER_CTX.code_for_node(node)


def statement_summary(node: cst.CSTNode, limit: int = 120) -> str:
  """
  Renders a node as a single trimmed line for diagnostics.

  Args:
      node: Statement or expression node.
      limit: Maximum length before the text is elided.

  Returns:
      str: Whitespace-collapsed source text.
  """
  if isinstance(node, cst.SimpleStatementLine):
    node = node.with_changes(leading_lines=[])
  text = " ".join(capture_node_source(node).split())
  if len(text) > limit:
    text = text[: limit - 3] + "..."
  return text
