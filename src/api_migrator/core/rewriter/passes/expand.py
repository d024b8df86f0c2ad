"""
Marker Expansion Pass (pass 2).

Replaces every call carrying a :class:`RewriteMarker` with the expression
built from the marker's template and parameters.

The annotated tree is wrapped with ``unsafe_skip_copy=True``: markers are keyed
by node identity and a copied tree would orphan them.

A :class:`TemplateBuildError` is fatal for the file. The failing call site is
reported and no further markers are expanded; the engine then discards the
partially rewritten tree.
"""

from typing import List, Optional

import libcst as cst
from libcst.metadata import MetadataWrapper, ScopeProvider

from api_migrator.core import template
from api_migrator.core.errors import TemplateBuildError
from api_migrator.core.rewriter.context import RewriterContext
from api_migrator.core.rewriter.interface import RewriterPass
from api_migrator.utils.node_diff import statement_summary


class ExpandPass(RewriterPass):
  """
  Pass consuming rewrite markers.
  """

  name = "expand"

  def applies(self, context: RewriterContext) -> bool:
    return context.expansion_required and not context.expansion_failed

  def transform(self, module: cst.Module, context: RewriterContext) -> cst.Module:
    """
    Expands all markers in the module.

    Args:
        module: The annotated CST produced by the scan pass.
        context: Shared state holding the marker side-table.

    Returns:
        The CST with marked calls replaced.
    """
    if not context.markers:
      return module

    wrapper = MetadataWrapper(module, unsafe_skip_copy=True)
    transformer = ExpandTransformer(context)
    result = wrapper.visit(transformer)
    context.markers.clear()
    return result


class ExpandTransformer(cst.CSTTransformer):
  """
  LibCST Transformer substituting marked calls.
  """

  METADATA_DEPENDENCIES = (ScopeProvider,)

  def __init__(self, context: RewriterContext) -> None:
    super().__init__()
    self.context = context
    self._names: List[str] = []

  def visit_ClassDef(self, node: cst.ClassDef) -> Optional[bool]:
    self._names.append(node.name.value)
    return True

  def leave_ClassDef(self, original_node: cst.ClassDef, updated_node: cst.ClassDef) -> cst.ClassDef:
    self._names.pop()
    return updated_node

  def visit_FunctionDef(self, node: cst.FunctionDef) -> Optional[bool]:
    self._names.append(node.name.value)
    return True

  def leave_FunctionDef(self, original_node: cst.FunctionDef, updated_node: cst.FunctionDef) -> cst.FunctionDef:
    self._names.pop()
    return updated_node

  def leave_Call(self, original_node: cst.Call, updated_node: cst.Call) -> cst.BaseExpression:
    """
    Builds the replacement for a marked call.
    """
    if self.context.expansion_failed:
      return updated_node

    marker = self.context.markers.pop(original_node)
    if marker is None:
      return updated_node

    scope = self.get_metadata(ScopeProvider, original_node, None)
    try:
      replacement = template.build(marker.template, scope, marker.parameters)
    except TemplateBuildError as e:
      self.context.expansion_failed = True
      self.context.report(
        f"Cannot expand coalesced call: {e}",
        severity="error",
        function=".".join(self._names) or None,
        line=marker.line,
        statement=statement_summary(original_node),
      )
      return updated_node

    self.context.expanded += 1
    return replacement
