"""
Coalescing Scan Pass (pass 1).

Applies :func:`scan_statements` to the body of every function and method in
a module. Callee names are resolved through LibCST's ``QualifiedNameProvider``
so aliased and dotted imports of the deprecated API are recognized, and
context arguments are compared with :class:`SemanticEquality` over
``ScopeProvider`` metadata.

Metadata only exists for the nodes of the wrapped input tree, so scanning runs
on each function's *original* statements; the resulting statement list is then
mapped back onto the updated statements (which may contain already rewritten
nested functions) and the markers are re-keyed to the calls that end up in
the output tree.
"""

from typing import Collection, Dict, List, Optional

import libcst as cst
from libcst.metadata import (
  MetadataWrapper,
  PositionProvider,
  QualifiedName,
  QualifiedNameProvider,
  ScopeProvider,
)

from api_migrator.core.equality import SemanticEquality
from api_migrator.core.errors import MalformedCallError
from api_migrator.core.escape_hatch import EscapeHatch
from api_migrator.core.rewriter.context import RewriterContext
from api_migrator.core.rewriter.interface import RewriterPass
from api_migrator.core.rewriter.scanner import scan_statements, statement_call
from api_migrator.utils.node_diff import statement_summary


class CallMatcher:
  """
  Matches calls whose callee resolves to a given fully-qualified name.
  """

  def __init__(self, qualified_name: str) -> None:
    self.qualified_name = qualified_name

  def matches(self, qualified_names: Collection[QualifiedName]) -> bool:
    """
    Args:
        qualified_names: ``QualifiedName`` entries resolved for ``call.func``.

    Returns:
        bool: True if any resolved name equals the configured name.
    """
    return any(q.name == self.qualified_name for q in qualified_names)


class ScanPass(RewriterPass):
  """
  Pass collapsing runs of deprecated calls and recording rewrite markers.
  """

  name = "scan"

  def transform(self, module: cst.Module, context: RewriterContext) -> cst.Module:
    """
    Executes the scan over the module.

    Args:
        module: The source CST.
        context: Shared state; receives markers, diagnostics and the
            ``expansion_required`` flag.

    Returns:
        The transformed CST.
    """
    wrapper = MetadataWrapper(module)
    transformer = ScanTransformer(context)
    return wrapper.visit(transformer)


class ScanTransformer(cst.CSTTransformer):
  """
  LibCST Transformer running the statement scanner per function body.
  """

  METADATA_DEPENDENCIES = (ScopeProvider, QualifiedNameProvider, PositionProvider)

  def __init__(self, context: RewriterContext) -> None:
    super().__init__()
    self.context = context
    self.matcher = CallMatcher(context.rule.deprecated_call)
    self._names: List[str] = []
    self._equality: Optional[SemanticEquality] = None

  # --- Qualified name tracking ---

  def visit_ClassDef(self, node: cst.ClassDef) -> Optional[bool]:
    self._names.append(node.name.value)
    return True

  def leave_ClassDef(self, original_node: cst.ClassDef, updated_node: cst.ClassDef) -> cst.ClassDef:
    self._names.pop()
    return updated_node

  def visit_FunctionDef(self, node: cst.FunctionDef) -> Optional[bool]:
    self._names.append(node.name.value)
    return True

  # --- Helpers ---

  def _matches(self, call: cst.Call) -> bool:
    names = self.get_metadata(QualifiedNameProvider, call.func, set())
    return self.matcher.matches(names)

  def _equal(self, a: cst.CSTNode, b: cst.CSTNode) -> bool:
    if self._equality is None:
      self._equality = SemanticEquality(self.metadata[ScopeProvider])
    return self._equality.equal(a, b)

  def _line_of(self, node: cst.CSTNode) -> Optional[int]:
    position = self.get_metadata(PositionProvider, node, None)
    return position.start.line if position else None

  # --- Function bodies ---

  def leave_FunctionDef(self, original_node: cst.FunctionDef, updated_node: cst.FunctionDef) -> cst.FunctionDef:
    """
    Coalesces deprecated call runs in the function body.

    On a malformed call the body is left exactly as it was and a warning is
    reported; other functions are still processed.
    """
    function_name = ".".join(self._names)
    self._names.pop()

    if not isinstance(original_node.body, cst.IndentedBlock):
      return updated_node

    originals = list(original_node.body.body)
    updated = list(updated_node.body.body)

    try:
      result = scan_statements(originals, self._matches, self._equal, self.context.rule, line_of=self._line_of)
    except MalformedCallError as e:
      return self._handle_malformed(e, function_name, originals, updated_node)

    if not result.coalesced_any:
      return updated_node

    counterpart: Dict[cst.BaseStatement, cst.BaseStatement] = dict(zip(originals, updated))
    new_body = []
    for statement in result.statements:
      new_statement = counterpart[statement]
      new_body.append(new_statement)

      original_call = statement_call(statement)
      marker = result.markers.get(original_call) if original_call is not None else None
      if marker is not None:
        self.context.markers.attach(statement_call(new_statement), marker)  # type: ignore[arg-type]

    self.context.coalesced += len(result.markers)
    self.context.expansion_required = True

    return updated_node.with_changes(body=updated_node.body.with_changes(body=new_body))

  def _handle_malformed(
    self,
    error: MalformedCallError,
    function_name: str,
    originals: List[cst.BaseStatement],
    updated_node: cst.FunctionDef,
  ) -> cst.FunctionDef:
    index = next(
      (i for i, stmt in enumerate(originals) if error.call is not None and statement_call(stmt) is error.call),
      None,
    )
    statement = originals[index] if index is not None else None

    self.context.report(
      str(error),
      severity="warning",
      function=function_name,
      line=self._line_of(statement) if statement is not None else None,
      statement=statement_summary(statement) if statement is not None else None,
    )

    if index is None or not self.context.config.mark_failures:
      return updated_node

    body = list(updated_node.body.body)
    marked = EscapeHatch.mark_failure(body[index], str(error))
    if isinstance(marked, cst.FlattenSentinel):
      body[index : index + 1] = list(marked.nodes)
    else:
      body[index] = marked
    return updated_node.with_changes(body=updated_node.body.with_changes(body=body))
