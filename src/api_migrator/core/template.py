"""
Positional Expression Templates.

Builds replacement expressions from templates such as
``TestPropertyValues.of(#{}).and_(#{}).apply_to(#{})``. Each ``#{}`` is bound,
in order, to one parameter expression taken from the original call site, so
references to locals keep pointing at the same bindings.

Parsing a template is comparatively expensive, so compiled templates are
memoized in a thread-local cache: each worker thread owns its own cache and
no synchronization is needed. Compiled templates are immutable LibCST trees.
"""

import threading
from dataclasses import dataclass
from typing import Dict, Optional, Sequence

import libcst as cst
from libcst.metadata import Assignment, ImportAssignment, Scope

from api_migrator.core.errors import TemplateBuildError
from api_migrator.rules.schema import PLACEHOLDER

_PLACEHOLDER_PREFIX = "__api_migrator_arg"

_local = threading.local()


@dataclass(frozen=True)
class CompiledTemplate:
  """
  A parsed template.

  Attributes:
      source: The original template string.
      expression: Parsed expression with placeholder identifiers.
      arity: Number of placeholders.
      root: Leftmost name of the expression (e.g. ``TestPropertyValues``), if any.
  """

  source: str
  expression: cst.BaseExpression
  arity: int
  root: Optional[str]


def _placeholder(index: int) -> str:
  return f"{_PLACEHOLDER_PREFIX}{index}__"


def _template_cache() -> Dict[str, CompiledTemplate]:
  cache = getattr(_local, "templates", None)
  if cache is None:
    cache = {}
    _local.templates = cache
  return cache


def clear_template_cache() -> None:
  """Drops the calling thread's compiled templates."""
  _template_cache().clear()


def compile_template(template: str) -> CompiledTemplate:
  """
  Parses a template, reusing this thread's cached result when available.

  Args:
      template (str): Template with ``#{}`` placeholders.

  Returns:
      CompiledTemplate: The parsed template.

  Raises:
      TemplateBuildError: If the template is not a valid Python expression.
  """
  cache = _template_cache()
  compiled = cache.get(template)
  if compiled is None:
    compiled = _compile(template)
    cache[template] = compiled
  return compiled


def _compile(template: str) -> CompiledTemplate:
  if _PLACEHOLDER_PREFIX in template:
    raise TemplateBuildError(f"Template uses the reserved identifier '{_PLACEHOLDER_PREFIX}'", template)

  pieces = template.split(PLACEHOLDER)
  text = pieces[0] + "".join(f"{_placeholder(i)}{piece}" for i, piece in enumerate(pieces[1:]))

  try:
    expression = cst.parse_expression(text)
  except cst.ParserSyntaxError as e:
    raise TemplateBuildError(f"Unparsable template '{template}': {e.message}", template) from e

  return CompiledTemplate(
    source=template,
    expression=expression,
    arity=len(pieces) - 1,
    root=_root_name(expression),
  )


def _root_name(node: cst.BaseExpression) -> Optional[str]:
  while True:
    if isinstance(node, cst.Name):
      return node.value
    if isinstance(node, cst.Call):
      node = node.func
    elif isinstance(node, (cst.Attribute, cst.Subscript)):
      node = node.value
    else:
      return None


class _PlaceholderBinder(cst.CSTTransformer):
  """Replaces placeholder identifiers with parameter expressions."""

  def __init__(self, parameters: Sequence[cst.BaseExpression]) -> None:
    self.parameters = parameters

  def leave_Name(self, original_node: cst.Name, updated_node: cst.Name) -> cst.BaseExpression:
    value = original_node.value
    if value.startswith(_PLACEHOLDER_PREFIX) and value.endswith("__"):
      index = int(value[len(_PLACEHOLDER_PREFIX) : -2])
      return self.parameters[index]
    return updated_node


def build(template: str, scope: Optional[Scope], parameters: Sequence[cst.BaseExpression]) -> cst.BaseExpression:
  """
  Builds a replacement expression.

  Args:
      template: Template with ``#{}`` placeholders.
      scope: Scope of the call site being replaced; used to reject templates
          whose root name is shadowed by a local, non-import binding.
      parameters: One expression per placeholder, in order.

  Returns:
      cst.BaseExpression: The bound expression.

  Raises:
      TemplateBuildError: On unparsable templates, placeholder/parameter count
          mismatch, or a shadowed root name.
  """
  compiled = compile_template(template)

  if len(parameters) != compiled.arity:
    raise TemplateBuildError(
      f"Template '{template}' has {compiled.arity} placeholder(s) but {len(parameters)} parameter(s) were supplied",
      template,
    )

  if scope is not None and compiled.root and compiled.root in scope:
    for assignment in scope[compiled.root]:
      if isinstance(assignment, Assignment) and not isinstance(assignment, ImportAssignment):
        raise TemplateBuildError(
          f"'{compiled.root}' is shadowed by a local binding at the call site",
          template,
        )

  return compiled.expression.visit(_PlaceholderBinder(parameters))  # type: ignore[return-value]
