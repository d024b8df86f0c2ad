"""
Orchestration Engine for Migrations.

This module provides the `MigrationEngine`, the per-file driver of the
migration. For Python sources the pipeline is:

1.  **Ingestion**: parse the text into a LibCST module.
2.  **Scan** (per coalescing rule): collapse runs of deprecated calls that
    share a context argument and record rewrite markers.
3.  **Expand** (only if the scan coalesced anything): replace every marked
    call with the fluent expression built from its template.
4.  **Import Fixer**: inject the replacement type's import and prune the
    deprecated type's import once nothing references it.
5.  **Emission**: print the module back to text.

A template failure in step 3 is fatal for the file: the original text is
returned with ``success=False``. Configuration files (``.properties``) skip
the tree pipeline and go through the key-rename rules instead.
"""

import logging
from pathlib import Path
from typing import List, Optional, Union

import libcst as cst

from api_migrator.config import RuntimeConfig
from api_migrator.core.conversion_result import ConversionResult
from api_migrator.core.diagnostics import Diagnostic
from api_migrator.core.import_fixer import ImportFixer
from api_migrator.core.rewriter.context import RewriterContext
from api_migrator.core.rewriter.passes.expand import ExpandPass
from api_migrator.core.rewriter.passes.scan import ScanPass
from api_migrator.rules.properties import rewrite_properties
from api_migrator.rules.registry import RecipeRegistry, ResolvedRecipe
from api_migrator.rules.schema import CoalesceRule

logger = logging.getLogger(__name__)

PROPERTIES_SUFFIXES = (".properties",)


class MigrationEngine:
  """
  The main migration unit.

  Holds a resolved recipe and applies it to one source text at a time. The
  engine keeps no per-file state, so one instance may be shared by worker
  threads.
  """

  def __init__(
    self,
    config: Optional[RuntimeConfig] = None,
    registry: Optional[RecipeRegistry] = None,
    recipe: Optional[Union[str, ResolvedRecipe]] = None,
  ) -> None:
    """
    Initializes the Engine.

    Args:
        config: Runtime configuration. Defaults are used when omitted.
        registry: Recipe source. Built-in recipes plus ``config.recipes`` when omitted.
        recipe: Recipe name or an already resolved recipe. Falls back to ``config.recipe``.

    Raises:
        RecipeError: If the recipe is unknown or its includes form a cycle.
    """
    self.config = config or RuntimeConfig()
    self.registry = registry or RecipeRegistry.with_builtins(self.config.recipes)

    if isinstance(recipe, ResolvedRecipe):
      self.recipe = recipe
    else:
      self.recipe = self.registry.resolve(recipe or self.config.recipe)

    self.scan_pass = ScanPass()
    self.expand_pass = ExpandPass()

  def parse(self, code: str) -> cst.Module:
    """
    Parses source string into a LibCST Module.

    Args:
        code (str): Python source code.

    Returns:
        cst.Module: The parsed syntax tree.

    Raises:
        libcst.ParserSyntaxError: If the input code is invalid Python.
    """
    return cst.parse_module(code)

  def to_source(self, tree: cst.Module) -> str:
    """
    Converts CST back to source string.

    Args:
        tree (cst.Module): The modified syntax tree.

    Returns:
        str: Generated Python code.
    """
    return tree.code

  def migrate(self, text: str, path: Optional[Union[str, Path]] = None) -> ConversionResult:
    """
    Migrates a file's contents, choosing the pipeline from its suffix.

    Args:
        text: File contents.
        path: File path; ``.properties`` files get key renames, everything
            else is treated as Python.

    Returns:
        ConversionResult: The outcome for this file.
    """
    if path is not None and Path(path).suffix in PROPERTIES_SUFFIXES:
      return self.run_properties(text, path)
    return self.run(text, path)

  def run(self, code: str, path: Optional[Union[str, Path]] = None) -> ConversionResult:
    """
    Executes the rewrite pipeline on Python source.

    Args:
        code (str): The input source string.
        path: Display path used in diagnostics.

    Returns:
        ConversionResult: Object containing transformed code and diagnostics.
    """
    display_path = str(path) if path is not None else None

    try:
      tree = self.parse(code)
    except cst.ParserSyntaxError as e:
      message = f"Parse Error: {e.message} (line {e.raw_line}, column {e.raw_column})"
      return ConversionResult(
        path=display_path,
        code=code,
        success=False,
        errors=[message],
        diagnostics=[Diagnostic(message=message, path=display_path, line=e.raw_line)],
      )

    diagnostics: List[Diagnostic] = []
    coalesced = 0

    for rule in self.recipe.coalesce:
      context = RewriterContext(rule, config=self.config, path=display_path)
      for rewriter_pass in (self.scan_pass, self.expand_pass):
        if rewriter_pass.applies(context):
          tree = rewriter_pass.transform(tree, context)
          logger.debug(
            f"{display_path or '<string>'}: {rewriter_pass.name} pass for rule '{rule.name}' "
            f"({context.coalesced} coalesced, {context.expanded} expanded)"
          )
      diagnostics.extend(context.diagnostics)

      if context.expansion_failed:
        return ConversionResult(
          path=display_path,
          code=code,
          success=False,
          errors=[d.render() for d in context.errors],
          diagnostics=diagnostics,
        )

      if not context.expanded:
        continue

      coalesced += context.coalesced
      fixer = _import_fixer_for(rule)
      tree = tree.visit(fixer)

      if fixer.conflicts:
        for module, name in sorted(fixer.conflicts):
          diagnostics.append(
            Diagnostic(
              message=f"'{name}' is already imported from elsewhere; cannot import it from '{module}'",
              path=display_path,
            )
          )
        return ConversionResult(
          path=display_path,
          code=code,
          success=False,
          errors=[d.render() for d in diagnostics if d.severity == "error"],
          diagnostics=diagnostics,
        )

    new_code = self.to_source(tree)
    return ConversionResult(
      path=display_path,
      code=new_code,
      changed=new_code != code,
      diagnostics=diagnostics,
      coalesced=coalesced,
    )

  def run_properties(self, text: str, path: Optional[Union[str, Path]] = None) -> ConversionResult:
    """
    Applies the recipe's key-rename rules to ``.properties`` text.

    Args:
        text: File contents.
        path: Display path.

    Returns:
        ConversionResult: Rewritten text and the renamed keys.
    """
    new_text, renamed = rewrite_properties(text, self.recipe.rename_keys)
    return ConversionResult(
      path=str(path) if path is not None else None,
      code=new_text,
      changed=new_text != text,
      renamed_keys=renamed,
    )


def _import_fixer_for(rule: CoalesceRule) -> ImportFixer:
  """
  Builds the fixer importing the replacement type and pruning the deprecated one.
  """
  prunable = []
  if "." in rule.deprecated_type:
    module, name = rule.deprecated_type.rsplit(".", 1)
    prunable.append((module, name))
  return ImportFixer(required=[(rule.replacement_module, rule.replacement_name)], prunable=prunable)
