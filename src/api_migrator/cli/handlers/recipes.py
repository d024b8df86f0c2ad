"""
Recipes Command Handler.

Lists the recipes known to the registry (built-ins plus project recipes from
``pyproject.toml``), or the flattened rules of a single recipe.
"""

from pathlib import Path
from typing import Optional

from pydantic import ValidationError
from rich.markup import escape
from rich.table import Table

from api_migrator.config import RuntimeConfig
from api_migrator.core.errors import RecipeError
from api_migrator.rules.registry import RecipeRegistry
from api_migrator.utils.console import console, log_error


def handle_recipes(name: Optional[str] = None, search_path: Optional[Path] = None) -> int:
  """
  Handles the 'recipes' command.

  Args:
      name: If given, print the resolved rule chain of this recipe.
      search_path: Directory to start the pyproject.toml search from.

  Returns:
      int: Exit code.
  """
  try:
    config = RuntimeConfig.load(search_path=search_path)
    registry = RecipeRegistry.with_builtins(config.recipes)
    if name is not None:
      return _show_recipe(registry, name)
  except ValidationError as e:
    log_error(f"Invalid configuration: {escape(str(e))}")
    return 1
  except RecipeError as e:
    log_error(escape(str(e)))
    return 1

  table = Table(title="Available Recipes")
  table.add_column("Name", style="cyan")
  table.add_column("Includes")
  table.add_column("Description")

  for recipe_name in registry.names():
    recipe = registry.get(recipe_name)
    marker = " (default)" if recipe_name == config.recipe else ""
    table.add_row(
      escape(recipe_name + marker),
      escape(", ".join(recipe.include)),
      escape(recipe.description or recipe.display_name),
    )

  console.print(table)
  return 0


def _show_recipe(registry: RecipeRegistry, name: str) -> int:
  resolved = registry.resolve(name)

  table = Table(title=f"Recipe '{escape(name)}': {escape(' -> '.join(resolved.chain))}")
  table.add_column("Kind", style="cyan")
  table.add_column("Rule")
  table.add_column("Rewrite")

  for rule in resolved.coalesce:
    table.add_row("coalesce", escape(rule.name), escape(f"{rule.deprecated_call} -> {rule.template_for(2)}"))
  for rule in resolved.rename_keys:
    rewrite = f"{rule.old_key} -> {rule.new_key}" if rule.pattern is None else f"{rule.pattern} -> {rule.replacement}"
    table.add_row("rename-key", escape(rule.name), escape(rewrite))

  console.print(table)
  return 0
