"""
Recipe Registry.

Loads recipe definitions and flattens recipe composition.

Built-in recipes are JSON files in the package's ``recipes/`` directory;
projects can add their own under ``[[tool.api_migrator.recipes]]``. A recipe's
``include`` list names recipes that run before its own rules, so an upgrade
recipe can chain the previous version's migration.
"""

import json
import logging
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Set

from pydantic import ValidationError

from api_migrator.core.errors import RecipeError
from api_migrator.rules.schema import CoalesceRule, KeyRenameRule, Recipe

if sys.version_info >= (3, 9):
  from importlib.resources import files
else:
  files = None

logger = logging.getLogger(__name__)


def resolve_recipes_dir() -> Path:
  """
  Locates the directory containing built-in recipe JSON files.

  Prefers the directory next to this file (source checkouts and editable
  installs) and falls back to package resources.

  Returns:
      Path: The 'recipes' directory.
  """
  local_path = Path(__file__).parent / "recipes"
  if local_path.exists():
    return local_path

  if files is not None:
    return Path(str(files("api_migrator.rules") / "recipes"))

  return local_path


@dataclass
class ResolvedRecipe:
  """
  A recipe with its includes flattened into ordered rule lists.
  """

  name: str
  chain: List[str] = field(default_factory=list)
  coalesce: List[CoalesceRule] = field(default_factory=list)
  rename_keys: List[KeyRenameRule] = field(default_factory=list)


class RecipeRegistry:
  """
  Name-indexed collection of recipes.
  """

  def __init__(self, recipes: Optional[Iterable[Recipe]] = None) -> None:
    self._recipes: Dict[str, Recipe] = {}
    for recipe in recipes or ():
      self.register(recipe)

  @classmethod
  def with_builtins(cls, extra: Optional[Iterable[Recipe]] = None) -> "RecipeRegistry":
    """
    Creates a registry holding the built-in recipes plus ``extra``.

    Project recipes override built-ins of the same name.

    Args:
        extra: Additional recipes, typically from ``RuntimeConfig.recipes``.

    Returns:
        RecipeRegistry: The populated registry.
    """
    registry = cls()
    registry.load_directory(resolve_recipes_dir())
    for recipe in extra or ():
      registry.register(recipe)
    return registry

  def register(self, recipe: Recipe) -> None:
    if recipe.name in self._recipes:
      logger.debug(f"Recipe '{recipe.name}' redefined")
    self._recipes[recipe.name] = recipe

  def load_file(self, path: Path) -> Recipe:
    """
    Loads a single JSON recipe file.

    Args:
        path: File to read.

    Returns:
        Recipe: The registered recipe.

    Raises:
        RecipeError: If the file is unreadable or invalid.
    """
    try:
      with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
      recipe = Recipe.model_validate(data)
    except (OSError, json.JSONDecodeError, ValidationError) as e:
      raise RecipeError(f"Invalid recipe file {path.name}: {e}") from e
    self.register(recipe)
    return recipe

  def load_directory(self, directory: Path) -> int:
    """
    Loads every ``*.json`` recipe in a directory.

    Returns:
        int: Number of recipes loaded.
    """
    if not directory.exists():
      return 0
    count = 0
    for path in sorted(directory.glob("*.json")):
      self.load_file(path)
      count += 1
    return count

  def names(self) -> List[str]:
    return sorted(self._recipes)

  def get(self, name: str) -> Recipe:
    try:
      return self._recipes[name]
    except KeyError:
      known = ", ".join(self.names()) or "none"
      raise RecipeError(f"Unknown recipe '{name}'. Available recipes: {known}") from None

  def resolve(self, name: str) -> ResolvedRecipe:
    """
    Flattens a recipe and its includes.

    Included recipes are expanded depth-first, in order, before the recipe's
    own rules. A recipe reachable along several paths contributes once, at
    its first position.

    Args:
        name: Recipe to resolve.

    Returns:
        ResolvedRecipe: Ordered rules.

    Raises:
        RecipeError: On unknown names or include cycles.
    """
    resolved = ResolvedRecipe(name=name)
    self._expand(name, resolved, visiting=[], done=set())
    return resolved

  def _expand(self, name: str, resolved: ResolvedRecipe, visiting: List[str], done: Set[str]) -> None:
    if name in visiting:
      cycle = " -> ".join([*visiting[visiting.index(name) :], name])
      raise RecipeError(f"Recipe include cycle: {cycle}")
    if name in done:
      return

    recipe = self.get(name)
    visiting.append(name)
    for included in recipe.include:
      self._expand(included, resolved, visiting, done)
    visiting.pop()

    done.add(name)
    resolved.chain.append(name)
    seen_coalesce = {rule.name for rule in resolved.coalesce}
    seen_rename = {rule.name for rule in resolved.rename_keys}
    resolved.coalesce.extend(r for r in recipe.coalesce if r.name not in seen_coalesce)
    resolved.rename_keys.extend(r for r in recipe.rename_keys if r.name not in seen_rename)
