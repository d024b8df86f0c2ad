"""
Rules Package.

Schemas for coalescing and key-rename rules, recipe composition, and the
properties-file key rewriter.
"""

from api_migrator.rules.registry import RecipeRegistry, ResolvedRecipe
from api_migrator.rules.schema import CoalesceRule, KeyRenameRule, Recipe

__all__ = [
  "CoalesceRule",
  "KeyRenameRule",
  "Recipe",
  "RecipeRegistry",
  "ResolvedRecipe",
]
