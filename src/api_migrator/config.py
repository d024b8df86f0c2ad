"""
Runtime Configuration Store.

Settings are read from the ``[tool.api_migrator]`` table of the nearest
``pyproject.toml`` and overridden by command-line arguments.

.. code-block:: toml

    [tool.api_migrator]
    recipe = "boot-2.7"
    mark_failures = true
    jobs = 4

    [[tool.api_migrator.recipes]]
    name = "in-house"
    include = ["boot-2.7"]
"""

import sys
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, Field, field_validator

from api_migrator.rules.schema import Recipe

if sys.version_info >= (3, 11):
  import tomllib
else:
  try:
    import tomli as tomllib
  except ImportError:
    tomllib = None  # type: ignore

DEFAULT_RECIPE = "boot-2.7"
DEFAULT_PATTERNS = ["*.py", "*.properties"]


class RuntimeConfig(BaseModel):
  """
  Global configuration container for the migration engine.
  """

  recipe: str = Field(DEFAULT_RECIPE, description="Name of the recipe to apply.")
  mark_failures: bool = Field(
    True,
    description="Wrap statements that could not be migrated in escape-hatch comments.",
  )
  jobs: int = Field(1, description="Number of worker threads used for batch runs.")
  patterns: List[str] = Field(default_factory=lambda: list(DEFAULT_PATTERNS), description="File globs to process.")
  recipes: List[Recipe] = Field(default_factory=list, description="Project-local recipe definitions.")

  @field_validator("jobs")
  @classmethod
  def validate_jobs(cls, v: int) -> int:
    """
    Ensures at least one worker.

    Args:
        v (int): Requested worker count.

    Returns:
        int: The validated count.

    Raises:
        ValueError: If the count is below 1.
    """
    if v < 1:
      raise ValueError(f"jobs must be at least 1, got {v}")
    return v

  @classmethod
  def load(
    cls,
    recipe: Optional[str] = None,
    mark_failures: Optional[bool] = None,
    jobs: Optional[int] = None,
    patterns: Optional[List[str]] = None,
    search_path: Optional[Path] = None,
  ) -> "RuntimeConfig":
    """
    Loads configuration from pyproject.toml and overrides with CLI arguments.

    Args:
        recipe: Override for the recipe name.
        mark_failures: Override for escape-hatch marking.
        jobs: Override for the worker count.
        patterns: Override for the file globs.
        search_path: Directory to start searching for TOML config.

    Returns:
        RuntimeConfig: The fully resolved configuration object.
    """
    start_dir = search_path or Path.cwd()
    toml_config, _ = _load_toml_settings(start_dir)

    final_mark = mark_failures if mark_failures is not None else toml_config.get("mark_failures", True)

    return cls(
      recipe=recipe or toml_config.get("recipe", DEFAULT_RECIPE),
      mark_failures=final_mark,
      jobs=jobs or toml_config.get("jobs", 1),
      patterns=patterns or toml_config.get("patterns", list(DEFAULT_PATTERNS)),
      recipes=toml_config.get("recipes", []),
    )


def _load_toml_settings(start_path: Path) -> Tuple[Dict[str, Any], Optional[Path]]:
  """
  Searches the start directory and its parents for 'pyproject.toml' and extracts config.

  Args:
      start_path (Path): Directory to start search from.

  Returns:
      Tuple[Dict, Optional[Path]]: The config dict and the directory it was found in.
  """
  if not tomllib:
    return {}, None

  current = start_path.resolve()

  for parent in [current, *current.parents]:
    toml_path = parent / "pyproject.toml"
    if toml_path.exists() and toml_path.is_file():
      try:
        with open(toml_path, "rb") as f:
          data = tomllib.load(f)
      except (OSError, tomllib.TOMLDecodeError):
        return {}, None

      tool_section = data.get("tool", {})
      return tool_section.get("api_migrator", {}), parent

  return {}, None
