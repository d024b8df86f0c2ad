"""
Migration Error Taxonomy.

All failures raised by the rewrite engine derive from ``MigrationError`` so
that batch drivers can isolate them per file.
"""

from typing import Optional

import libcst as cst


class MigrationError(Exception):
  """Base class for engine failures."""


class MalformedCallError(MigrationError):
  """
  Raised when a call matches a deprecated signature family but is not one of
  the recognized shapes: two or three positional arguments, none of them
  keyword or unpacked.
  """

  def __init__(self, message: str, call: Optional[cst.Call] = None) -> None:
    super().__init__(message)
    self.call = call


class TemplateBuildError(MigrationError):
  """
  Raised when a replacement template cannot be parsed or its placeholders
  do not line up with the supplied parameters.
  """

  def __init__(self, message: str, template: Optional[str] = None) -> None:
    super().__init__(message)
    self.template = template


class RecipeError(MigrationError):
  """Raised for unknown recipes, include cycles and invalid recipe files."""
