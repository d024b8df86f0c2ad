"""
Per-file diagnostics.

A ``Diagnostic`` pins a problem to a location precise enough for a user to
find the offending call: the file, the enclosing function, the line and the
statement text.
"""

from typing import Literal, Optional

from pydantic import BaseModel, Field


class Diagnostic(BaseModel):
  """
  A single located problem found while migrating a file.
  """

  message: str = Field(..., description="Human-readable description of the problem.")
  severity: Literal["warning", "error"] = Field("error", description="Warnings do not fail the file.")
  path: Optional[str] = Field(None, description="Source file the problem was found in.")
  function: Optional[str] = Field(None, description="Qualified name of the enclosing function.")
  line: Optional[int] = Field(None, description="1-based line of the offending statement.")
  statement: Optional[str] = Field(None, description="Source text of the offending statement.")

  def render(self) -> str:
    """
    Formats the diagnostic as a single line.

    Returns:
        str: e.g. ``tests/test_env.py:12 in TestEnv.setup(): message [add_environment(ctx)]``.
    """
    location = self.path or "<string>"
    if self.line is not None:
      location = f"{location}:{self.line}"
    if self.function:
      location = f"{location} in {self.function}()"

    text = f"{location}: {self.message}"
    if self.statement:
      text = f"{text} [{self.statement}]"
    return text
