"""
Per-file outcome of a migration run.
"""

from typing import List, Optional, Tuple

from pydantic import BaseModel, Field

from api_migrator.core.diagnostics import Diagnostic


class ConversionResult(BaseModel):
  """
  Container for the results of migrating one file.
  """

  path: Optional[str] = Field(default=None, description="Display path of the migrated file.")
  code: str = Field(default="", description="The migrated source text.")
  changed: bool = Field(default=False, description="True if the output differs from the input.")
  success: bool = Field(
    default=True,
    description="True if the pipeline completed without fatal failures.",
  )
  errors: List[str] = Field(default_factory=list, description="Fatal error messages.")
  diagnostics: List[Diagnostic] = Field(default_factory=list, description="Located warnings and errors.")
  coalesced: int = Field(default=0, description="Number of call runs collapsed into a fluent call.")
  renamed_keys: List[Tuple[str, str]] = Field(default_factory=list, description="(old, new) configuration keys.")

  @property
  def has_errors(self) -> bool:
    return bool(self.errors) or any(d.severity == "error" for d in self.diagnostics)

  @property
  def warnings(self) -> List[Diagnostic]:
    return [d for d in self.diagnostics if d.severity == "warning"]
