"""
Rewriter Context Module.

This module provides the ``RewriterContext`` container, which holds the state
shared by the scanning and expansion passes for one file and one rule: the
marker side-table, collected diagnostics and the flags that decide whether
the follow-up passes run.
"""

from typing import List, Optional

from api_migrator.config import RuntimeConfig
from api_migrator.core.diagnostics import Diagnostic
from api_migrator.core.markers import MarkerTable
from api_migrator.rules.schema import CoalesceRule


class RewriterContext:
  """
  Shared state container for one rule applied to one file.

  The scanner fills ``markers`` and sets ``expansion_required``; the engine
  inspects that flag to decide whether to run the expander, which in turn
  consumes the markers and counts its substitutions in ``expanded``.
  """

  def __init__(
    self,
    rule: CoalesceRule,
    config: Optional[RuntimeConfig] = None,
    path: Optional[str] = None,
  ) -> None:
    """
    Initializes the context.

    Args:
        rule: The coalescing rule being applied.
        config: Runtime configuration; defaults are used when omitted.
        path: Display path of the file, used in diagnostics.
    """
    self.rule = rule
    self.config = config or RuntimeConfig()
    self.path = path

    self.markers = MarkerTable()
    self.diagnostics: List[Diagnostic] = []

    # Flags
    self.expansion_required: bool = False
    self.expansion_failed: bool = False
    self.coalesced: int = 0
    self.expanded: int = 0

  def report(
    self,
    message: str,
    severity: str = "error",
    function: Optional[str] = None,
    line: Optional[int] = None,
    statement: Optional[str] = None,
  ) -> Diagnostic:
    """
    Records a located diagnostic for the current file.

    Returns:
        Diagnostic: The recorded entry.
    """
    diagnostic = Diagnostic(
      message=message,
      severity=severity,
      path=self.path,
      function=function,
      line=line,
      statement=statement,
    )
    self.diagnostics.append(diagnostic)
    return diagnostic

  @property
  def errors(self) -> List[Diagnostic]:
    return [d for d in self.diagnostics if d.severity == "error"]
