"""
Rewriter pass contract.

The engine drives the scan and expansion passes through this interface and
asks each pass whether it has work to do before running it.
"""

from abc import ABC, abstractmethod

import libcst as cst

from api_migrator.core.rewriter.context import RewriterContext


class RewriterPass(ABC):
  """
  One tree-to-tree step of a migration.

  Implementations return a new module and leave their input untouched.
  """

  name = "pass"

  def applies(self, context: RewriterContext) -> bool:
    """
    Whether the pass should run for the current rule and file.

    Args:
        context: State produced by earlier passes.
    """
    return True

  @abstractmethod
  def transform(self, module: cst.Module, context: RewriterContext) -> cst.Module:
    """
    Args:
        module: Tree produced by the previous pass.
        context: Shared per-file, per-rule state.

    Returns:
        cst.Module: The rewritten tree.
    """
