"""
Transformation Passes Package.
"""

from api_migrator.core.rewriter.passes.expand import ExpandPass, ExpandTransformer
from api_migrator.core.rewriter.passes.scan import CallMatcher, ScanPass, ScanTransformer

__all__ = [
  "CallMatcher",
  "ExpandPass",
  "ExpandTransformer",
  "ScanPass",
  "ScanTransformer",
]
