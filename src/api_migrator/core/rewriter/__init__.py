"""
Rewriter Package.

The two-pass coalescing rewrite:

- :mod:`.scanner`: pure statement-list scanner producing rewrite markers.
- :mod:`.passes.scan`: applies the scanner to every function body (pass 1).
- :mod:`.passes.expand`: replaces marked calls with template output (pass 2).
"""

from api_migrator.core.rewriter.context import RewriterContext
from api_migrator.core.rewriter.interface import RewriterPass
from api_migrator.core.rewriter.scanner import (
  ScanResult,
  build_marker,
  context_argument,
  scan_statements,
  statement_call,
  value_argument,
)

__all__ = [
  "RewriterContext",
  "RewriterPass",
  "ScanResult",
  "build_marker",
  "context_argument",
  "scan_statements",
  "statement_call",
  "value_argument",
]
