"""
Main Entry Point for api-migrator CLI.

This module handles argument parsing and dispatches to specific command
handlers defined in `api_migrator.cli.commands`.
"""

import argparse
import sys
from pathlib import Path
from typing import List, Optional

from api_migrator import __version__
from api_migrator.cli import commands
from api_migrator.utils.console import set_verbosity


def main(argv: Optional[List[str]] = None) -> int:
  """
  Main CLI entry point.

  Parses arguments via argparse and calls the appropriate handler function.

  Args:
      argv: Optional list of command line arguments (defaults to sys.argv).

  Returns:
      int: Exit code (0 for success, non-zero for failure).
  """
  parser = argparse.ArgumentParser(description="api-migrator: Deterministic Deprecated API Migration")
  parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
  parser.add_argument("--verbose", "-v", action="store_true", help="Show debug output")

  subparsers = parser.add_subparsers(dest="command", required=True)

  # --- Command: CONVERT ---
  cmd_conv = subparsers.add_parser("convert", help="Migrate a file or directory")
  cmd_conv.add_argument("path", type=Path, help="Input file or directory")
  cmd_conv.add_argument("--out", type=Path, default=None, help="Output destination (file or dir)")
  cmd_conv.add_argument("--in-place", action="store_true", help="Overwrite the input files")
  cmd_conv.add_argument("--recipe", default=None, help="Recipe to apply (default: from toml)")
  cmd_conv.add_argument("--jobs", "-j", type=int, default=None, help="Worker threads (default: from toml)")
  cmd_conv.add_argument(
    "--dry-run",
    action="store_true",
    help="Report what would change without writing any file",
  )
  cmd_conv.add_argument(
    "--no-mark-failures",
    dest="mark_failures",
    action="store_false",
    default=None,
    help="Leave unmigratable statements unmarked (Overrides config)",
  )

  # --- Command: RECIPES ---
  cmd_rec = subparsers.add_parser("recipes", help="List available recipes")
  cmd_rec.add_argument("name", nargs="?", default=None, help="Show the resolved rules of one recipe")

  args = parser.parse_args(argv)
  set_verbosity(args.verbose)

  if args.command == "convert":
    return commands.handle_convert(
      args.path,
      args.out,
      recipe=args.recipe,
      jobs=args.jobs,
      dry_run=args.dry_run,
      in_place=args.in_place,
      mark_failures=args.mark_failures,
    )

  elif args.command == "recipes":
    return commands.handle_recipes(args.name)

  return 0


if __name__ == "__main__":
  sys.exit(main())
