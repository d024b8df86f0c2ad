"""
Convert Command Handler.

This module implements the logic for the `api-migrator convert` command.
It orchestrates:
1. Configuration loading (pyproject.toml + CLI overrides).
2. Recipe resolution.
3. File discovery for the configured patterns.
4. Per-file migration via the Engine, optionally on a thread pool.
5. Output writing and the batch summary.

Every file is isolated: an exception while migrating one file is logged and
recorded as a failed result, and the batch moves on.
"""

from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Dict, List, Optional

from pydantic import ValidationError
from rich.markup import escape
from rich.table import Table

from api_migrator.config import RuntimeConfig
from api_migrator.core.conversion_result import ConversionResult
from api_migrator.core.engine import MigrationEngine
from api_migrator.core.errors import MigrationError
from api_migrator.utils.console import (
  console,
  log_error,
  log_info,
  log_success,
  log_warning,
)


def handle_convert(
  input_path: Path,
  output_path: Optional[Path],
  recipe: Optional[str] = None,
  jobs: Optional[int] = None,
  dry_run: bool = False,
  in_place: bool = False,
  mark_failures: Optional[bool] = None,
) -> int:
  """
  Handles the 'convert' command execution.

  Args:
      input_path: File or directory to migrate.
      output_path: Where migrated files are written. A single file without a
          destination is printed to stdout.
      recipe: Override for the recipe name.
      jobs: Override for the number of worker threads.
      dry_run: If True, nothing is written.
      in_place: If True, input files are overwritten.
      mark_failures: Override for escape-hatch marking.

  Returns:
      int: Exit code (0 for success, 1 if any file failed).
  """
  if not input_path.exists():
    log_error(f"Input not found: {input_path}")
    return 1

  if in_place and output_path is not None:
    log_error("--in-place and --out are mutually exclusive.")
    return 1

  if input_path.is_dir() and output_path is None and not (in_place or dry_run):
    log_error("Directory conversion requires --out, --in-place or --dry-run.")
    return 1

  # 1. Load Configuration (TOML + CLI overrides) and resolve the recipe
  try:
    config = RuntimeConfig.load(
      recipe=recipe,
      mark_failures=mark_failures,
      jobs=jobs,
      search_path=input_path if input_path.is_dir() else input_path.parent,
    )
    engine = MigrationEngine(config=config)
  except ValidationError as e:
    log_error(f"Invalid configuration: {escape(str(e))}")
    return 1
  except MigrationError as e:
    log_error(escape(str(e)))
    return 1

  # 2. Discover files
  files = _collect_files(input_path, config.patterns)
  if not files:
    log_warning(f"No files matching {', '.join(config.patterns)} found in {input_path}")
    return 0

  if input_path.is_dir():
    log_info(f"Processing {len(files)} files from {input_path} with recipe '{engine.recipe.name}'...")

  # 3. Migrate
  if config.jobs > 1 and len(files) > 1:
    with ThreadPoolExecutor(max_workers=config.jobs) as executor:
      results = list(executor.map(lambda f: _convert_single_file(f, engine), files))
  else:
    results = [_convert_single_file(f, engine) for f in files]

  # 4. Write and report, in discovery order
  batch_results: Dict[str, ConversionResult] = {}
  for src_file, result in zip(files, results):
    rel_path = src_file.relative_to(input_path) if input_path.is_dir() else Path(src_file.name)
    _report_diagnostics(result)

    if result.success and not dry_run:
      if in_place:
        dest_file: Optional[Path] = src_file
      elif output_path is not None:
        dest_file = output_path / rel_path if input_path.is_dir() else output_path
      else:
        dest_file = None
      _write_result(result, src_file, dest_file)

    batch_results[str(rel_path)] = result

  _print_batch_summary(batch_results, dry_run=dry_run)
  return 0 if all(r.success for r in batch_results.values()) else 1


def _collect_files(input_path: Path, patterns: List[str]) -> List[Path]:
  """
  Lists the files to migrate.

  Args:
      input_path: A file (returned as-is) or a directory searched recursively.
      patterns: Glob patterns such as ``*.py``.

  Returns:
      List[Path]: Sorted, de-duplicated file paths.
  """
  if input_path.is_file():
    return [input_path]

  found = set()
  for pattern in patterns:
    found.update(p for p in input_path.rglob(pattern) if p.is_file())
  return sorted(found)


def _convert_single_file(input_path: Path, engine: MigrationEngine) -> ConversionResult:
  """
  Helper to execute the migration on a single file.

  Args:
      input_path: Source file path.
      engine: Shared engine holding the resolved recipe.

  Returns:
      ConversionResult: Result object containing status and text.
  """
  try:
    with open(input_path, "rt", encoding="utf-8", newline="") as f:
      text = f.read()
    return engine.migrate(text, path=input_path)
  except Exception as e:
    log_error(f"Failed to migrate {escape(str(input_path))}: {escape(str(e))}")
    return ConversionResult(path=str(input_path), success=False, errors=[str(e)])


def _write_result(result: ConversionResult, input_path: Path, output_path: Optional[Path]) -> None:
  if output_path is None:
    console.print(result.code, markup=False, highlight=False, emoji=False, soft_wrap=True, end="")
    return

  if output_path == input_path and not result.changed:
    return

  try:
    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, "wt", encoding="utf-8", newline="") as f:
      f.write(result.code)
  except OSError as e:
    log_error(f"Failed to write {escape(str(output_path))}: {escape(str(e))}")
    result.success = False
    result.errors.append(str(e))
    return

  if result.changed:
    log_success(f"Migrated: [path]{escape(str(input_path))}[/path] -> [path]{escape(str(output_path))}[/path]")


def _report_diagnostics(result: ConversionResult) -> None:
  for diagnostic in result.diagnostics:
    text = escape(diagnostic.render())
    if diagnostic.severity == "warning":
      log_warning(text)
    else:
      log_error(text)


def _print_batch_summary(results: Dict[str, ConversionResult], dry_run: bool = False) -> None:
  """
  Renders a summary table of migration results to the console.

  Args:
      results: Dictionary mapping filenames to conversion results.
      dry_run: Whether the run wrote nothing.
  """
  total = len(results)
  changed = sum(1 for r in results.values() if r.success and r.changed)
  failures = sum(1 for r in results.values() if not r.success)
  flagged = [name for name, r in results.items() if not r.success or r.diagnostics]

  verb = "would change" if dry_run else "changed"

  if not flagged:
    log_success(f"Batch Complete: {changed}/{total} files {verb}.")
    return

  table = Table(title="Migration Report")
  table.add_column("File", style="cyan")
  table.add_column("Status", justify="center")
  table.add_column("Issues", style="red")

  for filename in flagged:
    res = results[filename]
    status = "❌ Failed" if not res.success else "⚠️ Warnings"
    issues = "; ".join(res.errors) if res.errors else "; ".join(d.message for d in res.diagnostics)
    table.add_row(escape(filename), status, escape(issues or "Unknown Error"))

  console.print(table)
  console.print(f"\n[bold]Summary:[/bold] {changed}/{total} files {verb}, {failures} failed.")
