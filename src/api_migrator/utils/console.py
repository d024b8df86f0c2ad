"""
Console and Logging.

All user-facing output goes either through the standard ``logging`` module
(status lines) or through ``console.print`` (tables, migrated source on
stdout). Both end up on the same Rich console:

- The root logger carries exactly one ``RichHandler`` bound to the active
  console.
- ``console`` is a stable proxy; ``set_console`` swaps the console behind it
  (tests use a recording console) and rebinds the handler.
- ``set_verbosity`` toggles DEBUG output such as the engine's per-rule trace.
"""

import logging
from typing import Any

from rich.console import Console
from rich.logging import RichHandler
from rich.theme import Theme

SUCCESS_LEVEL_NUM = 25
logging.addLevelName(SUCCESS_LEVEL_NUM, "SUCCESS")

_THEME = Theme(
  {
    "logging.level.success": "green",
    "info": "dim cyan",
    "warning": "yellow",
    "error": "bold red",
    "success": "green",
    "path": "bold blue",
    "code": "bold magenta",
  }
)


def _new_console() -> Console:
  return Console(theme=_THEME)


def _bind_root_logger(target: Console, level: int) -> None:
  root_logger = logging.getLogger()
  for handler in [h for h in root_logger.handlers if isinstance(h, RichHandler)]:
    root_logger.removeHandler(handler)

  root_logger.addHandler(
    RichHandler(
      console=target,
      show_time=False,
      show_path=False,
      markup=True,
      rich_tracebacks=True,
    )
  )
  root_logger.setLevel(level)


class _ConsoleProxy:
  """
  Stable stand-in for the active ``rich.console.Console``.

  Attributes:
      level (int): Root logger level applied on every rebind.
  """

  def __init__(self) -> None:
    self.level = logging.INFO
    self._backend = _new_console()
    _bind_root_logger(self._backend, self.level)

  @property
  def backend(self) -> Console:
    return self._backend

  def set_backend(self, new_console: Console) -> None:
    self._backend = new_console
    _bind_root_logger(self._backend, self.level)

  def set_level(self, level: int) -> None:
    self.level = level
    logging.getLogger().setLevel(level)

  def reset(self) -> None:
    self.level = logging.INFO
    self.set_backend(_new_console())

  def print(self, *args: Any, **kwargs: Any) -> None:
    self._backend.print(*args, **kwargs)

  def __getattr__(self, name: str) -> Any:
    return getattr(self._backend, name)


console = _ConsoleProxy()


def set_console(new_console: Console) -> None:
  """
  Routes printing and logging to ``new_console``.

  Args:
      new_console (Console): e.g. ``Console(record=True)`` in tests.
  """
  console.set_backend(new_console)


def reset_console() -> None:
  """Restores a fresh stdout console at INFO level."""
  console.reset()


def set_verbosity(verbose: bool) -> None:
  """
  Switches between INFO and DEBUG logging.

  Args:
      verbose (bool): True to show debug messages.
  """
  console.set_level(logging.DEBUG if verbose else logging.INFO)


def log_info(msg: str) -> None:
  """
  Logs an informational message.

  Args:
      msg (str): Message text; may contain Rich markup.
  """
  logging.info(f"ℹ️  {msg}", extra={"markup": True})


def log_success(msg: str) -> None:
  logging.log(SUCCESS_LEVEL_NUM, f"✅ {msg}", extra={"markup": True})


def log_warning(msg: str) -> None:
  logging.warning(f"⚠️  {msg}", extra={"markup": True})


def log_error(msg: str) -> None:
  """
  Logs an error message.

  Args:
      msg (str): Message text; callers escape user-supplied parts.
  """
  logging.error(f"❌ {msg}", extra={"markup": True})
