"""
Properties File Key Renaming.

Applies :class:`KeyRenameRule` entries to Java-style ``.properties`` text.
Only keys change: comments, blank lines, separators, values and line endings
are kept byte-for-byte. Continuation lines belong to the value of the line
before them and are never treated as keys.
"""

import re
from typing import List, Sequence, Tuple

from api_migrator.rules.schema import KeyRenameRule

# Leading whitespace, key (with escapes), then the rest of the line.
_ENTRY = re.compile(r"^(?P<indent>[ \t\f]*)(?P<key>(?:\\.|[^\s:=\\])+)(?P<rest>.*)$", re.DOTALL)


def _continues(line: str) -> bool:
  """True if the logical line carries on to the next physical line."""
  body = line.rstrip("\r\n")
  trailing = len(body) - len(body.rstrip("\\"))
  return trailing % 2 == 1


def rename_key(key: str, rules: Sequence[KeyRenameRule]) -> str:
  """
  Applies the first matching rule to a key.

  Args:
      key: Property key.
      rules: Rules in priority order.

  Returns:
      str: The renamed key, or ``key`` if no rule matches.
  """
  for rule in rules:
    if rule.matches(key):
      return rule.rewrite(key)
  return key


def rewrite_properties(text: str, rules: Sequence[KeyRenameRule]) -> Tuple[str, List[Tuple[str, str]]]:
  """
  Renames keys in properties text.

  Args:
      text: File contents.
      rules: Rules in priority order.

  Returns:
      Tuple[str, List[Tuple[str, str]]]: New text and ``(old, new)`` key pairs.
  """
  out: List[str] = []
  renamed: List[Tuple[str, str]] = []
  continuation = False

  for line in text.splitlines(keepends=True):
    if continuation:
      out.append(line)
      continuation = _continues(line)
      continue

    continuation = _continues(line)
    stripped = line.lstrip(" \t\f")
    if not stripped.strip() or stripped.startswith(("#", "!")):
      out.append(line)
      continuation = False
      continue

    match = _ENTRY.match(line)
    if not match:
      out.append(line)
      continue

    key = match.group("key")
    new_key = rename_key(key, rules)
    if new_key != key:
      renamed.append((key, new_key))
      line = f"{match.group('indent')}{new_key}{match.group('rest')}"
    out.append(line)

  return "".join(out), renamed
