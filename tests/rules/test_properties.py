"""
Tests for properties-file key renaming.
"""

from api_migrator.rules.properties import rename_key, rewrite_properties
from api_migrator.rules.schema import KeyRenameRule

RULES = [
  KeyRenameRule(name="platform", old_key="spring.datasource.platform", new_key="spring.sql.init.platform"),
  KeyRenameRule(name="catch-all", pattern=r"spring\.datasource\.(.*)", replacement=r"legacy.datasource.\1"),
]


def test_first_matching_rule_wins():
  assert rename_key("spring.datasource.platform", RULES) == "spring.sql.init.platform"
  assert rename_key("spring.datasource.url", RULES) == "legacy.datasource.url"
  assert rename_key("server.port", RULES) == "server.port"


def test_separators_values_and_comments_are_preserved():
  text = (
    "# spring.datasource.platform=commented\n"
    "! spring.datasource.platform=bang comment\n"
    "\n"
    "spring.datasource.platform=h2\n"
    "  spring.datasource.platform : h2\n"
    "spring.datasource.platform h2\n"
  )
  result, renamed = rewrite_properties(text, RULES[:1])

  assert result == (
    "# spring.datasource.platform=commented\n"
    "! spring.datasource.platform=bang comment\n"
    "\n"
    "spring.sql.init.platform=h2\n"
    "  spring.sql.init.platform : h2\n"
    "spring.sql.init.platform h2\n"
  )
  assert renamed == [("spring.datasource.platform", "spring.sql.init.platform")] * 3


def test_continuation_lines_are_values():
  text = "spring.datasource.platform=a,\\\n    spring.datasource.platform\nnext=1\n"
  result, renamed = rewrite_properties(text, RULES[:1])

  assert result == "spring.sql.init.platform=a,\\\n    spring.datasource.platform\nnext=1\n"
  assert len(renamed) == 1


def test_escaped_backslash_does_not_continue():
  text = "path=C:\\\\\nspring.datasource.platform=h2\n"
  result, _ = rewrite_properties(text, RULES[:1])
  assert result == "path=C:\\\\\nspring.sql.init.platform=h2\n"


def test_line_endings_are_kept():
  text = "spring.datasource.platform=h2\r\nserver.port=8080"
  result, _ = rewrite_properties(text, RULES[:1])
  assert result == "spring.sql.init.platform=h2\r\nserver.port=8080"


def test_no_rules_is_identity():
  text = "a=1\nb=2\n"
  assert rewrite_properties(text, []) == (text, [])
