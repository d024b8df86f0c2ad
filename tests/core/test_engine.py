"""
End-to-end tests for the Migration Engine.

Verifies:
1.  A run of deprecated calls becomes one fluent call.
2.  The deprecated import is pruned and the replacement import injected.
3.  Fatal template errors return the original text.
4.  `.properties` files go through the key-rename rules.
"""

import textwrap

import pytest

import api_migrator
from api_migrator.config import RuntimeConfig
from api_migrator.core.engine import MigrationEngine
from api_migrator.rules.registry import RecipeRegistry
from api_migrator.rules.schema import Recipe

SOURCE = (
  "from boot.test.util import EnvironmentTestUtils\n"
  "\n"
  "\n"
  "def setup(ctx):\n"
  '    EnvironmentTestUtils.add_environment(ctx, "a=1")\n'
  '    EnvironmentTestUtils.add_environment(ctx, "b=2")\n'
  '    EnvironmentTestUtils.add_environment(ctx, "c=3")\n'
)

EXPECTED = (
  "from boot.test.util import TestPropertyValues\n"
  "\n"
  "\n"
  "def setup(ctx):\n"
  '    TestPropertyValues.of("a=1").and_("b=2").and_("c=3").apply_to(ctx)\n'
)


def _engine(**config) -> MigrationEngine:
  return MigrationEngine(config=RuntimeConfig(**config), recipe="boot-2.0")


def test_concrete_scenario():
  result = _engine().run(SOURCE, path="test_env.py")

  assert result.success
  assert result.changed
  assert result.coalesced == 1
  assert result.code == EXPECTED
  assert result.diagnostics == []


def test_convenience_wrapper():
  assert api_migrator.migrate(SOURCE, recipe="boot-2.0") == EXPECTED


def test_existing_replacement_import_is_reused():
  code = (
    "from boot.test.util import EnvironmentTestUtils, TestPropertyValues\n"
    "\n"
    "\n"
    "def setup(ctx):\n"
    '    EnvironmentTestUtils.add_environment(ctx, "a=1")\n'
  )
  result = _engine().run(code)
  assert result.code == (
    "from boot.test.util import TestPropertyValues\n"
    "\n"
    "\n"
    "def setup(ctx):\n"
    '    TestPropertyValues.of("a=1").apply_to(ctx)\n'
  )


def test_deprecated_import_kept_while_still_referenced():
  code = (
    "from boot.test.util import EnvironmentTestUtils\n"
    "\n"
    "\n"
    "def setup(ctx):\n"
    '    EnvironmentTestUtils.add_environment(ctx, "a=1")\n'
    "    x = EnvironmentTestUtils.add_environment(ctx, 'b=2')\n"
  )
  result = _engine().run(code)

  assert result.success
  assert "from boot.test.util import EnvironmentTestUtils\n" in result.code
  assert "from boot.test.util import TestPropertyValues\n" in result.code
  assert "    x = EnvironmentTestUtils.add_environment(ctx, 'b=2')\n" in result.code


def test_injection_goes_below_docstring_and_future_imports():
  code = textwrap.dedent(
    '''\
    """Environment tests."""
    from __future__ import annotations

    import boot.test.util


    def setup(ctx):
        boot.test.util.EnvironmentTestUtils.add_environment(ctx, "a=1")
    '''
  )
  result = _engine().run(code)
  assert result.code == textwrap.dedent(
    '''\
    """Environment tests."""
    from __future__ import annotations
    from boot.test.util import TestPropertyValues


    def setup(ctx):
        TestPropertyValues.of("a=1").apply_to(ctx)
    '''
  )


def test_code_without_deprecated_calls_is_untouched():
  code = "import os\n\n\ndef f():\n    return os.getcwd()\n"
  result = _engine().run(code)
  assert result.success
  assert not result.changed
  assert result.code == code


def test_template_failure_returns_original_text():
  code = (
    "from boot.test.util import EnvironmentTestUtils\n"
    "\n"
    "\n"
    "def setup(ctx):\n"
    "    TestPropertyValues = None\n"
    '    EnvironmentTestUtils.add_environment(ctx, "a=1")\n'
  )
  result = _engine().run(code, path="test_env.py")

  assert not result.success
  assert result.code == code
  assert len(result.errors) == 1
  assert result.errors[0].startswith("test_env.py:6 in setup(): ")
  assert "shadowed" in result.errors[0]


def test_parse_error_is_a_file_failure():
  code = "def broken(:\n"
  result = _engine().run(code, path="broken.py")

  assert not result.success
  assert result.code == code
  assert result.errors[0].startswith("Parse Error")
  assert result.has_errors


def test_malformed_call_is_a_warning_not_a_failure():
  code = (
    "from boot.test.util import EnvironmentTestUtils\n"
    "\n"
    "\n"
    "def setup(ctx):\n"
    "    EnvironmentTestUtils.add_environment(ctx)\n"
  )
  result = _engine(mark_failures=False).run(code)

  assert result.success
  assert result.code == code
  assert len(result.warnings) == 1
  assert not result.has_errors


@pytest.mark.parametrize(
  "call",
  [
    "EnvironmentTestUtils.add_environment(ctx, *pairs)",
    'EnvironmentTestUtils.add_environment(pair="a=1", context=ctx)',
    'EnvironmentTestUtils.add_environment(ctx, "a=1", "b=2", "c=3")',
  ],
)
def test_unrecognized_call_shapes_are_left_for_manual_migration(call):
  code = (
    "from boot.test.util import EnvironmentTestUtils\n"
    "\n"
    "\n"
    "def setup(ctx, pairs):\n"
    '    EnvironmentTestUtils.add_environment(ctx, "x=0")\n'
    f"    {call}\n"
  )
  result = _engine(mark_failures=False).run(code)

  assert result.success
  assert result.code == code
  assert "TestPropertyValues" not in result.code
  assert len(result.warnings) == 1

  marked = _engine().run(code)
  assert marked.success
  assert "TestPropertyValues" not in marked.code
  assert "    # <API_MIGRATOR_SKIPPED>\n" in marked.code
  assert f"    {call}\n    # </API_MIGRATOR_SKIPPED>\n" in marked.code


def test_replacement_name_imported_from_elsewhere_fails_the_file():
  code = (
    "from boot.test.util import EnvironmentTestUtils\n"
    "from other.lib import TestPropertyValues\n"
    "\n"
    "\n"
    "def setup(ctx):\n"
    '    EnvironmentTestUtils.add_environment(ctx, "a=1")\n'
  )
  result = _engine().run(code, path="test_env.py")

  assert not result.success
  assert result.code == code
  assert len(result.errors) == 1
  assert result.errors[0].startswith("test_env.py: 'TestPropertyValues' is already imported")


def test_properties_are_renamed_with_included_rules():
  text = (
    "# SAML\n"
    "spring.security.saml2.relyingparty.registration.okta.identityprovider.entity-id=https://idp\n"
    "spring.datasource.platform = h2\n"
    "server.port: 8080\n"
  )
  engine = MigrationEngine(config=RuntimeConfig(), recipe="boot-2.7")
  result = engine.migrate(text, path="application.properties")

  assert result.success
  assert result.code == (
    "# SAML\n"
    "spring.security.saml2.relyingparty.registration.okta.assertingparty.entity-id=https://idp\n"
    "spring.sql.init.platform = h2\n"
    "server.port: 8080\n"
  )
  assert ("spring.datasource.platform", "spring.sql.init.platform") in result.renamed_keys


def test_python_paths_are_migrated_by_migrate():
  result = _engine().migrate(SOURCE, path="test_env.py")
  assert result.code == EXPECTED


def test_project_recipe_from_config():
  """
  Scenario: A project recipe includes a built-in one.
  Expect: The engine resolves it through the registry built from config.
  """
  config = RuntimeConfig(recipe="in-house", recipes=[Recipe(name="in-house", include=["boot-2.0"])])
  engine = MigrationEngine(config=config)

  assert engine.recipe.chain == ["boot-2.0", "in-house"]
  assert engine.run(SOURCE).code == EXPECTED


def test_explicit_registry():
  registry = RecipeRegistry([Recipe(name="empty")])
  engine = MigrationEngine(registry=registry, recipe="empty")
  result = engine.run(SOURCE)
  assert result.code == SOURCE
  assert not result.changed
