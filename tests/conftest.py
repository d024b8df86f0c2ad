"""
Pytest Configuration and Fixtures.

Includes:
- Syspath patching for local imports.
- Shared rule fixtures mirroring the built-in ``boot-2.0`` recipe.
- Console isolation so tests that swap the Rich backend do not leak.
"""

import sys
from pathlib import Path

import pytest

# Add src to path so we can import 'api_migrator' without installing it
src_path = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(src_path))

from api_migrator.core.template import clear_template_cache  # noqa: E402
from api_migrator.rules.schema import CoalesceRule  # noqa: E402
from api_migrator.utils.console import reset_console  # noqa: E402

ENV_RULE = {
  "name": "replace-environment-test-utils",
  "deprecated_call": "boot.test.util.EnvironmentTestUtils.add_environment",
  "replacement_type": "boot.test.util.TestPropertyValues",
}


@pytest.fixture
def env_rule() -> CoalesceRule:
  """The EnvironmentTestUtils -> TestPropertyValues coalescing rule."""
  return CoalesceRule(**ENV_RULE)


@pytest.fixture(autouse=True)
def isolate_console():
  """Restores the default console and template cache after each test."""
  yield
  reset_console()
  clear_template_cache()
