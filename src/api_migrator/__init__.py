"""
api-migrator Package.

A deterministic source migration tool. It collapses runs of calls to a
deprecated API into a single call to its fluent replacement, repairs the
affected imports, and renames configuration keys, driven by named recipes.

Usage
-----

Simple String Migration
^^^^^^^^^^^^^^^^^^^^^^^

.. code-block:: python

    import api_migrator as am
    code = '''
    from boot.test.util import EnvironmentTestUtils

    def setup(ctx):
        EnvironmentTestUtils.add_environment(ctx, "a=1")
        EnvironmentTestUtils.add_environment(ctx, "b=2")
    '''
    print(am.migrate(code))
    # from boot.test.util import TestPropertyValues
    #
    # def setup(ctx):
    #     TestPropertyValues.of("a=1").and_("b=2").apply_to(ctx)

Advanced Usage (Engine)
^^^^^^^^^^^^^^^^^^^^^^^

.. code-block:: python

    from api_migrator import MigrationEngine, RuntimeConfig

    config = RuntimeConfig(recipe="boot-2.0", mark_failures=False)
    engine = MigrationEngine(config=config)
    res = engine.run(code, path="tests/test_env.py")

    if res.success:
        print(res.code)
    else:
        print(f"Errors: {res.errors}")
"""

from typing import Optional

from api_migrator.config import RuntimeConfig
from api_migrator.core.conversion_result import ConversionResult
from api_migrator.core.engine import MigrationEngine

__version__ = "0.1.0"


def migrate(code: str, recipe: Optional[str] = None, mark_failures: bool = True) -> str:
  """
  Migrates a string of Python code with the given recipe.

  This is a high-level convenience wrapper around the `MigrationEngine`. For
  file-based or batch processing, use `api_migrator.cli` or the engine directly.

  Args:
      code (str): The source code to migrate.
      recipe (str, optional): Recipe name. Defaults to the configured recipe.
      mark_failures (bool): Wrap statements that cannot be migrated in
          escape hatch comments.

  Returns:
      str: The migrated source code.

  Raises:
      ValueError: If the migration fails (e.g. syntax or template errors).
  """
  config = RuntimeConfig(mark_failures=mark_failures)
  engine = MigrationEngine(config=config, recipe=recipe)
  result = engine.run(code)

  if not result.success:
    error_msg = "\n".join(result.errors)
    raise ValueError(f"Migration failed:\n{error_msg}")

  return result.code


__all__ = [
  "ConversionResult",
  "MigrationEngine",
  "RuntimeConfig",
  "migrate",
  "__version__",
]
