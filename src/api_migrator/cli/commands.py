"""
CLI Command Handlers Facade.

The dispatcher calls handlers through this module, which is also the patch
target for dispatch tests.
"""

from api_migrator.cli.handlers.convert import handle_convert
from api_migrator.cli.handlers.recipes import handle_recipes

__all__ = ["handle_convert", "handle_recipes"]
