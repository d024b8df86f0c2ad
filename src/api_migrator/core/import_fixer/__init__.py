"""
Import Fixer Package.

This package provides the ``ImportFixer`` class, a LibCST transformer responsible for:
1.  **Pruning**: Removing imports of the deprecated type once nothing references it.
2.  **Injection**: Adding the replacement type's import when it is used but not bound.

It is composed of mixins handling specific AST node types.
"""

from api_migrator.core.import_fixer.base import BaseImportFixer, ImportRef
from api_migrator.core.import_fixer.imports_mixin import ImportMixin
from api_migrator.core.import_fixer.injection_mixin import InjectionMixin


class ImportFixer(ImportMixin, InjectionMixin, BaseImportFixer):
  """
  Composite Transformer for managing imports.

  Inherits functionality from:
  - :class:`ImportMixin`: pruning import statements.
  - :class:`InjectionMixin`: injecting missing top-level imports.
  - :class:`BaseImportFixer`: State management and configuration.
  """


__all__ = ["ImportFixer", "ImportRef"]
