"""
Core Package.

Contains the backend migration logic:
- Migration Engine
- Scanning and expansion passes
- Semantic equality and replacement templates
- Import Fixer
"""
