"""
lazy-mapper — core mapping engine.

File: src/lazy_mapper/core/__init__.py

Purpose
- Attribute declarations, type registry, coercion resolution, memoization,
  validation, and rendering of model instances.

What should be included in this file
- No imports. Public names are re-exported from the ``lazy_mapper`` package root.
"""
