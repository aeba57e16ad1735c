"""
lazy-mapper — declarative, lazily evaluated typed views over raw records.

File: src/lazy_mapper/__init__.py

Purpose
- Package root. Exposes the model base class, the declaration helpers, and the
  error taxonomy.

Functional requirements
- Must not have side effects at import time (no config loading, no logging init).
"""

from lazy_mapper.core.attributes import UNSET, AttributeKind, AttributeSpec, has, is_, many, one
from lazy_mapper.core.coercion import Coercion, as_coercion, contextual, to_bool
from lazy_mapper.core.model import Model
from lazy_mapper.core.naming import camelize, humanize_list
from lazy_mapper.core.registry import TypeRegistry
from lazy_mapper.errors import (
    InvalidInputError,
    LazyMapperError,
    MaterializedAttributeError,
    MissingMapperError,
    TypeMismatchError,
)

__version__ = "0.1.0"

__all__ = [
    "UNSET",
    "AttributeKind",
    "AttributeSpec",
    "Coercion",
    "InvalidInputError",
    "LazyMapperError",
    "MaterializedAttributeError",
    "MissingMapperError",
    "Model",
    "TypeMismatchError",
    "TypeRegistry",
    "__version__",
    "as_coercion",
    "camelize",
    "contextual",
    "has",
    "humanize_list",
    "is_",
    "many",
    "one",
    "to_bool",
]
