"""Error taxonomy raised by model declaration, construction, and attribute resolution."""

from __future__ import annotations


class LazyMapperError(Exception):
    """Base class for every error raised by ``lazy_mapper``."""


class InvalidInputError(LazyMapperError, TypeError):
    """Raised when the raw record handed to a model factory is not record-like."""

    def __init__(self, model: str, value: object) -> None:
        self.model = model
        self.value = value
        super().__init__(f"{model}: {value!r} is not a mapping")


class TypeMismatchError(LazyMapperError, TypeError):
    """Raised when a written or coerced value is outside the declared types."""

    def __init__(
        self,
        message: str,
        *,
        model: str,
        attribute: str,
        expected: tuple[type, ...],
        value: object,
    ) -> None:
        self.model = model
        self.attribute = attribute
        self.expected = expected
        self.value = value
        self.actual_type = type(value)
        super().__init__(message)


class MissingMapperError(LazyMapperError, LookupError):
    """Raised on first read when a present raw value has no coercion to go through."""

    def __init__(self, model: str, attribute: str, declared_type: object, value: object) -> None:
        self.model = model
        self.attribute = attribute
        self.declared_type = declared_type
        self.value = value
        super().__init__(
            f"missing mapper for {model}.{attribute} ({_type_label(declared_type)}). "
            f"Unmapped value: {value!r}"
        )


class MaterializedAttributeError(LazyMapperError, AttributeError):
    """Raised when writing to an attribute whose value is already memoized."""

    def __init__(self, model: str, attribute: str) -> None:
        self.model = model
        self.attribute = attribute
        super().__init__(f"{model}.{attribute} is already materialized and cannot be reassigned")


def _type_label(declared_type: object) -> str:
    if isinstance(declared_type, type):
        return declared_type.__name__
    if isinstance(declared_type, tuple):
        return " | ".join(_type_label(item) for item in declared_type)
    return repr(declared_type)


__all__ = [
    "InvalidInputError",
    "LazyMapperError",
    "MaterializedAttributeError",
    "MissingMapperError",
    "TypeMismatchError",
]
