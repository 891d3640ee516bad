# Copyright (c) 2025 Voxgig Ltd. MIT LICENSE.
#
# Errors raised by lookups, writes and conversions. Every error names the
# attribute or path involved, plus the expected and actual shape where
# one applies, so callers can act without re-deriving context.

from typing import *


def _shapename(shape: Any) -> str:
    if shape is None:
        return 'None'
    if isinstance(shape, type):
        return shape.__module__ + '.' + shape.__qualname__ \
            if shape.__module__ != 'builtins' else shape.__qualname__
    return str(shape)


class StructError(Exception):
    """
    Base class of all beanstruct errors.
    """
    def __init__(
        self,
        message: str,
        name: Optional[str] = None,   # Attribute name or tier path.
        expected: Any = None,         # Expected shape, if any.
        actual: Any = None,           # Actual shape, if any.
    ) -> None:
        super().__init__(message)
        self.message = message
        self.name = name
        self.expected = expected
        self.actual = actual

    # KeyError subclasses would otherwise repr the message.
    def __str__(self) -> str:
        return self.message


class AttributeNotFound(StructError, AttributeError):
    def __init__(self, name: str, owner: Any = None) -> None:
        super().__init__(
            f"The property {name} does not exist in {_shapename(owner)}.",
            name=name, expected=owner)


class PathNotFound(StructError, KeyError):
    def __init__(self, path: str, root: Any = None) -> None:
        super().__init__(
            f"Path {path} not found in {_shapename(type(root)) if root is not None else 'None'}.",
            name=path, actual=type(root) if root is not None else None)


class AmbiguousPath(StructError, KeyError):
    def __init__(self, path: str, candidates: List[str]) -> None:
        super().__init__(
            f"Ambiguous path {path}: matches {', '.join(candidates)}.",
            name=path)
        self.candidates = candidates


class ValueAssignmentError(StructError, TypeError):
    def __init__(self, name: str, expected: Any, value: Any) -> None:
        super().__init__(
            f"Cannot set property {name} declared as {_shapename(expected)} "
            f"to a value of type {_shapename(type(value))}.",
            name=name, expected=expected, actual=type(value))


class UnresolvableConversion(StructError, ValueError):
    def __init__(self, target: Any, value: Any, name: Optional[str] = None) -> None:
        super().__init__(
            (f"Cannot resolve {name}: " if name else "Cannot resolve: ") +
            f"expected {_shapename(target)}, but found {_shapename(type(value))}.",
            name=name, expected=target, actual=type(value))


class InaccessibleAttribute(StructError, AttributeError):
    def __init__(self, name: str, owner: Any = None) -> None:
        super().__init__(
            f"The property {name} of {_shapename(owner)} cannot be written.",
            name=name, expected=owner)


__all__ = [
    'AmbiguousPath',
    'AttributeNotFound',
    'InaccessibleAttribute',
    'PathNotFound',
    'StructError',
    'UnresolvableConversion',
    'ValueAssignmentError',
]
