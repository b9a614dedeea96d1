"""Command and parameter models."""

from .errors import (
    CommandModelError,
    InstantiationError,
    MalformedOutputTypeError,
    MissingDeclarationError,
    NullInputError,
    UnresolvableMemberError,
)

__all__ = [
    "CommandModelError",
    "InstantiationError",
    "MalformedOutputTypeError",
    "MissingDeclarationError",
    "NullInputError",
    "UnresolvableMemberError",
]
