"""Errors raised while building command models.

Every error is fatal for the computation that raised it; callers decide
whether to skip the offending command or abort.
"""

from __future__ import annotations


class CommandModelError(RuntimeError):
    """Base class for command model failures."""


class NullInputError(CommandModelError, TypeError):
    """Raised when no command type is given."""


class MissingDeclarationError(CommandModelError, ValueError):
    """Raised when a type carries no cmdlet declaration."""


class MalformedOutputTypeError(CommandModelError):
    """Raised for output-type declarations without types or with unresolvable
    type references."""


class UnresolvableMemberError(CommandModelError):
    """Raised when the type of a parameter member cannot be determined."""


class InstantiationError(CommandModelError):
    """Raised when a dynamic-parameter command cannot be constructed or its
    provider fails."""


__all__ = [
    "CommandModelError",
    "InstantiationError",
    "MalformedOutputTypeError",
    "MissingDeclarationError",
    "NullInputError",
    "UnresolvableMemberError",
]
