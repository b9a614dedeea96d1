"""Structured models of cmdlet-style command classes for help generation."""

from cmdletdoc.metadata import (
    ALL_PARAMETER_SETS,
    AliasAttribute,
    CmdletAttribute,
    DynamicParameters,
    OutputTypeAttribute,
    ParameterAttribute,
    RuntimeDefinedParameter,
    RuntimeDefinedParameterDictionary,
    SupportsWildcardsAttribute,
    TypeReference,
    ValidateSetAttribute,
    cmdlet,
    output_type,
)
from cmdletdoc.domain.errors import (
    CommandModelError,
    InstantiationError,
    MalformedOutputTypeError,
    MissingDeclarationError,
    NullInputError,
    UnresolvableMemberError,
)
from cmdletdoc.domain.parameter import ComputedParameter, DeclaredParameter, Parameter
from cmdletdoc.domain.command import Command

__all__ = [
    "ALL_PARAMETER_SETS",
    "AliasAttribute",
    "CmdletAttribute",
    "Command",
    "CommandModelError",
    "ComputedParameter",
    "DeclaredParameter",
    "DynamicParameters",
    "InstantiationError",
    "MalformedOutputTypeError",
    "MissingDeclarationError",
    "NullInputError",
    "OutputTypeAttribute",
    "Parameter",
    "ParameterAttribute",
    "RuntimeDefinedParameter",
    "RuntimeDefinedParameterDictionary",
    "SupportsWildcardsAttribute",
    "TypeReference",
    "UnresolvableMemberError",
    "ValidateSetAttribute",
    "cmdlet",
    "output_type",
]
