"""Declarative metadata attached to command classes.

Commands are plain classes decorated with :func:`cmdlet` and, optionally,
:func:`output_type`. Parameters are public annotations (or property return
annotations) whose ``typing.Annotated`` metadata carries one or more
:class:`ParameterAttribute` instances::

    @cmdlet("Get", "Widget")
    @output_type("builtins.str")
    class GetWidget:
        name: Annotated[str, ParameterAttribute(mandatory=True, position=0)]
        id: Annotated[int, ParameterAttribute(parameter_set_name="ById")]
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from importlib import import_module
from typing import Any, Protocol, runtime_checkable
from collections.abc import Callable, Sequence

ALL_PARAMETER_SETS = "__AllParameterSets"

CMDLET_ATTRIBUTE_KEY = "__cmdlet__"
OUTPUT_TYPE_ATTRIBUTE_KEY = "__cmdlet_output_types__"

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True, kw_only=True)
class CmdletAttribute:
    """Declares a class as a command named ``verb-noun``."""

    verb: str
    noun: str
    default_parameter_set_name: str | None = None
    supports_should_process: bool = False

    @property
    def name(self) -> str:
        return self.verb + "-" + self.noun


@dataclass(frozen=True)
class TypeReference:
    """Reference to a type, either a class or a dotted name resolved on
    demand.

    Names may be ``"pkg.mod.Class"``, ``"pkg.mod:Outer.Inner"`` or a builtin
    such as ``"str"``.
    """

    target: type | str

    @property
    def type(self) -> type | None:
        if isinstance(self.target, type):
            return self.target
        return _import_type(self.target)

    def __str__(self) -> str:
        if isinstance(self.target, type):
            return f"{self.target.__module__}.{self.target.__qualname__}"
        return self.target


@dataclass(frozen=True)
class OutputTypeAttribute:
    """Declares types a command may emit."""

    types: tuple[TypeReference, ...] = ()
    parameter_set_names: tuple[str, ...] = (ALL_PARAMETER_SETS,)


@dataclass(frozen=True, kw_only=True)
class ParameterAttribute:
    """Marks a member as a command parameter within one parameter set."""

    parameter_set_name: str = ALL_PARAMETER_SETS
    mandatory: bool = False
    position: int | None = None
    value_from_pipeline: bool = False
    value_from_pipeline_by_property_name: bool = False
    value_from_remaining_arguments: bool = False
    help_message: str | None = None
    dont_show: bool = False


@dataclass(frozen=True)
class AliasAttribute:
    aliases: tuple[str, ...]

    def __init__(self, *aliases: str) -> None:
        object.__setattr__(self, "aliases", tuple(aliases))


@dataclass(frozen=True)
class ValidateSetAttribute:
    valid_values: tuple[str, ...]

    def __init__(self, *valid_values: str) -> None:
        object.__setattr__(self, "valid_values", tuple(valid_values))


@dataclass(frozen=True)
class SupportsWildcardsAttribute:
    pass


@runtime_checkable
class DynamicParameters(Protocol):
    """Capability of commands that compute extra parameters at runtime."""

    def get_dynamic_parameters(self) -> object:  # pragma: no cover
        """Return a :class:`RuntimeDefinedParameterDictionary` (or anything
        else, which is ignored)."""
        ...


@dataclass(kw_only=True)
class RuntimeDefinedParameter:
    """Parameter definition produced by a dynamic-parameter provider."""

    name: str
    parameter_type: type | None = None
    attributes: list[Any] = field(default_factory=list)
    value: Any = None


class RuntimeDefinedParameterDictionary(dict[str, RuntimeDefinedParameter]):
    """Mapping of parameter name to runtime definition, in insertion
    order."""

    def add(self, parameter: RuntimeDefinedParameter) -> RuntimeDefinedParameter:
        self[parameter.name] = parameter
        return parameter


def cmdlet(
    verb: str,
    noun: str,
    *,
    default_parameter_set_name: str | None = None,
    supports_should_process: bool = False,
) -> Callable[[type], type]:
    """Class decorator declaring a command."""

    def decorate(cls: type) -> type:
        if CMDLET_ATTRIBUTE_KEY in vars(cls):
            raise ValueError(f"{cls.__qualname__} already carries a cmdlet declaration")
        setattr(
            cls,
            CMDLET_ATTRIBUTE_KEY,
            CmdletAttribute(
                verb=verb,
                noun=noun,
                default_parameter_set_name=default_parameter_set_name,
                supports_should_process=supports_should_process,
            ),
        )
        return cls

    return decorate


def output_type(
    *types: type | str | TypeReference,
    parameter_set_names: Sequence[str] | None = None,
) -> Callable[[type], type]:
    """Class decorator declaring output types; may be applied repeatedly."""

    references = tuple(ref if isinstance(ref, TypeReference) else TypeReference(ref) for ref in types)
    attribute = OutputTypeAttribute(
        types=references,
        parameter_set_names=tuple(parameter_set_names or (ALL_PARAMETER_SETS,)),
    )

    def decorate(cls: type) -> type:
        declared = list(vars(cls).get(OUTPUT_TYPE_ATTRIBUTE_KEY, ()))
        # decorators apply bottom-up; keep source order
        declared.insert(0, attribute)
        setattr(cls, OUTPUT_TYPE_ATTRIBUTE_KEY, tuple(declared))
        return cls

    return decorate


def _import_type(name: str) -> type | None:
    if ":" in name:
        module_name, _, qualname = name.partition(":")
        return _lookup(module_name, qualname.split("."))

    parts = name.split(".")
    if len(parts) == 1:
        return _lookup("builtins", parts)
    # longest importable module prefix wins
    for split in range(len(parts) - 1, 0, -1):
        found = _lookup(".".join(parts[:split]), parts[split:])
        if found is not None:
            return found
    return None


def _lookup(module_name: str, attrs: Sequence[str]) -> type | None:
    try:
        obj: Any = import_module(module_name)
    except Exception as exc:
        # empty, relative or failing modules leave the reference unresolved
        LOGGER.debug("Cannot import %r: %s", module_name, exc)
        return None
    for attr in attrs:
        obj = getattr(obj, attr, None)
        if obj is None:
            return None
    return obj if isinstance(obj, type) else None


__all__ = [
    "ALL_PARAMETER_SETS",
    "AliasAttribute",
    "CmdletAttribute",
    "DynamicParameters",
    "OutputTypeAttribute",
    "ParameterAttribute",
    "RuntimeDefinedParameter",
    "RuntimeDefinedParameterDictionary",
    "SupportsWildcardsAttribute",
    "TypeReference",
    "ValidateSetAttribute",
    "cmdlet",
    "output_type",
]
