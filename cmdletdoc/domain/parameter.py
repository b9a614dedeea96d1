"""Parameter model shared by declared and runtime-computed parameters."""

from __future__ import annotations

from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Union, get_args, get_origin
from types import UnionType
from collections.abc import Sequence

from cmdletdoc.domain.errors import UnresolvableMemberError
from cmdletdoc.introspection import NO_DEFAULT, MemberInfo
from cmdletdoc.metadata import (
    ALL_PARAMETER_SETS,
    AliasAttribute,
    ParameterAttribute,
    RuntimeDefinedParameter,
    SupportsWildcardsAttribute,
    ValidateSetAttribute,
)


class Parameter(ABC):
    """A single parameter of a command.

    Subclasses supply ``name``, ``parameter_type`` and the raw attribute
    list; every other fact is derived from the attributes.
    """

    def __init__(self, owner_type: type, attributes: Sequence[Any]) -> None:
        self.owner_type = owner_type
        self.attributes: tuple[Any, ...] = tuple(attributes)
        self.parameter_attributes: tuple[ParameterAttribute, ...] = tuple(
            attr for attr in self.attributes if isinstance(attr, ParameterAttribute)
        )

    @property
    @abstractmethod
    def name(self) -> str: ...

    @property
    @abstractmethod
    def parameter_type(self) -> Any: ...

    @property
    def default_value(self) -> Any:
        return None

    @property
    def parameter_set_names(self) -> tuple[str, ...]:
        return tuple(dict.fromkeys(attr.parameter_set_name for attr in self.parameter_attributes))

    def get_parameter_attribute(self, parameter_set_name: str) -> ParameterAttribute | None:
        """The attribute scoped to ``parameter_set_name``, falling back to the
        all-sets attribute."""
        fallback = None
        for attr in self.parameter_attributes:
            if attr.parameter_set_name == parameter_set_name:
                return attr
            if attr.parameter_set_name == ALL_PARAMETER_SETS and fallback is None:
                fallback = attr
        return fallback

    def is_mandatory(self, parameter_set_name: str = ALL_PARAMETER_SETS) -> bool:
        attr = self.get_parameter_attribute(parameter_set_name)
        return attr is not None and attr.mandatory

    def position(self, parameter_set_name: str = ALL_PARAMETER_SETS) -> int | None:
        """Positional index, or ``None`` for named-only parameters."""
        attr = self.get_parameter_attribute(parameter_set_name)
        return attr.position if attr is not None else None

    def is_pipeline(self, parameter_set_name: str = ALL_PARAMETER_SETS) -> bool:
        attr = self.get_parameter_attribute(parameter_set_name)
        return attr is not None and attr.value_from_pipeline

    def is_pipeline_by_property_name(self, parameter_set_name: str = ALL_PARAMETER_SETS) -> bool:
        attr = self.get_parameter_attribute(parameter_set_name)
        return attr is not None and attr.value_from_pipeline_by_property_name

    def is_remaining_arguments(self, parameter_set_name: str = ALL_PARAMETER_SETS) -> bool:
        attr = self.get_parameter_attribute(parameter_set_name)
        return attr is not None and attr.value_from_remaining_arguments

    @property
    def help_message(self) -> str | None:
        for attr in self.parameter_attributes:
            if attr.help_message:
                return attr.help_message
        return None

    @property
    def aliases(self) -> tuple[str, ...]:
        found: list[str] = []
        for attr in self.attributes:
            if isinstance(attr, AliasAttribute):
                found.extend(attr.aliases)
        return tuple(dict.fromkeys(found))

    @property
    def supports_wildcards(self) -> bool:
        return any(isinstance(attr, SupportsWildcardsAttribute) for attr in self.attributes)

    @property
    def accepted_values(self) -> tuple[str, ...]:
        """Values from a validate-set attribute, else the members of an enum
        type."""
        for attr in self.attributes:
            if isinstance(attr, ValidateSetAttribute):
                return attr.valid_values
        enum_type = _enum_type(self.parameter_type)
        if enum_type is not None:
            return tuple(member.name for member in enum_type)
        return ()

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r}, sets={list(self.parameter_set_names)})"


class DeclaredParameter(Parameter):
    """Parameter backed by a public member of the command or a nested bag."""

    def __init__(self, owner_type: type, member: MemberInfo) -> None:
        # resolving here surfaces unresolvable member types at construction
        member_type, attributes = member.resolved
        super().__init__(owner_type, attributes)
        self.member = member
        self._parameter_type = member_type

    @property
    def name(self) -> str:
        return self.member.name

    @property
    def parameter_type(self) -> Any:
        return self._parameter_type

    @property
    def default_value(self) -> Any:
        default = self.member.default
        return None if default is NO_DEFAULT else default


class ComputedParameter(Parameter):
    """Parameter backed by a runtime definition from a dynamic provider."""

    def __init__(self, command_type: type, definition: RuntimeDefinedParameter) -> None:
        if definition.parameter_type is None:
            raise UnresolvableMemberError(
                f"Runtime parameter {definition.name!r} of {command_type.__qualname__} has no type"
            )
        super().__init__(command_type, definition.attributes)
        self.definition = definition

    @property
    def name(self) -> str:
        return self.definition.name

    @property
    def parameter_type(self) -> Any:
        return self.definition.parameter_type

    @property
    def default_value(self) -> Any:
        return self.definition.value


def _enum_type(tp: Any) -> type[Enum] | None:
    if isinstance(tp, type) and issubclass(tp, Enum):
        return tp
    # Optional[SomeEnum] and friends
    if get_origin(tp) in (Union, UnionType):
        candidates = [arg for arg in get_args(tp) if arg is not type(None)]
        if len(candidates) == 1:
            return _enum_type(candidates[0])
    return None


__all__ = ["ComputedParameter", "DeclaredParameter", "Parameter"]
