"""Command model built from a decorated command class."""

from __future__ import annotations

import logging
from collections.abc import Iterable

from cmdletdoc.domain.errors import (
    InstantiationError,
    MalformedOutputTypeError,
    MissingDeclarationError,
    NullInputError,
)
from cmdletdoc.domain.parameter import ComputedParameter, DeclaredParameter, Parameter
from cmdletdoc.introspection import (
    InstanceFactory,
    construct_default_instance,
    full_type_name,
    get_command_declaration,
    get_output_type_declarations,
    implements_dynamic_parameters,
    iter_nested_types,
    iter_parameter_members,
    resolve_type_reference,
)
from cmdletdoc.metadata import (
    ALL_PARAMETER_SETS,
    ParameterAttribute,
    RuntimeDefinedParameterDictionary,
)
from cmdletdoc.utils.lazy import Lazy

LOGGER = logging.getLogger(__name__)


class Command:
    """A single cmdlet.

    Output types and parameters are computed on first access and cached for
    the lifetime of the instance. Commands that provide dynamic parameters
    are instantiated once, through ``instance_factory``, to read them.
    """

    def __init__(
        self,
        command_type: type,
        *,
        instance_factory: InstanceFactory = construct_default_instance,
    ) -> None:
        if command_type is None:
            raise NullInputError("command_type must not be None")
        declaration = get_command_declaration(command_type)
        if declaration is None:
            raise MissingDeclarationError(f"Missing cmdlet declaration on {command_type.__qualname__}")
        self._command_type = command_type
        self._declaration = declaration
        self._instance_factory = instance_factory
        self._output_types: Lazy[tuple[type, ...]] = Lazy(self._compute_output_types)
        self._parameters: Lazy[tuple[Parameter, ...]] = Lazy(self._compute_parameters)

    @property
    def command_type(self) -> type:
        return self._command_type

    @property
    def verb(self) -> str:
        return self._declaration.verb

    @property
    def noun(self) -> str:
        return self._declaration.noun

    @property
    def name(self) -> str:
        return self._declaration.name

    @property
    def default_parameter_set_name(self) -> str | None:
        return self._declaration.default_parameter_set_name

    @property
    def output_types(self) -> tuple[type, ...]:
        """Declared output types, deduplicated and sorted by full name."""
        return self._output_types.value

    @property
    def parameters(self) -> tuple[Parameter, ...]:
        """Declared, nested-bag and dynamic parameters, in that order."""
        return self._parameters.value

    @property
    def parameter_set_names(self) -> tuple[str, ...]:
        names = [name for parameter in self.parameters for name in parameter.parameter_set_names]
        # parameterless commands still have the all-sets set
        names.append(ALL_PARAMETER_SETS)
        return tuple(dict.fromkeys(names))

    def get_parameters(self, parameter_set_name: str) -> tuple[Parameter, ...]:
        """Parameters belonging to ``parameter_set_name``.

        Parameters declared for all sets belong to every set.
        """
        if parameter_set_name == ALL_PARAMETER_SETS:
            return self.parameters
        return tuple(
            parameter
            for parameter in self.parameters
            if parameter_set_name in parameter.parameter_set_names
            or ALL_PARAMETER_SETS in parameter.parameter_set_names
        )

    def _compute_output_types(self) -> tuple[type, ...]:
        resolved: list[type] = []
        for attribute in get_output_type_declarations(self._command_type):
            if not attribute.types:
                raise MalformedOutputTypeError(
                    f"Type not set for output type declaration of command {self._command_type.__name__}"
                )
            for reference in attribute.types:
                try:
                    found = resolve_type_reference(reference)
                except Exception as exc:
                    raise MalformedOutputTypeError(
                        f"Could not find type for type reference {reference}: {exc}"
                    ) from exc
                if found is None:
                    raise MalformedOutputTypeError(f"Could not find type for type reference {reference}")
                resolved.append(found)

        output_types = tuple(sorted(dict.fromkeys(resolved), key=full_type_name))
        LOGGER.debug("%s declares %d output type(s)", self.name, len(output_types))
        return output_types

    def _compute_parameters(self) -> tuple[Parameter, ...]:
        command_type = self._command_type
        parameters: list[Parameter] = [
            DeclaredParameter(command_type, member) for member in iter_parameter_members(command_type)
        ]

        if implements_dynamic_parameters(command_type):
            for nested_type in iter_nested_types(command_type):
                parameters.extend(
                    DeclaredParameter(nested_type, member) for member in iter_parameter_members(nested_type)
                )
            parameters.extend(self._dynamic_parameters())

        LOGGER.debug("%s has %d parameter(s)", self.name, len(parameters))
        return tuple(parameters)

    def _dynamic_parameters(self) -> Iterable[Parameter]:
        command_type = self._command_type
        try:
            instance = self._instance_factory(command_type)
        except (Exception, SystemExit) as exc:
            raise InstantiationError(f"Unable to instantiate {command_type.__qualname__}: {exc}") from exc
        try:
            provided = instance.get_dynamic_parameters()  # type: ignore[attr-defined]
        except (Exception, SystemExit) as exc:
            raise InstantiationError(
                f"Dynamic parameter provider of {command_type.__qualname__} failed: {exc}"
            ) from exc

        if not isinstance(provided, RuntimeDefinedParameterDictionary):
            LOGGER.debug(
                "%s returned %s from its dynamic parameter provider, ignoring",
                self.name,
                type(provided).__name__,
            )
            return []
        return [
            ComputedParameter(command_type, definition)
            for definition in provided.values()
            if any(isinstance(attr, ParameterAttribute) for attr in definition.attributes)
        ]

    def __repr__(self) -> str:
        return f"Command({self.name!r}, type={self._command_type.__qualname__})"


__all__ = ["Command"]
