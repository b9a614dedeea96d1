"""JSON-friendly summaries of command models."""

from __future__ import annotations

from enum import Enum
from typing import Any
from collections.abc import Iterable

from cmdletdoc.domain.command import Command
from cmdletdoc.domain.parameter import Parameter
from cmdletdoc.introspection import full_type_name
from cmdletdoc.metadata import ALL_PARAMETER_SETS


def type_display_name(tp: Any) -> str:
    if isinstance(tp, type):
        if tp.__module__ == "builtins":
            return tp.__qualname__
        return full_type_name(tp)
    return str(tp).replace("typing.", "")


def _json_value(value: Any) -> Any:
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    if isinstance(value, Enum):
        return value.name
    if isinstance(value, (list, tuple)):
        return [_json_value(item) for item in value]
    return str(value)


def parameter_to_dict(parameter: Parameter, parameter_set_name: str) -> dict[str, Any]:
    return {
        "name": parameter.name,
        "type": type_display_name(parameter.parameter_type),
        "mandatory": parameter.is_mandatory(parameter_set_name),
        "position": parameter.position(parameter_set_name),
        "pipeline": parameter.is_pipeline(parameter_set_name),
        "pipeline_by_property_name": parameter.is_pipeline_by_property_name(parameter_set_name),
        "remaining_arguments": parameter.is_remaining_arguments(parameter_set_name),
        "aliases": list(parameter.aliases),
        "accepted_values": list(parameter.accepted_values),
        "supports_wildcards": parameter.supports_wildcards,
        "default": _json_value(parameter.default_value),
        "help": parameter.help_message,
    }


def documented_parameter_sets(command: Command, exclude: Iterable[str] = ()) -> list[str]:
    """Parameter sets to document, in discovery order.

    The all-sets set only gets its own entry when it is the sole set.
    """
    excluded = set(exclude)
    names = [name for name in command.parameter_set_names if name not in excluded]
    if len(names) > 1:
        names = [name for name in names if name != ALL_PARAMETER_SETS]
    return names


def command_to_dict(command: Command, exclude_parameter_sets: Iterable[str] = ()) -> dict[str, Any]:
    parameter_sets = {}
    for set_name in documented_parameter_sets(command, exclude_parameter_sets):
        parameters = sorted(
            command.get_parameters(set_name),
            key=lambda p: (p.position(set_name) is None, p.position(set_name) or 0),
        )
        parameter_sets[set_name] = [parameter_to_dict(p, set_name) for p in parameters]
    return {
        "name": command.name,
        "verb": command.verb,
        "noun": command.noun,
        "default_parameter_set": command.default_parameter_set_name,
        "output_types": [type_display_name(tp) for tp in command.output_types],
        "parameter_sets": parameter_sets,
    }


__all__ = [
    "command_to_dict",
    "documented_parameter_sets",
    "parameter_to_dict",
    "type_display_name",
]
