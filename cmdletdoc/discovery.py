"""Find command classes in modules and build their models.

Model failures are reported per command. By default a failing command is
logged and skipped; in strict mode the first failure aborts the run.
"""

from __future__ import annotations

import inspect
import logging
from dataclasses import dataclass, field
from importlib import import_module
from types import ModuleType
from collections.abc import Iterable

from cmdletdoc.domain.command import Command
from cmdletdoc.domain.errors import CommandModelError
from cmdletdoc.introspection import get_command_declaration

LOGGER = logging.getLogger(__name__)


@dataclass
class CommandFailure:
    """A command class whose model could not be built."""

    command_type: type
    error: CommandModelError

    @property
    def label(self) -> str:
        declaration = get_command_declaration(self.command_type)
        if declaration is not None:
            return declaration.name
        return self.command_type.__qualname__

    def __str__(self) -> str:
        return f"{self.label} ({self.command_type.__qualname__}): {self.error}"


@dataclass
class DiscoveryResult:
    commands: list[Command] = field(default_factory=list)
    failures: list[CommandFailure] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failures


def discover_command_types(module: ModuleType) -> list[type]:
    """Command classes defined in ``module``, sorted by command name."""
    found = []
    for _, member in inspect.getmembers(module, inspect.isclass):
        if member.__module__ != module.__name__:
            continue
        declaration = get_command_declaration(member)
        if declaration is not None:
            found.append((declaration.name, member))
    return [member for _, member in sorted(found, key=lambda item: item[0])]


def build_command(command_type: type) -> Command:
    """Construct a command and force its lazy output types and parameters."""
    command = Command(command_type)
    _ = command.output_types
    _ = command.parameters
    return command


def build_commands(module_names: Iterable[str], *, strict: bool = False) -> DiscoveryResult:
    result = DiscoveryResult()
    for module_name in module_names:
        module = import_module(module_name)
        command_types = discover_command_types(module)
        LOGGER.info("Found %d command(s) in %s", len(command_types), module_name)
        for command_type in command_types:
            try:
                result.commands.append(build_command(command_type))
            except CommandModelError as exc:
                failure = CommandFailure(command_type, exc)
                if strict:
                    LOGGER.error("Aborting on %s", failure)
                    raise
                LOGGER.error("Skipping %s", failure)
                result.failures.append(failure)
    return result


__all__ = [
    "CommandFailure",
    "DiscoveryResult",
    "build_command",
    "build_commands",
    "discover_command_types",
]
