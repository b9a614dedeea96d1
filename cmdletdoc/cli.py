"""Command line interface for cmdletdoc."""

from __future__ import annotations

import json
from pathlib import Path

import click

from cmdletdoc.config.loader import ConfigLoaderError, load_config_reference
from cmdletdoc.config.schema import DocGenConfig
from cmdletdoc.discovery import DiscoveryResult, build_commands
from cmdletdoc.domain.errors import CommandModelError
from cmdletdoc.report import command_to_dict
from cmdletdoc.utils.logging_config import configure_logging


def _common_options(func):
    options = [
        click.option("--config-ref", default=None, help="Config file path or Hydra config name"),
        click.option("--config-dir", type=click.Path(path_type=Path), default=Path("config")),
        click.option("--override", multiple=True, help="Dot-list or Hydra-style overrides"),
        click.option("--module", "modules", multiple=True, help="Module to scan for commands"),
        click.option("--strict", is_flag=True, help="Abort on the first command that fails"),
        click.option("--verbose", is_flag=True),
        click.option("--debug", is_flag=True),
    ]
    for option in reversed(options):
        func = option(func)
    return func


@click.group()
def cli() -> None:
    """Build structured models of cmdlet classes."""


@cli.command()
@_common_options
@click.option("--exclude-parameter-set", "excluded_sets", multiple=True, help="Parameter set to omit")
@click.option("--output", type=click.Path(path_type=Path), help="Write the summary to this file")
def describe(
    config_ref: str | None,
    config_dir: Path,
    override: tuple[str, ...],
    modules: tuple[str, ...],
    strict: bool,
    verbose: bool,
    debug: bool,
    excluded_sets: tuple[str, ...],
    output: Path | None,
) -> None:
    """Emit a JSON summary of every discovered command."""

    config = _load(config_ref, config_dir, override, modules, strict, verbose, debug)
    if excluded_sets:
        config.exclude_parameter_sets = [*config.exclude_parameter_sets, *excluded_sets]
    if output is not None:
        config.output_path = str(output)

    result = _discover(config)
    summary = {
        "commands": [command_to_dict(command, config.exclude_parameter_sets) for command in result.commands],
        "failures": [str(failure) for failure in result.failures],
    }
    text = json.dumps(summary, indent=config.indent)
    if config.output_path:
        target = Path(config.output_path)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(text + "\n", encoding="utf-8")
        click.echo(f"wrote {len(result.commands)} command(s) to {target}")
    else:
        click.echo(text)

    if result.failures:
        raise SystemExit(1)


@cli.command(name="list")
@_common_options
def list_commands(
    config_ref: str | None,
    config_dir: Path,
    override: tuple[str, ...],
    modules: tuple[str, ...],
    strict: bool,
    verbose: bool,
    debug: bool,
) -> None:
    """Print the name and parameter sets of every discovered command."""

    config = _load(config_ref, config_dir, override, modules, strict, verbose, debug)
    result = _discover(config)
    for command in result.commands:
        click.echo(f"{command.name}: {', '.join(command.parameter_set_names)}")
    for failure in result.failures:
        click.echo(f"failed {failure}", err=True)
    if result.failures:
        raise SystemExit(1)


def _load(
    config_ref: str | None,
    config_dir: Path,
    override: tuple[str, ...],
    modules: tuple[str, ...],
    strict: bool,
    verbose: bool,
    debug: bool,
) -> DocGenConfig:
    configure_logging(verbose=verbose, debug=debug)
    try:
        config = load_config_reference(config_ref, config_dir, override)
    except ConfigLoaderError as exc:
        raise click.ClickException(str(exc)) from exc
    if modules:
        config.modules = [*config.modules, *modules]
    if strict:
        config.strict = True
    if not config.modules:
        raise click.ClickException("No modules to scan; pass --module or set `modules` in the config")
    return config


def _discover(config: DocGenConfig) -> DiscoveryResult:
    try:
        return build_commands(config.modules, strict=config.strict)
    except CommandModelError as exc:
        raise click.ClickException(str(exc)) from exc
    except ImportError as exc:
        raise click.ClickException(f"Unable to import module: {exc}") from exc


if __name__ == "__main__":  # pragma: no cover
    cli()
