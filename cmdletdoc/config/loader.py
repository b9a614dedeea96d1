"""Helpers for reading run configuration into ``DocGenConfig``."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any
from collections.abc import Iterable, Mapping

from compoconf import parse_config
from hydra import compose, initialize_config_dir
from omegaconf import OmegaConf

from .schema import DocGenConfig

LOGGER = logging.getLogger(__name__)


class ConfigLoaderError(RuntimeError):
    """Raised when the configuration cannot be read or parsed."""


def _parse(data: Any, source: str) -> DocGenConfig:
    if not isinstance(data, Mapping):
        raise ConfigLoaderError(f"Configuration root must be a mapping: {source}")
    try:
        return parse_config(DocGenConfig, dict(data))
    except Exception as exc:  # compoconf raises rich errors
        raise ConfigLoaderError(f"Unable to parse config {source}: {exc}") from exc


def load_config(path: str | Path, overrides: Iterable[str] | None = None) -> DocGenConfig:
    """Load a YAML file, applying ``key=value`` dot-list overrides."""

    path = Path(path)
    if not path.exists():
        raise ConfigLoaderError(f"Configuration file not found: {path}")

    cfg = OmegaConf.load(path)
    overrides = list(overrides or [])
    if overrides:
        cfg = OmegaConf.merge(cfg, OmegaConf.from_dotlist(overrides))
    data = OmegaConf.to_container(cfg, resolve=True)
    return _parse(data, str(path))


def load_hydra_config(
    config_name: str,
    config_dir: str | Path,
    overrides: Iterable[str] | None = None,
) -> DocGenConfig:
    """Compose ``config_name`` from a Hydra config directory."""

    config_dir = Path(config_dir).resolve()
    if not config_dir.exists():
        raise ConfigLoaderError(f"Hydra config directory not found: {config_dir}")

    with initialize_config_dir(version_base=None, config_dir=str(config_dir)):
        cfg = compose(config_name=config_name, overrides=list(overrides or []))
    data = OmegaConf.to_container(cfg, resolve=True)
    return _parse(data, f"Hydra config {config_name}")


def load_config_reference(
    ref: str | Path | None,
    config_dir: str | Path,
    overrides: Iterable[str] | None = None,
) -> DocGenConfig:
    """Resolve ``ref`` as a file path first, then as a Hydra config name.

    Without a reference, defaults are used and overrides still apply.
    """
    if ref is None:
        cfg = OmegaConf.from_dotlist(list(overrides or []))
        return _parse(OmegaConf.to_container(cfg, resolve=True), "command line")
    path = Path(ref)
    if path.exists():
        LOGGER.debug("Loading config file %s", path)
        return load_config(path, overrides)
    LOGGER.debug("Composing Hydra config %s from %s", ref, config_dir)
    return load_hydra_config(str(ref), config_dir, overrides)


__all__ = [
    "ConfigLoaderError",
    "load_config",
    "load_config_reference",
    "load_hydra_config",
]
