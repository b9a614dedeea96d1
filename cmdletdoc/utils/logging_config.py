"""Logging setup for the cmdletdoc command line."""

from __future__ import annotations

import logging
import os

LOG_LEVEL_ENV_VAR = "CMDLETDOC_LOG_LEVEL"

_LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}


def get_log_level_from_env(default: int = logging.INFO, env_var: str = LOG_LEVEL_ENV_VAR) -> int:
    """Level named by ``env_var`` (e.g. ``CMDLETDOC_LOG_LEVEL=DEBUG``), or
    ``default`` when unset or unknown."""
    return _LEVELS.get(os.getenv(env_var, "").strip().upper(), default)


def configure_logging(
    verbose: bool = False,
    debug: bool = False,
    level: int | None = None,
    format: str = "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt: str = "%Y-%m-%d %H:%M:%S",
    respect_env: bool = True,
) -> int:
    """Configure root logging and return the chosen level.

    Priority: explicit ``level``, then ``debug``, then ``verbose``, then the
    ``CMDLETDOC_LOG_LEVEL`` environment variable, then WARNING.
    """
    if level is not None:
        final_level = level
    elif debug:
        final_level = logging.DEBUG
    elif verbose:
        final_level = logging.INFO
    elif respect_env:
        final_level = get_log_level_from_env(default=logging.WARNING)
    else:
        final_level = logging.WARNING

    logging.basicConfig(level=final_level, format=format, datefmt=datefmt, force=True)
    return final_level


__all__ = ["LOG_LEVEL_ENV_VAR", "configure_logging", "get_log_level_from_env"]
