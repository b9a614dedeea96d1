"""Configuration dataclasses for cmdletdoc runs.

Parsed with compoconf so configuration files map directly onto typed
dataclasses.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from compoconf import ConfigInterface


@dataclass(kw_only=True)
class DocGenConfig(ConfigInterface):
    """Settings for discovering commands and writing their model summary.

    Attributes:
        modules: Importable module names scanned for command classes
        strict: Abort on the first command that fails to model instead of
            logging it and continuing
        exclude_parameter_sets: Parameter sets left out of the summary
        output_path: File receiving the JSON summary (stdout when unset)
        indent: JSON indentation
    """

    class_name: str = "DocGen"
    modules: list[str] = field(default_factory=list)
    strict: bool = False
    exclude_parameter_sets: list[str] = field(default_factory=list)
    output_path: str | None = None
    indent: int = 2


__all__ = ["DocGenConfig"]
