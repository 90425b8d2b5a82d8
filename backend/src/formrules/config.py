"""Validator configuration."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from formrules.errors import ConfigurationError
from formrules.types import Mode


@dataclass
class ValidatorSettings:
    """Defaults applied to new Validator instances.

    Attributes:
        mode: Initial validation mode
        max_workers: Worker threads of the executor a validator creates for
            asynchronous runs
        thread_name_prefix: Name prefix of those worker threads
    """

    mode: Mode = Mode.BURST
    max_workers: int = 2
    thread_name_prefix: str = "formrules"

    def __post_init__(self) -> None:
        if self.max_workers < 1:
            raise ConfigurationError(
                f"'max_workers' must be at least 1, got {self.max_workers}."
            )

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ValidatorSettings:
        """Create settings from a YAML/JSON dict; missing keys use defaults."""
        unknown = set(data) - {"mode", "max_workers", "thread_name_prefix"}
        if unknown:
            raise ConfigurationError(
                f"Unknown validator settings: {', '.join(sorted(unknown))}"
            )

        defaults = cls()
        return cls(
            mode=_parse_mode(data.get("mode", defaults.mode.value)),
            max_workers=_parse_int(data.get("max_workers", defaults.max_workers), "max_workers"),
            thread_name_prefix=str(data.get("thread_name_prefix", defaults.thread_name_prefix)),
        )

    @classmethod
    def from_env(cls) -> ValidatorSettings:
        """Create settings from environment variables.

        Reads FORMRULES_MODE, FORMRULES_MAX_WORKERS and
        FORMRULES_THREAD_PREFIX; unset variables keep their defaults.
        """
        data: dict[str, Any] = {}
        for key, variable in (
            ("mode", "FORMRULES_MODE"),
            ("max_workers", "FORMRULES_MAX_WORKERS"),
            ("thread_name_prefix", "FORMRULES_THREAD_PREFIX"),
        ):
            value = os.environ.get(variable)
            if value:
                data[key] = value
        return cls.from_dict(data)

    @classmethod
    def from_yaml(cls, path: Path) -> ValidatorSettings:
        """Load settings from a YAML file.

        The file may hold the settings at the top level or under a
        `formrules:` key.
        """
        with open(path) as f:
            data = yaml.safe_load(f) or {}
        if not isinstance(data, dict):
            raise ConfigurationError(f"{path}: expected a mapping of settings")
        if "formrules" in data:
            data = data["formrules"] or {}
        return cls.from_dict(data)


def _parse_mode(value: Any) -> Mode:
    if isinstance(value, Mode):
        return value
    try:
        return Mode(str(value).lower())
    except ValueError as e:
        choices = ", ".join(mode.value for mode in Mode)
        raise ConfigurationError(f"Invalid mode '{value}', expected one of: {choices}") from e


def _parse_int(value: Any, name: str) -> int:
    try:
        return int(value)
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"'{name}' must be an integer, got '{value}'") from e
