import os
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import yaml

from release_ready_core.errors import ConfigError

DEFAULT_REFERENCE_PATTERN = r"(RP|WR|API|TS|BB|BP|DS|DP|TRI|BK)-\d{1,5}"

DEFAULT_CONFIG: dict = {
    "label": None,
    "leaddev_team_id": None,  # numeric team id or team slug
    "required_checks": [],  # list, or a comma-separated string as passed by Actions
    "reference_pattern": DEFAULT_REFERENCE_PATTERN,
    "timeout": 15,  # seconds, per GitHub API call
}

# GitHub Actions exposes `with:` inputs as INPUT_<NAME> environment variables.
_ACTION_INPUTS = ("label", "leaddev_team_id", "required_checks")


def load_config(config_path: str = ".release-ready.yml", cli_overrides: Optional[dict] = None) -> dict:
    """
    Load configuration by merging (in order of precedence):
      1. Built-in defaults
      2. .release-ready.yml in the current directory
      3. GitHub Actions inputs (INPUT_* environment variables)
      4. CLI argument overrides
    """
    config = {**DEFAULT_CONFIG, "required_checks": list(DEFAULT_CONFIG["required_checks"])}

    path = Path(config_path)
    if path.exists():
        with open(path) as f:
            file_config = yaml.safe_load(f) or {}
        config.update(file_config)

    for name in _ACTION_INPUTS:
        value = os.environ.get(f"INPUT_{name.upper()}")
        if value:
            config[name] = value

    if cli_overrides:
        for key, value in cli_overrides.items():
            if value is not None:
                config[key] = value

    return config


def parse_required_checks(value) -> tuple[str, ...]:
    """Normalize required checks to an ordered tuple of names.

    Accepts "lint, test" as well as ["lint", "test"]; blank entries are dropped.
    """
    if not value:
        return ()
    items = value.split(",") if isinstance(value, str) else value
    return tuple(str(item).strip() for item in items if str(item).strip())


@dataclass(frozen=True)
class GateConfig:
    """Validated settings passed explicitly into the gate."""

    label: str
    leaddev_team_id: str
    required_checks: tuple[str, ...] = ()
    reference_pattern: re.Pattern = re.compile(DEFAULT_REFERENCE_PATTERN)

    @classmethod
    def from_dict(cls, config: dict) -> "GateConfig":
        label = str(config.get("label") or "").strip()
        if not label:
            raise ConfigError("'label' is required.")

        team_id = str(config.get("leaddev_team_id") or "").strip()
        if not team_id:
            raise ConfigError("'leaddev_team_id' is required.")

        pattern = config.get("reference_pattern") or DEFAULT_REFERENCE_PATTERN
        try:
            compiled = re.compile(pattern)
        except re.error as e:
            raise ConfigError(f"Invalid reference_pattern {pattern!r}: {e}") from e

        return cls(
            label=label,
            leaddev_team_id=team_id,
            required_checks=parse_required_checks(config.get("required_checks")),
            reference_pattern=compiled,
        )
