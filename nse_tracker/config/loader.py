"""YAML loader for the config subsystem.

``tracker.yml`` is read, validated via models.py and returned as a typed
:class:`TrackerConfig`. Sections may be omitted; pydantic fills in defaults.
"""
from __future__ import annotations

from pathlib import Path
from typing import Mapping

import yaml
from pydantic import ValidationError

from nse_tracker.core.errors import ConfigurationError

from .models import TrackerConfig

DEFAULT_CONFIG_DIR = Path("config")
DEFAULT_CONFIG_PATH = DEFAULT_CONFIG_DIR / "tracker.yml"


def _read_yaml(path: Path) -> Mapping:
    """Read a YAML file and return a mapping (empty dict if file is blank)."""

    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")
    with path.open("r", encoding="utf-8") as fp:
        data = yaml.safe_load(fp) or {}
    if not isinstance(data, Mapping):
        raise ValueError(f"YAML root must be a mapping in {path}")
    return data


def load_tracker_config(path: Path | str = DEFAULT_CONFIG_PATH) -> TrackerConfig:
    """Load tracker.yml (nse, polling, broadcast, portfolio, server, telemetry).

    Raises :class:`FileNotFoundError` for a missing file, :class:`ValueError`
    for a non-mapping root and :class:`ConfigurationError` when validation
    fails.
    """

    data = _read_yaml(Path(path))
    try:
        return TrackerConfig.model_validate(data)
    except ValidationError as exc:
        raise ConfigurationError(f"Invalid tracker config in {path}: {exc}") from exc


def load_or_default(path: Path | str = DEFAULT_CONFIG_PATH) -> TrackerConfig:
    """Return the parsed config, or defaults when ``path`` does not exist."""

    if not Path(path).exists():
        return TrackerConfig()
    return load_tracker_config(path)
