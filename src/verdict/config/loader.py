"""Configuration loader for Verdict."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from pydantic import ValidationError

from verdict.config.schema import VerdictConfig
from verdict.errors import ConfigError

logger = logging.getLogger(__name__)

CONFIG_FILENAMES = [".verdict.yaml", ".verdict.yml", "verdict.yaml", "verdict.yml"]
GLOBAL_CONFIG_FILE = Path.home() / ".config" / "verdict" / "config.yaml"


def find_config_file(start_dir: Optional[Path] = None) -> Optional[Path]:
    """Return the nearest project config file at or above ``start_dir``."""
    directory = (start_dir or Path.cwd()).resolve()

    for candidate_dir in (directory, *directory.parents):
        for filename in CONFIG_FILENAMES:
            candidate = candidate_dir / filename
            if candidate.is_file():
                return candidate

    return None


def read_config_file(path: Path) -> Dict[str, Any]:
    """Read one config file into a mapping.

    A missing or empty file reads as ``{}``.

    Raises:
        ConfigError: If the file is not valid YAML or not a mapping
    """
    if not path.exists():
        return {}

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in config file {path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Config file must contain a mapping: {path}")

    return data


def load_config(
    config_file: Optional[Path] = None,
    project_dir: Optional[Path] = None,
    global_config_file: Optional[Path] = None,
) -> VerdictConfig:
    """Build the effective configuration.

    Layers, later overriding earlier: built-in defaults, the global file
    (``~/.config/verdict/config.yaml``), then ``config_file`` or, when it is
    not given, the nearest project file found from ``project_dir`` upward.

    Raises:
        ConfigError: If a file cannot be read or the merged values do not validate
    """
    sources = [global_config_file or GLOBAL_CONFIG_FILE]
    project_file = config_file or find_config_file(project_dir)
    if project_file is not None:
        sources.append(project_file)

    merged: Dict[str, Any] = {}
    for source in sources:
        data = read_config_file(source)
        if data:
            logger.debug(f"Loaded config from {source}")
            merged = _deep_merge(merged, data)

    try:
        return VerdictConfig.model_validate(merged)
    except ValidationError as e:
        origin = ", ".join(str(s) for s in sources if s.exists()) or "defaults"
        raise ConfigError(f"Invalid configuration ({origin}):\n{e}") from e


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    merged = dict(base)
    for key, value in override.items():
        current = merged.get(key)
        merged[key] = _deep_merge(current, value) if isinstance(current, dict) and isinstance(value, dict) else value
    return merged


def save_config(config: VerdictConfig, path: Path, include_defaults: bool = False) -> None:
    """Write ``config`` as YAML; only non-default values unless ``include_defaults``."""
    path.parent.mkdir(parents=True, exist_ok=True)
    data = config.model_dump(exclude_defaults=not include_defaults)

    with open(path, "w", encoding="utf-8") as f:
        yaml.safe_dump(data, f, default_flow_style=False, allow_unicode=True, sort_keys=False)
