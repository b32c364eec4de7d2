from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Dict

import yaml

logger = logging.getLogger(__name__)

_TRUE_VALUES = {"1", "true", "yes", "y", "on"}


def get_bool_env(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return str(value).strip().lower() in _TRUE_VALUES


def get_str_env(name: str, default: str = "") -> str:
    value = os.getenv(name)
    return default if value is None else str(value).strip()


def replace_env_vars(value: Any) -> Any:
    """Expand ``$VAR`` references in string values, recursing into containers."""
    if isinstance(value, str):
        if value.startswith("$"):
            return os.getenv(value[1:], value)
        return value
    if isinstance(value, dict):
        return {key: replace_env_vars(item) for key, item in value.items()}
    if isinstance(value, list):
        return [replace_env_vars(item) for item in value]
    return value


def load_yaml_config(file_path: str) -> Dict[str, Any]:
    """Load a YAML file, returning an empty mapping when it does not exist."""
    path = Path(file_path)
    if not path.exists():
        logger.debug("Config file %s not found; using defaults", path)
        return {}

    with path.open("r", encoding="utf-8") as handle:
        data = yaml.safe_load(handle) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Config file {path} must contain a mapping")
    return replace_env_vars(data)
