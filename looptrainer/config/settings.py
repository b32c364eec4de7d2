from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional

from .loader import get_bool_env, get_str_env, load_yaml_config

DEFAULT_DB_PATH = "looptrainer.db"
DEFAULT_FALLBACK_DIR = ".looptrainer"
DEFAULT_FALLBACK_KEY = "practice-sessions"


@dataclass(slots=True)
class StorageSettings:
    db_path: str = DEFAULT_DB_PATH
    db_enabled: bool = True
    fallback_dir: str = DEFAULT_FALLBACK_DIR
    fallback_key: str = DEFAULT_FALLBACK_KEY


def load_storage_settings(config_path: Optional[str] = None) -> StorageSettings:
    """Resolve storage settings: environment over YAML over defaults."""
    path = config_path or get_str_env("LOOPTRAINER_CONFIG", "")
    section: Mapping[str, Any] = {}
    if path:
        section = load_yaml_config(path).get("storage") or {}

    return StorageSettings(
        db_path=get_str_env("SESSION_DB_PATH", str(section.get("db_path", DEFAULT_DB_PATH))),
        db_enabled=get_bool_env("SESSION_DB_ENABLED", bool(section.get("db_enabled", True))),
        fallback_dir=get_str_env(
            "SESSION_FALLBACK_DIR", str(section.get("fallback_dir", DEFAULT_FALLBACK_DIR))
        ),
        fallback_key=get_str_env(
            "SESSION_FALLBACK_KEY", str(section.get("fallback_key", DEFAULT_FALLBACK_KEY))
        ),
    )
