from .loader import get_bool_env, get_str_env, load_yaml_config
from .settings import StorageSettings, load_storage_settings

__all__ = [
    "StorageSettings",
    "get_bool_env",
    "get_str_env",
    "load_storage_settings",
    "load_yaml_config",
]
