"""Config – 12-factor settings and loaders."""

from querycache.config.settings import (
    DotenvSettingsLoader,
    EnvSettingsLoader,
    QueryCacheSettings,
    Settings,
    SettingsLoader,
)
from querycache.config.validation import (
    ConfigError,
    InvalidSettingValueError,
    MissingRequiredSettingError,
)

__all__ = [
    "ConfigError",
    "DotenvSettingsLoader",
    "EnvSettingsLoader",
    "InvalidSettingValueError",
    "MissingRequiredSettingError",
    "QueryCacheSettings",
    "Settings",
    "SettingsLoader",
]
