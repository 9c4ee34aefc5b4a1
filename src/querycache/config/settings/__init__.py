"""Config settings – 12-factor env-based configuration."""
from querycache.config.settings.base import Settings
from querycache.config.settings.loaders import DotenvSettingsLoader, EnvSettingsLoader, SettingsLoader
from querycache.config.settings.query_cache import (
    DEFAULT_BASE_URL,
    DEFAULT_REQUEST_TIMEOUT,
    DEFAULT_RETENTION_SECONDS,
    QueryCacheSettings,
)

__all__ = [
    "DEFAULT_BASE_URL",
    "DEFAULT_REQUEST_TIMEOUT",
    "DEFAULT_RETENTION_SECONDS",
    "DotenvSettingsLoader",
    "EnvSettingsLoader",
    "QueryCacheSettings",
    "Settings",
    "SettingsLoader",
]
