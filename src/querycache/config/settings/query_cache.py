"""Config settings – QueryCacheSettings."""
from __future__ import annotations

import dataclasses
import logging
from typing import ClassVar

from querycache.config.settings.base import Settings
from querycache.config.validation import InvalidSettingValueError

DEFAULT_BASE_URL = "http://localhost:3000/api"
DEFAULT_RETENTION_SECONDS = 60.0
DEFAULT_REQUEST_TIMEOUT = 10.0

_LOG_LEVELS = frozenset(logging.getLevelNamesMapping())


@dataclasses.dataclass
class QueryCacheSettings(Settings):
    """Settings for a query client, read from ``QUERY_CACHE_*`` variables.

    ``retention_seconds`` is how long an entry without subscribers is kept
    before eviction. An empty ``tag_types`` disables the tag-type check.
    """

    _prefix: ClassVar[str] = "QUERY_CACHE"

    base_url: str = DEFAULT_BASE_URL
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT
    retention_seconds: float = DEFAULT_RETENTION_SECONDS
    log_level: str = "INFO"
    log_json: bool = True
    tag_types: list[str] = dataclasses.field(default_factory=list)

    def _validate(self) -> None:
        if self.retention_seconds < 0:
            raise InvalidSettingValueError(
                "retention_seconds", self.retention_seconds, "must be >= 0"
            )
        if self.request_timeout <= 0:
            raise InvalidSettingValueError(
                "request_timeout", self.request_timeout, "must be > 0"
            )
        if self.log_level.upper() not in _LOG_LEVELS:
            raise InvalidSettingValueError(
                "log_level", self.log_level, "not a logging level name"
            )


__all__ = [
    "DEFAULT_BASE_URL",
    "DEFAULT_REQUEST_TIMEOUT",
    "DEFAULT_RETENTION_SECONDS",
    "QueryCacheSettings",
]
