"""Logging configuration for the CBS controller.

Supports two formats:
- text: Human-readable for local development
- json: Structured logging for production (log aggregation)

Each lifecycle call sets a request_id in context so that every record
emitted while it polls can be correlated.
"""

import logging
import sys
import time
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any
from uuid import uuid4

from pythonjsonlogger import json as jsonlogger

from csi_cbs.config import LoggingConfig

request_id_ctx: ContextVar[str | None] = ContextVar("request_id", default=None)


def get_request_id() -> str | None:
    """Get current request_id from context."""
    return request_id_ctx.get()


def set_request_id(request_id: str | None = None) -> str:
    """Set request_id in context, generating one if not provided.

    Returns:
        The request ID that was set.
    """
    rid = request_id or str(uuid4())[:8]
    request_id_ctx.set(rid)
    return rid


def clear_request_context() -> None:
    """Clear request context (call at end of request)."""
    request_id_ctx.set(None)


class RateLimitFilter(logging.Filter):
    """Filter to prevent log storms from repeated messages.

    Suppresses duplicate log messages within a time window. Poll loops
    that keep failing against the CBS API would otherwise flood logs.

    Args:
        rate_limit_seconds: Minimum seconds between identical messages (default: 5)
        max_cache_size: Maximum number of messages to track (default: 1000)
    """

    def __init__(
        self,
        rate_limit_seconds: float = 5.0,
        max_cache_size: int = 1000,
        name: str = "",
    ) -> None:
        super().__init__(name)
        self._rate_limit = rate_limit_seconds
        self._max_cache = max_cache_size
        self._last_log: dict[str, float] = {}

    def filter(self, record: logging.LogRecord) -> bool:
        """Filter duplicate messages within the rate limit window."""
        # ERROR and above always pass through
        if record.levelno >= logging.ERROR:
            return True

        key = f"{record.name}:{record.lineno}:{record.getMessage()}"

        now = time.monotonic()
        last_time = self._last_log.get(key)

        if last_time is not None and now - last_time < self._rate_limit:
            return False

        self._last_log[key] = now

        if len(self._last_log) > self._max_cache:
            oldest_keys = sorted(self._last_log, key=self._last_log.get)[:100]  # type: ignore[arg-type]
            for old_key in oldest_keys:
                del self._last_log[old_key]

        return True


class CsiJsonFormatter(jsonlogger.JsonFormatter):
    """JSON formatter with standard fields for log aggregation.

    Adds:
    - timestamp: ISO 8601 format with timezone
    - level: Log level name
    - logger: Logger name
    - service: Service identifier
    - request_id: Lifecycle call correlation ID (if set in context)
    """

    def __init__(self, config: LoggingConfig, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self._service = config.service_name

    def add_fields(
        self,
        log_record: dict[str, Any],
        record: logging.LogRecord,
        message_dict: dict[str, Any],
    ) -> None:
        super().add_fields(log_record, record, message_dict)

        log_record["timestamp"] = datetime.fromtimestamp(
            record.created, tz=timezone.utc
        ).isoformat()
        log_record["level"] = record.levelname
        log_record["logger"] = record.name
        log_record["service"] = self._service
        log_record["pid"] = record.process

        log_record["filename"] = record.filename
        log_record["lineno"] = record.lineno

        if request_id := get_request_id():
            log_record["request_id"] = request_id

        if record.exc_info:
            log_record["exception"] = self.formatException(record.exc_info)


def setup_logging(config: LoggingConfig) -> None:
    """Configure logging for the controller process.

    Args:
        config: Logging configuration settings.
    """
    level = getattr(logging, config.level.upper(), logging.INFO)

    if config.format == "json":
        formatter: logging.Formatter = CsiJsonFormatter(config)
    else:
        formatter = logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)
    handler.addFilter(RateLimitFilter(rate_limit_seconds=config.rate_limit_seconds))

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(level)

    # The SDK logs every HTTP round trip at INFO
    logging.getLogger("tencentcloud_sdk_common").setLevel(logging.WARNING)
    logging.getLogger("urllib3").setLevel(logging.WARNING)
