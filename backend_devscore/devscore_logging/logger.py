"""
structlog setup for the dev reputation service.

Every record carries level, ISO timestamp and event_type (structlog's
"event" key, renamed). Output is one JSON object per line, or a console
renderer for local runs.

Import installs a JSON/INFO default so modules can log immediately; entrypoints
(main.main, create_app) call configure_structlog() again with the values from
Settings once .env has been read. get_logger() returns lazy proxies, so loggers
created at module import pick up the later configuration.

No backend_devscore imports here: config imports this package.
"""

from __future__ import annotations

import logging
import sys
from datetime import datetime, timezone
from typing import Any

import structlog

DEFAULT_LOG_FORMAT = "json"
DEFAULT_LOG_LEVEL = "INFO"


def _add_timestamp(
    logger: Any,
    method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    if "timestamp" not in event_dict:
        event_dict["timestamp"] = datetime.now(timezone.utc).isoformat()
    return event_dict


def _normalize_event(
    logger: Any,
    method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    """event -> event_type; message mirrors it unless the caller set one."""
    if "event" in event_dict and "event_type" not in event_dict:
        event_dict["event_type"] = event_dict.pop("event")
    if "message" not in event_dict and "event_type" in event_dict:
        event_dict["message"] = str(event_dict["event_type"])
    return event_dict


def _level_value(level: int | str) -> int:
    if isinstance(level, int):
        return level
    # getLevelName maps known names to their int, anything else to a "Level x" string
    value = logging.getLevelName(level.strip().upper())
    return value if isinstance(value, int) else logging.INFO


def _renderer(log_format: str) -> Any:
    if log_format.strip().lower() == "json":
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())


def configure_structlog(
    log_format: str = DEFAULT_LOG_FORMAT,
    level: int | str = DEFAULT_LOG_LEVEL,
) -> None:
    """(Re)configure structlog. log_format "json" or anything else for console."""
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            _add_timestamp,
            _normalize_event,
            _renderer(log_format),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(_level_value(level)),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stdout),
        cache_logger_on_first_use=False,
    )


if not structlog.is_configured():
    configure_structlog()


def get_logger(name: str) -> Any:
    """
    Structured logger tagged with the module name.

        logger = get_logger(__name__)
        logger.info("dev_score_updated", dev_id=dev_id, score=71, tier="gold")
    """
    return structlog._config.BoundLoggerLazyProxy(
        None, initial_values={"logger": name}, logger_factory_args=()
    )


def bind_dev(dev_id: str, name: str = "backend_devscore") -> Any:
    """Logger with dev_id on every record."""
    return get_logger(name).bind(dev_id=dev_id)
