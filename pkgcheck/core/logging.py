"""Logging for the bot: structlog events rendered through a stdlib handler.

Levels and output format come from :class:`~pkgcheck.config.Settings`, so the
same object that configures the GitHub client and the worker configures the
logs. Every event carries ``service`` (the check-run name), which keeps
several bot deployments apart in one log stream.
"""

from __future__ import annotations

import logging
import logging.config
from typing import Any

import structlog

from pkgcheck.config import Settings

# Third-party loggers that are chatty at INFO (one line per HTTP request).
_QUIET_LOGGERS = ("httpx", "httpcore", "uvicorn.access")


def _service_tagger(service: str) -> structlog.types.Processor:
    def add_service(_logger: Any, _method: str, event_dict: dict[str, Any]) -> dict[str, Any]:
        event_dict.setdefault("service", service)
        return event_dict

    return add_service


def _renderer(log_format: str) -> structlog.types.Processor:
    if log_format == "json":
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer()


def build_processors(settings: Settings) -> list[structlog.types.Processor]:
    """Processors shared by structlog loggers and foreign stdlib records."""
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        _service_tagger(settings.check_name),
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.format_exc_info,
    ]


def setup_logging(settings: Settings | None = None) -> None:
    """Configure structlog and the stdlib root handler from *settings*."""
    settings = settings or Settings.from_env()
    level = settings.log_level.upper()
    shared = build_processors(settings)

    structlog.configure(
        processors=[*shared, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    loggers: dict[str, dict[str, Any]] = {"pkgcheck": {"level": level}}
    loggers.update({name: {"level": "WARNING"} for name in _QUIET_LOGGERS})

    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "pkgcheck": {
                    "()": structlog.stdlib.ProcessorFormatter,
                    "foreign_pre_chain": shared,
                    "processors": [
                        structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                        _renderer(settings.log_format.lower()),
                    ],
                },
            },
            "handlers": {
                "stdout": {
                    "class": "logging.StreamHandler",
                    "stream": "ext://sys.stdout",
                    "formatter": "pkgcheck",
                },
            },
            "root": {"handlers": ["stdout"], "level": level},
            "loggers": loggers,
        }
    )
