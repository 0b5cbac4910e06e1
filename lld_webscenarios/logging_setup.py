"""structlog setup for the command line entry point."""

from __future__ import annotations

import logging

import structlog

LOG_LEVELS = ("debug", "info", "warning", "error")
DEFAULT_LOG_LEVEL = "info"
# Level names older cron lines still pass.
LOG_LEVEL_ALIASES = {"warn": "warning", "trace": "debug"}


def parse_log_level(name: str | None) -> int:
    s = (name or DEFAULT_LOG_LEVEL).strip().lower()
    s = LOG_LEVEL_ALIASES.get(s, s)
    if s not in LOG_LEVELS:
        raise ValueError(f"Unsupported log level {name!r}; expected one of {', '.join(LOG_LEVELS)}")
    return logging.getLevelName(s.upper())


def configure_logging(level: str | None = DEFAULT_LOG_LEVEL) -> None:
    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="ISO"),
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(parse_log_level(level)),
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )
