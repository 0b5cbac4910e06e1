"""Command line entry point.

Usage:
    wszl                          # uses ./wszl.yml, log level info
    wszl --log-level debug
    wszl --config /etc/wszl.yml
"""

from __future__ import annotations

import argparse
import os

import structlog

from . import __version__
from .config import load_config
from .errors import ConfigError
from .logging_setup import DEFAULT_LOG_LEVEL, LOG_LEVEL_ALIASES, LOG_LEVELS, configure_logging
from .orchestrator import RunOutcome, run_pass


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="wszl",
        description="Add web scenarios support for Zabbix low level discovery",
    )
    parser.add_argument(
        "--log-level",
        type=str.lower,
        choices=LOG_LEVELS + tuple(LOG_LEVEL_ALIASES),
        default=None,
        help=f"Logging level (default: $LOG_LEVEL or {DEFAULT_LOG_LEVEL})",
    )
    parser.add_argument("--config", default=None, help="Path to config file (default: $WSZL_CONFIG or wszl.yml)")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    level = args.log_level or os.getenv("LOG_LEVEL") or DEFAULT_LOG_LEVEL
    try:
        configure_logging(level)
    except ValueError:
        configure_logging(DEFAULT_LOG_LEVEL)
        structlog.get_logger("wszl").warning("unsupported log level, using default", level=level)
    logger = structlog.get_logger("wszl")

    try:
        config = load_config(args.config)
    except ConfigError as e:
        logger.error("unable to load config from file", error=str(e))
        return RunOutcome.CONFIG_FAILED.exit_code

    report = run_pass(config.zabbix, logger=logger)
    return report.exit_code
