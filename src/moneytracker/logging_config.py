"""Logging setup for moneytracker.

All modules log through ``structlog.get_logger()`` with snake_case event names
and key/value context. structlog renders and prints events to stderr itself;
the standard library root logger is set to the same level and stream so that
third-party log records land next to them.
"""

import logging
import sys

import structlog

from moneytracker.config import Settings, settings as default_settings


def configure_logging(config: Settings | None = None) -> None:
    """Configure structlog and the root logger.

    Args:
        config: Settings to read the level and renderer from. Defaults to the
            process-wide settings.
    """
    config = config or default_settings
    level = logging.getLevelName(config.log_level.upper())
    if not isinstance(level, int):
        level = logging.INFO

    # basicConfig is a no-op when the root logger already has handlers
    logging.basicConfig(format="%(message)s", stream=sys.stderr)
    logging.getLogger().setLevel(level)

    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
    ]
    if config.log_json:
        processors += [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=False))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level),
        logger_factory=_stderr_logger,
        cache_logger_on_first_use=False,
    )


def _stderr_logger(*args) -> structlog.PrintLogger:
    # sys.stderr is looked up per logger; it may be replaced after configuration
    return structlog.PrintLogger(file=sys.stderr)
