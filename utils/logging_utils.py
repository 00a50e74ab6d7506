"""
Logging setup.

Engine modules obtain loggers through ``get_logger(__name__)`` and emit
structured events. Importing the engine never configures structlog: entry
points call ``configure_logging``, library hosts keep their own setup.
"""
import logging
import sys
from typing import Optional

import structlog

from config.settings import get_settings


def _configure_structlog(json_output: bool) -> None:
    renderer = (
        structlog.processors.JSONRenderer()
        if json_output
        else structlog.dev.ConsoleRenderer(colors=False)
    )

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt='iso'),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )


def configure_logging(level: Optional[str] = None, json_output: Optional[bool] = None) -> None:
    """
    Configure stdlib logging and structlog processors for an entry point.

    Args:
        level: Logging level name, defaults to ``settings.log_level``
        json_output: Render JSON lines instead of console output,
            defaults to ``settings.log_json``
    """
    current = get_settings()
    level_name = (level or current.log_level).upper()
    if json_output is None:
        json_output = current.log_json

    logging.basicConfig(
        format='%(message)s',
        stream=sys.stderr,
        level=getattr(logging, level_name, logging.WARNING),
        force=True,
    )
    _configure_structlog(json_output)


def get_logger(name: str):
    """
    Return a lazy structlog logger.

    Configuration is resolved on each call, so whatever the host (or
    ``configure_logging``) installs applies, regardless of import order.
    """
    return structlog.get_logger(name)
