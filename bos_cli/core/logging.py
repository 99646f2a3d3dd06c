"""
Structured logging for the Bankrs OS client.

Loggers wrap the standard logging module and carry no global state, so
importing the library installs no handler and leaves structlog's own
configuration alone. configure_logging() attaches the stderr handler that
renders events; until it is called, warnings reach whatever handlers the
application set up. The first positional argument to
logger.info/warning/error becomes the 'event' field.
"""

import logging
import sys
from typing import Any

import structlog

LOGGER_NAME = "bos_cli"
DEFAULT_LEVEL = "WARNING"

# Run on every event before it is handed to the stdlib logger
PROCESSORS: list[Any] = [
    structlog.contextvars.merge_contextvars,
    structlog.stdlib.filter_by_level,
    structlog.stdlib.add_logger_name,
    structlog.stdlib.add_log_level,
    structlog.stdlib.PositionalArgumentsFormatter(),
    structlog.processors.TimeStamper(fmt="iso", key="timestamp"),
    structlog.processors.StackInfoRenderer(),
    structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
]


def configure_logging(level: str = DEFAULT_LEVEL, json_logs: bool = False, stream: Any = None) -> None:
    """Send bos_cli events at or above level to stream (stderr by default)."""
    if json_logs:
        renderers: list[Any] = [
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer(),
        ]
    else:
        renderers = [structlog.dev.ConsoleRenderer(colors=False)]

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, *renderers],
        )
    )

    root = logging.getLogger(LOGGER_NAME)
    for existing in root.handlers[:]:
        root.removeHandler(existing)
    root.addHandler(handler)
    root.setLevel(getattr(logging, level.upper(), logging.WARNING))
    root.propagate = False


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Get a logger writing through the stdlib logger of the same name."""
    return structlog.wrap_logger(
        logging.getLogger(name or LOGGER_NAME),
        processors=PROCESSORS,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
    )
