"""
Structured logging for robik.

The solvers log through structlog with event names and key/value context
(``opw_inverse_solved``, ``closed_form_sentinel_skipped``, ...) and never
print. Rendering is left to the standard library handlers installed by
:func:`configure_logging`, so the same events come out as console lines in the
CLI or as JSON lines when collected by another tool.

Usage::

    from robik.core.logging import configure_logging, get_logger

    configure_logging(level="DEBUG", json_output=True, log_file="ik.log")
    logger = get_logger(__name__)
    logger.debug("inverse_kinematics_calculated", cfx=2, in_limits=True)
"""

import logging
import sys
from pathlib import Path
from typing import Optional

import structlog

#: Processors applied to every event before it reaches a handler.
SHARED_PROCESSORS: list[structlog.types.Processor] = [
    structlog.contextvars.merge_contextvars,
    structlog.stdlib.add_log_level,
    structlog.stdlib.add_logger_name,
    structlog.processors.TimeStamper(fmt="iso"),
    structlog.processors.StackInfoRenderer(),
    structlog.processors.UnicodeDecoder(),
]


def _handlers(log_file: Optional[str | Path]) -> list[logging.Handler]:
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if log_file:
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))
    return handlers


def _formatter(json_output: bool) -> structlog.stdlib.ProcessorFormatter:
    if json_output:
        renderer: structlog.types.Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=False)
    return structlog.stdlib.ProcessorFormatter(
        processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, renderer],
    )


def configure_logging(
    level: str = "WARNING",
    json_output: bool = False,
    log_file: Optional[str | Path] = None,
) -> None:
    """
    Route robik's solver events to stderr and optionally a file.

    May be called again to change the level or output format; the handlers
    of the previous call are replaced.

    Args:
        level: Minimum log level name (DEBUG shows per-solve events)
        json_output: Render one JSON object per line instead of console text
        log_file: Also append the rendered events to this file
    """
    logging.basicConfig(
        format="%(message)s",
        level=getattr(logging, level.upper(), logging.WARNING),
        handlers=_handlers(log_file),
        force=True,
    )

    formatter = _formatter(json_output)
    for handler in logging.root.handlers:
        handler.setFormatter(formatter)

    structlog.configure(
        processors=[*SHARED_PROCESSORS, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get the structlog logger of a robik module (pass ``__name__``)."""
    return structlog.get_logger(name)
