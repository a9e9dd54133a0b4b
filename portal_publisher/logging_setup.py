"""Logging via structlog with a stdlib bridge.

Modules log through `logging.getLogger(__name__)`; structlog renders the
publisher's own events. Call `configure_structlog()` once at startup.

Level names accept the usual debug/info/warning/error plus the legacy
`fine` and `finest` (both map to debug).
"""

from __future__ import annotations

import logging
import sys

import structlog

_LEVELS = {
    "finest": logging.DEBUG,
    "finer": logging.DEBUG,
    "fine": logging.DEBUG,
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}


def parse_level(name: str) -> int:
    """Return the logging level for name; raises ValueError for unknown names."""
    try:
        return _LEVELS[name.strip().lower()]
    except KeyError:
        raise ValueError(f"Unknown log level: {name!r}") from None


def configure_structlog(level: str = "info") -> None:
    """Configure structlog and stdlib logging for the run.

    Calling multiple times is safe.
    """
    numeric_level = parse_level(level)

    structlog.configure(
        processors=[
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.dev.ConsoleRenderer(colors=False),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
        context_class=dict,
        logger_factory=structlog.WriteLoggerFactory(file=sys.stdout),
        cache_logger_on_first_use=False,
    )

    # Bridge stdlib logging so module loggers (and httpx) share the output
    logging.basicConfig(
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        stream=sys.stdout,
        level=numeric_level,
        force=True,
    )
    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(max(numeric_level, logging.WARNING))
