"""Logging configuration for the Checkout domain."""

import logging
import os

import structlog

_configured = False


def configure_logging(level: str | None = None, fmt: str | None = None) -> None:
    """Configure structlog once per process.

    ``CHECKOUT_LOG_LEVEL`` and ``CHECKOUT_LOG_FORMAT`` (``console`` or ``json``)
    are read from the environment when not given explicitly.
    """
    global _configured
    if _configured:
        return

    level_name = (level or os.environ.get("CHECKOUT_LOG_LEVEL", "INFO")).upper()
    renderer_name = fmt or os.environ.get("CHECKOUT_LOG_FORMAT", "console")

    renderer = (
        structlog.processors.JSONRenderer()
        if renderer_name == "json"
        else structlog.dev.ConsoleRenderer(colors=False)
    )

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(getattr(logging, level_name, logging.INFO)),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )

    # Suppress noisy library loggers
    logging.getLogger("protean").setLevel(logging.WARNING)
    logging.getLogger("stripe").setLevel(logging.WARNING)

    _configured = True
