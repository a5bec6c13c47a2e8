"""
structlog setup for the API process.

Debug builds render to the console; everything else emits one JSON object
per line. Values under credential-like keys never reach the output.
"""
import logging
import sys

import structlog

from bloxmarket.core.config import settings

REDACTED = "[redacted]"
SENSITIVE_KEYS = frozenset({
    "password",
    "new_password",
    "token",
    "access_token",
    "authorization",
    "secret_key",
})


def redact_sensitive(_logger, _method_name, event_dict):
    """structlog processor masking credential-like keys."""
    for key in SENSITIVE_KEYS.intersection(event_dict):
        event_dict[key] = REDACTED
    return event_dict


def resolve_log_level() -> int:
    if settings.log_level:
        return logging.getLevelName(settings.log_level.upper())
    return logging.DEBUG if settings.api_debug else logging.INFO


def setup_logging():
    log_level = resolve_log_level()

    renderer = (
        structlog.dev.ConsoleRenderer()
        if settings.api_debug
        else structlog.processors.JSONRenderer()
    )
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            redact_sensitive,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=log_level)

    # passlib warns about the bcrypt version probe on every start
    logging.getLogger("passlib").setLevel(logging.ERROR)
    logging.getLogger("multipart").setLevel(logging.WARNING)
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(
        logging.INFO if settings.db_echo else logging.WARNING
    )
