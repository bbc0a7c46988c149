"""Structured logging configuration using structlog."""
import logging
import sys
from typing import Any

import structlog
from pythonjsonlogger import jsonlogger

from src.config.settings import settings

# Event keys whose values never reach the log output
SENSITIVE_KEYS = frozenset({
    "password",
    "current_password",
    "new_password",
    "confirm_password",
    "access_token",
    "refresh_token",
    "bank_account_number",
    "ifsc_code",
    "pan_number",
})
REDACTED = "***"


def redact_sensitive(
    logger: Any,
    method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    """Mask credentials and bank details bound to a log event."""
    for key in SENSITIVE_KEYS.intersection(event_dict):
        if event_dict[key]:
            event_dict[key] = REDACTED
    return event_dict


def add_owner_prefix(
    logger: Any,
    method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    """Prefix the event with ``[owner_id]`` or ``[owner_id/report]``.

    Runs before the renderers so the prefix shows in both JSON and
    console output.

    Args:
        logger: The logger instance
        method_name: The name of the method being called
        event_dict: The event dictionary containing log data

    Returns:
        Modified event dictionary with owner prefix
    """
    owner_id = event_dict.get("owner_id")
    if not owner_id:
        return event_dict
    report = event_dict.get("report")
    tag = f"{owner_id}/{report}" if report else owner_id
    event_dict["event"] = f"[{tag}] {event_dict.get('event', '')}"
    return event_dict


def _build_handler(log_level: int) -> logging.Handler:
    handler = logging.StreamHandler(sys.stdout)
    if settings.logging.format == "json":
        handler.setFormatter(jsonlogger.JsonFormatter())
    else:
        handler.setFormatter(
            logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
        )
    handler.setLevel(log_level)
    return handler


def configure_logging() -> None:
    """Configure stdlib logging and structlog for the back office."""
    log_level = getattr(logging, settings.logging.level)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers.clear()
    root_logger.addHandler(_build_handler(log_level))

    # HTTP and storage clients log every request at INFO
    for noisy in ("httpcore", "httpx", "botocore", "boto3", "urllib3"):
        logging.getLogger(noisy).setLevel(logging.WARNING)

    renderer = (
        structlog.processors.JSONRenderer()
        if settings.logging.format == "json"
        else structlog.dev.ConsoleRenderer()
    )
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            redact_sensitive,
            add_owner_prefix,
            renderer,
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.typing.FilteringBoundLogger:
    """Get a configured logger instance.

    Args:
        name: Logger name, typically __name__

    Returns:
        Configured logger instance
    """
    return structlog.get_logger(name)
