"""Logging configuration for the GoBiz proxy."""

import logging
import sys
from typing import Any, Dict, Optional, Union

import structlog

from gobiz_proxy.core.config import Settings, get_settings

# Event keys whose values are credentials and must never reach the log sink
SENSITIVE_KEYS = frozenset({
    "authorization", "bearer", "otp", "otp_token", "otptoken", "access_token", "refresh_token",
})
REDACTED = "***"


def redact_secrets(logger: Any, method_name: str, event_dict: Dict[str, Any]) -> Dict[str, Any]:
    """structlog processor masking credential values, including nested headers."""
    for key, value in list(event_dict.items()):
        if key.lower() in SENSITIVE_KEYS:
            event_dict[key] = REDACTED
        elif isinstance(value, dict):
            event_dict[key] = {
                k: REDACTED if str(k).lower() in SENSITIVE_KEYS else v for k, v in value.items()
            }
    return event_dict


def setup_logging(settings: Optional[Settings] = None) -> None:
    """Configure structlog on top of the standard library logging module."""
    settings = settings or get_settings()
    level = getattr(logging, settings.LOG_LEVEL.upper())

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            redact_secrets,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            _get_renderer(settings.LOG_FORMAT),
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    # Rendered structlog events arrive here already formatted
    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level)
    logging.getLogger("gobiz_proxy").setLevel(level)


def _get_renderer(log_format: str) -> Union[structlog.processors.JSONRenderer, structlog.dev.ConsoleRenderer]:
    if log_format == "json":
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a structured logger instance."""
    return structlog.get_logger(name)
