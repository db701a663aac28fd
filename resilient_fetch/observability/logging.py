"""Structured logging configuration."""

import logging
import sys
from typing import TextIO

import structlog

from resilient_fetch import __version__
from resilient_fetch.fetch.redact import redact_url_credentials


SERVICE_NAME = "resilient-fetch"

# Record fields that may carry a URL with embedded credentials
URL_FIELDS = ("url", "request_url")


def add_service_fields(
    _logger: object, _method_name: str, event_dict: structlog.types.EventDict
) -> structlog.types.EventDict:
    """Stamp each record with the service name and package version."""
    event_dict.setdefault("service", SERVICE_NAME)
    event_dict.setdefault("version", __version__)
    return event_dict


def redact_url_fields(
    _logger: object, _method_name: str, event_dict: structlog.types.EventDict
) -> structlog.types.EventDict:
    """Mask credentials in URL fields, whichever code path logged them."""
    for key in URL_FIELDS:
        value = event_dict.get(key)
        if isinstance(value, str):
            event_dict[key] = redact_url_credentials(value)
    return event_dict


def configure_logging(
    level: int = logging.INFO,
    output: TextIO = sys.stderr,
    json_format: bool = True,
) -> None:
    """Configure structured logging for the application.

    JSON lines are meant for production log shipping; the console renderer
    is for local development.

    Args:
        level: Logging level (default: INFO).
        output: Output stream (default: stderr).
        json_format: Whether to use JSON format (default: True).
    """
    processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        add_service_fields,
        redact_url_fields,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if json_format:
        processors.append(structlog.processors.JSONRenderer(sort_keys=True))
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=False))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=output),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=output,
        level=level,
    )


def get_logger(component: str | None = None) -> structlog.stdlib.BoundLogger:
    """Get a logger, optionally bound to a component of this package.

    Args:
        component: Component name recorded on every record, e.g. "cli".

    Returns:
        Bound logger instance.
    """
    logger: structlog.stdlib.BoundLogger = structlog.get_logger()
    if component:
        return logger.bind(component=component)
    return logger


def bind_deploy_context(environment: str, revision: str | None = None) -> None:
    """Attach deployment environment and revision to every log record.

    Args:
        environment: Deployment environment name.
        revision: Source revision (commit SHA), if known.
    """
    structlog.contextvars.bind_contextvars(
        env=environment or "unknown-env",
        revision=revision,
    )


def clear_deploy_context() -> None:
    """Remove deployment context from log records."""
    structlog.contextvars.unbind_contextvars("env", "revision")
