"""Observability module for structured logging."""

from resilient_fetch.observability.logging import (
    bind_deploy_context,
    clear_deploy_context,
    configure_logging,
    get_logger,
)


__all__ = [
    "bind_deploy_context",
    "clear_deploy_context",
    "configure_logging",
    "get_logger",
]
