"""Structured logging for the notifier package, built on structlog.

Public API:
    - configure_logging(): Initialize logging for the application
    - get_module_logger(): Get a logger for the calling module
    - bind_dispatch_context(): Context manager for dispatch-scoped logging
    - get_correlation_id(): Get current correlation ID from context
    - clear_dispatch_context(): Clear all dispatch context

Example:
    from notifier.logging import configure_logging, get_module_logger

    configure_logging()

    logger = get_module_logger()
    logger.info("module_initialized")
"""

from notifier.logging.setup import (
    configure_logging,
    get_module_logger,
)

from notifier.logging.context import (
    bind_dispatch_context,
    clear_dispatch_context,
    get_correlation_id,
)

from notifier.logging.formatters import (
    SENSITIVE_PATTERNS,
    add_app_info,
    add_environment_info,
    mask_sensitive_data,
    truncate_large_values,
)

__all__ = [
    # Setup
    "configure_logging",
    "get_module_logger",
    # Context
    "bind_dispatch_context",
    "get_correlation_id",
    "clear_dispatch_context",
    # Formatters
    "add_app_info",
    "mask_sensitive_data",
    "truncate_large_values",
    "add_environment_info",
    "SENSITIVE_PATTERNS",
]
