"""Dispatch context binding for structured logging.

Binds an event name and correlation ID into structlog context variables so
every log line emitted while one event is dispatched can be correlated,
including lines from concurrent channel tasks (asyncio tasks copy the
current context when they are created).

Usage:
    from notifier.logging import bind_dispatch_context

    with bind_dispatch_context(event_name="order.placed", user_id="42"):
        logger.info("dispatching_event")
"""

import uuid
from contextlib import contextmanager
from typing import Any, Generator, Optional

import structlog


@contextmanager
def bind_dispatch_context(
    event_name: Optional[str] = None,
    correlation_id: Optional[str] = None,
    user_id: Optional[str] = None,
    **extra_context: Any,
) -> Generator[str, None, None]:
    """Bind dispatch-scoped context to all logs within the block.

    Args:
        event_name: Event being dispatched.
        correlation_id: Dispatch identifier. Reuses the one already bound by
            an enclosing block (e.g. a bulk trigger), or generates one.
        user_id: Recipient user id, if known.
        **extra_context: Additional key-value pairs to include in logs.

    Yields:
        The correlation ID in effect for the block.
    """
    context: dict[str, Any] = {
        "correlation_id": correlation_id or get_correlation_id() or str(uuid.uuid4()),
    }

    if event_name is not None:
        context["event_name"] = event_name

    if user_id:
        context["user_id"] = user_id

    context.update(extra_context)

    tokens = structlog.contextvars.bind_contextvars(**context)
    try:
        yield context["correlation_id"]
    finally:
        structlog.contextvars.reset_contextvars(**tokens)


def get_correlation_id() -> Optional[str]:
    """Get the current correlation ID from the logging context."""
    ctx = structlog.contextvars.get_contextvars()
    return ctx.get("correlation_id")


def clear_dispatch_context() -> None:
    """Clear all dispatch-scoped context from the logging context."""
    structlog.contextvars.clear_contextvars()
