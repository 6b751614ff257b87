"""Resilience helpers for channel sends.

Exports:
    execute_with_retry: Retry executor with fixed or exponential backoff
    backoff_wait: Cancellable backoff sleep
    raise_if_cancelled: Cancellation check used at every suspension point
"""

from notifier.resilience.retry import (
    backoff_wait,
    execute_with_retry,
    raise_if_cancelled,
)

__all__ = [
    "backoff_wait",
    "execute_with_retry",
    "raise_if_cancelled",
]
