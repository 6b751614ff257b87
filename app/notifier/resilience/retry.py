"""Retry executor for single channel sends.

Runs a zero-argument send coroutine under a RetryOptions policy:

    attempt 1..max_attempts
      success             -> return immediately
      failure/exception   -> wait delay * 2^(attempt-1) (or delay), try again
      last attempt failed -> return that result, no further wait

Cancellation (an asyncio.Event threaded through the dispatch) is checked
before every attempt and every wait, and interrupts a wait in progress.
"""

import asyncio
from typing import Awaitable, Callable, Optional

from notifier.errors import NotificationCancelledError
from notifier.logging import get_module_logger
from notifier.models import NotifyResult
from notifier.options import SINGLE_ATTEMPT, RetryOptions

logger = get_module_logger()

SendOperation = Callable[[], Awaitable[NotifyResult]]


def raise_if_cancelled(cancel_event: Optional[asyncio.Event]) -> None:
    """Raise NotificationCancelledError if cancellation was requested."""
    if cancel_event is not None and cancel_event.is_set():
        raise NotificationCancelledError("Notification dispatch was cancelled.")


async def backoff_wait(delay: float, cancel_event: Optional[asyncio.Event]) -> None:
    """Sleep for the backoff delay, waking early if cancellation is requested."""
    if cancel_event is None:
        await asyncio.sleep(delay)
        return
    try:
        await asyncio.wait_for(cancel_event.wait(), timeout=delay)
    except asyncio.TimeoutError:
        return
    raise_if_cancelled(cancel_event)


async def execute_with_retry(
    operation: SendOperation,
    options: Optional[RetryOptions] = None,
    *,
    cancel_event: Optional[asyncio.Event] = None,
    channel: str = "",
    provider: str = "",
) -> NotifyResult:
    """Run a send operation under a retry policy.

    Args:
        operation: Zero-argument coroutine function returning a NotifyResult.
        options: Attempt policy. None means a single attempt.
        cancel_event: Cancellation signal checked before attempts and waits.
        channel: Channel name, used for logs and exception results.
        provider: Provider key, used for logs and exception results.

    Returns:
        The first successful result, or the last attempt's failure. The
        result's ``attempts`` is the number of physical attempts made.

    Raises:
        NotificationCancelledError: If cancellation was requested.
    """
    options = options or SINGLE_ATTEMPT
    result: Optional[NotifyResult] = None

    for attempt in range(1, options.max_attempts + 1):
        raise_if_cancelled(cancel_event)

        try:
            result = await operation()
        except NotificationCancelledError:
            raise
        except Exception as e:
            logger.warning(
                "send_operation_raised",
                channel=channel,
                provider=provider,
                attempt=attempt,
                error=str(e),
                exc_info=True,
            )
            result = NotifyResult.failed(channel=channel, error=str(e), provider=provider)

        result = result.model_copy(update={"attempts": attempt})
        if result.success:
            return result

        if attempt < options.max_attempts:
            delay = options.delay_for(attempt)
            logger.debug(
                "retry_attempt_failed",
                channel=channel,
                provider=provider,
                attempt=attempt,
                max_attempts=options.max_attempts,
                retry_in_seconds=delay,
                error=result.error,
            )
            raise_if_cancelled(cancel_event)
            await backoff_wait(delay, cancel_event)

    if options.max_attempts > 1:
        logger.warning(
            "retry_exhausted",
            channel=channel,
            provider=provider,
            attempts=options.max_attempts,
            error=result.error,
        )
    return result
