"""Bulk coordinator: chunking and concurrency-bounded fan-out.

Used by the NotifyService for multi-recipient event triggers and by channel
adapters that have no native bulk API (NotificationChannel.send_bulk).

Guarantees:
- Chunks are contiguous, at most max_batch_size long, processed in sequence.
- No more than concurrency_limit item coroutines run at once.
- Results come back in input order, independent of completion order.
- One item's failure never aborts the batch.
- Once cancellation is requested no new item starts, and items still in
  flight are cancelled before NotificationCancelledError reaches the caller.
"""

import asyncio
from typing import Awaitable, Callable, List, Optional, Sequence, TypeVar

from notifier.errors import NotificationCancelledError
from notifier.logging import get_module_logger
from notifier.models import BulkNotifyResult, NotificationPayload, NotifyResult
from notifier.options import BulkOptions
from notifier.resilience import raise_if_cancelled

logger = get_module_logger()

T = TypeVar("T")
R = TypeVar("R")

ItemSend = Callable[[NotificationPayload], Awaitable[NotifyResult]]
BatchSend = Callable[[List[NotificationPayload]], Awaitable[List[NotifyResult]]]


def chunk(items: Sequence[T], options: BulkOptions) -> List[List[T]]:
    """Split items into contiguous chunks of at most options.max_batch_size.

    Without auto_chunk (or when the list fits) the whole list is one chunk.

    Example:
        chunk(range(2500), BulkOptions(max_batch_size=1000))
        # -> three chunks of 1000, 1000 and 500 items
    """
    items = list(items)
    if not items:
        return []
    if not options.auto_chunk or len(items) <= options.max_batch_size:
        return [items]
    size = options.max_batch_size
    return [items[i : i + size] for i in range(0, len(items), size)]


async def fan_out(
    items: Sequence[T],
    func: Callable[[T], Awaitable[R]],
    concurrency_limit: int,
    cancel_event: Optional[asyncio.Event] = None,
) -> List[R]:
    """Run func over items with bounded concurrency, preserving input order.

    Exceptions raised by func propagate; callers that need per-item failure
    isolation convert exceptions inside func.

    Args:
        items: Inputs, in the order results must be reported.
        func: Coroutine function applied to every item.
        concurrency_limit: Maximum coroutines in flight at once.
        cancel_event: Checked before each item starts.

    Returns:
        One result per item, same order as items.
    """
    semaphore = asyncio.Semaphore(max(1, concurrency_limit))

    async def run(item: T) -> R:
        async with semaphore:
            raise_if_cancelled(cancel_event)
            return await func(item)

    return await gather_all([run(item) for item in items])


async def gather_all(coroutines: Sequence[Awaitable[R]]) -> List[R]:
    """Run coroutines as tasks and collect their results positionally.

    If any task raises, every task still pending is cancelled and awaited
    before the first error propagates.
    """
    tasks = [asyncio.ensure_future(coroutine) for coroutine in coroutines]
    try:
        return list(await asyncio.gather(*tasks))
    except BaseException:
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        raise


async def send_bulk(
    payloads: Sequence[NotificationPayload],
    send: ItemSend,
    options: Optional[BulkOptions] = None,
    channel: str = "",
    cancel_event: Optional[asyncio.Event] = None,
) -> BulkNotifyResult:
    """Send payloads one by one through the generic bounded loop.

    Args:
        payloads: Ordered payloads, one per recipient.
        send: Single-send coroutine function (the channel's send).
        options: Chunking/concurrency options (defaults if None).
        channel: Channel name recorded on the aggregate and on exception results.
        cancel_event: Cancellation signal.

    Returns:
        BulkNotifyResult with used_native_batch=False; result i belongs to payload i.
    """
    options = options or BulkOptions()

    async def send_one(payload: NotificationPayload) -> NotifyResult:
        try:
            result = await send(payload)
        except NotificationCancelledError:
            raise
        except Exception as e:
            logger.warning(
                "bulk_item_send_raised",
                channel=channel,
                recipient=payload.to,
                error=str(e),
                exc_info=True,
            )
            result = NotifyResult.failed(channel=channel, error=str(e))
        return result.model_copy(update={"recipient": payload.to})

    results: List[NotifyResult] = []
    chunks = chunk(payloads, options)
    for index, items in enumerate(chunks, start=1):
        logger.debug(
            "bulk_chunk_started",
            channel=channel,
            chunk=index,
            chunk_count=len(chunks),
            chunk_size=len(items),
            concurrency_limit=options.concurrency_limit,
        )
        results.extend(
            await fan_out(items, send_one, options.concurrency_limit, cancel_event)
        )

    bulk_result = BulkNotifyResult(
        results=results, channel=channel, used_native_batch=False
    )
    _log_bulk_summary(bulk_result, chunk_count=len(chunks))
    return bulk_result


async def send_native_batches(
    payloads: Sequence[NotificationPayload],
    send_batch: BatchSend,
    options: Optional[BulkOptions] = None,
    channel: str = "",
    cancel_event: Optional[asyncio.Event] = None,
) -> BulkNotifyResult:
    """Send payloads through a provider's native batch API, one call per chunk.

    Per-item concurrency control is bypassed. Each chunk's results are matched
    to its payloads by position; a batch call that raises, or that returns the
    wrong number of results, fails every item of that chunk.

    Returns:
        BulkNotifyResult with used_native_batch=True.
    """
    options = options or BulkOptions()
    results: List[NotifyResult] = []
    chunks = chunk(payloads, options)

    for index, items in enumerate(chunks, start=1):
        raise_if_cancelled(cancel_event)
        logger.debug(
            "native_batch_started",
            channel=channel,
            chunk=index,
            chunk_count=len(chunks),
            chunk_size=len(items),
        )
        try:
            batch_results = list(await send_batch(items))
            if len(batch_results) != len(items):
                raise ValueError(
                    f"Batch returned {len(batch_results)} results for {len(items)} payloads"
                )
        except NotificationCancelledError:
            raise
        except Exception as e:
            logger.error(
                "native_batch_failed",
                channel=channel,
                chunk=index,
                chunk_size=len(items),
                error=str(e),
                exc_info=True,
            )
            batch_results = [
                NotifyResult.failed(channel=channel, error=str(e)) for _ in items
            ]

        results.extend(
            result.model_copy(update={"recipient": payload.to})
            for payload, result in zip(items, batch_results)
        )

    bulk_result = BulkNotifyResult(
        results=results, channel=channel, used_native_batch=True
    )
    _log_bulk_summary(bulk_result, chunk_count=len(chunks))
    return bulk_result


def _log_bulk_summary(result: BulkNotifyResult, chunk_count: int) -> None:
    logger.info(
        "bulk_send_completed",
        channel=result.channel,
        total=result.total,
        success_count=result.success_count,
        failure_count=result.failure_count,
        chunk_count=chunk_count,
        used_native_batch=result.used_native_batch,
    )
