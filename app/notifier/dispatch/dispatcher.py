"""Channel dispatcher: runs one event against one recipient context.

Process for dispatch(event_name, context):
    1. Load the EventDefinition (EventNotFoundError if unknown)
    2. For every configured channel, concurrently:
       a. evaluate the channel condition; False skips the channel
       b. skip the channel if the context carries no payload for it
       c. route through the ProviderRouter under the resolved retry policy
       d. invoke the delivery hook with the result
    3. For every failed channel, walk the event's fallback chain in order
       until one fallback channel delivers
    4. Aggregate everything into a DispatchReport

Retry policy precedence: event override, then the channel's own
ChannelOptions.retry, then the global default, then a single attempt.
"""

import asyncio
import inspect
from typing import Dict, List, Mapping, Optional, Set, Tuple

from notifier.bulk import gather_all
from notifier.dispatch.router import ProviderRouter
from notifier.events import EventDefinition, EventRegistry
from notifier.logging import bind_dispatch_context, get_module_logger
from notifier.models import DispatchReport, NotifyContext, NotifyResult
from notifier.options import ChannelOptions, RetryOptions
from notifier.orchestrator import DeliveryHook

logger = get_module_logger()


class ChannelDispatcher:
    """Event dispatcher with condition gating and two-level fallback.

    Attributes:
        registry: Event definitions, looked up by name
        router: Provider router used for every channel send
        delivery_hook: Called once per NotifyResult, success or failure
        default_retry: Global retry policy (None = single attempt)
        channel_options: Per-channel options, for channel-level retry defaults

    Example:
        dispatcher = ChannelDispatcher(
            registry=options.registry,
            router=ProviderRouter(adapters, settings.notify.channels),
            delivery_hook=options.delivery_hook,
            default_retry=settings.notify.retry,
        )

        report = await dispatcher.dispatch("order.placed", context)
        if not report.success:
            logger.warning("order_notification_failed", errors=report.errors)
    """

    def __init__(
        self,
        registry: EventRegistry,
        router: ProviderRouter,
        delivery_hook: Optional[DeliveryHook] = None,
        default_retry: Optional[RetryOptions] = None,
        channel_options: Optional[Mapping[str, ChannelOptions]] = None,
    ):
        self.registry = registry
        self.router = router
        self.delivery_hook = delivery_hook
        self.default_retry = default_retry
        self.channel_options = (
            dict(channel_options)
            if channel_options is not None
            else dict(router.channel_options)
        )

    def retry_for(
        self, definition: EventDefinition, channel: str
    ) -> Optional[RetryOptions]:
        """Resolve the retry policy for one channel of one event."""
        if definition.retry is not None:
            return definition.retry
        options = self.channel_options.get(channel)
        if options is not None and options.retry is not None:
            return options.retry
        return self.default_retry

    async def dispatch(
        self,
        event_name: str,
        context: NotifyContext,
        *,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> DispatchReport:
        """Dispatch an event to one recipient.

        Args:
            event_name: Registered event name (case-insensitive).
            context: Recipient plus per-channel payloads.
            cancel_event: Cancellation signal threaded to every attempt.

        Returns:
            DispatchReport with every hooked result, the outcome per attempted
            channel and the skipped channels.

        Raises:
            EventNotFoundError: If the event is not registered.
            NotificationCancelledError: If cancellation was requested.
        """
        definition = self.registry.require(event_name)

        with bind_dispatch_context(
            event_name=definition.name, user_id=context.user.user_id
        ):
            logger.debug(
                "dispatching_event",
                channels=list(definition.channels),
                payload_channels=sorted(context.channels),
                fallback_chain=list(definition.fallback_chain or ()),
            )

            primary = await gather_all(
                [
                    self._attempt_channel(definition, channel, context, cancel_event)
                    for channel in definition.channels
                ]
            )

            report = DispatchReport(event_name=definition.name)
            attempted: Set[str] = set()
            for channel, result in zip(definition.channels, primary):
                if result is None:
                    report.skipped.append(channel)
                    continue
                attempted.add(channel)
                report.results.append(result)
                report.outcomes[channel] = result

            if definition.fallback_chain:
                await self._apply_fallbacks(
                    definition, context, report, attempted, cancel_event
                )

            logger.info(
                "event_dispatched",
                success=report.success,
                attempted=sorted(report.outcomes),
                skipped=report.skipped,
                failed=sorted(report.errors),
                result_count=len(report.results),
            )
            return report

    async def _attempt_channel(
        self,
        definition: EventDefinition,
        channel: str,
        context: NotifyContext,
        cancel_event: Optional[asyncio.Event],
    ) -> Optional[NotifyResult]:
        """Condition check, route and hook for one primary channel.

        Returns None when the channel is skipped.
        """
        if not self._condition_allows(definition, channel, context):
            logger.debug("channel_skipped", channel=channel, reason="condition_false")
            return None

        return await self._send_and_hook(definition, channel, context, cancel_event)

    async def _send_and_hook(
        self,
        definition: EventDefinition,
        channel: str,
        context: NotifyContext,
        cancel_event: Optional[asyncio.Event],
        fallback_for: Optional[str] = None,
    ) -> Optional[NotifyResult]:
        payload = context.payload_for(channel)
        if payload is None:
            logger.debug(
                "channel_skipped",
                channel=channel,
                reason="no_payload",
                fallback_for=fallback_for,
            )
            return None

        result = await self.router.route(
            channel,
            payload,
            retry=self.retry_for(definition, channel),
            cancel_event=cancel_event,
        )
        if fallback_for is not None:
            result = result.model_copy(update={"fallback_for": fallback_for})

        if not result.success:
            logger.warning(
                "channel_send_failed",
                channel=channel,
                provider=result.provider,
                attempts=result.attempts,
                fallback_for=fallback_for,
                error=result.error,
            )

        await self._invoke_hook(result)
        return result

    def _condition_allows(
        self, definition: EventDefinition, channel: str, context: NotifyContext
    ) -> bool:
        condition = definition.condition_for(channel)
        if condition is None:
            return True
        try:
            return bool(condition(context))
        except Exception as e:
            logger.error(
                "channel_condition_failed",
                channel=channel,
                error=str(e),
                exc_info=True,
            )
            return False

    async def _apply_fallbacks(
        self,
        definition: EventDefinition,
        context: NotifyContext,
        report: DispatchReport,
        attempted: Set[str],
        cancel_event: Optional[asyncio.Event],
    ) -> None:
        """Walk the fallback chain for every failed primary channel.

        Runs after the primary fan-out, sequentially. A fallback channel that
        already delivered for an earlier failure covers later ones too.
        """
        delivered: Dict[str, NotifyResult] = {}
        chain = definition.fallback_chain or ()

        failed = [
            channel
            for channel in definition.channels
            if channel in report.outcomes and not report.outcomes[channel].success
        ]
        for failed_channel in failed:
            covered = await self._walk_chain(
                definition,
                chain,
                failed_channel,
                context,
                report.results,
                attempted,
                delivered,
                cancel_event,
            )
            if covered is not None:
                report.outcomes[failed_channel] = covered
            else:
                logger.warning(
                    "fallback_chain_exhausted",
                    channel=failed_channel,
                    fallback_chain=list(chain),
                    error=report.outcomes[failed_channel].error,
                )

    async def _walk_chain(
        self,
        definition: EventDefinition,
        chain: Tuple[str, ...],
        failed_channel: str,
        context: NotifyContext,
        results: List[NotifyResult],
        attempted: Set[str],
        delivered: Dict[str, NotifyResult],
        cancel_event: Optional[asyncio.Event],
    ) -> Optional[NotifyResult]:
        for target in chain:
            if target == failed_channel:
                continue
            if target in delivered:
                logger.debug(
                    "fallback_already_delivered",
                    channel=failed_channel,
                    fallback_channel=target,
                )
                return delivered[target]
            if target in attempted:
                continue

            attempted.add(target)
            logger.info(
                "cross_channel_fallback_attempted",
                channel=failed_channel,
                fallback_channel=target,
            )
            result = await self._send_and_hook(
                definition, target, context, cancel_event, fallback_for=failed_channel
            )
            if result is None:
                continue

            results.append(result)
            if result.success:
                delivered[target] = result
                return result
        return None

    async def _invoke_hook(self, result: NotifyResult) -> None:
        """Call the delivery hook, isolating its failures from the dispatch."""
        if self.delivery_hook is None:
            return
        try:
            outcome = self.delivery_hook(result)
            if inspect.isawaitable(outcome):
                await outcome
        except Exception as e:
            logger.error(
                "delivery_hook_failed",
                channel=result.channel,
                success=result.success,
                error=str(e),
                exc_info=True,
            )
