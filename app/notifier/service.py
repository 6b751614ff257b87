"""Notification service facade.

Wires the event registry, adapter registry, provider router and channel
dispatcher together, validates the whole configuration once at startup and
exposes the entry points application code calls.

Usage:
    from notifier import NotifyService, OrchestratorOptions, NotifyContext

    options = OrchestratorOptions().define_event(
        "order.placed", lambda e: e.use_channels("email", "sms")
    )
    service = NotifyService(adapters=[sendgrid, twilio], options=options)

    report = await service.trigger("order.placed", context)
    bulk = await service.bulk_trigger("order.placed", contexts)

    await service.channel("email").send(payload)
"""

import asyncio
from typing import Iterable, List, Optional, Sequence, Union

from notifier.bulk import chunk, fan_out
from notifier.channels import ChannelRegistry, NotificationChannel, RoutingChannel
from notifier.configuration import Settings, get_settings, validate_channel_options
from notifier.dispatch import ChannelDispatcher, ProviderRouter
from notifier.errors import ConfigurationError, UnknownProviderError
from notifier.logging import bind_dispatch_context, get_module_logger
from notifier.models import BulkDispatchReport, DispatchReport, NotifyContext
from notifier.orchestrator import OrchestratorOptions

logger = get_module_logger()


class NotifyService:
    """Entry point for event-driven notification dispatch.

    Construction validates every provider reference and every event channel
    against the registered adapters, then freezes the event registry. A
    service that constructs successfully cannot hit a missing adapter at
    send time.

    Args:
        adapters: Channel adapters, as a ChannelRegistry or any iterable.
        options: Event definitions and the delivery hook.
        settings: Settings instance. Defaults to get_settings().

    Raises:
        UnknownProviderError: A provider, fallback, named provider or event
            channel has no registered adapter.
    """

    def __init__(
        self,
        adapters: Union[ChannelRegistry, Iterable[NotificationChannel]],
        options: OrchestratorOptions,
        settings: Optional[Settings] = None,
    ):
        self._settings = settings or get_settings()
        self._adapters = (
            adapters
            if isinstance(adapters, ChannelRegistry)
            else ChannelRegistry(adapters)
        )
        self._options = options
        notify = self._settings.notify

        validate_channel_options(notify.channels, self._adapters.has)
        self._validate_event_channels()
        options.registry.freeze()

        self._router = ProviderRouter(self._adapters, notify.channels)
        self._dispatcher = ChannelDispatcher(
            registry=options.registry,
            router=self._router,
            delivery_hook=options.delivery_hook,
            default_retry=notify.retry,
            channel_options=notify.channels,
        )

        logger.info(
            "initialized_notify_service",
            events=options.registry.names(),
            adapters=self._adapters.keys(),
            delivery_hook=options.delivery_hook is not None,
        )

    @property
    def dispatcher(self) -> ChannelDispatcher:
        return self._dispatcher

    @property
    def router(self) -> ProviderRouter:
        return self._router

    def _is_routable(self, channel: str) -> bool:
        options = self._settings.notify.channels.get(channel)
        if options is not None and options.provider:
            # provider keys were checked by validate_channel_options
            return True
        return self._adapters.has(channel)

    def _validate_event_channels(self) -> None:
        for definition in self._options.registry:
            for channel in definition.channels:
                if not self._is_routable(channel):
                    raise UnknownProviderError(
                        channel=channel,
                        key=channel,
                        field=f"(event '{definition.name}')",
                    )
            for channel in definition.fallback_chain or ():
                if not self._is_routable(channel):
                    raise UnknownProviderError(
                        channel=channel,
                        key=channel,
                        field=f"(fallback chain of event '{definition.name}')",
                    )

    async def trigger(
        self,
        event_name: str,
        context: NotifyContext,
        *,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> DispatchReport:
        """Dispatch an event to one recipient.

        Raises:
            EventNotFoundError: If the event is not registered.
            NotificationCancelledError: If cancellation was requested.
        """
        return await self._dispatcher.dispatch(
            event_name, context, cancel_event=cancel_event
        )

    async def bulk_trigger(
        self,
        event_name: str,
        contexts: Sequence[NotifyContext],
        *,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> BulkDispatchReport:
        """Dispatch an event to many recipients.

        Contexts are chunked by BulkOptions.max_batch_size and each chunk is
        dispatched with at most BulkOptions.concurrency_limit triggers in
        flight. Reports are returned in input order.

        Raises:
            EventNotFoundError: If the event is not registered (before any send).
            NotificationCancelledError: If cancellation was requested.
        """
        definition = self._options.registry.require(event_name)
        bulk_options = self._settings.notify.bulk

        async def trigger_one(context: NotifyContext) -> DispatchReport:
            return await self._dispatcher.dispatch(
                definition.name, context, cancel_event=cancel_event
            )

        reports: List[DispatchReport] = []
        with bind_dispatch_context(event_name=definition.name):
            chunks = chunk(contexts, bulk_options)
            logger.info(
                "bulk_trigger_started",
                recipients=len(contexts),
                chunk_count=len(chunks),
                concurrency_limit=bulk_options.concurrency_limit,
            )
            for index, items in enumerate(chunks, start=1):
                logger.debug(
                    "bulk_chunk_started", chunk=index, chunk_size=len(items)
                )
                reports.extend(
                    await fan_out(
                        items,
                        trigger_one,
                        bulk_options.concurrency_limit,
                        cancel_event,
                    )
                )

            report = BulkDispatchReport(event_name=definition.name, reports=reports)
            logger.info(
                "bulk_trigger_completed",
                total=report.total,
                success_count=report.success_count,
                failure_count=report.failure_count,
            )
        return report

    def channel(self, name: str) -> RoutingChannel:
        """Direct access to one channel, bypassing event definitions.

        Sends go through the provider router, so named provider routing and
        provider fallback still apply. Retry uses the channel's own policy,
        else the global default.

        Raises:
            ConfigurationError: If the channel has no route.
        """
        channel_name = name.strip().lower()
        if not self._is_routable(channel_name):
            raise ConfigurationError(
                f"No adapter is registered for channel '{channel_name}'."
            )
        notify = self._settings.notify
        options = notify.channels.get(channel_name)
        retry = options.retry if options and options.retry else notify.retry
        return RoutingChannel(
            channel_name,
            self._router,
            retry=retry,
            bulk_options=notify.bulk,
        )

    def list_channels(self) -> List[str]:
        """Channel names that can be sent to."""
        names = set(self._adapters.channels())
        names.update(
            channel
            for channel, options in self._settings.notify.channels.items()
            if options.provider
        )
        return sorted(names)
