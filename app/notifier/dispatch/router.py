"""Provider router: picks the adapter for a channel send.

Resolution order for one payload:
    1. payload.metadata["provider"] names an entry in the channel's named
       provider table -> that entry's type, with that entry's fallback
    2. the channel's active provider, with the channel fallback
    3. no provider configured -> the adapter registered under the bare
       channel name, no fallback

The primary adapter runs under the retry executor. When it still fails, the
fallback adapter gets the same retry policy.
"""

import asyncio
from typing import Mapping, NamedTuple, Optional

from notifier.channels.registry import ChannelRegistry
from notifier.configuration import provider_key
from notifier.logging import get_module_logger
from notifier.models import NotificationPayload, NotifyResult
from notifier.options import ChannelOptions, RetryOptions
from notifier.resilience import execute_with_retry

logger = get_module_logger()


class Route(NamedTuple):
    """Resolved adapter keys for one send."""

    primary_key: str
    fallback_key: Optional[str] = None
    named_provider: Optional[str] = None


class ProviderRouter:
    """Routes channel sends to provider adapters with in-channel fallback.

    Args:
        adapters: Registry of channel adapters.
        channel_options: Provider configuration per channel name. Channels
            without an entry use the adapter registered under their bare name.

    Example:
        router = ProviderRouter(adapters, settings.notify.channels)
        result = await router.route("email", payload, retry=RetryOptions())
    """

    def __init__(
        self,
        adapters: ChannelRegistry,
        channel_options: Optional[Mapping[str, ChannelOptions]] = None,
    ):
        self.adapters = adapters
        self.channel_options = dict(channel_options or {})

    def options_for(self, channel: str) -> ChannelOptions:
        return self.channel_options.get(channel) or ChannelOptions()

    def resolve(self, channel: str, payload: NotificationPayload) -> Route:
        """Resolve the primary and fallback adapter keys for a payload."""
        options = self.options_for(channel)

        named = payload.provider_name
        if named is not None:
            definition = options.providers.get(named)
            if definition is not None:
                return Route(
                    primary_key=provider_key(channel, definition.type),
                    fallback_key=(
                        provider_key(channel, definition.fallback)
                        if definition.fallback
                        else None
                    ),
                    named_provider=named,
                )
            logger.warning(
                "unknown_named_provider",
                channel=channel,
                named_provider=named,
                configured=sorted(options.providers),
            )

        if not options.provider:
            return Route(primary_key=channel)

        return Route(
            primary_key=provider_key(channel, options.provider),
            fallback_key=(
                provider_key(channel, options.fallback) if options.fallback else None
            ),
        )

    async def route(
        self,
        channel: str,
        payload: NotificationPayload,
        retry: Optional[RetryOptions] = None,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> NotifyResult:
        """Send a payload through the resolved provider, falling back on failure.

        Args:
            channel: Channel name.
            payload: Payload to send.
            retry: Attempt policy for each provider. None means one attempt.
            cancel_event: Cancellation signal.

        Returns:
            The final NotifyResult, stamped with channel, named provider and
            recipient. used_fallback is True only when the fallback provider
            delivered.

        Raises:
            NotificationCancelledError: If cancellation was requested.
        """
        route = self.resolve(channel, payload)
        logger.debug(
            "routing_channel_send",
            channel=channel,
            provider_key=route.primary_key,
            named_provider=route.named_provider,
        )

        result = await self._send_via(
            route.primary_key, channel, payload, retry, cancel_event
        )
        used_fallback = False

        if (
            not result.success
            and route.fallback_key
            and route.fallback_key != route.primary_key
        ):
            logger.warning(
                "provider_fallback_attempted",
                channel=channel,
                failed_provider_key=route.primary_key,
                fallback_provider_key=route.fallback_key,
                error=result.error,
            )
            result = await self._send_via(
                route.fallback_key, channel, payload, retry, cancel_event
            )
            used_fallback = result.success
            if not result.success:
                logger.error(
                    "provider_fallback_failed",
                    channel=channel,
                    fallback_provider_key=route.fallback_key,
                    error=result.error,
                )

        return result.model_copy(
            update={
                "channel": channel,
                "named_provider": route.named_provider,
                "used_fallback": used_fallback,
                "recipient": payload.to,
            }
        )

    async def _send_via(
        self,
        key: str,
        channel: str,
        payload: NotificationPayload,
        retry: Optional[RetryOptions],
        cancel_event: Optional[asyncio.Event],
    ) -> NotifyResult:
        adapter = self.adapters.resolve(key)
        if adapter is None:
            logger.error("adapter_not_registered", channel=channel, provider_key=key)
            return NotifyResult.failed(
                channel, f"No adapter registered for key '{key}'", provider=key
            )

        provider = adapter.provider_name or adapter.channel_name
        result = await execute_with_retry(
            lambda: adapter.send(payload, cancel_event),
            retry,
            cancel_event=cancel_event,
            channel=channel,
            provider=provider,
        )
        if not result.provider:
            result = result.model_copy(update={"provider": provider})
        return result
