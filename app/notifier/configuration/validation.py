"""Startup validation of channel provider configuration.

Fail fast at startup: every provider key a channel can route to must
resolve to a registered adapter before the first notification is sent.
"""

from typing import Callable, Mapping

from notifier.errors import UnknownProviderError
from notifier.options import ChannelOptions


def provider_key(channel: str, provider: str | None) -> str:
    """Build the adapter registry key for a channel/provider pair.

    Channels without provider selection are keyed by the bare channel name.

    Example:
        provider_key("email", "sendgrid")  # "email:sendgrid"
        provider_key("slack", None)        # "slack"
    """
    if provider:
        return f"{channel}:{provider}"
    return channel


def validate_channel_options(
    channels: Mapping[str, ChannelOptions],
    is_registered: Callable[[str], bool],
) -> None:
    """Check that every provider reference in the channel options is registered.

    Args:
        channels: Channel name to ChannelOptions.
        is_registered: Returns True if an adapter exists for a registry key.

    Raises:
        UnknownProviderError: On the first unresolvable reference.
    """
    for channel, options in channels.items():
        _require(channel, options.provider, "provider", is_registered)

        if options.fallback:
            _require(channel, options.fallback, "fallback", is_registered)

        for name, definition in options.providers.items():
            _require(channel, definition.type, f"providers['{name}'].type", is_registered)
            if definition.fallback:
                _require(
                    channel,
                    definition.fallback,
                    f"providers['{name}'].fallback",
                    is_registered,
                )


def _require(
    channel: str,
    provider: str,
    field: str,
    is_registered: Callable[[str], bool],
) -> None:
    key = provider_key(channel, provider)
    if not is_registered(key):
        raise UnknownProviderError(channel=channel, key=key, field=field)
