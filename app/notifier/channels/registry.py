"""Adapter registry keyed by ``"<channel>:<provider>"``."""

from typing import Dict, Iterable, List, Optional

from notifier.channels.base import NotificationChannel
from notifier.errors import ConfigurationError
from notifier.logging import get_module_logger

logger = get_module_logger()


class ChannelRegistry:
    """Holds every registered channel adapter.

    Example:
        registry = ChannelRegistry([
            SendGridEmailChannel(),
            SmtpEmailChannel(),
            InAppChannel(handler=store_in_app_message),
        ])
        registry.resolve("email:sendgrid")
        registry.resolve("inapp")
    """

    def __init__(self, adapters: Optional[Iterable[NotificationChannel]] = None):
        self._adapters: Dict[str, NotificationChannel] = {}
        for adapter in adapters or ():
            self.register(adapter)

    def register(self, adapter: NotificationChannel) -> None:
        """Register an adapter under its key.

        Raises:
            ConfigurationError: If the adapter has no channel name, claims a
                native batch API without overriding send_batch, or the key is
                already taken.
        """
        if not adapter.channel_name:
            raise ConfigurationError(
                f"Adapter {type(adapter).__name__} has no channel_name."
            )
        if (
            adapter.supports_native_batch
            and type(adapter).send_batch is NotificationChannel.send_batch
        ):
            raise ConfigurationError(
                f"Adapter {type(adapter).__name__} sets supports_native_batch "
                "but does not implement send_batch()."
            )
        key = adapter.key
        if key in self._adapters:
            raise ConfigurationError(f"An adapter is already registered as '{key}'.")

        self._adapters[key] = adapter
        logger.debug(
            "registered_channel_adapter",
            key=key,
            channel=adapter.channel_name,
            provider=adapter.provider_name,
            adapter=type(adapter).__name__,
        )

    def resolve(self, key: str) -> Optional[NotificationChannel]:
        return self._adapters.get(key)

    def has(self, key: str) -> bool:
        return key in self._adapters

    def keys(self) -> List[str]:
        return list(self._adapters)

    def channels(self) -> List[str]:
        """Distinct channel names with at least one adapter, in registration order."""
        names: List[str] = []
        for adapter in self._adapters.values():
            if adapter.channel_name not in names:
                names.append(adapter.channel_name)
        return names

    def has_channel(self, channel: str) -> bool:
        return any(a.channel_name == channel for a in self._adapters.values())

    def __len__(self) -> int:
        return len(self._adapters)
