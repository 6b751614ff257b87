"""Fluent builder for EventDefinition.

Usage:
    builder = EventDefinitionBuilder("order.placed")
    definition = (
        builder.use_channels("email", "sms")
        .with_condition("sms", lambda ctx: ctx.user.phone_verified)
        .with_retry(max_attempts=3, delay=0.5)
        .with_fallback("whatsapp", "sms", "email")
        .build()
    )
"""

from types import MappingProxyType
from typing import Dict, List, Optional

from pydantic import ValidationError

from notifier.errors import InvalidConfigurationError
from notifier.events.definition import ChannelCondition, EventDefinition
from notifier.options import RetryOptions


def _normalize_channel(channel: str) -> str:
    if not isinstance(channel, str) or not channel.strip():
        raise InvalidConfigurationError("Channel names must be non-empty strings.")
    return channel.strip().lower()


class EventDefinitionBuilder:
    """Accumulates event configuration and snapshots it into an EventDefinition.

    The builder itself is mutable and is only used during startup; build()
    copies its state, so later builder calls never leak into a definition
    that is already registered.
    """

    def __init__(self, event_name: str):
        if not isinstance(event_name, str) or not event_name.strip():
            raise InvalidConfigurationError("Event name must not be empty.")
        self._event_name = event_name.strip()
        self._channels: List[str] = []
        self._conditions: Dict[str, ChannelCondition] = {}
        self._retry: Optional[RetryOptions] = None
        self._fallback_chain: Optional[List[str]] = None

    @property
    def event_name(self) -> str:
        return self._event_name

    def use_channels(self, *channels: str) -> "EventDefinitionBuilder":
        """Add channels dispatched for this event.

        Args:
            *channels: Channel names e.g. "email", "sms", "push". Duplicates
                are ignored, first occurrence wins the position.
        """
        for channel in channels:
            name = _normalize_channel(channel)
            if name not in self._channels:
                self._channels.append(name)
        return self

    def with_condition(
        self, channel: str, condition: ChannelCondition
    ) -> "EventDefinitionBuilder":
        """Gate a channel on a predicate evaluated against the NotifyContext.

        If the predicate returns False the channel is skipped: no send,
        no retry, no delivery hook call, no error.

        Args:
            channel: Channel the condition applies to.
            condition: Pure predicate receiving the dispatch NotifyContext.
        """
        if not callable(condition):
            raise InvalidConfigurationError(
                f"Condition for channel '{channel}' must be callable."
            )
        self._conditions[_normalize_channel(channel)] = condition
        return self

    def with_retry(
        self,
        max_attempts: int,
        delay: float = 0.5,
        exponential_backoff: bool = True,
    ) -> "EventDefinitionBuilder":
        """Override the channel/global retry policy for this event only.

        Args:
            max_attempts: Maximum attempts including the first one.
            delay: Base delay between attempts, in seconds.
            exponential_backoff: Double the delay on every subsequent attempt.
        """
        try:
            self._retry = RetryOptions(
                max_attempts=max_attempts,
                delay=delay,
                exponential_backoff=exponential_backoff,
            )
        except ValidationError as e:
            raise InvalidConfigurationError(
                f"Invalid retry options for event '{self._event_name}': {e}"
            ) from e
        return self

    def with_fallback(self, *chain: str) -> "EventDefinitionBuilder":
        """Define the cross-channel fallback chain.

        When a channel fails after all retries, channels in the chain are
        tried in order until one succeeds. Independent of within-channel
        provider fallback (see ChannelOptions.fallback).
        """
        self._fallback_chain = [_normalize_channel(channel) for channel in chain]
        return self

    def build(self) -> EventDefinition:
        """Snapshot the accumulated state into an immutable EventDefinition."""
        if not self._channels:
            raise InvalidConfigurationError(
                f"Event '{self._event_name}' must use at least one channel."
            )
        return EventDefinition(
            name=self._event_name,
            channels=tuple(self._channels),
            conditions=MappingProxyType(dict(self._conditions)),
            retry=self._retry,
            fallback_chain=(
                tuple(self._fallback_chain) if self._fallback_chain else None
            ),
        )
