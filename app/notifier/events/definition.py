"""Event definition model.

An EventDefinition is a named, reusable dispatch policy: which channels an
event uses, under which conditions, with what retry override and which
cross-channel fallback chain.
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Callable, Mapping, Optional, Tuple

from notifier.models import NotifyContext
from notifier.options import RetryOptions

ChannelCondition = Callable[[NotifyContext], bool]


@dataclass(frozen=True)
class EventDefinition:
    """Immutable definition of a named notification event.

    Built once at startup by EventDefinitionBuilder and stored in the
    EventRegistry. Sequences are tuples and the condition map is read-only,
    so concurrent dispatches share a definition without locking.
    """

    name: str
    """Unique event name (e.g. 'order.placed'), compared case-insensitively."""

    channels: Tuple[str, ...] = ()
    """Channels dispatched in parallel for every trigger."""

    conditions: Mapping[str, ChannelCondition] = field(
        default_factory=lambda: MappingProxyType({})
    )
    """Per-channel predicates; a False result skips the channel."""

    retry: Optional[RetryOptions] = None
    """Per-event retry override. None falls back to channel/global defaults."""

    fallback_chain: Optional[Tuple[str, ...]] = None
    """Channels tried in order when a channel fails after retries."""

    @property
    def key(self) -> str:
        """Registry lookup key."""
        return normalize_event_name(self.name)

    def condition_for(self, channel: str) -> Optional[ChannelCondition]:
        return self.conditions.get(channel)


def normalize_event_name(name: str) -> str:
    return name.strip().casefold()
