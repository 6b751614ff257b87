"""Event definitions - named, reusable dispatch policies.

Usage:

    from notifier.events import EventDefinitionBuilder, EventRegistry

    registry = EventRegistry()
    registry.register(
        EventDefinitionBuilder("order.placed")
        .use_channels("email", "push")
        .with_condition("push", lambda ctx: ctx.user.push_enabled)
        .build()
    )
    registry.freeze()
"""

from notifier.events.builder import EventDefinitionBuilder
from notifier.events.definition import ChannelCondition, EventDefinition
from notifier.events.registry import EventRegistry

__all__ = [
    "ChannelCondition",
    "EventDefinition",
    "EventDefinitionBuilder",
    "EventRegistry",
]
