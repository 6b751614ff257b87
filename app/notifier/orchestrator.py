"""Orchestrator options: the event configuration surface.

Startup code defines events and the delivery hook here; NotifyService then
validates everything against the registered adapters and freezes the
registry.

Usage:
    options = (
        OrchestratorOptions()
        .define_event(
            "order.placed",
            lambda e: e.use_channels("email", "sms")
            .with_condition("sms", lambda ctx: ctx.user.phone_verified)
            .with_retry(max_attempts=3, delay=0.5),
        )
        .on_delivery(write_notification_log)
    )
"""

from typing import Any, Awaitable, Callable, Optional, Union

from notifier.errors import InvalidConfigurationError
from notifier.events import EventDefinition, EventDefinitionBuilder, EventRegistry
from notifier.models import NotifyResult

DeliveryHook = Callable[[NotifyResult], Union[Awaitable[None], None]]


class OrchestratorOptions:
    """Event definitions plus the delivery hook."""

    def __init__(self, registry: Optional[EventRegistry] = None) -> None:
        self._registry = registry or EventRegistry()
        self._delivery_hook: Optional[DeliveryHook] = None

    @property
    def registry(self) -> EventRegistry:
        return self._registry

    @property
    def delivery_hook(self) -> Optional[DeliveryHook]:
        return self._delivery_hook

    def define_event(
        self,
        event_name: str,
        configure: Callable[[EventDefinitionBuilder], Any],
    ) -> "OrchestratorOptions":
        """Define and register a named event.

        Args:
            event_name: Unique event name e.g. "order.placed".
            configure: Receives the builder; its return value is ignored.

        Raises:
            InvalidConfigurationError: Blank name or invalid definition.
            DuplicateEventError: The name is already defined.
        """
        builder = EventDefinitionBuilder(event_name)
        configure(builder)
        self._registry.register(builder.build())
        return self

    def add_event(self, definition: EventDefinition) -> "OrchestratorOptions":
        """Register a definition that was built elsewhere."""
        self._registry.register(definition)
        return self

    def on_delivery(self, hook: DeliveryHook) -> "OrchestratorOptions":
        """Register the callback invoked after every send attempt.

        Called once per NotifyResult, success or failure, never once per
        bulk batch. May be a plain function or a coroutine function.
        """
        if not callable(hook):
            raise InvalidConfigurationError("Delivery hook must be callable.")
        self._delivery_hook = hook
        return self
