"""Event registry.

Process-wide name -> EventDefinition lookup. Populated once during startup,
then frozen; after freeze() no write path remains, so lookups from
concurrent dispatches need no synchronization.
"""

from typing import Dict, Iterator, List, Optional

from notifier.errors import ConfigurationError, DuplicateEventError, EventNotFoundError
from notifier.events.definition import EventDefinition, normalize_event_name
from notifier.logging import get_module_logger

logger = get_module_logger()


class EventRegistry:
    """Stores EventDefinition instances keyed by case-insensitive name.

    Example:
        registry = EventRegistry()
        registry.register(definition)
        registry.freeze()

        definition = registry.get("Order.Placed")  # same as "order.placed"
    """

    def __init__(self) -> None:
        self._events: Dict[str, EventDefinition] = {}
        self._frozen = False

    def register(self, definition: EventDefinition) -> None:
        """Register an event definition.

        Args:
            definition: Definition built by EventDefinitionBuilder.

        Raises:
            DuplicateEventError: If the name is already registered. The
                registry is left unchanged.
            ConfigurationError: If the registry has been frozen.
        """
        if self._frozen:
            raise ConfigurationError(
                f"Cannot register event '{definition.name}': "
                "the event registry is frozen after startup."
            )
        if definition.key in self._events:
            raise DuplicateEventError(definition.name)

        self._events[definition.key] = definition
        logger.debug(
            "registered_event",
            event_name=definition.name,
            channels=list(definition.channels),
            fallback_chain=list(definition.fallback_chain or ()),
            total_events=len(self._events),
        )

    def get(self, event_name: str) -> Optional[EventDefinition]:
        """Return the definition for a name, or None if it is not registered."""
        return self._events.get(normalize_event_name(event_name))

    def require(self, event_name: str) -> EventDefinition:
        """Return the definition for a name.

        Raises:
            EventNotFoundError: If the name is not registered.
        """
        definition = self.get(event_name)
        if definition is None:
            raise EventNotFoundError(event_name)
        return definition

    def freeze(self) -> None:
        """Seal the registry. Idempotent."""
        if not self._frozen:
            self._frozen = True
            logger.info("event_registry_frozen", total_events=len(self._events))

    @property
    def frozen(self) -> bool:
        return self._frozen

    def names(self) -> List[str]:
        """Registered event names, as originally spelled."""
        return [definition.name for definition in self._events.values()]

    def __contains__(self, event_name: object) -> bool:
        return isinstance(event_name, str) and self.get(event_name) is not None

    def __iter__(self) -> Iterator[EventDefinition]:
        return iter(list(self._events.values()))

    def __len__(self) -> int:
        return len(self._events)
