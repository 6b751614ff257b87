"""Notification dispatch exceptions.

Only configuration-time and event-lookup errors are raised to callers.
Everything that happens below the dispatcher (provider failures, exhausted
retries, exhausted fallback chains, skipped channels) is reported through
NotifyResult values instead.
"""


class NotifyError(Exception):
    """Base class for all notifier errors."""


class ConfigurationError(NotifyError):
    """Invalid startup configuration.

    Raised while events are defined and adapters are validated, never while
    a notification is being dispatched.
    """


class InvalidConfigurationError(ConfigurationError):
    """An event definition or option value is malformed (e.g. blank name)."""


class DuplicateEventError(ConfigurationError):
    """An event with the same case-insensitive name is already registered."""

    def __init__(self, event_name: str):
        self.event_name = event_name
        super().__init__(
            f"Event '{event_name}' is already registered. "
            "Each event name must be unique."
        )


class UnknownProviderError(ConfigurationError):
    """A channel references a provider that has no registered adapter."""

    def __init__(self, channel: str, key: str, field: str):
        self.channel = channel
        self.key = key
        self.field = field
        super().__init__(
            f"Channel '{channel}' {field} references '{key}' "
            "but no adapter is registered under that key."
        )


class EventNotFoundError(NotifyError, LookupError):
    """The caller triggered an event name that was never defined."""

    def __init__(self, event_name: str):
        self.event_name = event_name
        super().__init__(
            f"Event '{event_name}' is not defined. "
            "Register it with OrchestratorOptions.define_event() at startup."
        )


class NotificationCancelledError(NotifyError):
    """Dispatch was aborted because cancellation was requested.

    Distinct from a provider failure: no result is produced for the
    attempt that was not started.
    """
