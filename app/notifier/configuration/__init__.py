"""Notifier configuration module - public API.

Centralized configuration management using Pydantic BaseSettings.

Exports:
    Settings: Main settings class (for testing/overrides)
    NotifySettings: Dispatch engine settings section
    get_settings: Cached settings singleton
    validate_channel_options: Fail-fast provider reference validation
    provider_key: Adapter registry key builder

Example:
    ```python
    from notifier.configuration import get_settings

    settings = get_settings()
    retry = settings.notify.retry
    ```
"""

from notifier.configuration.notify import NotifySettings
from notifier.configuration.settings import Settings, get_settings
from notifier.configuration.validation import provider_key, validate_channel_options

__all__ = [
    "Settings",
    "NotifySettings",
    "get_settings",
    "provider_key",
    "validate_channel_options",
]
