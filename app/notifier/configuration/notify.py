"""Notification dispatch settings."""

from typing import Dict, Optional

from pydantic import Field, field_validator
from pydantic_settings import SettingsConfigDict

from notifier.configuration.base import SectionSettings
from notifier.options import BulkOptions, ChannelOptions, RetryOptions


class NotifySettings(SectionSettings):
    """Channel, retry and bulk configuration for the dispatch engine.

    Environment Variables:
        NOTIFY_RETRY: JSON retry policy applied when neither the event nor
            the channel defines one (default: single attempt)
        NOTIFY_RETRY__MAX_ATTEMPTS, NOTIFY_RETRY__DELAY,
        NOTIFY_RETRY__EXPONENTIAL_BACKOFF: Same, field by field
        NOTIFY_BULK__CONCURRENCY_LIMIT: Max in-flight sends in bulk loops (default: 10)
        NOTIFY_BULK__MAX_BATCH_SIZE: Max payloads per chunk (default: 1000)
        NOTIFY_BULK__AUTO_CHUNK: Split oversized bulk sends (default: True)
        NOTIFY_CHANNELS: JSON map of channel name to provider configuration

    Example:
        ```bash
        NOTIFY_CHANNELS='{"email": {"provider": "sendgrid", "fallback": "smtp",
            "providers": {"transactional": {"type": "postmark"}}}}'
        NOTIFY_RETRY__MAX_ATTEMPTS=3
        ```

        ```python
        from notifier.configuration import get_settings

        settings = get_settings()
        email = settings.notify.channels["email"]
        ```
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="NOTIFY_",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    retry: Optional[RetryOptions] = Field(
        default=None,
        description="Global default retry policy",
    )
    bulk: BulkOptions = Field(
        default_factory=BulkOptions,
        description="Bulk chunking and concurrency settings",
    )
    channels: Dict[str, ChannelOptions] = Field(
        default_factory=dict,
        description="Provider configuration per channel name",
    )

    @field_validator("channels")
    @classmethod
    def normalize_channel_names(
        cls, v: Dict[str, ChannelOptions]
    ) -> Dict[str, ChannelOptions]:
        """Channel names are matched case-insensitively."""
        return {name.strip().lower(): options for name, options in v.items()}

    def channel_options(self, channel: str) -> ChannelOptions:
        """Return the options for a channel, or empty options if unconfigured."""
        return self.channels.get(channel.strip().lower(), ChannelOptions())
