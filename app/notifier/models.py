"""Notification dispatch core models.

Platform-agnostic models shared by the dispatch engine and channel adapters.
Callers own the content, the engine never renders or modifies payloads.

Uses Pydantic BaseModel for:
- Runtime input validation of caller-supplied contexts
- Type safety with proper error messages
- JSON-friendly serialization of results for delivery hooks
"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator

PROVIDER_METADATA_KEY = "provider"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class NotifyUser(BaseModel):
    """Recipient of a notification.

    Read by channel conditions and logging only, never stored.

    Attributes:
        user_id: Application user identifier (logging/tracing only)
        email: Email address, used by the email channel
        phone: Phone number in E.164 format, used by sms/whatsapp
        device_token: FCM/APNs token, used by push
        phone_verified: Typical guard for sms/whatsapp conditions
        push_enabled: Typical guard for push conditions
        extra: Any additional attributes conditions need

    Example:
        user = NotifyUser(user_id="42", email="user@example.com", push_enabled=True)
    """

    user_id: str = ""
    email: Optional[str] = None
    phone: Optional[str] = None
    device_token: Optional[str] = None
    phone_verified: bool = False
    push_enabled: bool = False
    extra: Dict[str, Any] = Field(default_factory=dict)


class NotificationPayload(BaseModel):
    """Content for one channel.

    Attributes:
        to: Destination address (email, phone number, device token, webhook URL...)
        subject: Optional subject/title, ignored by channels without one
        body: Message body, passed through as-is
        metadata: Channel-specific extras. Key "provider" is reserved for
            named provider routing; all other keys are opaque to the engine.

    Example:
        payload = NotificationPayload(
            to="user@example.com",
            subject="Order shipped",
            body="Your order is on its way",
            metadata={"provider": "transactional"},
        )
    """

    to: str = ""
    subject: Optional[str] = None
    body: str = ""
    metadata: Dict[str, Any] = Field(default_factory=dict)

    @property
    def provider_name(self) -> Optional[str]:
        """Named provider requested through metadata, if any."""
        value = self.metadata.get(PROVIDER_METADATA_KEY)
        if isinstance(value, str) and value.strip():
            return value.strip()
        return None


class NotifyContext(BaseModel):
    """Recipient plus per-channel payloads for one dispatch.

    Only channels present in ``channels`` can be attempted; a missing payload
    means the caller chose not to use that channel for this recipient.
    """

    user: NotifyUser = Field(default_factory=NotifyUser)
    channels: Dict[str, NotificationPayload] = Field(default_factory=dict)

    @field_validator("channels")
    @classmethod
    def normalize_channel_names(
        cls, v: Dict[str, NotificationPayload]
    ) -> Dict[str, NotificationPayload]:
        """Channel names are matched case-insensitively."""
        return {name.strip().lower(): payload for name, payload in v.items()}

    def payload_for(self, channel: str) -> Optional[NotificationPayload]:
        return self.channels.get(channel)


class NotifyResult(BaseModel):
    """Outcome of one logical send attempt.

    Retries collapse into a single result describing the final attempt.

    Attributes:
        success: True if the provider accepted the notification
        channel: Channel that attempted delivery (e.g. "email")
        provider: Provider that handled the send (e.g. "sendgrid")
        named_provider: Metadata-selected named provider, None for the default
        used_fallback: True if the send only succeeded on the fallback provider
        provider_id: Provider message id, for tracking and support queries
        error: Error message when success is False
        sent_at: UTC timestamp of the attempt
        recipient: Destination of the payload this result belongs to
        attempts: Physical attempts made for this logical result
        fallback_for: Channel whose failure triggered this cross-channel attempt

    Example:
        result = NotifyResult.sent("email", provider="sendgrid", provider_id="abc")
        failed = NotifyResult.failed("sms", "Twilio returned 503", provider="twilio")
    """

    success: bool
    channel: str = ""
    provider: str = ""
    named_provider: Optional[str] = None
    used_fallback: bool = False
    provider_id: Optional[str] = None
    error: Optional[str] = None
    sent_at: datetime = Field(default_factory=_utcnow)
    recipient: Optional[str] = None
    attempts: int = 1
    fallback_for: Optional[str] = None

    @classmethod
    def sent(
        cls,
        channel: str,
        provider: str = "",
        provider_id: Optional[str] = None,
        recipient: Optional[str] = None,
    ) -> "NotifyResult":
        """Create a successful result."""
        return cls(
            success=True,
            channel=channel,
            provider=provider,
            provider_id=provider_id,
            recipient=recipient,
        )

    @classmethod
    def failed(
        cls,
        channel: str,
        error: str,
        provider: str = "",
        recipient: Optional[str] = None,
    ) -> "NotifyResult":
        """Create a failed result carrying the provider error."""
        return cls(
            success=False,
            channel=channel,
            provider=provider,
            error=error,
            recipient=recipient,
        )


class BulkNotifyResult(BaseModel):
    """Outcome of a multi-recipient send.

    ``results`` is in the same order as the input payloads, independent of
    the order in which the sends completed.
    """

    results: List[NotifyResult] = Field(default_factory=list)
    channel: str = ""
    used_native_batch: bool = False

    @property
    def total(self) -> int:
        return len(self.results)

    @property
    def success_count(self) -> int:
        return sum(1 for r in self.results if r.success)

    @property
    def failure_count(self) -> int:
        return sum(1 for r in self.results if not r.success)

    @property
    def all_succeeded(self) -> bool:
        return all(r.success for r in self.results)

    @property
    def any_succeeded(self) -> bool:
        return any(r.success for r in self.results)

    @property
    def failures(self) -> List[NotifyResult]:
        return [r for r in self.results if not r.success]


class DispatchReport(BaseModel):
    """Aggregated outcome of triggering one event for one recipient.

    Attributes:
        event_name: Event that was triggered
        results: Every hooked attempt, primary channels first (in configured
            order) followed by cross-channel fallback attempts
        outcomes: Authoritative result per attempted primary channel. A
            successful fallback replaces the failure of the channel it covered.
        skipped: Channels skipped by a false condition or a missing payload
    """

    event_name: str
    results: List[NotifyResult] = Field(default_factory=list)
    outcomes: Dict[str, NotifyResult] = Field(default_factory=dict)
    skipped: List[str] = Field(default_factory=list)

    @property
    def success(self) -> bool:
        """True when every attempted channel ended in a successful delivery.

        A dispatch where every channel was skipped is a successful no-op.
        """
        return all(r.success for r in self.outcomes.values())

    @property
    def errors(self) -> Dict[str, str]:
        """Error message per channel whose outcome is a failure."""
        return {
            channel: result.error or "unknown error"
            for channel, result in self.outcomes.items()
            if not result.success
        }


class BulkDispatchReport(BaseModel):
    """Outcome of triggering one event for many recipients, in input order."""

    event_name: str
    reports: List[DispatchReport] = Field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.reports)

    @property
    def success_count(self) -> int:
        return sum(1 for r in self.reports if r.success)

    @property
    def failure_count(self) -> int:
        return sum(1 for r in self.reports if not r.success)
