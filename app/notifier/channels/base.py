"""Notification channel abstract base class.

Every provider adapter (email via SendGrid, SMS via Twilio, in-app, webhook...)
implements this interface and is registered in the ChannelRegistry under
``"<channel>:<provider>"`` (or the bare channel name).
"""

import asyncio
from abc import ABC, abstractmethod
from typing import List, Optional, Sequence

from notifier.bulk import send_bulk, send_native_batches
from notifier.models import BulkNotifyResult, NotificationPayload, NotifyResult
from notifier.options import BulkOptions


class NotificationChannel(ABC):
    """Abstract base class for channel adapters.

    Each adapter handles delivery through one provider. Swapping providers
    is a configuration change; dispatch code never imports an adapter.

    Example Implementation:
        class SendGridEmailChannel(NotificationChannel):
            channel_name = "email"
            provider_name = "sendgrid"

            async def send(self, payload, cancel_event=None):
                try:
                    response = await self._client.send(payload.to, payload.subject, payload.body)
                except SendGridError as e:
                    return NotifyResult.failed("email", str(e), provider="sendgrid")
                return NotifyResult.sent("email", provider="sendgrid", provider_id=response.id)
    """

    channel_name: str = ""
    """Stable channel identifier (email, sms, push, whatsapp...)."""

    provider_name: Optional[str] = None
    """Provider identifier (sendgrid, twilio...); None for single-provider channels."""

    supports_native_batch: bool = False
    """True when send_batch() talks to a provider bulk API.

    Adapters that set this must override send_batch(); the ChannelRegistry
    rejects them otherwise.
    """

    bulk_options: BulkOptions = BulkOptions()

    @abstractmethod
    async def send(
        self,
        payload: NotificationPayload,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> NotifyResult:
        """Send one notification.

        Must return NotifyResult(success=False) for provider and network
        errors rather than raising.

        Args:
            payload: Content and destination for this channel.
            cancel_event: Cancellation signal for long-running sends.

        Returns:
            NotifyResult describing the outcome.
        """

    async def send_bulk(
        self,
        payloads: Sequence[NotificationPayload],
        cancel_event: Optional[asyncio.Event] = None,
    ) -> BulkNotifyResult:
        """Send many notifications, one result per payload in input order.

        Uses the provider's native batch API when supports_native_batch is
        set, otherwise a concurrency-bounded loop over send().
        """
        if self.supports_native_batch:
            return await send_native_batches(
                payloads,
                self.send_batch,
                options=self.bulk_options,
                channel=self.channel_name,
                cancel_event=cancel_event,
            )
        return await send_bulk(
            payloads,
            lambda payload: self.send(payload, cancel_event),
            options=self.bulk_options,
            channel=self.channel_name,
            cancel_event=cancel_event,
        )

    async def send_batch(
        self, payloads: List[NotificationPayload]
    ) -> List[NotifyResult]:
        """Send one chunk through the provider's bulk API.

        Override hook paired with supports_native_batch; only called when that
        flag is True. Must return exactly one result per payload, in the same
        order.
        """
        raise NotImplementedError(
            f"{type(self).__name__} does not implement a native batch API"
        )

    @property
    def key(self) -> str:
        """Adapter registry key."""
        if self.provider_name:
            return f"{self.channel_name}:{self.provider_name}"
        return self.channel_name
