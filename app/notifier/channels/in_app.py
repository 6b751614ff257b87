"""In-app channel backed by a caller-supplied handler."""

import asyncio
from typing import Awaitable, Callable, Optional

from notifier.channels.base import NotificationChannel
from notifier.logging import get_module_logger
from notifier.models import NotificationPayload, NotifyResult

logger = get_module_logger()

InAppHandler = Callable[[NotificationPayload], Awaitable[Optional[str]]]


class InAppChannel(NotificationChannel):
    """Delivers in-app notifications through the application's own storage.

    The handler persists (or pushes over a live connection) the payload and
    returns an optional message id. Any exception it raises becomes a
    failure result.

    Example:
        async def store(payload):
            row = await repo.insert_inbox_item(payload.to, payload.subject, payload.body)
            return str(row.id)

        channel = InAppChannel(handler=store)
    """

    channel_name = "inapp"

    def __init__(self, handler: InAppHandler, channel_name: str = "inapp"):
        self.channel_name = channel_name
        self._handler = handler

    async def send(
        self,
        payload: NotificationPayload,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> NotifyResult:
        try:
            message_id = await self._handler(payload)
        except Exception as e:
            logger.error(
                "in_app_handler_failed",
                channel=self.channel_name,
                recipient=payload.to,
                error=str(e),
                exc_info=True,
            )
            return NotifyResult.failed(self.channel_name, str(e), provider="inapp")

        return NotifyResult.sent(
            self.channel_name, provider="inapp", provider_id=message_id
        )
