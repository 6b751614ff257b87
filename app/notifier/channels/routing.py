"""Routing channel used for direct channel access from NotifyService."""

import asyncio
from typing import TYPE_CHECKING, Optional

from notifier.channels.base import NotificationChannel
from notifier.models import NotificationPayload, NotifyResult
from notifier.options import BulkOptions, RetryOptions

if TYPE_CHECKING:
    from notifier.dispatch.router import ProviderRouter


class RoutingChannel(NotificationChannel):
    """Channel facade that sends through the ProviderRouter.

    Named provider routing and in-channel provider fallback apply to every
    send. Bulk sends use the generic loop, so each payload can target a
    different named provider.

    Example:
        email = service.channel("email")
        await email.send(NotificationPayload(to="a@b.c", body="hi",
                                             metadata={"provider": "transactional"}))
    """

    supports_native_batch = False

    def __init__(
        self,
        channel_name: str,
        router: "ProviderRouter",
        retry: Optional[RetryOptions] = None,
        bulk_options: Optional[BulkOptions] = None,
    ):
        self.channel_name = channel_name
        self._router = router
        self._retry = retry
        if bulk_options is not None:
            self.bulk_options = bulk_options

    async def send(
        self,
        payload: NotificationPayload,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> NotifyResult:
        return await self._router.route(
            self.channel_name, payload, retry=self._retry, cancel_event=cancel_event
        )
