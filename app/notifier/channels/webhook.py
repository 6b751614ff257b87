"""Incoming-webhook channel (Slack, Discord, Teams, Mattermost style)."""

import asyncio
from typing import Any, Dict, Optional

import httpx

from notifier.channels.base import NotificationChannel
from notifier.logging import get_module_logger
from notifier.models import NotificationPayload, NotifyResult

logger = get_module_logger()

DEFAULT_TIMEOUT_SECONDS = 10.0


class WebhookChannel(NotificationChannel):
    """Posts notifications as JSON to an incoming webhook URL.

    The request body is ``{"text": ..., "title": ...}``; ``title`` is only
    present when the payload has a subject. A payload whose ``to`` is an
    http(s) URL is posted there instead of the configured URL.

    Args:
        channel_name: Channel identifier, e.g. "slack" or "teams".
        url: Default webhook URL.
        provider_name: Optional provider identifier for multi-provider channels.
        client: Shared httpx.AsyncClient; a short-lived client is used per
            send when omitted.
        timeout: Request timeout in seconds.
    """

    def __init__(
        self,
        channel_name: str,
        url: str,
        provider_name: Optional[str] = None,
        client: Optional[httpx.AsyncClient] = None,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
    ):
        self.channel_name = channel_name
        self.provider_name = provider_name
        self.url = url
        self.timeout = timeout
        self._client = client

    def _target_url(self, payload: NotificationPayload) -> str:
        if payload.to.startswith(("http://", "https://")):
            return payload.to
        return self.url

    @staticmethod
    def build_body(payload: NotificationPayload) -> Dict[str, Any]:
        body: Dict[str, Any] = {"text": payload.body}
        if payload.subject:
            body["title"] = payload.subject
        return body

    async def _post(self, url: str, body: Dict[str, Any]) -> httpx.Response:
        if self._client is not None:
            return await self._client.post(url, json=body, timeout=self.timeout)
        async with httpx.AsyncClient() as client:
            return await client.post(url, json=body, timeout=self.timeout)

    async def send(
        self,
        payload: NotificationPayload,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> NotifyResult:
        provider = self.provider_name or "webhook"
        url = self._target_url(payload)
        if not url:
            return NotifyResult.failed(
                self.channel_name, "No webhook URL configured", provider=provider
            )

        try:
            response = await self._post(url, self.build_body(payload))
        except httpx.TimeoutException:
            logger.warning(
                "webhook_timeout",
                channel=self.channel_name,
                timeout_seconds=self.timeout,
            )
            return NotifyResult.failed(
                self.channel_name,
                f"Request timeout after {self.timeout}s",
                provider=provider,
            )
        except httpx.HTTPError as e:
            logger.warning(
                "webhook_request_failed",
                channel=self.channel_name,
                error=str(e),
            )
            return NotifyResult.failed(self.channel_name, str(e), provider=provider)

        if not response.is_success:
            logger.warning(
                "webhook_rejected",
                channel=self.channel_name,
                status_code=response.status_code,
            )
            return NotifyResult.failed(
                self.channel_name,
                f"HTTP {response.status_code}: {response.text[:500]}",
                provider=provider,
            )

        return NotifyResult.sent(
            self.channel_name,
            provider=provider,
            provider_id=response.headers.get("x-request-id"),
        )
