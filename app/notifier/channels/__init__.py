"""Channel adapters.

Public API:
    - NotificationChannel: Abstract adapter contract
    - ChannelRegistry: Adapters keyed by "<channel>:<provider>"
    - RoutingChannel: Direct channel access through the provider router
    - InAppChannel: Handler-backed in-app notifications
    - WebhookChannel: JSON POST to incoming webhooks
"""

from notifier.channels.base import NotificationChannel
from notifier.channels.registry import ChannelRegistry
from notifier.channels.routing import RoutingChannel
from notifier.channels.in_app import InAppChannel
from notifier.channels.webhook import WebhookChannel

__all__ = [
    "NotificationChannel",
    "ChannelRegistry",
    "RoutingChannel",
    "InAppChannel",
    "WebhookChannel",
]
