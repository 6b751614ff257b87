"""Event-driven multi-channel notification dispatch.

Public API:
    - OrchestratorOptions: define events and the delivery hook at startup
    - NotifyService: trigger events, bulk trigger, direct channel access
    - NotificationChannel: adapter contract for providers
    - NotifyContext, NotifyUser, NotificationPayload: dispatch inputs
    - NotifyResult, DispatchReport, BulkDispatchReport, BulkNotifyResult: outcomes

Example:
    from notifier import (
        NotificationPayload,
        NotifyContext,
        NotifyService,
        NotifyUser,
        OrchestratorOptions,
    )

    options = (
        OrchestratorOptions()
        .define_event(
            "password.reset",
            lambda e: e.use_channels("email", "sms")
            .with_condition("sms", lambda ctx: ctx.user.phone_verified)
            .with_retry(max_attempts=3, delay=0.5),
        )
        .on_delivery(record_delivery)
    )
    service = NotifyService(adapters=[email_adapter, sms_adapter], options=options)

    report = await service.trigger(
        "password.reset",
        NotifyContext(
            user=NotifyUser(user_id="42", phone_verified=True),
            channels={
                "email": NotificationPayload(to="a@example.com", subject="Reset", body="..."),
                "sms": NotificationPayload(to="+15551234567", body="..."),
            },
        ),
    )
"""

from notifier.channels import (
    ChannelRegistry,
    InAppChannel,
    NotificationChannel,
    RoutingChannel,
    WebhookChannel,
)
from notifier.dispatch import ChannelDispatcher, ProviderRouter, Route
from notifier.errors import (
    ConfigurationError,
    DuplicateEventError,
    EventNotFoundError,
    InvalidConfigurationError,
    NotificationCancelledError,
    NotifyError,
    UnknownProviderError,
)
from notifier.events import EventDefinition, EventDefinitionBuilder, EventRegistry
from notifier.models import (
    BulkDispatchReport,
    BulkNotifyResult,
    DispatchReport,
    NotificationPayload,
    NotifyContext,
    NotifyResult,
    NotifyUser,
)
from notifier.options import (
    BulkOptions,
    ChannelOptions,
    NamedProviderDefinition,
    RetryOptions,
)
from notifier.orchestrator import DeliveryHook, OrchestratorOptions
from notifier.service import NotifyService

__all__ = [
    # Service
    "NotifyService",
    "OrchestratorOptions",
    "DeliveryHook",
    # Events
    "EventDefinition",
    "EventDefinitionBuilder",
    "EventRegistry",
    # Channels
    "NotificationChannel",
    "ChannelRegistry",
    "RoutingChannel",
    "InAppChannel",
    "WebhookChannel",
    # Dispatch
    "ChannelDispatcher",
    "ProviderRouter",
    "Route",
    # Models
    "NotifyUser",
    "NotifyContext",
    "NotificationPayload",
    "NotifyResult",
    "BulkNotifyResult",
    "DispatchReport",
    "BulkDispatchReport",
    # Options
    "RetryOptions",
    "BulkOptions",
    "ChannelOptions",
    "NamedProviderDefinition",
    # Errors
    "NotifyError",
    "ConfigurationError",
    "InvalidConfigurationError",
    "DuplicateEventError",
    "UnknownProviderError",
    "EventNotFoundError",
    "NotificationCancelledError",
]
