"""Unit tests for NotifyService wiring, validation and entry points."""

import asyncio

import pytest

from notifier.channels import ChannelRegistry, RoutingChannel
from notifier.errors import (
    ConfigurationError,
    EventNotFoundError,
    NotificationCancelledError,
    UnknownProviderError,
)
from notifier.options import BulkOptions, ChannelOptions, RetryOptions
from notifier.orchestrator import OrchestratorOptions
from notifier.service import NotifyService
from tests.factories import StubChannel, make_context, make_payload


@pytest.mark.unit
class TestNotifyServiceStartup:
    """Tests for startup validation."""

    def test_valid_configuration_freezes_registry(self, settings_factory):
        options = OrchestratorOptions().define_event(
            "order.placed", lambda e: e.use_channels("email", "slack")
        )

        NotifyService(
            adapters=[StubChannel("email", "sendgrid"), StubChannel("slack")],
            options=options,
            settings=settings_factory(channels={"email": ChannelOptions(provider="sendgrid")}),
        )

        assert options.registry.frozen is True

    def test_accepts_prebuilt_registry(self, settings_factory):
        adapters = ChannelRegistry([StubChannel("email")])
        options = OrchestratorOptions().define_event("e", lambda e: e.use_channels("email"))

        service = NotifyService(adapters, options, settings=settings_factory())

        assert service.list_channels() == ["email"]

    def test_fallback_provider_without_adapter_rejected(self, settings_factory):
        with pytest.raises(UnknownProviderError) as exc_info:
            NotifyService(
                adapters=[StubChannel("email", "sendgrid")],
                options=OrchestratorOptions(),
                settings=settings_factory(
                    channels={"email": ChannelOptions(provider="sendgrid", fallback="smtp")}
                ),
            )

        assert exc_info.value.key == "email:smtp"

    def test_event_channel_without_adapter_rejected(self, settings_factory):
        options = OrchestratorOptions().define_event(
            "order.placed", lambda e: e.use_channels("email", "push")
        )

        with pytest.raises(UnknownProviderError) as exc_info:
            NotifyService([StubChannel("email")], options, settings=settings_factory())

        assert exc_info.value.channel == "push"
        assert options.registry.frozen is False

    def test_fallback_chain_channel_without_adapter_rejected(self, settings_factory):
        options = OrchestratorOptions().define_event(
            "order.placed", lambda e: e.use_channels("email").with_fallback("sms")
        )

        with pytest.raises(UnknownProviderError):
            NotifyService([StubChannel("email")], options, settings=settings_factory())

    def test_registry_frozen_after_startup(self, settings_factory):
        options = OrchestratorOptions()
        NotifyService([StubChannel("email")], options, settings=settings_factory())

        with pytest.raises(ConfigurationError):
            options.define_event("late", lambda e: e.use_channels("email"))


@pytest.mark.unit
class TestNotifyServiceTrigger:
    """Tests for trigger() and bulk_trigger()."""

    @pytest.mark.asyncio
    async def test_trigger(self, settings_factory, hook_recorder):
        email = StubChannel("email")
        options = (
            OrchestratorOptions()
            .define_event("user.welcome", lambda e: e.use_channels("email"))
            .on_delivery(hook_recorder)
        )
        service = NotifyService([email], options, settings=settings_factory())

        report = await service.trigger("user.welcome", make_context())

        assert report.success is True
        assert email.calls == 1
        assert hook_recorder.channels == ["email"]

    @pytest.mark.asyncio
    async def test_mixed_case_channel_settings_route_to_provider(self, settings_factory):
        sendgrid = StubChannel("email", "sendgrid")
        options = OrchestratorOptions().define_event("e", lambda e: e.use_channels("email"))
        service = NotifyService(
            [sendgrid],
            options,
            settings=settings_factory(channels={"Email": ChannelOptions(provider="sendgrid")}),
        )

        report = await service.trigger("e", make_context())

        assert sendgrid.calls == 1
        assert report.outcomes["email"].provider == "sendgrid"

    @pytest.mark.asyncio
    async def test_trigger_unknown_event(self, settings_factory):
        service = NotifyService([StubChannel("email")], OrchestratorOptions(), settings=settings_factory())

        with pytest.raises(EventNotFoundError):
            await service.trigger("missing", make_context())

    @pytest.mark.asyncio
    async def test_global_retry_from_settings(self, settings_factory, no_backoff):
        email = StubChannel("email", outcomes=[False])
        options = OrchestratorOptions().define_event("e", lambda e: e.use_channels("email"))
        service = NotifyService(
            [email],
            options,
            settings=settings_factory(retry=RetryOptions(max_attempts=2, delay=0.5)),
        )

        await service.trigger("e", make_context())

        assert email.calls == 2
        assert no_backoff == [0.5]

    @pytest.mark.asyncio
    async def test_bulk_trigger_preserves_order_and_bounds_concurrency(self, settings_factory):
        email = StubChannel("email", delay=0.001)
        options = OrchestratorOptions().define_event("e", lambda e: e.use_channels("email"))
        service = NotifyService(
            [email],
            options,
            settings=settings_factory(bulk=BulkOptions(concurrency_limit=5, max_batch_size=20)),
        )
        contexts = [
            make_context(["email"], email=make_payload(to=f"user-{i}")) for i in range(50)
        ]

        bulk = await service.bulk_trigger("e", contexts)

        assert bulk.total == 50
        assert bulk.success_count == 50
        assert [r.results[0].recipient for r in bulk.reports] == [f"user-{i}" for i in range(50)]
        assert email.max_in_flight <= 5

    @pytest.mark.asyncio
    async def test_bulk_trigger_unknown_event_sends_nothing(self, settings_factory):
        email = StubChannel("email")
        service = NotifyService([email], OrchestratorOptions(), settings=settings_factory())

        with pytest.raises(EventNotFoundError):
            await service.bulk_trigger("missing", [make_context()])

        assert email.calls == 0

    @pytest.mark.asyncio
    async def test_bulk_trigger_cancelled(self, settings_factory):
        email = StubChannel("email")
        options = OrchestratorOptions().define_event("e", lambda e: e.use_channels("email"))
        service = NotifyService([email], options, settings=settings_factory())
        cancel_event = asyncio.Event()
        cancel_event.set()

        with pytest.raises(NotificationCancelledError):
            await service.bulk_trigger("e", [make_context()] * 3, cancel_event=cancel_event)

        assert email.calls == 0


@pytest.mark.unit
class TestNotifyServiceChannels:
    """Tests for direct channel access."""

    @pytest.mark.asyncio
    async def test_channel_returns_routing_channel(self, settings_factory, no_backoff):
        sendgrid = StubChannel("email", "sendgrid", outcomes=[False])
        smtp = StubChannel("email", "smtp")
        service = NotifyService(
            [sendgrid, smtp],
            OrchestratorOptions(),
            settings=settings_factory(
                channels={
                    "email": ChannelOptions(
                        provider="sendgrid",
                        fallback="smtp",
                        retry=RetryOptions(max_attempts=2, delay=0),
                    )
                }
            ),
        )

        channel = service.channel("Email")
        result = await channel.send(make_context().channels["email"])

        assert isinstance(channel, RoutingChannel)
        assert channel.channel_name == "email"
        assert sendgrid.calls == 2
        assert result.used_fallback is True

    def test_unknown_channel_rejected(self, settings_factory):
        service = NotifyService([StubChannel("email")], OrchestratorOptions(), settings=settings_factory())

        with pytest.raises(ConfigurationError):
            service.channel("fax")

    def test_list_channels(self, settings_factory):
        service = NotifyService(
            [StubChannel("email", "sendgrid"), StubChannel("slack"), StubChannel("sms", "twilio")],
            OrchestratorOptions(),
            settings=settings_factory(
                channels={
                    "email": ChannelOptions(provider="sendgrid"),
                    "sms": ChannelOptions(provider="twilio"),
                }
            ),
        )

        assert service.list_channels() == ["email", "slack", "sms"]
