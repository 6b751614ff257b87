"""Unit tests for ProviderRouter.

Tests cover:
- Route resolution (default, named, bare channel, unknown named provider)
- Within-channel provider fallback
- Result stamping
- Unresolvable adapter keys
"""

import pytest

from notifier.channels import ChannelRegistry
from notifier.dispatch import ProviderRouter, Route
from notifier.options import ChannelOptions, NamedProviderDefinition, RetryOptions
from tests.factories import StubChannel, make_payload


EMAIL_OPTIONS = ChannelOptions(
    provider="sendgrid",
    fallback="smtp",
    providers={
        "backup": NamedProviderDefinition(type="postmark", fallback="mailgun"),
        "solo": NamedProviderDefinition(type="postmark"),
    },
)


def _router(*adapters, channels=None):
    return ProviderRouter(ChannelRegistry(adapters), channels or {"email": EMAIL_OPTIONS})


@pytest.mark.unit
class TestResolve:
    """Tests for ProviderRouter.resolve()."""

    def test_default_provider_with_channel_fallback(self):
        route = _router().resolve("email", make_payload())
        assert route == Route("email:sendgrid", "email:smtp", None)

    def test_named_provider_uses_its_own_fallback(self):
        route = _router().resolve("email", make_payload(provider="backup"))
        assert route == Route("email:postmark", "email:mailgun", "backup")

    def test_named_provider_without_fallback_has_none(self):
        route = _router().resolve("email", make_payload(provider="solo"))
        assert route == Route("email:postmark", None, "solo")

    def test_unknown_named_provider_uses_default_route(self):
        route = _router().resolve("email", make_payload(provider="nope"))
        assert route == Route("email:sendgrid", "email:smtp", None)

    def test_unconfigured_channel_uses_bare_key(self):
        route = _router().resolve("slack", make_payload())
        assert route == Route("slack", None, None)


@pytest.mark.unit
class TestRoute:
    """Tests for ProviderRouter.route()."""

    @pytest.mark.asyncio
    async def test_primary_success(self, no_backoff):
        primary = StubChannel("email", "sendgrid")
        fallback = StubChannel("email", "smtp")

        result = await _router(primary, fallback).route(
            "email", make_payload(to="a@example.com")
        )

        assert result.success is True
        assert result.provider == "sendgrid"
        assert result.used_fallback is False
        assert result.recipient == "a@example.com"
        assert result.channel == "email"
        assert fallback.calls == 0

    @pytest.mark.asyncio
    async def test_fallback_after_primary_exhausts_retries(self, no_backoff):
        primary = StubChannel("email", "sendgrid", outcomes=[False])
        fallback = StubChannel("email", "smtp")

        result = await _router(primary, fallback).route(
            "email", make_payload(), retry=RetryOptions(max_attempts=3, delay=0.1)
        )

        assert primary.calls == 3
        assert fallback.calls == 1
        assert result.success is True
        assert result.used_fallback is True
        assert result.provider == "smtp"

    @pytest.mark.asyncio
    async def test_fallback_uses_same_retry_options(self, no_backoff):
        primary = StubChannel("email", "sendgrid", outcomes=[False])
        fallback = StubChannel("email", "smtp", outcomes=[False, True])

        result = await _router(primary, fallback).route(
            "email", make_payload(), retry=RetryOptions(max_attempts=2, delay=0)
        )

        assert primary.calls == 2
        assert fallback.calls == 2
        assert result.success is True
        assert result.used_fallback is True

    @pytest.mark.asyncio
    async def test_both_fail_returns_fallback_failure(self, no_backoff):
        primary = StubChannel("email", "sendgrid", outcomes=[False], error="sendgrid down")
        fallback = StubChannel("email", "smtp", outcomes=[False], error="smtp down")

        result = await _router(primary, fallback).route("email", make_payload())

        assert result.success is False
        assert result.error == "smtp down"
        assert result.provider == "smtp"
        assert result.used_fallback is False

    @pytest.mark.asyncio
    async def test_named_provider_falls_back_to_named_fallback(self, no_backoff):
        default = StubChannel("email", "sendgrid")
        channel_fallback = StubChannel("email", "smtp")
        named = StubChannel("email", "postmark", outcomes=[False])
        named_fallback = StubChannel("email", "mailgun")

        result = await _router(default, channel_fallback, named, named_fallback).route(
            "email", make_payload(provider="backup")
        )

        assert named.calls == 1
        assert named_fallback.calls == 1
        assert default.calls == 0
        assert channel_fallback.calls == 0
        assert result.named_provider == "backup"
        assert result.used_fallback is True
        assert result.provider == "mailgun"

    @pytest.mark.asyncio
    async def test_fallback_same_as_primary_is_not_retried(self, no_backoff):
        primary = StubChannel("email", "sendgrid", outcomes=[False])
        router = _router(
            primary, channels={"email": ChannelOptions(provider="sendgrid", fallback="sendgrid")}
        )

        result = await router.route("email", make_payload())

        assert primary.calls == 1
        assert result.success is False

    @pytest.mark.asyncio
    async def test_adapter_exception_becomes_failure(self, no_backoff):
        primary = StubChannel("slack", outcomes=[RuntimeError("socket closed")])

        result = await _router(primary).route("slack", make_payload())

        assert result.success is False
        assert result.error == "socket closed"
        assert result.channel == "slack"
        assert result.provider == "slack"

    @pytest.mark.asyncio
    async def test_missing_adapter_is_failure_not_exception(self, no_backoff):
        result = await _router().route("email", make_payload(to="x@example.com"))

        assert result.success is False
        assert result.error.startswith("No adapter registered")
        assert result.recipient == "x@example.com"
