"""Unit tests for notifier configuration and startup validation."""

import pytest

from notifier.configuration import (
    NotifySettings,
    Settings,
    get_settings,
    provider_key,
    validate_channel_options,
)
from notifier.errors import UnknownProviderError
from notifier.options import ChannelOptions, NamedProviderDefinition, RetryOptions


@pytest.mark.unit
class TestNotifySettings:
    """Tests for NotifySettings environment loading."""

    def test_defaults(self):
        settings = NotifySettings()

        assert settings.retry is None
        assert settings.bulk.concurrency_limit == 10
        assert settings.channels == {}
        assert settings.channel_options("email") == ChannelOptions()

    def test_nested_env_vars(self, monkeypatch):
        monkeypatch.setenv("NOTIFY_RETRY__MAX_ATTEMPTS", "4")
        monkeypatch.setenv("NOTIFY_RETRY__DELAY", "0.25")
        monkeypatch.setenv("NOTIFY_BULK__CONCURRENCY_LIMIT", "25")

        settings = NotifySettings()

        assert settings.retry == RetryOptions(max_attempts=4, delay=0.25)
        assert settings.bulk.concurrency_limit == 25
        assert settings.bulk.max_batch_size == 1000

    def test_channels_from_json(self, monkeypatch):
        monkeypatch.setenv(
            "NOTIFY_CHANNELS",
            '{"email": {"provider": "sendgrid", "fallback": "smtp",'
            ' "providers": {"transactional": {"type": "postmark"}}}}',
        )

        settings = NotifySettings()

        email = settings.channel_options("email")
        assert email.provider == "sendgrid"
        assert email.fallback == "smtp"
        assert email.providers["transactional"].type == "postmark"

    def test_channel_names_are_lowercased(self, monkeypatch):
        monkeypatch.setenv(
            "NOTIFY_CHANNELS",
            '{"Email": {"provider": "sendgrid"}, " SMS ": {"provider": "twilio"}}',
        )

        settings = NotifySettings()

        assert sorted(settings.channels) == ["email", "sms"]
        assert settings.channel_options("EMAIL").provider == "sendgrid"

    def test_channel_names_lowercased_from_init(self):
        settings = NotifySettings(channels={"Push": ChannelOptions(provider="fcm")})

        assert list(settings.channels) == ["push"]


@pytest.mark.unit
class TestSettings:
    """Tests for the Settings aggregator."""

    def test_notify_section_is_created(self):
        settings = Settings()
        assert isinstance(settings.notify, NotifySettings)

    def test_is_production(self, monkeypatch):
        monkeypatch.setenv("ENVIRONMENT", "production")
        assert Settings().is_production is True

    def test_get_settings_is_cached(self):
        assert get_settings() is get_settings()


@pytest.mark.unit
class TestProviderKey:
    """Tests for provider_key()."""

    def test_with_provider(self):
        assert provider_key("email", "sendgrid") == "email:sendgrid"

    @pytest.mark.parametrize("provider", [None, ""])
    def test_bare_channel(self, provider):
        assert provider_key("slack", provider) == "slack"


@pytest.mark.unit
class TestValidateChannelOptions:
    """Tests for fail-fast provider validation."""

    REGISTERED = {"email:sendgrid", "email:smtp", "email:postmark", "slack"}

    def _validate(self, channels):
        validate_channel_options(channels, self.REGISTERED.__contains__)

    def test_valid_configuration(self):
        self._validate(
            {
                "email": ChannelOptions(
                    provider="sendgrid",
                    fallback="smtp",
                    providers={
                        "transactional": NamedProviderDefinition(
                            type="postmark", fallback="sendgrid"
                        )
                    },
                ),
                "slack": ChannelOptions(),
            }
        )

    def test_unknown_active_provider(self):
        with pytest.raises(UnknownProviderError) as exc_info:
            self._validate({"email": ChannelOptions(provider="mailgun")})

        assert exc_info.value.key == "email:mailgun"
        assert exc_info.value.field == "provider"

    def test_unknown_fallback(self):
        with pytest.raises(UnknownProviderError) as exc_info:
            self._validate({"email": ChannelOptions(provider="sendgrid", fallback="ses")})

        assert exc_info.value.key == "email:ses"
        assert exc_info.value.field == "fallback"

    def test_unknown_named_type(self):
        with pytest.raises(UnknownProviderError) as exc_info:
            self._validate(
                {
                    "email": ChannelOptions(
                        provider="sendgrid",
                        providers={"bulk": NamedProviderDefinition(type="resend")},
                    )
                }
            )

        assert exc_info.value.key == "email:resend"

    def test_unknown_named_fallback(self):
        with pytest.raises(UnknownProviderError) as exc_info:
            self._validate(
                {
                    "email": ChannelOptions(
                        provider="sendgrid",
                        providers={
                            "bulk": NamedProviderDefinition(type="postmark", fallback="ses")
                        },
                    )
                }
            )

        assert exc_info.value.key == "email:ses"

    def test_unconfigured_bare_channel_without_adapter(self):
        with pytest.raises(UnknownProviderError) as exc_info:
            self._validate({"teams": ChannelOptions()})

        assert exc_info.value.key == "teams"
