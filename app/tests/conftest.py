"""Shared fixtures for notifier tests."""

from typing import Dict, List, Optional

import pytest

from notifier.configuration import NotifySettings, Settings, get_settings
from notifier.logging import clear_dispatch_context
from notifier.models import NotifyResult
from notifier.options import BulkOptions, ChannelOptions, RetryOptions
from tests.factories import StubChannel, make_context, make_payload, make_user


@pytest.fixture(autouse=True)
def _isolate_environment(monkeypatch):
    """Keep tests independent of the developer's NOTIFY_* environment."""
    for name in ("NOTIFY_RETRY", "NOTIFY_CHANNELS", "NOTIFY_BULK"):
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
    clear_dispatch_context()


@pytest.fixture
def settings_factory():
    """Factory for Settings with an explicit notify section.

    Example:
        settings = settings_factory(
            channels={"email": ChannelOptions(provider="sendgrid")},
            retry=RetryOptions(max_attempts=2, delay=0),
        )
    """

    def _factory(
        channels: Optional[Dict[str, ChannelOptions]] = None,
        retry: Optional[RetryOptions] = None,
        bulk: Optional[BulkOptions] = None,
    ) -> Settings:
        notify = NotifySettings(
            channels=channels or {},
            retry=retry,
            bulk=bulk or BulkOptions(),
        )
        return Settings(notify=notify)

    return _factory


@pytest.fixture
def stub_channel_factory():
    """Factory for scripted StubChannel adapters."""
    return StubChannel


@pytest.fixture
def user_factory():
    return make_user


@pytest.fixture
def payload_factory():
    return make_payload


@pytest.fixture
def context_factory():
    return make_context


@pytest.fixture
def hook_recorder():
    """Async delivery hook that records every result it receives.

    Example:
        options.on_delivery(hook_recorder)
        ...
        assert [r.channel for r in hook_recorder.results] == ["email"]
    """

    class _Recorder:
        def __init__(self):
            self.results: List[NotifyResult] = []

        async def __call__(self, result: NotifyResult) -> None:
            self.results.append(result)

        @property
        def channels(self) -> List[str]:
            return [r.channel for r in self.results]

    return _Recorder()


@pytest.fixture
def no_backoff(monkeypatch):
    """Replace retry backoff waits with a recorder; returns the waited delays."""
    waits: List[float] = []

    async def _record(delay, cancel_event):
        waits.append(delay)

    monkeypatch.setattr("notifier.resilience.retry.backoff_wait", _record)
    return waits
