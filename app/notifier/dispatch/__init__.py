"""Dispatch engine.

Exports:
    ProviderRouter: Adapter selection with named routing and provider fallback
    Route: Resolved primary/fallback adapter keys
    ChannelDispatcher: Event dispatch with conditions, hooks and fallback chains
"""

from notifier.dispatch.router import ProviderRouter, Route
from notifier.dispatch.dispatcher import ChannelDispatcher

__all__ = [
    "ProviderRouter",
    "Route",
    "ChannelDispatcher",
]
