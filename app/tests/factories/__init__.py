"""Test data factories for deterministic test data generation."""

from tests.factories.notifications import (
    BatchStubChannel,
    StubChannel,
    make_context,
    make_payload,
    make_payloads,
    make_user,
)

__all__ = [
    "BatchStubChannel",
    "StubChannel",
    "make_context",
    "make_payload",
    "make_payloads",
    "make_user",
]
