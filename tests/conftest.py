"""
Pytest configuration and fixtures for testing.

This module provides shared fixtures for the connection registry, the
message router and in-memory connections.
"""

import os
import uuid

import pytest

# Set environment variables for testing before importing relay modules
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("LOG_LEVEL", "DEBUG")

from control_relay.managers.connection_registry import (  # noqa: E402
    ConnectionRegistry,
)
from control_relay.routing import MessageRouter  # noqa: E402
from control_relay.schemas.connection import ConnectionSession  # noqa: E402
from tests.mocks.channel_mocks import FakeChannel  # noqa: E402


@pytest.fixture
def registry():
    """
    Provides an empty connection registry.

    Returns:
        ConnectionRegistry: Registry with no masters or clients
    """
    return ConnectionRegistry()


@pytest.fixture
def router(registry):
    """
    Provides a message router bound to the registry fixture.

    Returns:
        MessageRouter: Router with the full envelope handler table
    """
    return MessageRouter(registry)


@pytest.fixture
def make_session():
    """
    Provides a factory for unregistered connections backed by a FakeChannel.

    Returns:
        Callable[[str], ConnectionSession]: Factory taking a channel name
    """

    def _make_session(name: str = "conn") -> ConnectionSession:
        return ConnectionSession(
            connection_id=f"{name}-{uuid.uuid4().hex[:8]}",
            channel=FakeChannel(name),
        )

    return _make_session
