"""
Pytest configuration and shared fixtures for the Versifi client tests.

Provides test-level logging, credentials and a fake transport factory so the
supervisor can be driven without a network.
"""

import os

import pytest

# Configure test environment
os.environ['ENVIRONMENT'] = 'test'

from versifi.config import Credentials, WebSocketConfig
from versifi.infrastructure.logging import get_logger
from versifi.infrastructure.logging.factory import LoggerFactory
from versifi.infrastructure.logging.structs import (
    LoggingConfig, ConsoleBackendConfig, RouterConfig
)

from tests.fakes import FakeConnector, FakeWebSocket

TEST_API_KEY = "test-api-key"
TEST_SECRET = "test-secret"


@pytest.fixture(scope="session", autouse=True)
def setup_test_logging():
    """Set up test-appropriate logging configuration."""
    LoggerFactory._cached_loggers.clear()
    LoggerFactory._default_config = LoggingConfig(
        environment="test",
        console=ConsoleBackendConfig(enabled=True, min_level="WARNING", color=False),
        router=RouterConfig(default_backends=["console"])
    )
    yield
    LoggerFactory.clear_cache()


@pytest.fixture
def logger():
    return get_logger("versifi.tests")


@pytest.fixture
def credentials():
    return Credentials(api_key=TEST_API_KEY, secret_key=TEST_SECRET)


@pytest.fixture
def ws_config():
    """Fast timings; keepalive off so tests control every outbound frame."""
    return WebSocketConfig(
        url="ws://fake.local/v1/ws",
        keepalive=False,
        auto_reconnect=False,
        reconnect_delay=0.01,
        auth_timeout=0.5,
        close_timeout=0.5,
    )


@pytest.fixture
def fake_ws():
    return FakeWebSocket()


@pytest.fixture
def connector(fake_ws):
    return FakeConnector(fake_ws)
