"""
PURPOSE: Pytest fixtures for hookrelay tests.

Provides shared objects including:
- Test configuration settings
- Fresh EventStore, BroadcastHub and WebhookProcessor instances
- A FastAPI app and TestClient sharing one event loop for HTTP and WebSocket calls
- Sample TradingView alert payloads
"""

import pytest
from fastapi.testclient import TestClient

from hookrelay.config.settings import Settings
from hookrelay.events.hub import BroadcastHub
from hookrelay.main import create_app
from hookrelay.webhook.ids import MessageIdGenerator
from hookrelay.webhook.processor import WebhookProcessor
from hookrelay.webhook.store import EventStore


@pytest.fixture
def test_settings():
    """
    PURPOSE: Settings override with test values.

    Provides a Settings object with:
    - Debug logging
    - Default buffer capacity (100)
    - Small subscriber queues so backpressure is easy to trigger
    - Dummy Binance credentials pointing at an unroutable host

    Returns:
        Settings: Configuration object with test values.
    """
    return Settings(
        APP_ENV="test",
        DEBUG=True,
        LOG_LEVEL="DEBUG",
        MAX_MESSAGES=100,
        SUBSCRIBER_QUEUE_SIZE=8,
        BINANCE_API_KEY="test-api-key",
        BINANCE_API_SECRET="test-api-secret",
        BINANCE_BASE_URL="https://binance.invalid",
    )


@pytest.fixture
def store():
    """EventStore with a fixed id salt for readable ids."""
    return EventStore(capacity=100, id_generator=MessageIdGenerator(salt="test"))


@pytest.fixture
def hub():
    """BroadcastHub with small per-subscriber queues."""
    return BroadcastHub(queue_size=4)


@pytest.fixture
def processor(store, hub):
    """WebhookProcessor wired to the store and hub fixtures."""
    return WebhookProcessor(store=store, hub=hub)


@pytest.fixture
def app(test_settings):
    """
    PURPOSE: Fresh FastAPI application per test.

    Each app owns its own processor, so tests never share message history.
    """
    return create_app(test_settings)


@pytest.fixture
def client(app):
    """
    PURPOSE: TestClient entered as a context manager.

    Entering runs the lifespan and makes HTTP requests and WebSocket sessions
    share one event loop, the same way uvicorn serves them.
    """
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def sample_alert():
    """TradingView-style alert carrying both a directive and a price."""
    return {"action": "BUY", "symbol": "BTCUSDT", "price": 65000}
