"""
PURPOSE: FastAPI dependencies exposing the objects built by create_app().

The processor, settings and exchange client live on app.state so that every
request handler receives the explicitly constructed instances instead of
module-level globals.
"""

from fastapi import Request

from hookrelay.bridge.binance_client import BinanceFuturesClient
from hookrelay.config.settings import Settings
from hookrelay.webhook.processor import WebhookProcessor


def get_processor(request: Request) -> WebhookProcessor:
    """Return the app's WebhookProcessor."""
    return request.app.state.processor


def get_app_settings(request: Request) -> Settings:
    """Return the Settings instance the app was created with."""
    return request.app.state.settings


def get_exchange_client(request: Request) -> BinanceFuturesClient:
    """Return the app's Binance futures client."""
    return request.app.state.exchange_client


def client_address(request: Request) -> str:
    """Best-effort textual address of the caller."""
    if request.client is not None and request.client.host:
        return request.client.host
    return "unknown"
