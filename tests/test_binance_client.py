"""
PURPOSE: Tests for the Binance futures client and the /binance proxy routes.

Covers:
- HMAC-SHA256 query signing
- Successful signed GETs through httpx.MockTransport
- Mapping of upstream rejections and transport failures to BinanceAPIError
- 503 / 502 / 200 responses of the proxy routes
- Per-app rate limit on the proxy routes
"""

import asyncio
import hashlib
import hmac
from urllib.parse import parse_qs, urlsplit

import httpx
import pytest
from fastapi.testclient import TestClient

from hookrelay.bridge.binance_client import BinanceAPIError, BinanceFuturesClient
from hookrelay.config.settings import Settings
from hookrelay.main import create_app

API_KEY = "test-api-key"
API_SECRET = "test-api-secret"


def make_client(handler) -> BinanceFuturesClient:
    return BinanceFuturesClient(
        api_key=API_KEY,
        api_secret=API_SECRET,
        base_url="https://binance.invalid",
        transport=httpx.MockTransport(handler),
    )


class TestSigning:
    """Test query construction and signatures."""

    def test_signature_is_hmac_sha256_of_query(self):
        client = BinanceFuturesClient(API_KEY, API_SECRET)

        query = client.build_signed_query({"symbol": "BTCUSDT"}, timestamp_ms=1700000000000)

        unsigned, signature = query.rsplit("&signature=", 1)
        assert unsigned == "symbol=BTCUSDT&recvWindow=5000&timestamp=1700000000000"
        expected = hmac.new(API_SECRET.encode(), unsigned.encode(), hashlib.sha256).hexdigest()
        assert signature == expected

    def test_none_params_are_skipped(self):
        client = BinanceFuturesClient(API_KEY, API_SECRET, recv_window=1000)

        query = client.build_signed_query({"symbol": "ETHUSDT", "limit": None}, timestamp_ms=1)

        assert query.startswith("symbol=ETHUSDT&recvWindow=1000&timestamp=1&signature=")
        assert "limit" not in query


class TestSignedRequests:
    """Test requests issued through a mock transport."""

    async def test_get_account(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["path"] = request.url.path
            seen["api_key"] = request.headers.get("X-MBX-APIKEY")
            seen["params"] = parse_qs(urlsplit(str(request.url)).query)
            return httpx.Response(200, json={"totalWalletBalance": "100.0"})

        client = make_client(handler)
        try:
            data = await client.get_account()
        finally:
            await client.aclose()

        assert data == {"totalWalletBalance": "100.0"}
        assert seen["path"] == "/fapi/v2/account"
        assert seen["api_key"] == API_KEY
        assert "signature" in seen["params"]
        assert "timestamp" in seen["params"]

    async def test_get_user_trades(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["path"] = request.url.path
            seen["params"] = parse_qs(urlsplit(str(request.url)).query)
            return httpx.Response(200, json=[{"id": 1, "symbol": "BTCUSDT"}])

        client = make_client(handler)
        try:
            data = await client.get_user_trades("BTCUSDT", limit=10)
        finally:
            await client.aclose()

        assert data == [{"id": 1, "symbol": "BTCUSDT"}]
        assert seen["path"] == "/fapi/v1/userTrades"
        assert seen["params"]["symbol"] == ["BTCUSDT"]
        assert seen["params"]["limit"] == ["10"]

    async def test_upstream_rejection(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(401, json={"code": -2015, "msg": "Invalid API-key, IP, or permissions for action."})

        client = make_client(handler)
        try:
            with pytest.raises(BinanceAPIError) as exc_info:
                await client.get_account()
        finally:
            await client.aclose()

        assert exc_info.value.status_code == 401
        assert exc_info.value.code == -2015
        assert "Invalid API-key" in exc_info.value.message

    async def test_non_json_response(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, text="<html>maintenance</html>")

        client = make_client(handler)
        try:
            with pytest.raises(BinanceAPIError) as exc_info:
                await client.get_account()
        finally:
            await client.aclose()

        assert exc_info.value.status_code == 200
        assert exc_info.value.code is None

    async def test_transport_failure_is_retried_then_raised(self, monkeypatch):
        monkeypatch.setattr(asyncio, "sleep", _no_sleep)
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            raise httpx.ConnectError("connection refused", request=request)

        client = make_client(handler)
        try:
            with pytest.raises(BinanceAPIError) as exc_info:
                await client.get_account()
        finally:
            await client.aclose()

        assert exc_info.value.status_code is None
        assert len(calls) == 3


async def _no_sleep(_seconds):
    return None


class TestProxyRoutes:
    """Test the /binance/futures routes."""

    def test_missing_credentials_returns_503(self):
        app = create_app(Settings(APP_ENV="test", BINANCE_API_KEY="", BINANCE_API_SECRET=""))

        with TestClient(app) as client:
            response = client.get("/binance/futures/account")

        assert response.status_code == 503
        assert response.json()["success"] is False

    def test_account_success(self, app):
        app.state.exchange_client = make_client(
            lambda request: httpx.Response(200, json={"assets": []})
        )

        with TestClient(app) as client:
            response = client.get("/binance/futures/account")

        assert response.status_code == 200
        assert response.json() == {"success": True, "data": {"assets": []}}

    def test_trades_symbol_is_upper_cased(self, app):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["params"] = parse_qs(urlsplit(str(request.url)).query)
            return httpx.Response(200, json=[])

        app.state.exchange_client = make_client(handler)

        with TestClient(app) as client:
            response = client.get("/binance/futures/trades", params={"symbol": "ethusdt", "limit": 5})

        assert response.status_code == 200
        assert seen["params"]["symbol"] == ["ETHUSDT"]
        assert seen["params"]["limit"] == ["5"]

    def test_upstream_error_returns_502(self, app):
        app.state.exchange_client = make_client(
            lambda request: httpx.Response(400, json={"code": -1121, "msg": "Invalid symbol."})
        )

        with TestClient(app) as client:
            response = client.get("/binance/futures/trades", params={"symbol": "NOPE"})

        assert response.status_code == 502
        assert response.json() == {
            "success": False,
            "error": "Invalid symbol.",
            "status": 400,
            "code": -1121,
        }

    def test_invalid_limit_is_rejected(self, client):
        response = client.get("/binance/futures/trades", params={"limit": 0})

        assert response.status_code == 422
        assert response.json()["error"] == "Request validation failed"

    def test_rate_limit_comes_from_app_settings(self, test_settings):
        app = create_app(test_settings.model_copy(update={"EXCHANGE_RATE_LIMIT": "2/minute"}))
        app.state.exchange_client = make_client(
            lambda request: httpx.Response(200, json={"assets": []})
        )

        with TestClient(app) as client:
            statuses = [client.get("/binance/futures/account").status_code for _ in range(3)]

        assert statuses == [200, 200, 429]
