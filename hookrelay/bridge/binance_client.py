"""
Binance Futures REST Client

PURPOSE: Issue HMAC-signed read requests against the Binance USDS-M futures
REST API and return the raw upstream JSON. Uses an httpx async client that is
created lazily and reused across requests.

CALLED BY:
    - hookrelay/api/routes_exchange.py
"""

import hashlib
import hmac
import time
from typing import Any, Dict, Optional
from urllib.parse import urlencode

import httpx

from hookrelay.utils.decorators import retry
from hookrelay.utils.logger import get_logger

logger = get_logger("bridge.binance")

ACCOUNT_PATH = "/fapi/v2/account"
USER_TRADES_PATH = "/fapi/v1/userTrades"


class BinanceAPIError(Exception):
    """
    PURPOSE: Raised when Binance rejects a request or cannot be reached.

    Attributes:
        status_code: Upstream HTTP status, or None for transport failures.
        code: Binance error code from the response body, if any.
        message: Human-readable error detail.
    """

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        code: Optional[int] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.code = code


class BinanceFuturesClient:
    """
    PURPOSE: Signed read-only access to the Binance futures REST API.

    Attributes:
        _api_key: API key sent in the X-MBX-APIKEY header.
        _api_secret: Secret used for HMAC-SHA256 request signatures.
        _base_url: REST base URL (e.g. "https://fapi.binance.com").
        _recv_window: Milliseconds a signed request stays valid.
        _client: httpx.AsyncClient instance, created on first use.
    """

    def __init__(
        self,
        api_key: str,
        api_secret: str,
        base_url: str = "https://fapi.binance.com",
        recv_window: int = 5000,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        """
        Args:
            api_key: Binance API key.
            api_secret: Binance API secret.
            base_url: REST base URL.
            recv_window: recvWindow parameter for signed requests.
            timeout: Total request timeout in seconds.
            transport: Optional httpx transport, e.g. httpx.MockTransport in tests.
        """
        self._api_key = api_key
        self._api_secret = api_secret
        self._base_url = base_url.rstrip("/")
        self._recv_window = recv_window
        self._timeout = timeout
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def _get_client(self) -> httpx.AsyncClient:
        """
        PURPOSE: Get or create the httpx async client.

        Returns:
            httpx.AsyncClient: Reusable HTTP client instance.
        """
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self._base_url,
                timeout=httpx.Timeout(self._timeout, connect=5.0),
                headers={"X-MBX-APIKEY": self._api_key},
                transport=self._transport,
            )
        return self._client

    async def aclose(self) -> None:
        """Close the underlying HTTP client if one was opened."""
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
        self._client = None

    def sign(self, query: str) -> str:
        """
        PURPOSE: Compute the HMAC-SHA256 signature of a query string.

        Args:
            query: URL-encoded query string, exactly as it will be sent.

        Returns:
            str: Lowercase hex digest.
        """
        return hmac.new(
            self._api_secret.encode("utf-8"),
            query.encode("utf-8"),
            hashlib.sha256,
        ).hexdigest()

    def build_signed_query(
        self,
        params: Optional[Dict[str, Any]] = None,
        timestamp_ms: Optional[int] = None,
    ) -> str:
        """
        PURPOSE: Build "<params>&recvWindow=..&timestamp=..&signature=.." for a signed endpoint.

        Args:
            params: Endpoint parameters, None values are skipped.
            timestamp_ms: Request time in epoch milliseconds (defaults to now).

        Returns:
            str: Query string ready to append after "?".
        """
        query_params = {k: v for k, v in (params or {}).items() if v is not None}
        query_params["recvWindow"] = self._recv_window
        query_params["timestamp"] = timestamp_ms if timestamp_ms is not None else int(time.time() * 1000)
        query = urlencode(query_params)
        return f"{query}&signature={self.sign(query)}"

    async def get_account(self) -> Any:
        """
        PURPOSE: Fetch futures account balances and positions.

        Returns:
            Any: Raw JSON of GET /fapi/v2/account.

        Raises:
            BinanceAPIError: On upstream rejection or transport failure.
        """
        return await self._signed_get(ACCOUNT_PATH)

    async def get_user_trades(self, symbol: str, limit: Optional[int] = None) -> Any:
        """
        PURPOSE: Fetch the account's trade history for one symbol.

        Args:
            symbol: Futures symbol, e.g. "BTCUSDT".
            limit: Optional number of trades (Binance default 500, max 1000).

        Returns:
            Any: Raw JSON of GET /fapi/v1/userTrades.

        Raises:
            BinanceAPIError: On upstream rejection or transport failure.
        """
        return await self._signed_get(USER_TRADES_PATH, {"symbol": symbol, "limit": limit})

    async def _signed_get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        try:
            response = await self._send_signed_get(path, params)
        except httpx.TransportError as e:
            logger.error(
                "binance_request_failed",
                path=path,
                error=str(e),
                exception_type=type(e).__name__,
            )
            raise BinanceAPIError(f"Binance request failed: {type(e).__name__}: {e}") from e

        if response.is_error:
            raise self._error_from_response(path, response)

        try:
            return response.json()
        except ValueError as e:
            raise BinanceAPIError(
                "Binance returned a non-JSON response",
                status_code=response.status_code,
            ) from e

    @retry(max_retries=2, delay=0.5, backoff=2.0, exceptions=(httpx.TransportError,))
    async def _send_signed_get(self, path: str, params: Optional[Dict[str, Any]]) -> httpx.Response:
        # Signed fresh on every attempt so retries carry a current timestamp
        client = await self._get_client()
        query = self.build_signed_query(params)
        response = await client.get(f"{path}?{query}")
        logger.debug("binance_response", path=path, status_code=response.status_code)
        return response

    def _error_from_response(self, path: str, response: httpx.Response) -> BinanceAPIError:
        """Map a Binance error response ({"code": -2015, "msg": "..."}) to BinanceAPIError."""
        code = None
        message = response.text or response.reason_phrase
        try:
            body = response.json()
        except ValueError:
            body = None
        if isinstance(body, dict):
            code = body.get("code")
            message = body.get("msg") or message

        logger.warning(
            "binance_request_rejected",
            path=path,
            status_code=response.status_code,
            code=code,
            error=message,
        )
        return BinanceAPIError(message, status_code=response.status_code, code=code)
