"""
PURPOSE: Binance futures proxy routes for hookrelay.

Exposes signed, read-only Binance USDS-M futures endpoints so the dashboard
can show account state next to incoming alerts. Upstream failures never touch
the webhook pipeline; they are returned as structured error payloads.

CALLED BY:
    - Dashboard / operators (GET /binance/futures/account, /binance/futures/trades)
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, Request, status
from fastapi.responses import JSONResponse

from hookrelay.api.deps import get_app_settings, get_exchange_client
from hookrelay.bridge.binance_client import BinanceAPIError, BinanceFuturesClient
from hookrelay.config.settings import Settings
from hookrelay.core.rate_limit import exchange_limit, limiter
from hookrelay.utils.logger import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/binance", tags=["exchange"])

DEFAULT_SYMBOL = "BTCUSDT"


# ════════════════════════════════════════════════════════════════
# Internal Helpers
# ════════════════════════════════════════════════════════════════


def _credentials_missing() -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"success": False, "error": "Binance API credentials are not configured"},
    )


def _upstream_failed(action: str, error: BinanceAPIError) -> JSONResponse:
    """
    PURPOSE: Turn a BinanceAPIError into a 502 structured error payload.

    Args:
        action: Human-readable description of the failed call.
        error: Error raised by BinanceFuturesClient.

    Returns:
        JSONResponse: {"success": false, "error", "status", "code"}
    """
    logger.warning(
        "exchange_route_failed",
        action=action,
        upstream_status=error.status_code,
        code=error.code,
        error=error.message,
    )
    return JSONResponse(
        status_code=status.HTTP_502_BAD_GATEWAY,
        content={
            "success": False,
            "error": error.message,
            "status": error.status_code,
            "code": error.code,
        },
    )


# ════════════════════════════════════════════════════════════════
# Routes
# ════════════════════════════════════════════════════════════════


@router.get("/futures/account")
@limiter.limit(exchange_limit)
async def futures_account(
    request: Request,
    app_settings: Settings = Depends(get_app_settings),
    client: BinanceFuturesClient = Depends(get_exchange_client),
):
    """
    PURPOSE: Return the raw Binance futures account (balances, positions).

    Returns:
        dict: {success: true, data: <upstream JSON>}

    Raises:
        HTTP 429: Rate limit exceeded.
        HTTP 502 / 503: Structured error payload on upstream failure / missing credentials.
    """
    if not app_settings.has_binance_credentials():
        return _credentials_missing()

    try:
        data = await client.get_account()
    except BinanceAPIError as e:
        return _upstream_failed("fetch futures account", e)
    return {"success": True, "data": data}


@router.get("/futures/trades")
@limiter.limit(exchange_limit)
async def futures_trades(
    request: Request,
    symbol: str = Query(DEFAULT_SYMBOL, min_length=1, max_length=32),
    limit: Optional[int] = Query(None, ge=1, le=1000),
    app_settings: Settings = Depends(get_app_settings),
    client: BinanceFuturesClient = Depends(get_exchange_client),
):
    """
    PURPOSE: Return the account's futures trades for one symbol.

    Args:
        symbol: Futures symbol (default BTCUSDT), upper-cased before sending.
        limit: Optional number of trades (1-1000).

    Returns:
        dict: {success: true, data: <upstream JSON>}
    """
    if not app_settings.has_binance_credentials():
        return _credentials_missing()

    try:
        data = await client.get_user_trades(symbol.strip().upper(), limit=limit)
    except BinanceAPIError as e:
        return _upstream_failed("fetch futures trades", e)
    return {"success": True, "data": data}
