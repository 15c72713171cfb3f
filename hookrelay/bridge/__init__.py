"""
Exchange Bridge Module

PURPOSE: Provides the signed Binance futures REST client used by the
/binance proxy routes.

Exports:
    - BinanceFuturesClient: HMAC-signed read client for the futures API
    - BinanceAPIError: Upstream rejection or transport failure
    - create_binance_client: Factory building a client from Settings
"""

from hookrelay.bridge.binance_client import BinanceAPIError, BinanceFuturesClient
from hookrelay.config.settings import Settings


def create_binance_client(settings: Settings) -> BinanceFuturesClient:
    """
    PURPOSE: Build a BinanceFuturesClient from application settings.

    CALLED BY: hookrelay.main.create_app()

    Args:
        settings: Application settings carrying BINANCE_* values.

    Returns:
        BinanceFuturesClient: Client ready for use (credentials may be blank;
            routes check Settings.has_binance_credentials() first).
    """
    return BinanceFuturesClient(
        api_key=settings.BINANCE_API_KEY,
        api_secret=settings.BINANCE_API_SECRET,
        base_url=settings.BINANCE_BASE_URL,
        recv_window=settings.BINANCE_RECV_WINDOW,
        timeout=settings.BINANCE_TIMEOUT,
    )


__all__ = ["BinanceAPIError", "BinanceFuturesClient", "create_binance_client"]
