"""
PURPOSE: Rate limiting configuration for the hookrelay API using slowapi.

Provides a shared Limiter instance keyed by client IP address. Only the
Binance proxy routes are limited; webhook ingestion is never throttled so
alert bursts are not rejected.

The exchange limit is resolved on every request through exchange_limit(),
so the value create_app() receives in its Settings takes effect.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address

from hookrelay.config.settings import settings

# Shared limiter instance, keyed by client IP
limiter = Limiter(key_func=get_remote_address)

# ── Rate limit tiers ──────────────────────────────────────────
_exchange_limit: str = settings.EXCHANGE_RATE_LIMIT


def configure_exchange_limit(limit: str) -> None:
    """
    PURPOSE: Set the limit string applied to the Binance proxy routes.

    CALLED BY: hookrelay.main.create_app()

    Args:
        limit: slowapi limit expression, e.g. "60/minute".
    """
    global _exchange_limit
    _exchange_limit = limit


def exchange_limit() -> str:
    """Current limit for the Binance proxy routes, read by slowapi per request."""
    return _exchange_limit
