"""
PURPOSE: API router initialization and exports for hookrelay.

Aggregates the /api routers (message history, stats) into a single
api_router. Routes that live outside /api (webhook ingestion, health,
dashboard, Binance proxy and the WebSocket) are exported individually and
included by the application factory.
"""

from fastapi import APIRouter

from hookrelay.api.routes_exchange import router as exchange_router
from hookrelay.api.routes_messages import router as messages_router
from hookrelay.api.routes_system import router as system_router
from hookrelay.api.routes_webhook import router as webhook_router
from hookrelay.api.routes_ws import router as ws_router

# Create the main API router
api_router = APIRouter(prefix="/api", tags=["api"])

# Include all sub-routers
api_router.include_router(messages_router, tags=["messages"])

__all__ = [
    "api_router",
    "exchange_router",
    "system_router",
    "webhook_router",
    "ws_router",
]
