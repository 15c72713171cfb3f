"""
PURPOSE: Main FastAPI application factory and lifecycle management for hookrelay.

Initializes the FastAPI application with:
- The webhook processor (message store + broadcast hub) and Binance client
- All routers (webhook, messages, system, Binance proxy, websocket)
- CORS middleware
- Exception handlers for common errors
- Startup/shutdown events (logging setup, subscriber and client cleanup)
- Metadata from version.json
"""

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from hookrelay.api import api_router, exchange_router, system_router, webhook_router, ws_router
from hookrelay.bridge import create_binance_client
from hookrelay.config.settings import Settings, settings as default_settings
from hookrelay.core.rate_limit import configure_exchange_limit, limiter
from hookrelay.events.hub import BroadcastHub
from hookrelay.utils.logger import get_logger, setup_logging
from hookrelay.version import get_version
from hookrelay.webhook.processor import WebhookProcessor
from hookrelay.webhook.store import EventStore


logger = get_logger(__name__)


# ════════════════════════════════════════════════════════════════
# Lifecycle Events
# ════════════════════════════════════════════════════════════════


async def on_startup(app: FastAPI) -> None:
    """
    PURPOSE: Execute startup tasks.

    CALLED BY: FastAPI lifespan startup

    Tasks:
        1. Setup logging with configured level
        2. Log buffer sizing and exchange proxy availability
    """
    app_settings: Settings = app.state.settings
    setup_logging(app_settings.LOG_LEVEL)
    logger.info(
        "application_startup_complete",
        version=app.version,
        log_level=app_settings.LOG_LEVEL,
        max_messages=app.state.processor.store.capacity,
        subscriber_queue_size=app_settings.SUBSCRIBER_QUEUE_SIZE,
        binance_configured=app_settings.has_binance_credentials(),
    )


async def on_shutdown(app: FastAPI) -> None:
    """
    PURPOSE: Execute shutdown tasks to gracefully close resources.

    CALLED BY: FastAPI lifespan shutdown

    Tasks:
        1. Close every WebSocket subscription
        2. Close the Binance HTTP client
    """
    try:
        logger.info("application_shutdown_starting")
        app.state.processor.shutdown()
        await app.state.exchange_client.aclose()
        logger.info("application_shutdown_complete")
    except Exception as e:
        logger.error("application_shutdown_error", error=str(e))
        raise


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    PURPOSE: Manage application lifespan with startup and shutdown events.

    CALLED BY: FastAPI during application startup and shutdown

    Args:
        app: FastAPI application instance

    Yields:
        None
    """
    await on_startup(app)

    yield

    await on_shutdown(app)


# ════════════════════════════════════════════════════════════════
# Exception Handlers
# ════════════════════════════════════════════════════════════════


async def validation_exception_handler(
    request: Request,
    exc: RequestValidationError
) -> JSONResponse:
    """
    PURPOSE: Handle Pydantic validation errors with consistent JSON response.

    CALLED BY: FastAPI when request validation fails

    Args:
        request: HTTP request that failed validation
        exc: RequestValidationError with validation details

    Returns:
        JSONResponse: Formatted error response with validation details
    """
    logger.warning(
        "request_validation_failed",
        path=request.url.path,
        method=request.method,
        error_count=len(exc.errors())
    )

    safe_errors = jsonable_encoder(
        exc.errors(),
        custom_encoder={
            ValueError: lambda e: str(e),
            Exception: lambda e: str(e),
        },
    )

    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "success": False,
            "error": "Request validation failed",
            "errors": safe_errors,
        },
    )


async def general_exception_handler(
    request: Request,
    exc: Exception
) -> JSONResponse:
    """
    PURPOSE: Handle unexpected exceptions with logging and safe error response.

    CALLED BY: FastAPI exception handler middleware

    Args:
        request: HTTP request that raised exception
        exc: Exception that was raised

    Returns:
        JSONResponse: Safe error response without exposing internals
    """
    logger.error(
        "unhandled_exception",
        path=request.url.path,
        method=request.method,
        error=str(exc),
        exception_type=type(exc).__name__
    )

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "success": False,
            "error": "Internal server error",
        },
    )


# ════════════════════════════════════════════════════════════════
# FastAPI Application Factory
# ════════════════════════════════════════════════════════════════


def create_app(app_settings: Optional[Settings] = None) -> FastAPI:
    """
    PURPOSE: Create and configure FastAPI application with all routers, middleware, and handlers.

    CALLED BY: Application entrypoint (uvicorn factory, tests)

    The message store, broadcast hub and Binance client are constructed
    here, once per application, and exposed to handlers through app.state.

    Args:
        app_settings: Settings override; the environment-loaded settings when omitted.

    Returns:
        FastAPI: Configured FastAPI application ready to run
    """
    app_settings = app_settings or default_settings

    try:
        version_data = get_version()
        version = version_data.get("version", "unknown")
        description = f"TradingView webhook relay - {version_data.get('codename', 'Relay')}"
    except Exception as e:
        logger.warning("version_data_unavailable", error=str(e))
        version = "unknown"
        description = "TradingView webhook relay"

    app = FastAPI(
        title="hookrelay",
        description=description,
        version=version,
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
    )

    # ────────────────────────────────────────────────────────────
    # Application state
    # ────────────────────────────────────────────────────────────

    app.state.settings = app_settings
    app.state.processor = WebhookProcessor(
        store=EventStore(capacity=app_settings.MAX_MESSAGES),
        hub=BroadcastHub(queue_size=app_settings.SUBSCRIBER_QUEUE_SIZE),
    )
    app.state.exchange_client = create_binance_client(app_settings)

    # ────────────────────────────────────────────────────────────
    # Middleware
    # ────────────────────────────────────────────────────────────

    configure_exchange_limit(app_settings.EXCHANGE_RATE_LIMIT)
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

    # Wildcard origins cannot be combined with credentials
    allow_any_origin = "*" in app_settings.CORS_ORIGINS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=app_settings.CORS_ORIGINS,
        allow_credentials=not allow_any_origin,
        allow_methods=["GET", "POST", "DELETE", "OPTIONS"],
        allow_headers=["*"],
    )

    # ────────────────────────────────────────────────────────────
    # Routes
    # ────────────────────────────────────────────────────────────

    app.include_router(webhook_router)
    app.include_router(api_router)
    app.include_router(system_router)
    app.include_router(exchange_router)
    app.include_router(ws_router)

    # ────────────────────────────────────────────────────────────
    # Exception Handlers
    # ────────────────────────────────────────────────────────────

    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, general_exception_handler)

    logger.info(
        "application_created",
        version=version,
        max_messages=app_settings.MAX_MESSAGES,
    )

    return app
