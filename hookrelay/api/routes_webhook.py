"""
PURPOSE: Webhook ingestion routes for hookrelay.

Provides the public inbound endpoint for TradingView alert webhooks and a
test endpoint that pushes a synthetic alert through the same pipeline.

Both endpoints are intentionally PUBLIC and unthrottled. TradingView cannot
authenticate its outbound calls and bursts of alerts must not be rejected.
Any body up to MAX_BODY_BYTES is accepted: JSON, form fields, or plain
text. A body that cannot be parsed is stored verbatim and classified as Text.

CALLED BY:
    - TradingView alert webhooks (POST /webhook)
    - Dashboard "Test Webhook" button (POST /test-webhook)
"""

import random
from typing import Any, Dict

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse

from hookrelay.api.deps import client_address, get_app_settings, get_processor
from hookrelay.config.settings import Settings
from hookrelay.schemas.message import DemoWebhookAck, WebhookAck
from hookrelay.utils.logger import get_logger
from hookrelay.utils.time_utils import utc_iso_now
from hookrelay.webhook.processor import WebhookProcessor, decode_body

logger = get_logger(__name__)

router = APIRouter(tags=["webhook"])

TEST_SOURCE_ADDR = "TEST"


# ════════════════════════════════════════════════════════════════
# Internal Helpers
# ════════════════════════════════════════════════════════════════


def _ingest_failed(action: str, error: Exception) -> JSONResponse:
    """
    PURPOSE: Build the generic 500 response for an ingestion failure.

    Logs the failure with structlog so the error appears in the structured
    log stream alongside the action context. Internals are not exposed.

    CALLED BY: Route handlers on unexpected exceptions

    Args:
        action: Human-readable description of the failed operation.
        error:  The caught exception.

    Returns:
        JSONResponse: HTTP 500 with {"success": false, "error": ...}.
    """
    logger.error(
        "webhook_route_failed",
        action=action,
        error=str(error),
        exception_type=type(error).__name__,
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"success": False, "error": "Internal server error"},
    )


class PayloadTooLarge(Exception):
    """Raised when a request body exceeds the configured MAX_BODY_BYTES."""

    def __init__(self, size: int, limit: int) -> None:
        super().__init__(f"Request body of {size} bytes exceeds {limit} bytes")
        self.size = size
        self.limit = limit


async def read_limited_body(request: Request, max_bytes: int) -> bytes:
    """
    PURPOSE: Read the request body, refusing anything larger than max_bytes.

    A declared Content-Length over the limit is rejected before reading.
    Otherwise the body is streamed and reading stops as soon as the limit
    is passed, so chunked uploads without a length are bounded too.

    CALLED BY: receive_webhook, fire_test_webhook

    Args:
        request: Incoming request.
        max_bytes: Largest accepted body size.

    Returns:
        bytes: The complete body.

    Raises:
        PayloadTooLarge: When the body is bigger than max_bytes.
    """
    declared = request.headers.get("content-length", "")
    if declared.isdigit() and int(declared) > max_bytes:
        raise PayloadTooLarge(int(declared), max_bytes)

    chunks = []
    size = 0
    async for chunk in request.stream():
        size += len(chunk)
        if size > max_bytes:
            raise PayloadTooLarge(size, max_bytes)
        chunks.append(chunk)
    return b"".join(chunks)


def _payload_too_large(error: PayloadTooLarge) -> JSONResponse:
    logger.warning("webhook_payload_too_large", size=error.size, limit=error.limit)
    return JSONResponse(
        status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
        content={"success": False, "error": "Payload too large"},
    )


def _synthetic_alert() -> Dict[str, Any]:
    """Default payload used by /test-webhook when the request has no body."""
    return {
        "action": "TEST",
        "symbol": "BTCUSDT",
        "price": random.randint(30000, 79999),
        "timestamp": utc_iso_now(),
        "test": True,
    }


# ════════════════════════════════════════════════════════════════
# Public Inbound Endpoint
# ════════════════════════════════════════════════════════════════


@router.post("/webhook")
async def receive_webhook(
    request: Request,
    processor: WebhookProcessor = Depends(get_processor),
    app_settings: Settings = Depends(get_app_settings),
):
    """
    PURPOSE: Receive a webhook, store it and broadcast it to live subscribers.

    On receipt the alert is:
      1. Decoded (JSON, form, or raw text, never rejected).
      2. Classified and stored by WebhookProcessor.
      3. Broadcast to every connected WebSocket client.
      4. Acknowledged with its message id and timestamp.

    Args:
        request: Incoming request carrying the raw body and headers.
        processor: App-scoped WebhookProcessor.

    Returns:
        dict: {"success": true, "message", "messageId", "timestamp"}

    Raises:
        Nothing. Internal failures are answered with HTTP 500
        {"success": false, "error": "Internal server error"}.
        Bodies over MAX_BODY_BYTES get HTTP 413
        {"success": false, "error": "Payload too large"}.
    """
    source_addr = client_address(request)
    content_type = request.headers.get("content-type")
    user_agent = request.headers.get("user-agent")

    try:
        body = await read_limited_body(request, app_settings.MAX_BODY_BYTES)
        payload = decode_body(body, content_type)

        logger.info(
            "webhook_received",
            source_addr=source_addr,
            content_type=content_type,
            size=len(body),
        )

        message = processor.ingest(payload, source_addr, content_type, user_agent)
        return WebhookAck(message_id=message.id, timestamp=message.received_at).to_json_dict()
    except PayloadTooLarge as e:
        return _payload_too_large(e)
    except Exception as e:
        return _ingest_failed("process webhook", e)


# ════════════════════════════════════════════════════════════════
# Test Endpoint
# ════════════════════════════════════════════════════════════════


@router.post("/test-webhook")
async def fire_test_webhook(
    request: Request,
    processor: WebhookProcessor = Depends(get_processor),
    app_settings: Settings = Depends(get_app_settings),
):
    """
    PURPOSE: Push a test alert through the full ingestion pipeline.

    Uses the request body when one is sent, otherwise synthesises a BUY-style
    BTCUSDT alert with a random price. The stored message is tagged with the
    source address "TEST" so the dashboard can tell it apart.

    CALLED BY: Dashboard "Test Webhook" button, manual smoke tests.

    Returns:
        dict: {"success": true, "message", "messageId", "data"}
    """
    content_type = request.headers.get("content-type")

    try:
        body = await read_limited_body(request, app_settings.MAX_BODY_BYTES)
        if body.strip():
            payload = decode_body(body, content_type)
        else:
            payload = _synthetic_alert()
            content_type = "application/json"

        logger.info("webhook_test_alert_fired", has_body=bool(body.strip()))

        message = processor.ingest(
            payload,
            TEST_SOURCE_ADDR,
            content_type,
            request.headers.get("user-agent"),
        )
        return DemoWebhookAck(message_id=message.id, data=payload).to_json_dict()
    except PayloadTooLarge as e:
        return _payload_too_large(e)
    except Exception as e:
        return _ingest_failed("send test webhook", e)
