"""
PURPOSE: WebSocket endpoint for real-time webhook updates in hookrelay.

Provides a persistent connection at the server root that delivers:
- the buffered history once on connect (initial_data)
- every newly stored webhook (new_message)
- history resets (messages_cleared)

Each connection runs two tasks: a sender draining the connection's hub
subscription and a reader watching for client frames and disconnects. When
either finishes, the other is cancelled and the subscription is removed.
"""

import asyncio
import json
from typing import Any, Dict

from fastapi import APIRouter, WebSocket, WebSocketDisconnect, status

from hookrelay.config.constants import NotificationType
from hookrelay.events.hub import Subscription
from hookrelay.utils.logger import get_logger
from hookrelay.utils.time_utils import utc_iso_now
from hookrelay.webhook.processor import WebhookProcessor

logger = get_logger(__name__)
router = APIRouter(tags=["websocket"])

# Close codes sent when the server ends a subscription
_CLOSE_CODES = {
    "queue_full": status.WS_1013_TRY_AGAIN_LATER,
    "shutdown": status.WS_1001_GOING_AWAY,
}


# ════════════════════════════════════════════════════════════════
# Per-connection tasks
# ════════════════════════════════════════════════════════════════


async def _forward_notifications(websocket: WebSocket, subscription: Subscription) -> None:
    """
    PURPOSE: Send every hub notification to the client until the subscription closes.

    CALLED BY: websocket_live_messages (as a task)

    Args:
        websocket: Accepted client connection
        subscription: Hub subscription owned by this connection
    """
    while True:
        notification = await subscription.get()
        if notification is None:
            break
        await websocket.send_json(notification)

    close_code = _CLOSE_CODES.get(subscription.close_reason or "")
    if close_code is not None:
        logger.info(
            "websocket_closing_by_server",
            client_id=subscription.id,
            reason=subscription.close_reason,
        )
        try:
            await websocket.close(code=close_code)
        except Exception as e:
            logger.debug("websocket_close_failed", client_id=subscription.id, error=str(e))


async def _read_client_frames(websocket: WebSocket, client_id: int) -> None:
    """
    PURPOSE: Consume client frames, answering heartbeats, until the peer disconnects.

    CALLED BY: websocket_live_messages (as a task)

    Args:
        websocket: Accepted client connection
        client_id: Subscription id used in logs
    """
    while True:
        frame = await websocket.receive()
        if frame["type"] == "websocket.disconnect":
            return

        data = frame.get("text")
        if not data:
            continue

        try:
            message = json.loads(data)
        except json.JSONDecodeError as e:
            logger.warning("websocket_json_decode_failed", client_id=client_id, error=str(e))
            await websocket.send_json({
                "type": NotificationType.ERROR.value,
                "message": "Invalid JSON format",
            })
            continue

        message_type = message.get("type", "unknown") if isinstance(message, dict) else "unknown"
        if message_type == "ping":
            await websocket.send_json({
                "type": NotificationType.PONG.value,
                "timestamp": utc_iso_now(),
            })
        else:
            logger.debug(
                "websocket_unknown_message_type",
                client_id=client_id,
                message_type=message_type,
            )


def _initial_data(snapshot) -> Dict[str, Any]:
    return {
        "type": NotificationType.INITIAL_DATA.value,
        "messages": [message.to_json_dict() for message in snapshot.messages],
        "messageCount": snapshot.total_count,
    }


# ════════════════════════════════════════════════════════════════
# WebSocket Endpoint
# ════════════════════════════════════════════════════════════════


@router.websocket("/")
async def websocket_live_messages(websocket: WebSocket) -> None:
    """
    PURPOSE: WebSocket endpoint streaming webhook messages to a dashboard.

    CALLED BY: Dashboard page for real-time updates

    Behavior:
        1. Accept WebSocket connection
        2. Register a hub subscription and snapshot the history atomically
        3. Send initial_data with the snapshot
        4. Forward new_message / messages_cleared notifications
        5. Answer {"type": "ping"} with pong
        6. Remove the subscription on disconnect, send failure or drop

    Args:
        websocket: WebSocket connection from client

    Returns:
        None (runs until disconnect)
    """
    processor: WebhookProcessor = websocket.app.state.processor

    await websocket.accept()
    subscription, snapshot = processor.open_subscription()
    client_id = subscription.id

    logger.info(
        "websocket_client_connected",
        client_id=client_id,
        total_clients=processor.hub.subscriber_count,
    )

    tasks = []
    try:
        await websocket.send_json(_initial_data(snapshot))

        tasks = [
            asyncio.create_task(_forward_notifications(websocket, subscription)),
            asyncio.create_task(_read_client_frames(websocket, client_id)),
        ]
        done, _pending = await asyncio.wait(tasks, return_when=asyncio.FIRST_COMPLETED)

        for task in done:
            error = task.exception()
            if error is not None and not isinstance(error, WebSocketDisconnect):
                logger.warning(
                    "websocket_task_failed",
                    client_id=client_id,
                    error=str(error),
                    exception_type=type(error).__name__,
                )

    except WebSocketDisconnect:
        logger.info("websocket_client_disconnected", client_id=client_id)

    except Exception as e:
        logger.error(
            "websocket_error",
            client_id=client_id,
            error=str(e)
        )

    finally:
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)

        # Always remove client from the hub
        processor.close_subscription(subscription)
        logger.info(
            "websocket_client_cleanup",
            client_id=client_id,
            remaining_clients=processor.hub.subscriber_count,
        )
