"""
PURPOSE: Message history and statistics routes for hookrelay.

Serves the buffered webhook history (newest first), clears it, and reports
server counters for the dashboard stats cards.
"""

from fastapi import APIRouter, Depends

from hookrelay.api.deps import get_processor
from hookrelay.schemas.message import MessageList, ServerStats
from hookrelay.utils.logger import get_logger
from hookrelay.utils.time_utils import get_utc_now
from hookrelay.webhook.processor import WebhookProcessor

logger = get_logger(__name__)

router = APIRouter(tags=["messages"])


@router.get("/messages")
async def list_messages(processor: WebhookProcessor = Depends(get_processor)):
    """
    PURPOSE: Return every buffered webhook message, newest first.

    CALLED BY: Dashboard refresh button and initial page load.

    Returns:
        dict: {messages: [...], messageCount: int, timestamp: str}
    """
    snapshot = processor.snapshot()
    return MessageList(
        messages=list(snapshot.messages),
        message_count=snapshot.total_count,
        timestamp=get_utc_now(),
    ).to_json_dict()


@router.delete("/messages")
async def clear_messages(processor: WebhookProcessor = Depends(get_processor)):
    """
    PURPOSE: Clear the history and notify live subscribers.

    CALLED BY: Dashboard "Clear All" button.

    Returns:
        dict: {success: true, message: "All messages cleared"}
    """
    processor.clear()
    return {"success": True, "message": "All messages cleared"}


@router.get("/stats")
async def get_stats(processor: WebhookProcessor = Depends(get_processor)):
    """
    PURPOSE: Return server counters.

    Returns:
        dict: {messageCount, lastMessage, uptime, connectedClients, memoryUsage}
    """
    return ServerStats(**processor.get_stats()).to_json_dict()
