"""
PURPOSE: Webhook processor tying the message store to the broadcast hub.

Owns one EventStore and one BroadcastHub and serialises every operation that
touches both: append+publish per message, clear+publish_clear, and
subscribe+snapshot per new WebSocket. Because none of those steps awaits,
holding a plain lock keeps each pair atomic for every observer, so a
subscriber always sees messages in the order they were stored.

CALLED BY:
    - hookrelay/api/routes_webhook.py (POST /webhook, POST /test-webhook)
    - hookrelay/api/routes_messages.py (GET/DELETE /api/messages, GET /api/stats)
    - hookrelay/api/routes_ws.py (WebSocket /)
"""

import json
import threading
from typing import Any, Dict, Optional, Tuple
from urllib.parse import parse_qsl

from hookrelay.config.constants import MAX_CAPACITY
from hookrelay.events.hub import DEFAULT_QUEUE_SIZE, BroadcastHub, Subscription
from hookrelay.schemas.message import WebhookMessage
from hookrelay.utils.logger import get_logger
from hookrelay.utils.process_info import process_memory
from hookrelay.utils.time_utils import process_uptime
from hookrelay.webhook.store import EventStore, StoreSnapshot

logger = get_logger(__name__)

FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"


class WebhookProcessor:
    """
    PURPOSE: Single entry point for ingestion, history and subscriptions.

    Attributes:
        store: Bounded message history.
        hub: Live subscriber registry.
        _lock: Orders store mutations against their broadcasts.
    """

    def __init__(
        self,
        store: Optional[EventStore] = None,
        hub: Optional[BroadcastHub] = None,
    ) -> None:
        """
        PURPOSE: Wire a store and a hub together.

        CALLED BY: hookrelay.main.create_app()

        Args:
            store: EventStore to use; a default-capacity store when omitted.
            hub: BroadcastHub to use; a default hub when omitted.
        """
        self.store = store if store is not None else EventStore(MAX_CAPACITY)
        self.hub = hub if hub is not None else BroadcastHub(DEFAULT_QUEUE_SIZE)
        self._lock = threading.Lock()

    # ════════════════════════════════════════════════════════════════
    # Public API
    # ════════════════════════════════════════════════════════════════

    def ingest(
        self,
        payload: Any,
        source_addr: str,
        content_type: Optional[str] = None,
        user_agent: Optional[str] = None,
    ) -> WebhookMessage:
        """
        PURPOSE: Store one webhook payload and broadcast it to live subscribers.

        CALLED BY: POST /webhook and POST /test-webhook route handlers

        Args:
            payload: Parsed JSON, form dict, or raw text body.
            source_addr: Client address of the sender.
            content_type: Request Content-Type header.
            user_agent: Request User-Agent header.

        Returns:
            WebhookMessage: The stored message with its id and timestamp.
        """
        with self._lock:
            message = self.store.append(payload, source_addr, content_type, user_agent)
            total_count = self.store.total_count
            delivered = self.hub.publish(message, total_count)

        logger.info(
            "webhook_message_stored",
            message_id=message.id,
            category=message.category.value,
            source_addr=source_addr,
            total_count=total_count,
            subscribers_notified=delivered,
        )
        return message

    def clear(self) -> None:
        """
        PURPOSE: Empty the history and tell every subscriber the count is back to 0.

        CALLED BY: DELETE /api/messages
        """
        with self._lock:
            self.store.clear()
            delivered = self.hub.publish_clear()
        logger.info("webhook_messages_cleared", subscribers_notified=delivered)

    def snapshot(self) -> StoreSnapshot:
        """Current newest-first history and lifetime count."""
        return self.store.snapshot()

    def open_subscription(self) -> Tuple[Subscription, StoreSnapshot]:
        """
        PURPOSE: Register a subscriber and capture the history it starts from.

        Both happen under the processor lock, so every message is either in
        the returned snapshot or queued on the subscription, never both.

        CALLED BY: WebSocket / endpoint on connect

        Returns:
            tuple: (Subscription, StoreSnapshot)
        """
        with self._lock:
            subscription = self.hub.subscribe()
            snapshot = self.store.snapshot()
        return subscription, snapshot

    def close_subscription(self, subscription: Subscription) -> None:
        """Deregister a subscriber. Safe to call more than once."""
        self.hub.unsubscribe(subscription)

    def get_stats(self) -> Dict[str, Any]:
        """
        PURPOSE: Return counters for the dashboard stats cards.

        CALLED BY: GET /api/stats

        Returns:
            dict: {message_count, last_message, uptime, connected_clients, memory_usage}
        """
        return {
            "message_count": self.store.total_count,
            "last_message": self.store.last_received_at,
            "uptime": process_uptime(),
            "connected_clients": self.hub.subscriber_count,
            "memory_usage": process_memory(),
        }

    def shutdown(self) -> None:
        """Close every live subscription so WebSocket handlers can exit."""
        self.hub.close_all()


# ════════════════════════════════════════════════════════════════
# Body decoding
# ════════════════════════════════════════════════════════════════


def decode_body(body: bytes, content_type: Optional[str]) -> Any:
    """
    PURPOSE: Turn a raw request body into the payload that gets stored.

    Never raises: a body that cannot be parsed as its declared type is kept
    as text so the classifier can still look at it.

    CALLED BY: Ingestion route handlers

    Args:
        body: Raw request bytes.
        content_type: Request Content-Type header, if any.

    Returns:
        Any: Parsed JSON for JSON content types, a dict of fields for form
            bodies, otherwise the body decoded as UTF-8 text ("" when empty).
            Invalid UTF-8 sequences become U+FFFD and are logged as
            webhook_body_not_utf8.

    Examples:
        b'{"action": "BUY"}', "application/json" → {"action": "BUY"}
        b"action=BUY&symbol=BTCUSDT", FORM_CONTENT_TYPE → {"action": "BUY", "symbol": "BTCUSDT"}
        b"hello", "text/plain" → "hello"
    """
    try:
        text = body.decode("utf-8")
    except UnicodeDecodeError as e:
        logger.warning(
            "webhook_body_not_utf8",
            content_type=content_type,
            size=len(body),
            position=e.start,
        )
        text = body.decode("utf-8", errors="replace")
    media_type = (content_type or "").split(";", 1)[0].strip().lower()

    if media_type == "application/json" or media_type.endswith("+json"):
        try:
            return json.loads(text)
        except ValueError:
            logger.debug("webhook_body_not_json", content_type=content_type, size=len(body))
            return text

    if media_type == FORM_CONTENT_TYPE and text:
        return dict(parse_qsl(text, keep_blank_values=True))

    return text
