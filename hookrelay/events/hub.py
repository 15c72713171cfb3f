"""
PURPOSE: Broadcast hub fanning webhook notifications out to live subscribers.

Each subscriber owns a bounded asyncio queue. publish() never awaits: it
enqueues with put_nowait and drops any subscriber whose queue is full or
already closed, so one slow WebSocket can never stall ingestion or the other
subscribers.

CALLED BY:
    - hookrelay/webhook/processor.py (WebhookProcessor)
    - hookrelay/api/routes_ws.py (per-connection sender loop)
"""

import asyncio
import itertools
import threading
from typing import Any, Dict, Optional, Set

from hookrelay.config.constants import NotificationType
from hookrelay.schemas.message import WebhookMessage
from hookrelay.utils.logger import get_logger

logger = get_logger(__name__)

# Pushed into a subscriber queue to wake its reader after close()
_CLOSED = object()

DEFAULT_QUEUE_SIZE = 256


class Subscription:
    """
    PURPOSE: Handle for one subscriber channel registered in the BroadcastHub.

    Attributes:
        id: Hub-assigned subscriber number, used in logs.
        closed: True once the hub dropped the subscriber or it was closed.
        close_reason: Why the subscription closed ("unsubscribed", "queue_full", "shutdown").
    """

    def __init__(self, subscriber_id: int, queue_size: int = DEFAULT_QUEUE_SIZE) -> None:
        if queue_size <= 0:
            raise ValueError(f"queue_size must be positive, got {queue_size}")
        self.id = subscriber_id
        self.closed = False
        self.close_reason: Optional[str] = None
        self._queue: asyncio.Queue = asyncio.Queue(maxsize=queue_size)

    def offer(self, notification: Dict[str, Any]) -> bool:
        """
        Enqueue a notification without blocking.

        Returns:
            bool: False if the subscription is closed or its queue is full.
        """
        if self.closed:
            return False
        try:
            self._queue.put_nowait(notification)
        except asyncio.QueueFull:
            return False
        return True

    async def get(self) -> Optional[Dict[str, Any]]:
        """
        PURPOSE: Wait for the next notification.

        Returns:
            dict | None: The notification, or None once the subscription is closed.
        """
        if self.closed and self._queue.empty():
            return None
        item = await self._queue.get()
        if item is _CLOSED:
            return None
        return item

    def pending(self) -> int:
        """Number of notifications queued and not yet read."""
        return self._queue.qsize()

    def close(self, reason: str = "unsubscribed") -> None:
        """Mark closed, discard undelivered notifications and wake the reader. Idempotent."""
        if self.closed:
            return
        self.closed = True
        self.close_reason = reason
        while not self._queue.empty():
            self._queue.get_nowait()
        self._queue.put_nowait(_CLOSED)


class BroadcastHub:
    """
    PURPOSE: Registry of subscriber channels and the fan-out operation over them.

    Membership changes only on subscribe, unsubscribe, drop or shutdown.
    Delivery is best-effort and independent per subscriber.

    Attributes:
        _subscribers: Currently registered Subscription handles.
        _queue_size: Per-subscriber queue bound.
        _lock: Guards _subscribers.
    """

    def __init__(self, queue_size: int = DEFAULT_QUEUE_SIZE) -> None:
        self._subscribers: Set[Subscription] = set()
        self._queue_size = queue_size
        self._ids = itertools.count(1)
        self._lock = threading.Lock()

    @property
    def subscriber_count(self) -> int:
        with self._lock:
            return len(self._subscribers)

    def subscribe(self) -> Subscription:
        """
        PURPOSE: Register a new subscriber channel.

        CALLED BY: WebhookProcessor.open_subscription()

        Returns:
            Subscription: Handle for reading notifications and for unsubscribe().
        """
        with self._lock:
            subscription = Subscription(next(self._ids), self._queue_size)
            self._subscribers.add(subscription)
            total = len(self._subscribers)
        logger.info("subscriber_registered", subscriber_id=subscription.id, total_subscribers=total)
        return subscription

    def unsubscribe(self, subscription: Subscription) -> None:
        """Remove and close a subscriber. Unknown or already removed handles are ignored."""
        with self._lock:
            was_member = subscription in self._subscribers
            self._subscribers.discard(subscription)
            total = len(self._subscribers)
        subscription.close()
        if was_member:
            logger.info(
                "subscriber_unregistered",
                subscriber_id=subscription.id,
                total_subscribers=total,
            )

    def publish(self, message: WebhookMessage, total_count: int) -> int:
        """
        PURPOSE: Deliver a new_message notification to every subscriber.

        CALLED BY: WebhookProcessor.ingest()

        Args:
            message: The newly stored message.
            total_count: Store counter after the append.

        Returns:
            int: Number of subscribers the notification was queued for.
        """
        notification = {
            "type": NotificationType.NEW_MESSAGE.value,
            "message": message.to_json_dict(),
            "messageCount": total_count,
        }
        return self._fan_out(notification)

    def publish_clear(self) -> int:
        """Deliver a messages_cleared notification (count reset to 0) to every subscriber."""
        notification = {
            "type": NotificationType.MESSAGES_CLEARED.value,
            "messageCount": 0,
        }
        return self._fan_out(notification)

    def close_all(self) -> None:
        """Close and remove every subscriber, e.g. on shutdown."""
        with self._lock:
            subscribers = list(self._subscribers)
            self._subscribers.clear()
        for subscription in subscribers:
            subscription.close("shutdown")
        if subscribers:
            logger.info("subscribers_closed", count=len(subscribers))

    def _fan_out(self, notification: Dict[str, Any]) -> int:
        delivered = 0
        dropped = []
        with self._lock:
            for subscription in self._subscribers:
                if subscription.offer(notification):
                    delivered += 1
                else:
                    dropped.append(subscription)
            for subscription in dropped:
                self._subscribers.discard(subscription)

        for subscription in dropped:
            reason = "closed" if subscription.closed else "queue_full"
            subscription.close(reason)
            logger.warning(
                "subscriber_dropped",
                subscriber_id=subscription.id,
                reason=reason,
                notification_type=notification["type"],
            )
        return delivered
