"""
PURPOSE: Bounded in-memory history of ingested webhook messages.

Keeps the newest messages first in a ring buffer (a deque with maxlen), plus
a lifetime counter that is independent of eviction. Every operation holds a
single lock, so the store is safe under concurrent callers.

CALLED BY:
    - hookrelay/webhook/processor.py (WebhookProcessor)
"""

import threading
from collections import deque
from datetime import datetime
from typing import Any, NamedTuple, Optional

from hookrelay.config.constants import MAX_CAPACITY
from hookrelay.schemas.message import WebhookMessage
from hookrelay.utils.time_utils import get_utc_now
from hookrelay.webhook.classifier import classify
from hookrelay.webhook.ids import MessageIdGenerator


class StoreSnapshot(NamedTuple):
    """Stable copy of the store contents: newest-first messages and lifetime count."""

    messages: tuple[WebhookMessage, ...]
    total_count: int


class EventStore:
    """
    PURPOSE: Ring buffer of the most recent webhook messages.

    Appending at capacity evicts the oldest-inserted message (FIFO by
    insertion order, never by timestamp). total_count only grows, except on
    clear().

    Attributes:
        _messages: Deque of messages, index 0 is the newest.
        _total_count: Messages appended since construction or last clear.
        _ids: Id generator shared by every append.
        _lock: Guards _messages and _total_count.
    """

    def __init__(
        self,
        capacity: int = MAX_CAPACITY,
        id_generator: Optional[MessageIdGenerator] = None,
    ) -> None:
        """
        Args:
            capacity: Maximum number of messages retained (must be positive).
            id_generator: Optional id source, mainly for tests.

        Raises:
            ValueError: If capacity is not positive.
        """
        if capacity <= 0:
            raise ValueError(f"capacity must be positive, got {capacity}")
        self._capacity = capacity
        self._messages: deque[WebhookMessage] = deque(maxlen=capacity)
        self._total_count = 0
        self._ids = id_generator or MessageIdGenerator()
        self._lock = threading.Lock()

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def total_count(self) -> int:
        with self._lock:
            return self._total_count

    @property
    def last_received_at(self) -> Optional[datetime]:
        """Arrival time of the newest buffered message, or None when empty."""
        with self._lock:
            return self._messages[0].received_at if self._messages else None

    def __len__(self) -> int:
        with self._lock:
            return len(self._messages)

    def append(
        self,
        payload: Any,
        source_addr: str,
        content_type: Optional[str] = None,
        user_agent: Optional[str] = None,
    ) -> WebhookMessage:
        """
        PURPOSE: Classify and store one webhook payload.

        CALLED BY: WebhookProcessor.ingest()

        Args:
            payload: Parsed JSON, form dict, or raw text body.
            source_addr: Client address of the sender.
            content_type: Request Content-Type header.
            user_agent: Request User-Agent header.

        Returns:
            WebhookMessage: The stored, immutable message.
        """
        category = classify(payload)
        with self._lock:
            message = WebhookMessage(
                id=self._ids.next_id(),
                received_at=get_utc_now(),
                payload=payload,
                category=category,
                source_addr=source_addr,
                content_type=content_type,
                user_agent=user_agent,
            )
            # deque(maxlen) drops from the right end, i.e. the oldest message
            self._messages.appendleft(message)
            self._total_count += 1
        return message

    def snapshot(self) -> StoreSnapshot:
        """Return newest-first messages and total_count as one consistent copy."""
        with self._lock:
            return StoreSnapshot(tuple(self._messages), self._total_count)

    def clear(self) -> None:
        """Drop every buffered message and reset total_count to 0."""
        with self._lock:
            self._messages.clear()
            self._total_count = 0
