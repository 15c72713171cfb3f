"""
Webhook message Pydantic schemas for the hookrelay API.

Handles serialization of stored webhook messages and the response bodies of
the ingestion, message history and stats endpoints. All models emit
camelCase keys so the dashboard can consume them directly.
"""

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from hookrelay.config.constants import Category


class CamelModel(BaseModel):
    """Base model serialising field names as camelCase aliases."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_json_dict(self) -> dict[str, Any]:
        """Return a JSON-compatible dict using camelCase keys."""
        return self.model_dump(mode="json", by_alias=True)


class WebhookMessage(CamelModel):
    """
    One ingested webhook notification.

    Attributes:
        id: Process-unique message identifier
        received_at: UTC arrival timestamp, assigned once
        payload: Parsed JSON, form fields, or raw body text
        category: Classification assigned at ingestion
        source_addr: Client address the webhook came from
        content_type: Request Content-Type header, if any
        user_agent: Request User-Agent header, if any
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )

    id: str
    received_at: datetime
    payload: Any = None
    category: Category
    source_addr: str
    content_type: Optional[str] = None
    user_agent: Optional[str] = None


class WebhookAck(CamelModel):
    """Acknowledgement returned by POST /webhook."""

    success: bool = True
    message: str = "Webhook received successfully"
    message_id: str
    timestamp: datetime


class DemoWebhookAck(CamelModel):
    """Acknowledgement returned by POST /test-webhook."""

    success: bool = True
    message: str = "Test webhook sent"
    message_id: str
    data: Any = None


class MessageList(CamelModel):
    """Response body of GET /api/messages (newest first)."""

    messages: list[WebhookMessage]
    message_count: int
    timestamp: datetime


class ServerStats(CamelModel):
    """
    Response body of GET /api/stats.

    Attributes:
        message_count: Total messages received since start or last clear
        last_message: Arrival time of the newest buffered message
        uptime: Process uptime in seconds
        connected_clients: Live WebSocket subscribers
        memory_usage: Process memory in bytes ({"rss", "vms"})
    """

    message_count: int
    last_message: Optional[datetime] = None
    uptime: float
    connected_clients: int
    memory_usage: dict[str, int]
