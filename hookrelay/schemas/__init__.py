"""
Pydantic v2 schemas for the hookrelay API.

This module exports all schema classes used throughout the API
for request/response validation and documentation.
"""

from .message import (
    CamelModel,
    DemoWebhookAck,
    MessageList,
    ServerStats,
    WebhookAck,
    WebhookMessage,
)
from .system import HealthCheck

__all__ = [
    # Message schemas
    "CamelModel",
    "WebhookMessage",
    "WebhookAck",
    "DemoWebhookAck",
    "MessageList",
    "ServerStats",
    # System schemas
    "HealthCheck",
]
