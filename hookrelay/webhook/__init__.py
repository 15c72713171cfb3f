"""
PURPOSE: Webhook module for hookrelay: ingests inbound TradingView alerts.

Classifies each alert, keeps the most recent ones in a bounded in-memory
store and hands them to the broadcast hub for live subscribers.
"""

from hookrelay.webhook.classifier import classify
from hookrelay.webhook.processor import WebhookProcessor, decode_body
from hookrelay.webhook.store import EventStore, StoreSnapshot

__all__ = [
    "classify",
    "decode_body",
    "EventStore",
    "StoreSnapshot",
    "WebhookProcessor",
]
