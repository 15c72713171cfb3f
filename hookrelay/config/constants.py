"""
PURPOSE: Shared constants and enumerations for hookrelay.

Defines the message categories assigned by the classifier, the notification
types pushed over the WebSocket channel and the default buffer capacity.
"""

from enum import Enum


# Default number of messages kept in the in-memory ring buffer
MAX_CAPACITY = 100

# Default request body cap for webhook ingestion (10 MiB)
DEFAULT_MAX_BODY_BYTES = 10 * 1024 * 1024


class Category(str, Enum):
    """
    PURPOSE: Semantic category assigned to every ingested webhook message.

    Values are sent verbatim to API and WebSocket clients.
    """

    ALERT = "Alert"
    SYMBOL_DATA = "SymbolData"
    PRICE_UPDATE = "PriceUpdate"
    SIGNAL = "Signal"
    STRATEGY = "Strategy"
    TEXT = "Text"
    UNKNOWN = "Unknown"


class NotificationType(str, Enum):
    """Frame types delivered to WebSocket subscribers."""

    INITIAL_DATA = "initial_data"
    NEW_MESSAGE = "new_message"
    MESSAGES_CLEARED = "messages_cleared"
    PONG = "pong"
    ERROR = "error"
