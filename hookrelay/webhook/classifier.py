"""
PURPOSE: Classify inbound webhook payloads into a semantic Category.

The classifier is a pure, total function: it never raises and never mutates
its input. Text that is not valid JSON is Text; structured data is sniffed for
well-known TradingView alert fields in a fixed precedence order.

CALLED BY:
    - hookrelay/webhook/store.py (EventStore.append)
"""

import json
import math
from typing import Any, Mapping

from hookrelay.config.constants import Category

# Checked in order, first match wins. A directive outranks everything else so
# {"action": "BUY", "price": 1} is an Alert, not a PriceUpdate.
DIRECTIVE_FIELDS = ("action", "command")
INSTRUMENT_FIELDS = ("symbol", "ticker")
PRICE_FIELD = "price"
SIGNAL_FIELD = "signal"
STRATEGY_FIELD = "strategy"


def classify(payload: Any) -> Category:
    """
    PURPOSE: Map an arbitrary webhook payload to its Category.

    CALLED BY: EventStore.append()

    Args:
        payload: Raw text, bytes, or already-parsed structured data.

    Returns:
        Category: Text when text cannot be parsed, Unknown when the structure
            carries none of the recognised fields.
    """
    if isinstance(payload, (bytes, bytearray)):
        try:
            payload = bytes(payload).decode("utf-8")
        except UnicodeDecodeError:
            return Category.TEXT

    if isinstance(payload, str):
        try:
            payload = json.loads(payload)
        except ValueError:
            return Category.TEXT

    if not isinstance(payload, Mapping):
        return Category.UNKNOWN

    if _has_any(payload, DIRECTIVE_FIELDS):
        return Category.ALERT
    if _has_any(payload, INSTRUMENT_FIELDS):
        return Category.SYMBOL_DATA
    if _is_numeric(payload.get(PRICE_FIELD)):
        return Category.PRICE_UPDATE
    if _is_present(payload.get(SIGNAL_FIELD)):
        return Category.SIGNAL
    if _is_present(payload.get(STRATEGY_FIELD)):
        return Category.STRATEGY
    return Category.UNKNOWN


def _has_any(data: Mapping, fields: tuple[str, ...]) -> bool:
    return any(_is_present(data.get(name)) for name in fields)


def _is_present(value: Any) -> bool:
    """A field counts as present unless it is None, blank, or an empty container."""
    if value is None:
        return False
    if isinstance(value, str):
        return bool(value.strip())
    if isinstance(value, (list, tuple, dict, set)):
        return bool(value)
    return True


def _is_numeric(value: Any) -> bool:
    """True for finite int/float values (bool excluded) and strings holding a finite number."""
    if isinstance(value, bool):
        return False
    if isinstance(value, int):
        return True
    if isinstance(value, float):
        return math.isfinite(value)
    if isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return False
        return math.isfinite(number)
    return False
