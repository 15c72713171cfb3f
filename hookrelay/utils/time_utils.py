"""
PURPOSE: Time utilities for message timestamps and process uptime.
"""

import time
from datetime import datetime, timezone

# Monotonic reference taken at import, i.e. process start for the server
_PROCESS_START = time.monotonic()


def get_utc_now() -> datetime:
    """
    PURPOSE: Return the current UTC time as a timezone-aware datetime object.

    Returns:
        datetime: Current UTC time with timezone info.
    """
    return datetime.now(timezone.utc)


def utc_iso_now() -> str:
    """Current UTC time as an ISO-8601 string."""
    return get_utc_now().isoformat()


def process_uptime() -> float:
    """
    PURPOSE: Seconds elapsed since the hookrelay process started.

    Returns:
        float: Uptime in seconds (monotonic, never negative).
    """
    return time.monotonic() - _PROCESS_START
