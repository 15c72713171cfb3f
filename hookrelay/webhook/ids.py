"""
PURPOSE: Process-unique message id generation.

Ids combine a salt derived from the process start time with a sequence
counter, so two messages arriving within the same clock tick still receive
distinct ids and an id is never reused while the process lives.
"""

import itertools
import threading
import time
from typing import Optional


class MessageIdGenerator:
    """
    PURPOSE: Hand out unique, monotonically increasing message ids.

    Format: "<salt>-<sequence>" where salt is the process start time in
    milliseconds (base 36) and sequence starts at 1. Thread-safe.
    """

    def __init__(self, salt: Optional[str] = None) -> None:
        self._salt = salt if salt is not None else _base36(time.time_ns() // 1_000_000)
        self._counter = itertools.count(1)
        self._lock = threading.Lock()

    @property
    def salt(self) -> str:
        return self._salt

    def next_id(self) -> str:
        with self._lock:
            sequence = next(self._counter)
        return f"{self._salt}-{sequence:06d}"


def _base36(value: int) -> str:
    digits = "0123456789abcdefghijklmnopqrstuvwxyz"
    if value == 0:
        return "0"
    out = []
    while value:
        value, rem = divmod(value, 36)
        out.append(digits[rem])
    return "".join(reversed(out))
