"""
Event fan-out module for hookrelay.

Provides the in-process broadcast hub that pushes webhook notifications to
live WebSocket subscribers.
"""

from hookrelay.events.hub import BroadcastHub, Subscription

__all__ = [
    "BroadcastHub",
    "Subscription",
]
