"""
PURPOSE: Process resource readings for the stats endpoint.
"""

from typing import Dict

import psutil


def process_memory() -> Dict[str, int]:
    """
    PURPOSE: Memory held by the running hookrelay process.

    CALLED BY: WebhookProcessor.get_stats()

    Returns:
        dict: {"rss": resident bytes, "vms": virtual bytes}
    """
    info = psutil.Process().memory_info()
    return {"rss": info.rss, "vms": info.vms}
