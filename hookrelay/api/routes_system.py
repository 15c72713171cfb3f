"""
PURPOSE: System-level routes for hookrelay.

Provides the health check and serves the static dashboard page.
"""

from functools import lru_cache
from pathlib import Path

from fastapi import APIRouter
from fastapi.responses import HTMLResponse

from hookrelay.schemas import HealthCheck
from hookrelay.utils.time_utils import get_utc_now, process_uptime

router = APIRouter(tags=["system"])

DASHBOARD_FILE = Path(__file__).resolve().parent.parent / "static" / "dashboard.html"


@lru_cache(maxsize=1)
def _load_dashboard() -> str:
    return DASHBOARD_FILE.read_text(encoding="utf-8")


@router.get("/health")
async def health_check():
    """
    PURPOSE: Liveness check.

    CALLED BY: Load balancers, container health checks

    Returns:
        dict: {status: "healthy", timestamp, uptime}
    """
    return HealthCheck(timestamp=get_utc_now(), uptime=process_uptime()).model_dump(mode="json")


@router.get("/", response_class=HTMLResponse, include_in_schema=False)
async def dashboard() -> HTMLResponse:
    """
    PURPOSE: Serve the live webhook dashboard.

    The page reads GET /api/messages and the WebSocket at / and renders
    everything client-side.
    """
    return HTMLResponse(_load_dashboard())
