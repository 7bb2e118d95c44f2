"""
API routes for simulated dashboard KPIs and emergency alerts.
"""
from fastapi import APIRouter, Depends, Query
import logging

from app.core.dependencies import get_dashboard_state
from app.core.state import DashboardState
from app.schemas.metrics import AlertList, DashboardMetrics, RealtimeToggle
from app.services.metrics.simulator import active_alerts

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/", response_model=DashboardMetrics)
async def get_metrics(state: DashboardState = Depends(get_dashboard_state)):
    """Get the current on-time percentage and average delay."""
    return state.metrics.snapshot()


@router.post("/realtime", response_model=DashboardMetrics)
async def set_realtime(toggle: RealtimeToggle, state: DashboardState = Depends(get_dashboard_state)):
    """Turn the simulated real-time updates on or off."""
    state.metrics.realtime_enabled = toggle.enabled
    logger.info(f"Real-time metrics {'enabled' if toggle.enabled else 'disabled'}")
    return state.metrics.snapshot()


@router.get("/alerts", response_model=AlertList)
async def get_alerts(
    active_only: bool = Query(False, description="Only return active alerts"),
    state: DashboardState = Depends(get_dashboard_state)
):
    active = active_alerts(state.alerts)
    return AlertList(
        alerts=active if active_only else list(state.alerts),
        active_count=len(active)
    )
