"""
FastAPI dependency injection utilities.
"""
from fastapi import Request

from app.core.state import DashboardState


def get_dashboard_state(request: Request) -> DashboardState:
    """
    Return the dashboard state attached to the application at startup.

    Tests override this dependency to run against a fresh state.
    """
    return request.app.state.dashboard
