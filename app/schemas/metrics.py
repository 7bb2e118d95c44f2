"""
Pydantic schemas for dashboard metrics and emergency alerts.
"""
from pydantic import BaseModel, Field, ConfigDict
from pydantic.alias_generators import to_camel
from typing import List
from enum import Enum


class DashboardMetrics(BaseModel):
    """Scalar KPIs perturbed by the real-time simulation."""
    trains_on_time: float = Field(..., ge=0, le=100, description="Percentage of trains on time")
    average_delay: float = Field(..., ge=0, description="Average delay in minutes")
    realtime_enabled: bool = False
    system_status: str = "Operational"

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class RealtimeToggle(BaseModel):
    enabled: bool


class AlertStatus(str, Enum):
    ACTIVE = "Active"
    RESOLVED = "Resolved"


class EmergencyAlert(BaseModel):
    id: str
    type: str
    severity: str
    zone: str
    description: str
    time: str
    status: AlertStatus


class AlertList(BaseModel):
    alerts: List[EmergencyAlert] = Field(default_factory=list)
    active_count: int = 0

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)
