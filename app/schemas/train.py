"""
Pydantic schemas for train records shown on the control center dashboard.
"""
from pydantic import BaseModel, Field, ConfigDict
from pydantic.alias_generators import to_camel
from enum import Enum


class TrainZone(str, Enum):
    """Railway network zones."""
    NORTHERN = "Northern"
    SOUTHERN = "Southern"
    WESTERN = "Western"
    EASTERN = "Eastern"
    CENTRAL = "Central"
    NORTH_EASTERN = "North Eastern"


class TrainStatus(str, Enum):
    """Running status as displayed on the dashboard."""
    ON_TIME = "On Time"
    DELAYED = "Delayed"
    MOVING = "Moving"
    OTHER = "Other"


class TrainPriority(str, Enum):
    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"


class TrainType(str, Enum):
    """Core train operational categories."""
    EXPRESS = "Express"
    SUPERFAST = "Superfast"
    PASSENGER = "Passenger"
    FREIGHT = "Freight"
    LOCAL = "Local"
    GOODS = "Goods"
    OTHER = "Other"


class TrainRecord(BaseModel):
    """A physical train service in the current fleet snapshot."""
    id: str = Field(..., description="Internal train identifier (e.g. 'T002')")
    name: str = Field(..., description="Service name")
    number: str = Field(..., description="Public train number (e.g. '12002')")
    route: str = Field(..., description="Origin → destination")
    zone: TrainZone
    status: TrainStatus
    current_location: str
    next_station: str
    eta: str = Field(..., pattern=r"^\d{1,2}:\d{2}$", description="Expected arrival, 24h H:MM")
    delay: int = Field(default=0, ge=0, description="Delay in minutes")
    passengers: int = Field(default=0, ge=0)
    priority: TrainPriority
    type: TrainType

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)
