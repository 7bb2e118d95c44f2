"""
Pydantic schemas for the backend predictor and model input exports.
"""
from pydantic import BaseModel, Field, ConfigDict
from pydantic.alias_generators import to_camel
from typing import Optional, List


class DepartureModelInput(BaseModel):
    """One row of the departure model input form."""
    id: str = ""
    train_id: str = ""
    type: str = ""
    delay: int = Field(default=0, ge=0)
    passenger_count: int = Field(default=0, ge=0)
    platform: int = 1
    departure_time: str = ""
    arrival_time: str = ""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def is_complete(self) -> bool:
        return bool(self.train_id and self.type)


class ArrivalModelInput(BaseModel):
    """One row of the arrival model input form."""
    id: str = ""
    train_id: str = ""
    type: str = ""
    passenger_count: int = Field(default=0, ge=0)
    arrival_time: str = ""
    current_speed: float = Field(default=0, ge=0)
    distance_left: float = Field(default=0, ge=0)

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def is_complete(self) -> bool:
        return bool(self.train_id and self.type)


class TrainData(BaseModel):
    """Train payload in the format the backend predictor expects."""
    train_id: str
    departure_time: str
    destination: str
    delay: int
    passengers: int
    type: str
    platform: int

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class PredictionResponse(BaseModel):
    priority: str
    confidence: Optional[float] = None
    message: Optional[str] = None


class DeparturePredictionRequest(BaseModel):
    inputs: List[DepartureModelInput] = Field(..., description="Departure model input rows")


class ArrivalExportRequest(BaseModel):
    inputs: List[ArrivalModelInput] = Field(..., description="Arrival model input rows")
