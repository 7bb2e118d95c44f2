"""
Pydantic schemas for AI scheduling requests and recommendations.
"""
from pydantic import BaseModel, Field, ConfigDict
from pydantic.alias_generators import to_camel
from typing import Optional, List, Dict, Any
from enum import Enum


CAMEL_CONFIG = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class OptimizationGoal(str, Enum):
    MINIMIZE_DELAYS = "minimize_delays"
    MAXIMIZE_THROUGHPUT = "maximize_throughput"
    OPTIMIZE_FUEL = "optimize_fuel"
    PASSENGER_COMFORT = "passenger_comfort"
    BALANCED = "balanced"


class TimeHorizon(str, Enum):
    ONE_HOUR = "1_hour"
    TWO_HOURS = "2_hours"
    FOUR_HOURS = "4_hours"
    EIGHT_HOURS = "8_hours"
    TWENTY_FOUR_HOURS = "24_hours"


class WeatherCondition(str, Enum):
    NORMAL = "normal"
    LIGHT_RAIN = "light_rain"
    HEAVY_RAIN = "heavy_rain"
    FOG = "fog"
    EXTREME_WEATHER = "extreme_weather"


class RecommendationStatus(str, Enum):
    PENDING = "pending"
    APPLIED = "applied"
    REJECTED = "rejected"


class AnalysisState(str, Enum):
    IDLE = "idle"
    RUNNING = "running"
    DONE = "done"


class ModelInput(BaseModel):
    """Minimal projection of a train record in the AI model's input format."""
    id: str = Field(..., description="Public train number")
    type: str = Field(..., description="Lower-cased train type")
    rel_arrival: int = 0
    rel_departure: int = 0
    delay: int = Field(default=0, ge=0)
    passengers: int = Field(default=0, ge=0)
    platform: int = 1


class PriorityWeights(BaseModel):
    """Independent percentage sliders; they are not required to sum to 100."""
    on_time: int = Field(default=80, ge=0, le=100)
    passenger_comfort: int = Field(default=60, ge=0, le=100)
    fuel_efficiency: int = Field(default=40, ge=0, le=100)
    track_utilization: int = Field(default=70, ge=0, le=100)

    model_config = CAMEL_CONFIG


class RecommendationRequest(BaseModel):
    """Selected trains plus the optimization parameters chosen by the controller."""
    trains: List[ModelInput] = Field(default_factory=list)
    optimization_goal: OptimizationGoal = OptimizationGoal.MINIMIZE_DELAYS
    time_horizon: TimeHorizon = TimeHorizon.TWO_HOURS
    weather_conditions: WeatherCondition = WeatherCondition.NORMAL
    special_events: str = ""
    priority_weights: PriorityWeights = Field(default_factory=PriorityWeights)

    model_config = CAMEL_CONFIG

    def to_wire(self) -> Dict[str, Any]:
        """Body sent to the remote AI model."""
        return {
            "trains": [t.model_dump(mode="json") for t in self.trains],
            "optimization_goal": self.optimization_goal.value,
            "time_horizon": self.time_horizon.value,
            "weather_conditions": self.weather_conditions.value,
            "special_events": self.special_events,
            "priority_weights": self.priority_weights.model_dump(by_alias=True),
        }


class RequestParametersUpdate(BaseModel):
    """Partial update of the draft request parameters."""
    optimization_goal: Optional[OptimizationGoal] = None
    time_horizon: Optional[TimeHorizon] = None
    weather_conditions: Optional[WeatherCondition] = None
    special_events: Optional[str] = None
    priority_weights: Optional[PriorityWeights] = None

    model_config = CAMEL_CONFIG


class CurrentSchedule(BaseModel):
    """Snapshot of the train at generation time."""
    current_location: str
    next_station: str
    eta: str
    delay: int

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


class RecommendedChanges(BaseModel):
    new_route: Optional[str] = None
    new_eta: str = Field(..., alias="newETA")
    delay_reduction: int = Field(..., ge=0)
    alternate_stations: Optional[List[str]] = None

    model_config = CAMEL_CONFIG


class Impact(BaseModel):
    delay_reduction: int = Field(..., ge=0)
    passenger_impact: str
    fuel_savings: int
    confidence_score: int = Field(..., ge=0, le=100)

    model_config = CAMEL_CONFIG


class Recommendation(BaseModel):
    """One generated schedule change for one train."""
    id: str
    train_id: str = Field(..., description="Internal id of the target train")
    train_name: str
    current_schedule: CurrentSchedule
    recommended_changes: RecommendedChanges
    impact: Impact
    reasoning: str
    status: RecommendationStatus = RecommendationStatus.PENDING

    model_config = CAMEL_CONFIG


class GenerationError(BaseModel):
    """A train that was skipped while generating recommendations."""
    train_number: str
    message: str

    model_config = CAMEL_CONFIG


class AnalysisSummary(BaseModel):
    """Aggregate view over the current recommendation set."""
    state: AnalysisState
    just_generated: bool = False
    source: Optional[str] = None
    count: int = 0
    applied_count: int = 0
    total_delay_reduction: int = 0
    average_confidence: int = 0
    errors: List[GenerationError] = Field(default_factory=list)

    model_config = CAMEL_CONFIG


class SelectionMode(str, Enum):
    EXPLICIT = "explicit"
    ALL = "all"
    DELAYED = "delayed"


class TrainSelection(BaseModel):
    """Which trains to feed into the AI model."""
    mode: SelectionMode = SelectionMode.EXPLICIT
    train_numbers: List[str] = Field(default_factory=list)

    model_config = CAMEL_CONFIG
