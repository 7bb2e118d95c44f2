"""
Domain errors raised by the scheduling services.

Routes translate these into HTTP responses; services never raise HTTPException.
"""


class SchedulingError(Exception):
    """Base class for all rail control center errors."""


class ValidationError(SchedulingError):
    """Input rejected before any state was touched (e.g. no trains selected)."""


class ProviderError(SchedulingError):
    """A recommendation provider could not produce a result."""


class ProviderTransportError(ProviderError):
    """Network failure, non-2xx status or undecodable body from the remote model."""

    def __init__(self, message: str, status_code: int = None):
        super().__init__(message)
        self.status_code = status_code


class InvalidStateTransition(SchedulingError):
    """Recommendation status does not allow the requested transition."""

    def __init__(self, recommendation_id: str, current: str, action: str):
        super().__init__(
            f"Cannot {action} recommendation {recommendation_id}: status is '{current}'"
        )
        self.recommendation_id = recommendation_id
        self.current = current
        self.action = action


class AnalysisInProgressError(SchedulingError):
    """An analysis run is already in flight."""


class RecommendationNotFoundError(SchedulingError):
    """No recommendation with the given id in the current result set."""


class TrainNotFoundError(SchedulingError):
    """Train is not (or no longer) present in the train record store."""


class PredictorError(SchedulingError):
    """The backend predictor failed to answer."""
