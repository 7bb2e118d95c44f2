"""
Client for the backend predictor used by the data management screen.
"""
from datetime import datetime, timezone
from typing import List, Tuple
import json
import logging

import requests

from app.core.exceptions import PredictorError, ValidationError
from app.schemas.prediction import (
    ArrivalModelInput, DepartureModelInput, PredictionResponse, TrainData
)
from app.services.scheduling.export import export_filename

logger = logging.getLogger(__name__)

DEFAULT_DEPARTURE_TIME = "00:00"
DEFAULT_DESTINATION = "Destination Station"


def to_train_data(row: DepartureModelInput) -> TrainData:
    return TrainData(
        train_id=row.train_id,
        departure_time=row.departure_time or DEFAULT_DEPARTURE_TIME,
        destination=DEFAULT_DESTINATION,
        delay=row.delay,
        passengers=row.passenger_count,
        type=row.type,
        platform=row.platform,
    )


class PredictorClient:
    """Posts departure inputs to the predictor and returns its priority call."""

    def __init__(self, url: str, timeout: float = 10.0, session: requests.Session = None):
        self.url = url
        self.timeout = timeout
        self.session = session or requests.Session()

    def predict(self, inputs: List[DepartureModelInput], now: datetime = None) -> PredictionResponse:
        complete = [row for row in inputs if row.is_complete()]
        if not complete:
            raise ValidationError("Please fill at least one complete departure input")

        now = now or datetime.now(timezone.utc)
        body = {
            "trains": [to_train_data(row).model_dump(by_alias=True) for row in complete],
            "timestamp": now.isoformat(),
        }

        logger.info(f"Sending {len(complete)} trains to predictor at {self.url}")
        try:
            response = self.session.post(self.url, json=body, timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            raise PredictorError(f"Failed to connect to backend: {e}") from e

        if not response.ok:
            raise PredictorError(f"Backend error: {response.status_code} {response.reason}")

        try:
            result = PredictionResponse.model_validate(response.json())
        except ValueError as e:
            raise PredictorError(f"Backend returned an invalid prediction: {e}") from e

        logger.info(f"Received prediction: priority={result.priority}")
        return result


def export_arrival_inputs(inputs: List[ArrivalModelInput], now: datetime = None) -> Tuple[str, str]:
    """Serialize complete arrival inputs for download."""
    complete = [row for row in inputs if row.is_complete()]
    if not complete:
        raise ValidationError("Please fill at least one complete arrival input")

    now = now or datetime.now(timezone.utc)
    document = {
        "model": "arrival",
        "trains": [row.model_dump(by_alias=True) for row in complete],
        "exportedAt": now.isoformat(),
    }
    return export_filename(now, prefix="arrival-model-input"), json.dumps(document, indent=2)
