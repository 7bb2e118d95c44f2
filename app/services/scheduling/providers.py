"""
Recommendation providers: the remote AI model and the synthetic fallback.
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional
import logging
import random
import time

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from app.core.exceptions import ProviderError, ProviderTransportError
from app.schemas.train import TrainRecord
from app.schemas.recommendation import (
    CurrentSchedule, GenerationError, Impact, Recommendation,
    RecommendationRequest, RecommendedChanges
)

logger = logging.getLogger(__name__)

MIN_DELAY_REDUCTION = 5
HIGH_IMPROVEMENT_THRESHOLD = 10
ALTERNATE_ROUTES = ["Bypass Junction", "Express Route", "Priority Track"]
ALTERNATE_PLATFORMS = ["Platform 2", "Platform 5"]
REASONING_TEMPLATES = [
    "Rerouting through less congested track section reduces delay by {reduction} minutes",
    "Track utilization data suggests optimal time slot available",
    "Weather conditions favorable for speed optimization",
    "Passenger density allows for schedule adjustment",
]
RETRY_STATUS_CODES = [502, 503, 504]


@dataclass
class GenerationBatch:
    """Output of one provider call."""
    recommendations: List[Recommendation] = field(default_factory=list)
    errors: List[GenerationError] = field(default_factory=list)
    source: str = "synthetic"


def compute_new_eta(eta: str, reduction: int, rollover: bool = False) -> str:
    """
    Move an H:MM ETA earlier by `reduction` minutes.

    Without rollover the hour is kept and the minutes are clamped at zero, so
    15:05 minus 10 gives 15:00. That is the legacy dashboard output and is
    wrong for any reduction larger than the minutes field.
    """
    hours_str, minutes_str = eta.split(":")
    hours, minutes = int(hours_str), int(minutes_str)
    if not (0 <= hours < 24 and 0 <= minutes < 60):
        raise ValueError(f"ETA out of range: {eta}")

    if not rollover:
        return f"{hours}:{max(0, minutes - reduction):02d}"

    total = (hours * 60 + minutes - reduction) % (24 * 60)
    return f"{total // 60:02d}:{total % 60:02d}"


def passenger_impact_for(reduction: int) -> str:
    if reduction > HIGH_IMPROVEMENT_THRESHOLD:
        return "High Improvement"
    return "Moderate Improvement"


def selected_trains(request: RecommendationRequest, trains: List[TrainRecord]) -> List[TrainRecord]:
    """Trains from the store whose public number is in the request."""
    numbers = {t.id for t in request.trains}
    return [train for train in trains if train.number in numbers]


class RecommendationProvider(ABC):
    """Abstract base class for recommendation generation."""

    source = "unknown"

    @abstractmethod
    def generate(
        self,
        request: RecommendationRequest,
        trains: List[TrainRecord]
    ) -> GenerationBatch:
        """
        Generate one recommendation per selected train.

        Args:
            request: Normalized model request
            trains: Current train record snapshot

        Returns:
            Batch of recommendations plus per-train errors
        """


class SyntheticProvider(RecommendationProvider):
    """
    Randomized recommendations with a fixed shape.

    The values are cosmetic, not predictions. Priority weights are ignored.
    """

    source = "synthetic"

    def __init__(self, rng: random.Random = None, eta_rollover: bool = False):
        self.rng = rng or random.Random()
        self.eta_rollover = eta_rollover

    # Per-field rules, also used to fill gaps in remote responses

    def delay_reduction(self, train: TrainRecord) -> int:
        upper = (train.delay * 4) // 5 + MIN_DELAY_REDUCTION
        if upper <= MIN_DELAY_REDUCTION:
            return MIN_DELAY_REDUCTION
        return self.rng.randrange(MIN_DELAY_REDUCTION, upper)

    def new_eta(self, train: TrainRecord, reduction: int) -> str:
        return compute_new_eta(train.eta, reduction, rollover=self.eta_rollover)

    def fuel_savings(self) -> int:
        return self.rng.randrange(5, 20)

    def confidence_score(self) -> int:
        return self.rng.randrange(80, 100)

    def reasoning(self, reduction: int) -> str:
        return self.rng.choice(REASONING_TEMPLATES).format(reduction=reduction)

    def alternate_route(self) -> Optional[str]:
        if self.rng.random() > 0.5:
            return f"Alternate via {self.rng.choice(ALTERNATE_ROUTES)}"
        return None

    def alternate_stations(self) -> Optional[List[str]]:
        if self.rng.random() > 0.7:
            return list(ALTERNATE_PLATFORMS)
        return None

    def synthesize(self, train: TrainRecord, rec_id: str) -> Recommendation:
        reduction = self.delay_reduction(train)
        new_eta = self.new_eta(train, reduction)
        return build_recommendation(
            train,
            rec_id,
            new_eta=new_eta,
            delay_reduction=reduction,
            new_route=self.alternate_route(),
            alternate_stations=self.alternate_stations(),
            passenger_impact=passenger_impact_for(reduction),
            fuel_savings=self.fuel_savings(),
            confidence_score=self.confidence_score(),
            reasoning=self.reasoning(reduction),
        )

    def generate(self, request, trains):
        batch = GenerationBatch(source=self.source)
        stamp = int(time.time() * 1000)

        for index, train in enumerate(selected_trains(request, trains)):
            try:
                batch.recommendations.append(self.synthesize(train, f"rec_{stamp}_{index}"))
            except (ValueError, TypeError) as e:
                logger.warning(f"Skipping train {train.number}: {e}")
                batch.errors.append(GenerationError(train_number=train.number, message=str(e)))

        logger.info(f"Synthesized {len(batch.recommendations)} recommendations")
        return batch


def build_recommendation(
    train: TrainRecord,
    rec_id: str,
    *,
    new_eta: str,
    delay_reduction: int,
    new_route: Optional[str],
    alternate_stations: Optional[List[str]],
    passenger_impact: str,
    fuel_savings: int,
    confidence_score: int,
    reasoning: str
) -> Recommendation:
    return Recommendation(
        id=rec_id,
        train_id=train.id,
        train_name=f"{train.name} ({train.number})",
        current_schedule=CurrentSchedule(
            current_location=train.current_location,
            next_station=train.next_station,
            eta=train.eta,
            delay=train.delay,
        ),
        recommended_changes=RecommendedChanges(
            new_route=new_route,
            new_eta=new_eta,
            delay_reduction=delay_reduction,
            alternate_stations=alternate_stations,
        ),
        impact=Impact(
            delay_reduction=delay_reduction,
            passenger_impact=passenger_impact,
            fuel_savings=fuel_savings,
            confidence_score=confidence_score,
        ),
        reasoning=reasoning,
    )


def create_session(max_retries: int = 0) -> requests.Session:
    """Create a requests session with retry configuration."""
    session = requests.Session()

    if max_retries > 0:
        retry_strategy = Retry(
            total=max_retries,
            backoff_factor=0.5,
            status_forcelist=RETRY_STATUS_CODES,
            allowed_methods=["POST"],
            raise_on_status=False,
        )
        adapter = HTTPAdapter(max_retries=retry_strategy)
        session.mount("http://", adapter)
        session.mount("https://", adapter)

    return session


class RemoteProvider(RecommendationProvider):
    """
    Calls the external AI scheduling model.

    Any field missing from the model's answer is filled by the synthetic rule
    for that field alone.
    """

    source = "remote"

    def __init__(
        self,
        endpoint: Optional[str],
        session: requests.Session = None,
        timeout: float = 10.0,
        api_key: Optional[str] = None,
        field_fallback: SyntheticProvider = None
    ):
        self.endpoint = endpoint
        self.session = session or create_session()
        self.timeout = timeout
        self.api_key = api_key
        self.field_fallback = field_fallback or SyntheticProvider()

    def _post(self, request: RecommendationRequest) -> Any:
        if not self.endpoint:
            raise ProviderTransportError("AI model endpoint is not configured")

        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"

        logger.info(f"Sending {len(request.trains)} trains to AI model at {self.endpoint}")
        try:
            response = self.session.post(
                self.endpoint,
                json=request.to_wire(),
                headers=headers,
                timeout=self.timeout,
            )
        except requests.exceptions.RequestException as e:
            raise ProviderTransportError(f"AI model request failed: {e}") from e

        if not response.ok:
            raise ProviderTransportError(
                f"AI Model API Error: {response.status_code} {response.reason}",
                status_code=response.status_code,
            )

        try:
            return response.json()
        except ValueError as e:
            raise ProviderTransportError(f"AI model returned an invalid body: {e}") from e

    @staticmethod
    def _index_by_train(payload: Any) -> Dict[str, Dict[str, Any]]:
        entries = payload.get("recommendations") if isinstance(payload, dict) else None
        if not isinstance(entries, list):
            return {}
        indexed = {}
        for entry in entries:
            if isinstance(entry, dict) and entry.get("train_id") is not None:
                indexed.setdefault(str(entry["train_id"]), entry)
        return indexed

    def _merge(self, train: TrainRecord, rec_id: str, remote: Dict[str, Any]) -> Recommendation:
        rules = self.field_fallback

        reduction = remote.get("delay_reduction")
        reduction = rules.delay_reduction(train) if reduction is None else int(reduction)

        new_eta = remote.get("new_eta")
        new_eta = rules.new_eta(train, reduction) if new_eta is None else str(new_eta)

        passenger_impact = remote.get("passenger_impact")
        if passenger_impact is None:
            passenger_impact = passenger_impact_for(reduction)

        fuel_savings = remote.get("fuel_savings")
        fuel_savings = rules.fuel_savings() if fuel_savings is None else int(fuel_savings)

        confidence = remote.get("confidence_score")
        confidence = rules.confidence_score() if confidence is None else int(confidence)

        reasoning = remote.get("reasoning")
        if reasoning is None:
            reasoning = rules.reasoning(reduction)

        return build_recommendation(
            train,
            rec_id,
            new_eta=new_eta,
            delay_reduction=reduction,
            new_route=remote.get("alternative_route"),
            alternate_stations=remote.get("alternative_platforms"),
            passenger_impact=str(passenger_impact),
            fuel_savings=fuel_savings,
            confidence_score=confidence,
            reasoning=str(reasoning),
        )

    def generate(self, request, trains):
        payload = self._post(request)
        by_train = self._index_by_train(payload)

        batch = GenerationBatch(source=self.source)
        stamp = int(time.time() * 1000)

        for index, train in enumerate(selected_trains(request, trains)):
            try:
                rec = self._merge(train, f"rec_{stamp}_{index}", by_train.get(train.number, {}))
                batch.recommendations.append(rec)
            except (ValueError, TypeError, OverflowError) as e:
                logger.warning(f"Skipping train {train.number} from AI model response: {e}")
                batch.errors.append(GenerationError(train_number=train.number, message=str(e)))

        logger.info(
            f"AI model returned {len(by_train)} entries, "
            f"built {len(batch.recommendations)} recommendations"
        )
        return batch


class FallbackProvider(RecommendationProvider):
    """Uses the primary provider and falls back on any provider error."""

    def __init__(self, primary: RecommendationProvider, fallback: RecommendationProvider):
        self.primary = primary
        self.fallback = fallback

    def generate(self, request, trains):
        try:
            return self.primary.generate(request, trains)
        except ProviderError as e:
            logger.warning(f"AI model unavailable, falling back to {self.fallback.source} recommendations: {e}")
            return self.fallback.generate(request, trains)
