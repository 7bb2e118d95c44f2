"""
Application state shared by all request handlers.
"""
from dataclasses import dataclass, field
from typing import List
import random

from app.core.config import Settings
from app.schemas.metrics import EmergencyAlert
from app.schemas.recommendation import RecommendationRequest
from app.services.fleet.store import TrainRecordStore
from app.services.metrics.simulator import MetricsSimulator, seed_alerts
from app.services.prediction.client import PredictorClient
from app.services.scheduling.lifecycle import RecommendationLifecycleManager
from app.services.scheduling.providers import (
    FallbackProvider, RemoteProvider, SyntheticProvider, create_session
)


@dataclass
class DashboardState:
    """Everything the control center keeps in memory for one session."""
    store: TrainRecordStore
    lifecycle: RecommendationLifecycleManager
    metrics: MetricsSimulator
    predictor: PredictorClient
    draft: RecommendationRequest = field(default_factory=RecommendationRequest)
    alerts: List[EmergencyAlert] = field(default_factory=seed_alerts)


def create_dashboard_state(settings: Settings, rng: random.Random = None) -> DashboardState:
    """Wire the store, providers and lifecycle manager from settings."""
    rng = rng or random.Random(settings.random_seed)
    store = TrainRecordStore.from_seed()

    synthetic = SyntheticProvider(rng=rng, eta_rollover=settings.eta_hour_rollover)
    remote = RemoteProvider(
        endpoint=settings.ai_model_endpoint,
        session=create_session(settings.ai_model_max_retries),
        timeout=settings.ai_model_timeout_seconds,
        api_key=settings.ai_model_api_key,
        field_fallback=synthetic,
    )
    lifecycle = RecommendationLifecycleManager(store, FallbackProvider(remote, synthetic))

    metrics = MetricsSimulator(rng=random.Random(settings.random_seed))
    metrics.realtime_enabled = settings.realtime_metrics_enabled

    predictor = PredictorClient(settings.predictor_url, timeout=settings.predictor_timeout_seconds)

    return DashboardState(store=store, lifecycle=lifecycle, metrics=metrics, predictor=predictor)
