"""
Test configuration and fixtures for the rail control center.
"""
import os
import random

import pytest
from unittest.mock import MagicMock
from fastapi.testclient import TestClient

# Keep the tests offline regardless of the developer's .env
os.environ["AI_MODEL_ENDPOINT"] = ""
os.environ["REALTIME_METRICS_ENABLED"] = "false"

from app.main import app
from app.core.config import Settings
from app.core.dependencies import get_dashboard_state
from app.core.state import create_dashboard_state
from app.schemas.recommendation import RecommendationRequest, TrainSelection
from app.schemas.train import TrainRecord
from app.services.fleet.store import TrainRecordStore
from app.services.scheduling.normalizer import build_request


@pytest.fixture
def rng():
    """Seeded random source so synthetic output is reproducible."""
    return random.Random(1234)


@pytest.fixture
def store():
    return TrainRecordStore.from_seed()


@pytest.fixture
def shatabdi_request(store):
    """Request selecting only the delayed Shatabdi Express (12002)."""
    return build_request(store, TrainSelection(train_numbers=["12002"]))


@pytest.fixture
def all_trains_request(store):
    return build_request(store, TrainSelection(mode="all"))


@pytest.fixture
def make_train():
    """Factory for ad-hoc train records."""
    def _make(**overrides):
        data = {
            "id": "T900",
            "name": "Test Express",
            "number": "99999",
            "route": "A → B",
            "zone": "Northern",
            "status": "Delayed",
            "current_location": "Alpha",
            "next_station": "Beta",
            "eta": "10:30",
            "delay": 20,
            "passengers": 500,
            "priority": "Medium",
            "type": "Express",
        }
        data.update(overrides)
        return TrainRecord(**data)
    return _make


@pytest.fixture
def mock_response():
    """Factory for fake requests responses."""
    def _make(status_code=200, payload=None, json_error=None):
        response = MagicMock()
        response.status_code = status_code
        response.ok = 200 <= status_code < 400
        response.reason = "OK" if response.ok else "Service Unavailable"
        if json_error is not None:
            response.json.side_effect = json_error
        else:
            response.json.return_value = payload if payload is not None else {}
        return response
    return _make


@pytest.fixture
def test_settings():
    return Settings(ai_model_endpoint=None, random_seed=42, realtime_metrics_enabled=False)


@pytest.fixture
def dashboard_state(test_settings):
    return create_dashboard_state(test_settings)


@pytest.fixture
def client(dashboard_state):
    """Test client bound to a fresh dashboard state."""
    app.dependency_overrides[get_dashboard_state] = lambda: dashboard_state
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def empty_request():
    return RecommendationRequest()
