"""
Tests for the remote, synthetic and fallback recommendation providers.
"""
import random

import pytest
import requests
from unittest.mock import MagicMock

from app.core.exceptions import ProviderTransportError
from app.schemas.recommendation import RecommendationStatus
from app.services.scheduling.providers import (
    ALTERNATE_PLATFORMS, REASONING_TEMPLATES, FallbackProvider,
    RecommendationProvider, RemoteProvider, SyntheticProvider, compute_new_eta
)


class TestComputeNewEta:
    """ETA arithmetic in legacy and rollover modes."""

    def test_legacy_subtracts_minutes(self):
        assert compute_new_eta("15:45", 10) == "15:35"

    def test_legacy_clamps_at_zero_without_borrowing(self):
        assert compute_new_eta("15:05", 10) == "15:00"

    def test_legacy_hour_is_unpadded(self):
        assert compute_new_eta("09:30", 5) == "9:25"

    def test_rollover_borrows_from_hour(self):
        assert compute_new_eta("15:05", 10, rollover=True) == "14:55"

    def test_rollover_wraps_midnight(self):
        assert compute_new_eta("00:05", 10, rollover=True) == "23:55"

    @pytest.mark.parametrize("eta", ["bogus", "25:00", "12:60", "12"])
    def test_malformed_eta(self, eta):
        with pytest.raises(ValueError):
            compute_new_eta(eta, 5)


class TestSyntheticProvider:
    """Randomized fallback generation."""

    def test_unreachable_model_scenario(self, store, shatabdi_request, rng):
        provider = SyntheticProvider(rng=rng)
        batch = provider.generate(shatabdi_request, store.all())

        assert batch.source == "synthetic"
        assert batch.errors == []
        assert len(batch.recommendations) == 1

        rec = batch.recommendations[0]
        reduction = rec.recommended_changes.delay_reduction
        assert 5 <= reduction < 17
        assert rec.status == RecommendationStatus.PENDING
        assert rec.train_id == "T002"
        assert rec.train_name == "Shatabdi Express (12002)"

        hours, minutes = rec.recommended_changes.new_eta.split(":")
        assert hours == "15"
        assert int(minutes) == max(0, 45 - reduction)

    def test_value_ranges_over_many_seeds(self, store, shatabdi_request):
        for seed in range(50):
            batch = SyntheticProvider(rng=random.Random(seed)).generate(shatabdi_request, store.all())
            rec = batch.recommendations[0]

            assert 5 <= rec.impact.fuel_savings < 20
            assert 80 <= rec.impact.confidence_score < 100
            assert rec.impact.delay_reduction == rec.recommended_changes.delay_reduction
            expected = "High Improvement" if rec.impact.delay_reduction > 10 else "Moderate Improvement"
            assert rec.impact.passenger_impact == expected
            templates = [t.format(reduction=rec.impact.delay_reduction) for t in REASONING_TEMPLATES]
            assert rec.reasoning in templates
            assert rec.recommended_changes.new_route in (
                None,
                "Alternate via Bypass Junction",
                "Alternate via Express Route",
                "Alternate via Priority Track",
            )
            assert rec.recommended_changes.alternate_stations in (None, ALTERNATE_PLATFORMS)

    def test_zero_delay_gives_minimum_reduction(self, make_train, rng):
        provider = SyntheticProvider(rng=rng)
        assert provider.delay_reduction(make_train(delay=0)) == 5
        assert provider.delay_reduction(make_train(delay=1)) == 5

    def test_same_seed_same_output(self, store, all_trains_request):
        first = SyntheticProvider(rng=random.Random(7)).generate(all_trains_request, store.all())
        second = SyntheticProvider(rng=random.Random(7)).generate(all_trains_request, store.all())

        strip = lambda batch: [r.model_dump(exclude={"id"}) for r in batch.recommendations]
        assert strip(first) == strip(second)

    def test_one_per_selected_train_in_store(self, store, all_trains_request, rng):
        store.remove("T003")
        batch = SyntheticProvider(rng=rng).generate(all_trains_request, store.all())

        assert [r.train_id for r in batch.recommendations] == ["T001", "T002", "T004"]
        assert len({r.id for r in batch.recommendations}) == 3

    def test_malformed_train_skipped(self, store, all_trains_request, rng):
        trains = store.all()
        trains[1] = trains[1].model_copy(update={"eta": "not-a-time"})

        batch = SyntheticProvider(rng=rng).generate(all_trains_request, trains)

        assert len(batch.recommendations) == 3
        assert len(batch.errors) == 1
        assert batch.errors[0].train_number == "12002"

    def test_rollover_mode(self, make_train, rng):
        provider = SyntheticProvider(rng=rng, eta_rollover=True)
        train = make_train(eta="10:02", delay=0)
        rec = provider.synthesize(train, "rec_1_0")
        assert rec.recommended_changes.new_eta == "09:57"


class TestRemoteProvider:
    """Remote AI model calls and field-level fallback."""

    def _provider(self, session, rng, **kwargs):
        return RemoteProvider(
            endpoint="http://model.local/recommend",
            session=session,
            timeout=5,
            field_fallback=SyntheticProvider(rng=rng),
            **kwargs
        )

    def test_no_endpoint_configured(self, store, shatabdi_request):
        provider = RemoteProvider(endpoint=None, session=MagicMock())
        with pytest.raises(ProviderTransportError):
            provider.generate(shatabdi_request, store.all())

    def test_transport_failure(self, store, shatabdi_request, rng):
        session = MagicMock()
        session.post.side_effect = requests.exceptions.ConnectionError("connection refused")

        with pytest.raises(ProviderTransportError):
            self._provider(session, rng).generate(shatabdi_request, store.all())

    def test_non_success_status(self, store, shatabdi_request, rng, mock_response):
        session = MagicMock()
        session.post.return_value = mock_response(status_code=503)

        with pytest.raises(ProviderTransportError) as exc_info:
            self._provider(session, rng).generate(shatabdi_request, store.all())
        assert exc_info.value.status_code == 503

    def test_invalid_json_body(self, store, shatabdi_request, rng, mock_response):
        session = MagicMock()
        session.post.return_value = mock_response(json_error=ValueError("Expecting value"))

        with pytest.raises(ProviderTransportError):
            self._provider(session, rng).generate(shatabdi_request, store.all())

    def test_sends_wire_format(self, store, shatabdi_request, rng, mock_response):
        session = MagicMock()
        session.post.return_value = mock_response(payload={})

        self._provider(session, rng, api_key="secret").generate(shatabdi_request, store.all())

        args, kwargs = session.post.call_args
        assert args[0] == "http://model.local/recommend"
        assert kwargs["timeout"] == 5
        assert kwargs["headers"]["Authorization"] == "Bearer secret"

        body = kwargs["json"]
        assert body["trains"] == [{
            "id": "12002", "type": "express", "rel_arrival": 0, "rel_departure": 0,
            "delay": 15, "passengers": 891, "platform": 1
        }]
        assert body["optimization_goal"] == "minimize_delays"
        assert body["time_horizon"] == "2_hours"
        assert body["weather_conditions"] == "normal"
        assert body["special_events"] == ""
        assert body["priority_weights"] == {
            "onTime": 80, "passengerComfort": 60, "fuelEfficiency": 40, "trackUtilization": 70
        }

    def test_full_remote_answer_is_used(self, store, shatabdi_request, rng, mock_response):
        session = MagicMock()
        session.post.return_value = mock_response(payload={"recommendations": [{
            "train_id": "12002",
            "delay_reduction": 12,
            "new_eta": "15:33",
            "alternative_route": "Via Rajpura",
            "alternative_platforms": ["Platform 4"],
            "passenger_impact": "Significant",
            "fuel_savings": 9,
            "confidence_score": 91,
            "reasoning": "Clear path on down line",
        }]})

        batch = self._provider(session, rng).generate(shatabdi_request, store.all())
        rec = batch.recommendations[0]

        assert batch.source == "remote"
        assert rec.recommended_changes.delay_reduction == 12
        assert rec.recommended_changes.new_eta == "15:33"
        assert rec.recommended_changes.new_route == "Via Rajpura"
        assert rec.recommended_changes.alternate_stations == ["Platform 4"]
        assert rec.impact.passenger_impact == "Significant"
        assert rec.impact.fuel_savings == 9
        assert rec.impact.confidence_score == 91
        assert rec.reasoning == "Clear path on down line"

    def test_missing_fields_fall_back_individually(self, store, shatabdi_request, rng, mock_response):
        session = MagicMock()
        session.post.return_value = mock_response(payload={"recommendations": [{
            "train_id": "12002",
            "delay_reduction": 4,
        }]})

        rec = self._provider(session, rng).generate(shatabdi_request, store.all()).recommendations[0]

        assert rec.recommended_changes.delay_reduction == 4
        assert rec.recommended_changes.new_eta == "15:41"
        assert rec.impact.passenger_impact == "Moderate Improvement"
        assert 5 <= rec.impact.fuel_savings < 20
        assert 80 <= rec.impact.confidence_score < 100
        assert rec.recommended_changes.new_route is None
        assert rec.recommended_changes.alternate_stations is None

    def test_train_absent_from_answer_is_synthesized(self, store, all_trains_request, rng, mock_response):
        session = MagicMock()
        session.post.return_value = mock_response(payload={"status": "ok"})

        batch = self._provider(session, rng).generate(all_trains_request, store.all())

        assert len(batch.recommendations) == 4
        assert all(5 <= r.impact.delay_reduction for r in batch.recommendations)

    def test_bad_entry_skipped_batch_continues(self, store, all_trains_request, rng, mock_response):
        session = MagicMock()
        session.post.return_value = mock_response(payload={"recommendations": [
            {"train_id": "12301", "delay_reduction": -3},
            {"train_id": "12624", "confidence_score": "high"},
        ]})

        batch = self._provider(session, rng).generate(all_trains_request, store.all())

        assert [e.train_number for e in batch.errors] == ["12301", "12624"]
        assert [r.train_id for r in batch.recommendations] == ["T002", "T004"]

    def test_non_finite_numbers_skipped_batch_continues(self, store, all_trains_request, rng, mock_response):
        session = MagicMock()
        session.post.return_value = mock_response(payload={"recommendations": [
            {"train_id": "12002", "delay_reduction": float("inf")},
            {"train_id": "12624", "fuel_savings": float("-inf")},
        ]})
        provider = FallbackProvider(self._provider(session, rng), SyntheticProvider(rng=rng))

        batch = provider.generate(all_trains_request, store.all())

        assert batch.source == "remote"
        assert [e.train_number for e in batch.errors] == ["12002", "12624"]
        assert [r.train_id for r in batch.recommendations] == ["T001", "T004"]


def test_provider_base_is_abstract():
    with pytest.raises(TypeError):
        RecommendationProvider()


class TestFallbackProvider:

    def test_falls_back_on_transport_error(self, store, shatabdi_request, rng):
        remote = RemoteProvider(endpoint=None, session=MagicMock())
        provider = FallbackProvider(remote, SyntheticProvider(rng=rng))

        batch = provider.generate(shatabdi_request, store.all())

        assert batch.source == "synthetic"
        assert len(batch.recommendations) == 1

    def test_uses_remote_when_available(self, store, shatabdi_request, rng, mock_response):
        session = MagicMock()
        session.post.return_value = mock_response(payload={"recommendations": []})
        remote = RemoteProvider(endpoint="http://model.local", session=session)
        provider = FallbackProvider(remote, SyntheticProvider(rng=rng))

        assert provider.generate(shatabdi_request, store.all()).source == "remote"
