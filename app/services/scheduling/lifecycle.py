"""
Recommendation lifecycle: analysis runs, apply and reject.
"""
from typing import List, Optional
import logging
import threading

from app.core.exceptions import (
    AnalysisInProgressError, InvalidStateTransition,
    RecommendationNotFoundError, TrainNotFoundError, ValidationError
)
from app.schemas.recommendation import (
    AnalysisState, AnalysisSummary, GenerationError, Recommendation,
    RecommendationRequest, RecommendationStatus
)
from app.services.fleet.store import TrainRecordStore
from app.services.scheduling.providers import RecommendationProvider

logger = logging.getLogger(__name__)


class RecommendationLifecycleManager:
    """
    Owns the current recommendation set and applies accepted changes to the
    train record store.

    At most one analysis runs at a time; a second run while one is in flight
    is rejected, not queued. The result list is swapped in only once it is
    complete.
    """

    def __init__(self, store: TrainRecordStore, provider: RecommendationProvider):
        self.store = store
        self.provider = provider
        self.state = AnalysisState.IDLE
        self.just_generated = False
        self.source: Optional[str] = None
        self._recommendations: List[Recommendation] = []
        self._errors: List[GenerationError] = []
        self._run_lock = threading.Lock()

    def run_analysis(self, request: RecommendationRequest) -> AnalysisSummary:
        if not request.trains:
            raise ValidationError("Please select at least one train for analysis")

        if not self._run_lock.acquire(blocking=False):
            raise AnalysisInProgressError("An AI analysis is already running")

        previous_state = self.state
        try:
            self.state = AnalysisState.RUNNING
            logger.info(f"Running AI analysis for {len(request.trains)} trains")

            batch = self.provider.generate(request, self.store.all())

            self._recommendations = list(batch.recommendations)
            self._errors = list(batch.errors)
            self.source = batch.source
            self.just_generated = True
            self.state = AnalysisState.DONE

            logger.info(
                f"Analysis complete: {len(batch.recommendations)} recommendations "
                f"from {batch.source}, {len(batch.errors)} skipped"
            )
        except Exception:
            self.state = previous_state
            raise
        finally:
            self._run_lock.release()

        return self.summary()

    def recommendations(self) -> List[Recommendation]:
        return list(self._recommendations)

    def get(self, recommendation_id: str) -> Recommendation:
        for rec in self._recommendations:
            if rec.id == recommendation_id:
                return rec
        raise RecommendationNotFoundError(f"Recommendation {recommendation_id} not found")

    def apply(self, recommendation_id: str) -> Recommendation:
        """
        Apply a pending recommendation to its train.

        Raises InvalidStateTransition for anything not pending and
        TrainNotFoundError when the train has left the store; neither
        touches any train record.
        """
        rec = self.get(recommendation_id)
        if rec.status != RecommendationStatus.PENDING:
            raise InvalidStateTransition(rec.id, rec.status.value, "apply")

        train = self.store.get(rec.train_id)
        if train is None:
            raise TrainNotFoundError(
                f"Train {rec.train_id} for recommendation {rec.id} no longer exists"
            )

        changes = rec.recommended_changes
        self.store.update(
            train.id,
            eta=changes.new_eta,
            delay=max(0, train.delay - changes.delay_reduction),
        )
        rec.status = RecommendationStatus.APPLIED
        logger.info(f"Applied recommendation {rec.id} to train {train.number}")
        return rec

    def reject(self, recommendation_id: str) -> Recommendation:
        """Reject a pending recommendation. Rejecting twice is a no-op."""
        rec = self.get(recommendation_id)
        if rec.status == RecommendationStatus.APPLIED:
            raise InvalidStateTransition(rec.id, rec.status.value, "reject")

        if rec.status == RecommendationStatus.PENDING:
            rec.status = RecommendationStatus.REJECTED
            logger.info(f"Rejected recommendation {rec.id}")
        return rec

    def acknowledge(self) -> None:
        self.just_generated = False

    def summary(self) -> AnalysisSummary:
        recs = self._recommendations
        applied = [r for r in recs if r.status == RecommendationStatus.APPLIED]
        average = 0
        if recs:
            average = round(sum(r.impact.confidence_score for r in recs) / len(recs))

        return AnalysisSummary(
            state=self.state,
            just_generated=self.just_generated,
            source=self.source,
            count=len(recs),
            applied_count=len(applied),
            total_delay_reduction=sum(r.impact.delay_reduction for r in applied),
            average_confidence=average,
            errors=list(self._errors),
        )
