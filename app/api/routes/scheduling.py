"""
API routes for AI scheduling: draft request, analysis runs and recommendations.
"""
from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import Response
from typing import List
import logging

from app.core.dependencies import get_dashboard_state
from app.core.exceptions import (
    AnalysisInProgressError, InvalidStateTransition,
    RecommendationNotFoundError, TrainNotFoundError, ValidationError
)
from app.core.state import DashboardState
from app.schemas.recommendation import (
    AnalysisSummary, Recommendation, RecommendationRequest,
    RequestParametersUpdate, TrainSelection
)
from app.services.scheduling.export import export_request
from app.services.scheduling.normalizer import build_request, toggle_train

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/request", response_model=RecommendationRequest)
async def get_draft_request(state: DashboardState = Depends(get_dashboard_state)):
    """Get the request currently being configured."""
    return state.draft


@router.patch("/request", response_model=RecommendationRequest)
async def update_draft_parameters(
    update: RequestParametersUpdate,
    state: DashboardState = Depends(get_dashboard_state)
):
    """Update optimization parameters; the train selection is kept."""
    changes = update.model_dump(exclude_none=True, exclude={"priority_weights"})
    if update.priority_weights is not None:
        # Sliders not sent keep their current draft value
        changes["priority_weights"] = state.draft.priority_weights.model_copy(
            update=update.priority_weights.model_dump(exclude_unset=True)
        )
    state.draft = state.draft.model_copy(update=changes)
    return state.draft


@router.post("/request/selection", response_model=RecommendationRequest)
async def select_trains(
    selection: TrainSelection,
    state: DashboardState = Depends(get_dashboard_state)
):
    """Replace the train selection (explicit list, all trains, or delayed only)."""
    try:
        state.draft = build_request(state.store, selection, base=state.draft)
    except ValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    logger.info(f"Selected {len(state.draft.trains)} trains ({selection.mode.value})")
    return state.draft


@router.post("/request/toggle/{number}", response_model=RecommendationRequest)
async def toggle_selection(number: str, state: DashboardState = Depends(get_dashboard_state)):
    """Check or uncheck a single train."""
    try:
        state.draft = toggle_train(state.store, state.draft, number)
    except ValidationError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    return state.draft


@router.delete("/request/selection", response_model=RecommendationRequest)
async def clear_selection(state: DashboardState = Depends(get_dashboard_state)):
    state.draft = state.draft.model_copy(update={"trains": []})
    return state.draft


@router.get("/request/export")
async def download_draft_request(state: DashboardState = Depends(get_dashboard_state)):
    """Download the draft request as pretty-printed JSON."""
    filename, content = export_request(state.draft)
    return Response(
        content=content,
        media_type="application/json",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'}
    )


@router.post("/analysis", response_model=AnalysisSummary)
def run_analysis(state: DashboardState = Depends(get_dashboard_state)):
    """
    Run the AI analysis on the draft request.

    Falls back to synthetic recommendations when the AI model is unreachable,
    so a result set is always produced for a non-empty selection.
    """
    try:
        return state.lifecycle.run_analysis(state.draft)
    except ValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except AnalysisInProgressError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))


@router.get("/recommendations", response_model=List[Recommendation])
async def list_recommendations(state: DashboardState = Depends(get_dashboard_state)):
    return state.lifecycle.recommendations()


@router.get("/summary", response_model=AnalysisSummary)
async def get_summary(state: DashboardState = Depends(get_dashboard_state)):
    """Aggregate view: count, applied delay reduction and average confidence."""
    return state.lifecycle.summary()


@router.post("/summary/acknowledge", response_model=AnalysisSummary)
async def acknowledge_results(state: DashboardState = Depends(get_dashboard_state)):
    state.lifecycle.acknowledge()
    return state.lifecycle.summary()


@router.post("/recommendations/{recommendation_id}/apply", response_model=Recommendation)
async def apply_recommendation(
    recommendation_id: str,
    state: DashboardState = Depends(get_dashboard_state)
):
    """Apply a pending recommendation to its train."""
    try:
        return state.lifecycle.apply(recommendation_id)
    except (RecommendationNotFoundError, TrainNotFoundError) as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except InvalidStateTransition as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))


@router.post("/recommendations/{recommendation_id}/reject", response_model=Recommendation)
async def reject_recommendation(
    recommendation_id: str,
    state: DashboardState = Depends(get_dashboard_state)
):
    try:
        return state.lifecycle.reject(recommendation_id)
    except RecommendationNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except InvalidStateTransition as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
