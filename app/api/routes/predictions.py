"""
API routes for the departure predictor and arrival model exports.
"""
from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import Response
import logging

from app.core.dependencies import get_dashboard_state
from app.core.exceptions import PredictorError, ValidationError
from app.core.state import DashboardState
from app.schemas.prediction import (
    ArrivalExportRequest, DeparturePredictionRequest, PredictionResponse
)
from app.services.prediction.client import export_arrival_inputs

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post("/departure", response_model=PredictionResponse)
def predict_departure(
    request: DeparturePredictionRequest,
    state: DashboardState = Depends(get_dashboard_state)
):
    """Send complete departure inputs to the backend predictor."""
    try:
        return state.predictor.predict(request.inputs)
    except ValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except PredictorError as e:
        logger.error(f"Predictor call failed: {str(e)}")
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(e))


@router.post("/arrival/export")
async def export_arrival(request: ArrivalExportRequest):
    """Download complete arrival inputs as JSON."""
    try:
        filename, content = export_arrival_inputs(request.inputs)
    except ValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    return Response(
        content=content,
        media_type="application/json",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'}
    )
