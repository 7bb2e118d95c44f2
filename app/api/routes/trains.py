"""
API routes for the train record store.
"""
from fastapi import APIRouter, Depends, HTTPException, status
from typing import List

from app.core.dependencies import get_dashboard_state
from app.core.state import DashboardState
from app.schemas.train import TrainRecord

router = APIRouter()


@router.get("/", response_model=List[TrainRecord])
async def list_trains(state: DashboardState = Depends(get_dashboard_state)):
    """Get the current fleet snapshot."""
    return state.store.all()


@router.get("/{train_id}", response_model=TrainRecord)
async def get_train(train_id: str, state: DashboardState = Depends(get_dashboard_state)):
    """Get one train by internal id."""
    train = state.store.get(train_id)
    if train is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Train {train_id} not found"
        )
    return train
