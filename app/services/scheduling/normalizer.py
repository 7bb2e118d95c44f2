"""
Converts train records into the AI model's input format.
"""
from typing import List
import logging

from app.core.exceptions import ValidationError
from app.schemas.train import TrainRecord
from app.schemas.recommendation import (
    ModelInput, RecommendationRequest, SelectionMode, TrainSelection
)
from app.services.fleet.store import TrainRecordStore

logger = logging.getLogger(__name__)

DEFAULT_PLATFORM = 1


def to_model_input(train: TrainRecord) -> ModelInput:
    """
    Project a train record onto the model input.

    Relative arrival/departure offsets are not derived from the schedule yet
    and are always sent as 0.
    """
    return ModelInput(
        id=train.number,
        type=train.type.value.lower(),
        rel_arrival=0,
        rel_departure=0,
        delay=train.delay,
        passengers=train.passengers,
        platform=DEFAULT_PLATFORM,
    )


def select_trains(store: TrainRecordStore, selection: TrainSelection) -> List[TrainRecord]:
    """Resolve a selection against the store, preserving selection order."""
    if selection.mode == SelectionMode.ALL:
        return store.all()
    if selection.mode == SelectionMode.DELAYED:
        return store.delayed()

    selected = []
    seen = set()
    for number in selection.train_numbers:
        if number in seen:
            continue
        seen.add(number)
        train = store.find_by_number(number)
        if train is None:
            raise ValidationError(f"Unknown train number: {number}")
        selected.append(train)
    return selected


def normalize(store: TrainRecordStore, selection: TrainSelection) -> List[ModelInput]:
    trains = select_trains(store, selection)
    logger.debug(f"Selection {selection.mode.value} resolved to {len(trains)} trains")
    return [to_model_input(train) for train in trains]


def build_request(
    store: TrainRecordStore,
    selection: TrainSelection,
    base: RecommendationRequest = None
) -> RecommendationRequest:
    """Build a request for the selection, keeping the parameters of `base`."""
    base = base or RecommendationRequest()
    return base.model_copy(update={"trains": normalize(store, selection)})


def toggle_train(
    store: TrainRecordStore,
    request: RecommendationRequest,
    number: str
) -> RecommendationRequest:
    """Add the train to the selection, or remove it if already selected."""
    if any(t.id == number for t in request.trains):
        remaining = [t for t in request.trains if t.id != number]
        return request.model_copy(update={"trains": remaining})

    train = store.find_by_number(number)
    if train is None:
        raise ValidationError(f"Unknown train number: {number}")
    return request.model_copy(update={"trains": request.trains + [to_model_input(train)]})
