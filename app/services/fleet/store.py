"""
In-memory train record store backing the control center dashboard.
"""
from typing import Callable, Dict, List, Optional
import logging

from app.core.exceptions import TrainNotFoundError
from app.schemas.train import TrainRecord

logger = logging.getLogger(__name__)

UpdateCallback = Callable[[TrainRecord, TrainRecord], None]


SEED_TRAINS = [
    {
        "id": "T001",
        "name": "Rajdhani Express",
        "number": "12301",
        "route": "NEW DELHI → MUMBAI CENTRAL",
        "zone": "Western",
        "status": "On Time",
        "current_location": "Mathura Junction",
        "next_station": "Agra Cantt",
        "eta": "14:30",
        "delay": 0,
        "passengers": 1247,
        "priority": "High",
        "type": "Express",
    },
    {
        "id": "T002",
        "name": "Shatabdi Express",
        "number": "12002",
        "route": "NEW DELHI → CHANDIGARH",
        "zone": "Northern",
        "status": "Delayed",
        "current_location": "Ambala Cantt",
        "next_station": "Chandigarh",
        "eta": "15:45",
        "delay": 15,
        "passengers": 891,
        "priority": "High",
        "type": "Express",
    },
    {
        "id": "T003",
        "name": "Chennai Express",
        "number": "12624",
        "route": "NEW DELHI → CHENNAI CENTRAL",
        "zone": "Southern",
        "status": "On Time",
        "current_location": "Vijayawada Junction",
        "next_station": "Gudur Junction",
        "eta": "22:15",
        "delay": 0,
        "passengers": 1456,
        "priority": "Medium",
        "type": "Express",
    },
    {
        "id": "T004",
        "name": "Goods Train",
        "number": "GDS456",
        "route": "MUMBAI PORT → DELHI",
        "zone": "Central",
        "status": "Moving",
        "current_location": "Bhopal Junction",
        "next_station": "Jhansi Junction",
        "eta": "18:30",
        "delay": 5,
        "passengers": 0,
        "priority": "Low",
        "type": "Goods",
    },
]


class TrainRecordStore:
    """
    Holds the current fleet snapshot.

    Records keep their insertion order. `update` is the only mutation path and
    notifies every registered callback with the old and new record.
    """

    def __init__(self, trains: Optional[List[TrainRecord]] = None):
        self._trains: Dict[str, TrainRecord] = {}
        self._callbacks: List[UpdateCallback] = []
        for train in trains or []:
            self._trains[train.id] = train

    @classmethod
    def from_seed(cls) -> "TrainRecordStore":
        return cls([TrainRecord(**data) for data in SEED_TRAINS])

    def all(self) -> List[TrainRecord]:
        return list(self._trains.values())

    def get(self, train_id: str) -> Optional[TrainRecord]:
        return self._trains.get(train_id)

    def find_by_number(self, number: str) -> Optional[TrainRecord]:
        for train in self._trains.values():
            if train.number == number:
                return train
        return None

    def delayed(self) -> List[TrainRecord]:
        return [t for t in self._trains.values() if t.delay > 0]

    def on_update(self, callback: UpdateCallback) -> None:
        self._callbacks.append(callback)

    def update(self, train_id: str, **changes) -> TrainRecord:
        """Replace a train with an updated copy and notify listeners."""
        current = self._trains.get(train_id)
        if current is None:
            raise TrainNotFoundError(f"Train {train_id} not found")

        updated = current.model_copy(update=changes)
        self._trains[train_id] = updated
        logger.info(f"Train {train_id} updated: {changes}")

        for callback in self._callbacks:
            callback(current, updated)
        return updated

    def remove(self, train_id: str) -> None:
        """Drop a train, e.g. when it leaves the monitored network."""
        if self._trains.pop(train_id, None) is None:
            raise TrainNotFoundError(f"Train {train_id} not found")

    def __len__(self) -> int:
        return len(self._trains)
