"""
Simulated real-time dashboard metrics.

Only the two headline KPIs move; train records and recommendations are never
touched by the ticker.
"""
from typing import List
import asyncio
import logging
import random

from app.schemas.metrics import AlertStatus, DashboardMetrics, EmergencyAlert

logger = logging.getLogger(__name__)

SEED_ALERTS = [
    {
        "id": "E001",
        "type": "Weather",
        "severity": "High",
        "zone": "Eastern",
        "description": "Heavy rainfall affecting Howrah-Sealdah section",
        "time": "13:45",
        "status": "Active",
    },
    {
        "id": "E002",
        "type": "Technical",
        "severity": "Medium",
        "zone": "Western",
        "description": "Signal failure at Dadar Junction - Platform 3",
        "time": "14:12",
        "status": "Resolved",
    },
]


def seed_alerts() -> List[EmergencyAlert]:
    return [EmergencyAlert(**data) for data in SEED_ALERTS]


def active_alerts(alerts: List[EmergencyAlert]) -> List[EmergencyAlert]:
    return [a for a in alerts if a.status == AlertStatus.ACTIVE]


class MetricsSimulator:
    """Bounded random walk over trains-on-time and average delay."""

    ON_TIME_BOUNDS = (65.0, 95.0)
    ON_TIME_STEP = 1.5
    DELAY_BOUNDS = (2.0, 15.0)
    DELAY_STEP = 1.0

    def __init__(self, rng: random.Random = None, trains_on_time: float = 78.0, average_delay: float = 8.5):
        self.rng = rng or random.Random()
        self.trains_on_time = trains_on_time
        self.average_delay = average_delay
        self.realtime_enabled = False

    @staticmethod
    def _clamp(value: float, bounds) -> float:
        low, high = bounds
        return max(low, min(high, value))

    def tick(self) -> DashboardMetrics:
        self.trains_on_time = self._clamp(
            self.trains_on_time + (self.rng.random() - 0.5) * self.ON_TIME_STEP,
            self.ON_TIME_BOUNDS,
        )
        self.average_delay = self._clamp(
            self.average_delay + (self.rng.random() - 0.5) * self.DELAY_STEP,
            self.DELAY_BOUNDS,
        )
        return self.snapshot()

    def snapshot(self) -> DashboardMetrics:
        return DashboardMetrics(
            trains_on_time=round(self.trains_on_time, 1),
            average_delay=round(self.average_delay, 1),
            realtime_enabled=self.realtime_enabled,
        )


async def run_ticker(simulator: MetricsSimulator, interval_seconds: float):
    """Tick the simulator every interval while real-time mode is on."""
    logger.info(f"Metrics ticker started ({interval_seconds}s interval)")
    try:
        while True:
            await asyncio.sleep(interval_seconds)
            if simulator.realtime_enabled:
                simulator.tick()
    except asyncio.CancelledError:
        logger.info("Metrics ticker stopped")
        raise
