"""
Checkpoint Projector Module
Extrapolates partial-day totals to an end-of-day forecast using the
team's cumulative weight curve
"""

import logging
from typing import Any, Dict, Iterable, Optional

from .calendar_service import REPORTING_TIMES
from .models import DEFAULT_WEIGHTS, CheckpointEntry

logger = logging.getLogger(__name__)


def last_checkpoint(entries: Iterable[CheckpointEntry]) -> Optional[int]:
    """Highest reporting time present, or None for an empty day"""
    times = [entry.reporting_time for entry in entries if entry.reporting_time]
    return max(times) if times else None


def cumulative_weight(weights: Dict[int, int], checkpoint: Optional[int]) -> float:
    if not checkpoint:
        return 0
    return weights.get(checkpoint, 0) or 0


def forecast(actual_value: float, checkpoint: Optional[int], weights: Dict[int, int]) -> float:
    """
    Project the end-of-day value of a cumulative count

    Args:
        actual_value: Count observed so far
        checkpoint: Last reported checkpoint (None if nothing reported)
        weights: Cumulative weight curve in percent

    Returns:
        actual / (weight / 100), or the actual value when the weight is 0
    """
    weight = cumulative_weight(weights, checkpoint)
    if weight > 0:
        return actual_value / (weight / 100)
    return actual_value


def migrate_weights(loaded: Optional[Dict[Any, Any]]) -> Dict[int, int]:
    """
    Normalise a persisted weight curve

    Keys are stored as strings. A curve missing any current checkpoint is
    replaced entirely by the defaults; partial curves are never patched.
    """
    if not isinstance(loaded, dict):
        return dict(DEFAULT_WEIGHTS)

    weights: Dict[int, int] = {}
    for key, value in loaded.items():
        try:
            weights[int(key)] = int(value)
        except (TypeError, ValueError):
            continue

    if not all(time in weights for time in REPORTING_TIMES):
        logger.warning("Weight curve is missing checkpoints, resetting to defaults")
        return dict(DEFAULT_WEIGHTS)
    return {time: weights[time] for time in REPORTING_TIMES}


def prediction_feedback(percentage: float) -> str:
    """Qualitative reading of a predicted achievement percentage"""
    if percentage >= 100:
        return 'good'
    if percentage >= 80:
        return 'warning'
    return 'danger'


class CheckpointProjector:
    """Binds a weight curve to a day's last checkpoint"""

    def __init__(self, weights: Dict[int, int], checkpoint: Optional[int]):
        self.weights = weights
        self.checkpoint = checkpoint

    @classmethod
    def for_entries(cls, weights: Dict[int, int], entries: Iterable[CheckpointEntry]) -> "CheckpointProjector":
        return cls(weights, last_checkpoint(entries))

    @property
    def weight(self) -> float:
        return cumulative_weight(self.weights, self.checkpoint)

    def project(self, actual_value: float) -> float:
        return forecast(actual_value, self.checkpoint, self.weights)


def achievement(value: float, goal: float) -> float:
    return (value / goal * 100) if goal > 0 else 0.0
