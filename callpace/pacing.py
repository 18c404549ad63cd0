"""
Pacing Classifier Module
Compares goal completion against calendar-expected progress
"""

import math
from enum import Enum
from typing import Any, Dict

from .aggregator import DailySummary
from .models import MonthlyCoreGoals, MonthlyProgressSnapshot

TOLERANCE = 0.95


class PacingStatus(str, Enum):
    INSUFFICIENT_DATA = "insufficient_data"
    BEHIND = "behind"
    ON_TRACK = "on_track"
    AHEAD = "ahead"


def _is_number(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return not math.isnan(value)


def classify(actual_completion: Any, expected_progress: Any) -> PacingStatus:
    """
    Classify pace for one goal track

    Args:
        actual_completion: Percentage of the goal achieved
        expected_progress: Percentage of the period elapsed

    Returns:
        INSUFFICIENT_DATA without a usable baseline, AHEAD at or above it,
        BEHIND below 95% of it, ON_TRACK otherwise
    """
    if not _is_number(actual_completion) or not _is_number(expected_progress) or expected_progress == 0:
        return PacingStatus.INSUFFICIENT_DATA
    if actual_completion >= expected_progress:
        return PacingStatus.AHEAD
    if actual_completion < expected_progress * TOLERANCE:
        return PacingStatus.BEHIND
    return PacingStatus.ON_TRACK


def completion(value: float, target: float) -> float:
    return (value / target * 100) if target > 0 else 0.0


def goal_tracks(summary: DailySummary,
                snapshot: MonthlyProgressSnapshot,
                core_goals: MonthlyCoreGoals,
                workday_progress: float,
                opening_day_progress: float) -> Dict[str, Dict]:
    """The four monthly goal tracks with their completion and verdict"""
    tracks = {
        'attempt_rate': (completion(summary.attempt_rate, core_goals.attempt_rate), workday_progress),
        'active_attempt_rate': (completion(summary.active_attempt_rate, core_goals.active_attempt_rate), workday_progress),
        'stt_mention_rate': (completion(summary.stt_mention_rate, core_goals.stt_mention_rate), workday_progress),
        'activation_goal': (completion(snapshot.activations, core_goals.activation_goal), opening_day_progress),
    }
    return {
        name: {
            'completion': actual,
            'expected': expected,
            'status': classify(actual, expected).value,
        }
        for name, (actual, expected) in tracks.items()
    }
