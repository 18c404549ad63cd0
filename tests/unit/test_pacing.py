"""
Pacing classification of goal tracks against calendar-expected progress
"""

import math

import pytest

from callpace.aggregator import DailySummary
from callpace.models import MonthlyCoreGoals, MonthlyProgressSnapshot
from callpace.pacing import PacingStatus, classify, goal_tracks


@pytest.mark.parametrize("actual, expected, status", [
    (80, 100, PacingStatus.BEHIND),
    (94.9, 100, PacingStatus.BEHIND),
    (95.5, 100, PacingStatus.ON_TRACK),
    (96, 100, PacingStatus.ON_TRACK),
    (100, 100, PacingStatus.AHEAD),
    (101, 100, PacingStatus.AHEAD),
    (0, 50, PacingStatus.BEHIND),
])
def test_classify(actual, expected, status):
    assert classify(actual, expected) is status


@pytest.mark.parametrize("actual, expected", [
    (50, 0),
    (math.nan, 50),
    (50, math.nan),
    (None, 50),
    ("50", 50),
    (True, 50),
])
def test_classify_without_usable_data(actual, expected):
    assert classify(actual, expected) is PacingStatus.INSUFFICIENT_DATA


def test_status_serializes_as_string():
    assert PacingStatus.ON_TRACK.value == "on_track"
    assert PacingStatus.AHEAD == "ahead"


def test_goal_tracks():
    summary = DailySummary(attempt_rate=90, active_attempt_rate=25, stt_mention_rate=68)
    snapshot = MonthlyProgressSnapshot(products={}, activations=60)
    goals = MonthlyCoreGoals(attempt_rate=90, active_attempt_rate=50, stt_mention_rate=70, activation_goal=120)

    tracks = goal_tracks(summary, snapshot, goals, workday_progress=100.0, opening_day_progress=40.0)

    assert set(tracks) == {"attempt_rate", "active_attempt_rate", "stt_mention_rate", "activation_goal"}
    assert tracks["attempt_rate"]["status"] == "ahead"
    assert tracks["active_attempt_rate"]["completion"] == pytest.approx(50)
    assert tracks["active_attempt_rate"]["status"] == "behind"
    assert tracks["stt_mention_rate"]["status"] == "on_track"
    assert tracks["activation_goal"]["expected"] == 40.0
    assert tracks["activation_goal"]["status"] == "ahead"


def test_goal_tracks_at_month_start():
    tracks = goal_tracks(DailySummary(), MonthlyProgressSnapshot(), MonthlyCoreGoals(), 0.0, 0.0)
    assert all(track["status"] == "insufficient_data" for track in tracks.values())
