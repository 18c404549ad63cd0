"""Shared pytest configuration for the project test suite."""
from __future__ import annotations

import json
import sys
from datetime import date
from pathlib import Path
from typing import Callable, Dict, List

import pytest


# Ensure the repository root (which contains the ``callpace`` package) is importable.
ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from callpace.models import CheckpointEntry, DaySettings, ProductGoal  # noqa: E402
from callpace.record_store import MemoryRecordStore, daily_record_key  # noqa: E402


@pytest.fixture
def store() -> MemoryRecordStore:
    return MemoryRecordStore()


@pytest.fixture
def product_goals() -> List[ProductGoal]:
    return [ProductGoal(id=1, name="A", goal=310), ProductGoal(id=2, name="B", goal=155)]


@pytest.fixture
def settings(product_goals) -> DaySettings:
    return DaySettings(product_goals=product_goals)


@pytest.fixture
def make_entry() -> Callable[..., CheckpointEntry]:
    def _make(time: int, calls: int = 10, successes: Dict[str, int] = None, **counts) -> CheckpointEntry:
        return CheckpointEntry(
            reporting_time=time,
            calls=calls,
            product_successes=dict(successes or {}),
            **counts,
        )

    return _make


@pytest.fixture
def seed_day(store) -> Callable[..., None]:
    """Write a raw daily record the way the dashboard persists it."""

    def _seed(team: str, day: date, entries: List[dict], key: str = None, **extra) -> None:
        payload = {"entries": entries, **extra}
        store.set(key or daily_record_key(team, day), json.dumps(payload))

    return _seed
