"""Load/save lifecycle for a team's daily record and settings."""

from __future__ import annotations

import logging
from datetime import date
from typing import Any, List, Optional

from .calendar_service import DateLike, iter_month_days
from .models import (
    CheckpointEntry,
    DailyRecord,
    DaySettings,
    EntryValidationError,
    MonthInfoOverride,
    MonthlyCoreGoals,
    ProductGoal,
    default_product_goals,
)
from .projector import migrate_weights
from .record_store import RecordStore, daily_record_key, read_daily_record, write_json

LOGGER = logging.getLogger(__name__)


def parse_entries(raw_entries: Any, context: str = "") -> List[CheckpointEntry]:
    """Stored entries that pass validation; anything malformed is skipped."""
    if not isinstance(raw_entries, list):
        return []
    entries: List[CheckpointEntry] = []
    for raw in raw_entries:
        try:
            entries.append(CheckpointEntry.from_dict(raw).validate(allow_unselected=True))
        except EntryValidationError as exc:
            LOGGER.warning("Skipping malformed entry %s: %s", context, exc)
    entries.sort(key=lambda entry: entry.reporting_time)
    return entries


def parse_product_goals(raw_goals: Any) -> List[ProductGoal]:
    if not isinstance(raw_goals, list) or not raw_goals:
        return default_product_goals()
    goals = [ProductGoal.from_dict(raw) for raw in raw_goals if isinstance(raw, dict)]
    return goals or default_product_goals()


def record_from_payload(payload: Any, context: str = "") -> DailyRecord:
    """Decode a stored daily record, falling back to defaults field by field."""
    if not isinstance(payload, dict):
        return DailyRecord()
    settings = DaySettings(
        weights=migrate_weights(payload.get("predictionWeights")),
        month_info_override=MonthInfoOverride.from_dict(payload.get("monthInfoOverrides")),
        core_goals=MonthlyCoreGoals.from_dict(payload.get("monthlyGoals")),
        product_goals=parse_product_goals(payload.get("monthlyProductGoals")),
    )
    return DailyRecord(entries=parse_entries(payload.get("entries"), context), settings=settings)


class SettingsStore:
    """Owns reading and writing of ``DailyRecord`` objects by (team, date)."""

    def __init__(self, store: RecordStore, legacy_team: Optional[str] = None) -> None:
        self.store = store
        self.legacy_team = legacy_team

    def load_day(self, team: str, day: DateLike) -> DailyRecord:
        payload = read_daily_record(self.store, team, day, legacy_team=self.legacy_team)
        if payload is None:
            return DailyRecord()
        return record_from_payload(payload, context=f"{team}/{day}")

    def load_entries(self, team: str, day: DateLike) -> Optional[List[CheckpointEntry]]:
        """Entries of a stored day, or None when no record exists."""
        payload = read_daily_record(self.store, team, day, legacy_team=self.legacy_team)
        if not isinstance(payload, dict):
            return None
        return parse_entries(payload.get("entries"), context=f"{team}/{day}")

    def latest_stored_day(self, team: str, year_month: str) -> Optional[date]:
        """Last day of the month with a stored record, or None."""
        for day in reversed(list(iter_month_days(year_month))):
            if isinstance(read_daily_record(self.store, team, day, legacy_team=self.legacy_team), dict):
                return day
        return None

    def save_day(self, team: str, day: DateLike, record: DailyRecord) -> bool:
        """Persist the record; False signals a non-fatal save failure."""
        saved = write_json(self.store, daily_record_key(team, day), record.to_dict())
        if saved:
            LOGGER.info("Saved daily record for %s on %s", team, day)
        return saved
