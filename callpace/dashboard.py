"""
Pacing Dashboard Service
Wires the record store, aggregator, rollup, pacing and simulation together
for one (team, date) view
"""

import logging
from datetime import date
from typing import Any, Dict, Optional

from . import calendar_service
from .aggregator import DayLedger, compare_with_previous, summarize, trend
from .ai_client import GeminiClient
from .models import (
    CheckpointEntry,
    DailyRecord,
    EntryValidationError,
    MonthInfoOverride,
    MonthlyCoreGoals,
    MonthlyProgressSnapshot,
)
from .pacing import goal_tracks
from .projector import prediction_feedback
from .record_store import RecordStore
from .rollup import MonthlyRollup, goal_completion
from .settings_store import SettingsStore, parse_product_goals
from .simulator import OVERALL, simulate_scope

logger = logging.getLogger(__name__)

SAVE_FAILED_NOTICE = "Could not save data; changes are kept for this request only"


class PacingDashboard:
    """Request-scoped operations over a team's persisted days"""

    def __init__(self, store: RecordStore, ai_client: Optional[GeminiClient] = None,
                 legacy_team: Optional[str] = None):
        self.settings_store = SettingsStore(store, legacy_team=legacy_team)
        self.rollup = MonthlyRollup(store, legacy_team=legacy_team)
        self.ai_client = ai_client or GeminiClient()

    def _ledger(self, day: date, record: DailyRecord, today: Optional[date]) -> DayLedger:
        return DayLedger(day, record.entries, today=today)

    def _save(self, team: str, day: date, record: DailyRecord, result: Dict) -> Dict:
        if not self.settings_store.save_day(team, day, record):
            result['notice'] = SAVE_FAILED_NOTICE
        return result

    def day_view(self, team: str, day: Any, today: Optional[date] = None) -> Dict[str, Any]:
        """
        Full computed view of a team's day

        Args:
            team: Team identifier
            day: Displayed date
            today: Reference date for read-only and progress rules

        Returns:
            Dict with entries, settings, summary, monthly progress and pacing
        """
        day = calendar_service.to_date(day)
        today = today or date.today()
        record = self.settings_store.load_day(team, day)
        settings = record.settings
        info = calendar_service.resolve_month_info(day, settings.month_info_override)
        summary = summarize(record.entries, settings, info)

        snapshot = self.rollup.rollup(team, calendar_service.month_key(day), settings.product_goals)
        workday = calendar_service.workday_progress(day, info.net_application_days, today)
        opening = calendar_service.opening_day_progress(day, info.opening_days, today)

        previous = self.settings_store.load_entries(team, calendar_service.previous_day(day))
        comparison = compare_with_previous(record.entries, previous)
        ledger = self._ledger(day, record, today)

        return {
            'team': team,
            'date': day.isoformat(),
            'read_only': ledger.is_read_only,
            'entries': [entry.to_dict() for entry in ledger.entries],
            'available_times': ledger.available_times(),
            'next_time': ledger.next_time(),
            'settings': record.to_dict(),
            'weights_complete': settings.weights_complete,
            'final_weight': settings.final_weight,
            'month_info': {
                'opening_days': info.opening_days,
                'net_application_days': info.net_application_days,
                'overridden': settings.month_info_override is not None,
            },
            'summary': summary.to_dict(),
            'prediction_feedback': prediction_feedback(summary.predicted_achievement),
            'comparison': {
                'successes': trend(summary.total_successes, comparison['successes']) if comparison else None,
                'activations': trend(summary.total_activations, comparison['activations']) if comparison else None,
            },
            'monthly_progress': {
                **snapshot.to_dict(),
                'overridden': snapshot.overridden,
                'completion': goal_completion(snapshot, settings.product_goals, settings.core_goals),
            },
            'expected_progress': {'workday': workday, 'opening_day': opening},
            'pacing': goal_tracks(summary, snapshot, settings.core_goals, workday, opening),
        }

    def upsert_entry(self, team: str, day: Any, payload: Dict, editing_time: Optional[int] = None,
                     today: Optional[date] = None) -> Dict[str, Any]:
        """Validate and store an operator entry; raises on invalid input or read-only day"""
        day = calendar_service.to_date(day)
        record = self.settings_store.load_day(team, day)
        ledger = self._ledger(day, record, today)
        replaced = ledger.upsert(CheckpointEntry.from_dict(payload), editing_time=editing_time)
        record.entries = ledger.entries
        return self._save(team, day, record, {
            'replaced': replaced,
            'entries': [entry.to_dict() for entry in record.entries],
            'next_time': ledger.next_time(),
        })

    def delete_entry(self, team: str, day: Any, reporting_time: int,
                     today: Optional[date] = None) -> Dict[str, Any]:
        day = calendar_service.to_date(day)
        record = self.settings_store.load_day(team, day)
        ledger = self._ledger(day, record, today)
        removed = ledger.remove(reporting_time)
        record.entries = ledger.entries
        return self._save(team, day, record, {'removed': removed})

    def reset_day(self, team: str, day: Any, today: Optional[date] = None) -> Dict[str, Any]:
        day = calendar_service.to_date(day)
        record = self.settings_store.load_day(team, day)
        ledger = self._ledger(day, record, today)
        ledger.reset()
        record.entries = []
        return self._save(team, day, record, {'entries': []})

    def update_settings(self, team: str, day: Any, payload: Dict,
                        today: Optional[date] = None) -> Dict[str, Any]:
        """Apply a partial settings update using the stored field names"""
        day = calendar_service.to_date(day)
        record = self.settings_store.load_day(team, day)
        self._ledger(day, record, today).ensure_writable()
        settings = record.settings
        for name in ('predictionWeights', 'monthlyGoals'):
            if payload.get(name) is not None and not isinstance(payload[name], dict):
                raise EntryValidationError(f"{name} must be an object")
        if 'predictionWeights' in payload:
            for key, value in (payload['predictionWeights'] or {}).items():
                settings.set_weight(int(key), value)
        if 'monthInfoOverrides' in payload:
            settings.month_info_override = MonthInfoOverride.from_dict(payload['monthInfoOverrides'])
        if 'monthlyGoals' in payload:
            merged = {**settings.core_goals.to_dict(), **(payload['monthlyGoals'] or {})}
            settings.core_goals = MonthlyCoreGoals.from_dict(merged)
        if 'monthlyProductGoals' in payload:
            settings.product_goals = parse_product_goals(payload['monthlyProductGoals'])
        return self._save(team, day, record, {
            'settings': record.to_dict(),
            'weights_complete': settings.weights_complete,
        })

    def reset_weights(self, team: str, day: Any, today: Optional[date] = None) -> Dict[str, Any]:
        day = calendar_service.to_date(day)
        record = self.settings_store.load_day(team, day)
        self._ledger(day, record, today).ensure_writable()
        record.settings.reset_weights()
        return self._save(team, day, record, {'predictionWeights': record.to_dict()['predictionWeights']})

    def month_progress(self, team: str, year_month: str, day: Any = None) -> MonthlyProgressSnapshot:
        """
        Monthly progress tracked against a stored day's product goals

        Without ``day`` the latest stored day of the month supplies the
        goals, so the result matches that day's view.
        """
        if day is None:
            day = self.settings_store.latest_stored_day(team, year_month)
        if day is None:
            day = f"{year_month}-01"
        record = self.settings_store.load_day(team, day)
        return self.rollup.rollup(team, year_month, record.settings.product_goals)

    def override_month(self, team: str, year_month: str, payload: Dict) -> Dict[str, Any]:
        snapshot = MonthlyProgressSnapshot.from_dict(payload)
        result = {**snapshot.to_dict(), 'overridden': True}
        if not self.rollup.override(team, year_month, snapshot):
            result['overridden'] = False
            result['notice'] = SAVE_FAILED_NOTICE
        return result

    def clear_month_override(self, team: str, year_month: str) -> Dict[str, Any]:
        result = {'cleared': self.rollup.clear_override(team, year_month)}
        if not result['cleared']:
            result['notice'] = SAVE_FAILED_NOTICE
        return result

    def simulate(self, team: str, day: Any, scope: str = OVERALL, adjustment: int = 0) -> Dict[str, Any]:
        day = calendar_service.to_date(day)
        record = self.settings_store.load_day(team, day)
        info = calendar_service.resolve_month_info(day, record.settings.month_info_override)
        summary = summarize(record.entries, record.settings, info)
        hours = calendar_service.remaining_hours(summary.last_checkpoint)
        return simulate_scope(summary, scope, adjustment, hours).to_dict()

    def smart_input(self, team: str, day: Any, text: str) -> Dict[str, Any]:
        """Parse free text into an entry draft; never stores anything"""
        record = self.settings_store.load_day(team, day)
        entry = self.ai_client.parse_entry(text, record.settings.product_names)
        if entry is None:
            return {'entry': None, 'error': 'Could not parse the report, please enter it manually'}
        return {'entry': entry.to_dict()}

    def coaching(self, team: str, day: Any) -> Dict[str, Any]:
        day = calendar_service.to_date(day)
        record = self.settings_store.load_day(team, day)
        info = calendar_service.resolve_month_info(day, record.settings.month_info_override)
        summary = summarize(record.entries, record.settings, info)
        message = self.ai_client.coaching(team, summary, record.settings)
        if message is None:
            return {'message': None, 'error': 'AI service is unavailable'}
        return {'message': message}
