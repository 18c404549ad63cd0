"""
Monthly Rollup Module
Sums a month of daily records into product and activation totals
"""

import logging
from typing import Dict, List, Optional

from .calendar_service import iter_month_days
from .models import MonthlyCoreGoals, MonthlyProgressSnapshot, ProductGoal
from .record_store import (
    RecordStore,
    monthly_override_key,
    read_daily_record,
    read_json,
    remove_record,
    write_json,
)
from .settings_store import parse_entries

logger = logging.getLogger(__name__)


class MonthlyRollup:
    """Computes or returns the overridden monthly progress for a team"""

    def __init__(self, store: RecordStore, legacy_team: Optional[str] = None):
        self.store = store
        self.legacy_team = legacy_team

    def rollup(self, team: str, year_month: str, product_goals: List[ProductGoal]) -> MonthlyProgressSnapshot:
        """
        Monthly progress for (team, year_month)

        Args:
            team: Team identifier
            year_month: Month as YYYY-MM
            product_goals: Currently tracked products; other names are dropped

        Returns:
            The override snapshot if one is saved, otherwise the scan result
        """
        override = read_json(self.store, monthly_override_key(team, year_month))
        if isinstance(override, dict):
            return MonthlyProgressSnapshot.from_dict(override, overridden=True)

        snapshot = MonthlyProgressSnapshot(products={p.name: 0 for p in product_goals})
        for day in iter_month_days(year_month):
            payload = read_daily_record(self.store, team, day, legacy_team=self.legacy_team)
            if not isinstance(payload, dict):
                continue
            # entries the day view rejects are skipped here too
            for entry in parse_entries(payload.get('entries'), context=f"{team}/{day}"):
                for name, count in entry.product_successes.items():
                    if name in snapshot.products:
                        snapshot.products[name] += count
                snapshot.activations += entry.activations
        return snapshot

    def override(self, team: str, year_month: str, snapshot: MonthlyProgressSnapshot) -> bool:
        """Freeze a manually corrected snapshot until clear_override is called"""
        saved = write_json(self.store, monthly_override_key(team, year_month), snapshot.to_dict())
        if saved:
            snapshot.overridden = True
            logger.info(f"Monthly progress overridden for {team} {year_month}")
        return saved

    def clear_override(self, team: str, year_month: str) -> bool:
        cleared = remove_record(self.store, monthly_override_key(team, year_month))
        if cleared:
            logger.info(f"Monthly override cleared for {team} {year_month}")
        return cleared


def goal_completion(snapshot: MonthlyProgressSnapshot,
                    product_goals: List[ProductGoal],
                    core_goals: MonthlyCoreGoals) -> Dict:
    """Completion percentage of each monthly goal"""
    products = {}
    for product in product_goals:
        progress = snapshot.products.get(product.name, 0)
        products[product.name] = {
            'progress': progress,
            'goal': product.goal,
            'completion': (progress / product.goal * 100) if product.goal > 0 else 0.0,
        }
    activation_goal = core_goals.activation_goal
    return {
        'products': products,
        'activations': {
            'progress': snapshot.activations,
            'goal': activation_goal,
            'completion': (snapshot.activations / activation_goal * 100) if activation_goal > 0 else 0.0,
        },
    }
