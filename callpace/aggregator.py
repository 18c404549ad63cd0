"""
Daily Aggregator Module
Reduces a day's checkpoint entries into totals, rates and forecasts
"""

import logging
from dataclasses import asdict, dataclass, field
from datetime import date
from typing import Dict, List, Optional

from .calendar_service import REPORTING_TIMES, MonthInfo, DateLike, to_date
from .models import CheckpointEntry, DaySettings, ReadOnlyDayError
from .projector import CheckpointProjector, achievement, last_checkpoint

logger = logging.getLogger(__name__)


def rate(numerator: float, denominator: float) -> float:
    """Percentage with an empty denominator defined as 0%"""
    return (numerator / denominator * 100) if denominator > 0 else 0.0


@dataclass
class ProductSummary:
    total_successes: int
    predicted_successes: float
    daily_goal: float
    current_achievement: float
    predicted_achievement: float


@dataclass
class DailySummary:
    total_calls: int = 0
    total_memo_attempts: int = 0
    total_manager_attempts: int = 0
    total_stt_attempts: int = 0
    total_successes: int = 0
    total_activations: int = 0
    attempt_rate: float = 0.0
    active_attempt_rate: float = 0.0
    stt_mention_rate: float = 0.0
    conversion_rate: float = 0.0
    activation_rate: float = 0.0
    last_checkpoint: Optional[int] = None
    cumulative_weight: float = 0
    daily_goal: float = 0.0
    current_achievement: float = 0.0
    predicted_successes: float = 0.0
    predicted_activations: float = 0.0
    predicted_achievement: float = 0.0
    daily_activation_goal: float = 0.0
    current_activation_achievement: float = 0.0
    predicted_activation_achievement: float = 0.0
    product_summaries: Dict[str, ProductSummary] = field(default_factory=dict)

    def to_dict(self) -> Dict:
        return asdict(self)


def daily_goal(settings: DaySettings, info: MonthInfo) -> float:
    if info.net_application_days == 0:
        return 0.0
    return sum(p.goal for p in settings.product_goals) / info.net_application_days


def summarize(entries: List[CheckpointEntry], settings: DaySettings, info: MonthInfo) -> DailySummary:
    """
    Aggregate a day's entries

    Args:
        entries: Accepted checkpoint entries for the day
        settings: Team settings (weights, goals)
        info: Effective month day counts (overrides already applied)

    Returns:
        DailySummary with totals, rates, forecasts and per-product breakdown
    """
    projector = CheckpointProjector.for_entries(settings.weights, entries)

    total_calls = sum(e.calls for e in entries)
    total_memo = sum(e.memo_attempts for e in entries)
    total_manager = sum(e.manager_attempts for e in entries)
    total_stt = sum(e.stt_attempts for e in entries)
    total_successes = sum(e.total_successes for e in entries)
    total_activations = sum(e.activations or 0 for e in entries)

    goal = daily_goal(settings, info)
    predicted_successes = projector.project(total_successes)
    predicted_activations = projector.project(total_activations)

    activation_goal = (settings.core_goals.activation_goal / info.opening_days
                       if info.opening_days > 0 else 0.0)

    products: Dict[str, ProductSummary] = {}
    for product in settings.product_goals:
        successes = sum(e.product_successes.get(product.name, 0) for e in entries)
        predicted = projector.project(successes)
        product_goal = (product.goal / info.net_application_days
                        if info.net_application_days > 0 else 0.0)
        products[product.name] = ProductSummary(
            total_successes=successes,
            predicted_successes=predicted,
            daily_goal=product_goal,
            current_achievement=achievement(successes, product_goal),
            predicted_achievement=achievement(predicted, product_goal),
        )

    return DailySummary(
        total_calls=total_calls,
        total_memo_attempts=total_memo,
        total_manager_attempts=total_manager,
        total_stt_attempts=total_stt,
        total_successes=total_successes,
        total_activations=total_activations,
        attempt_rate=rate(total_memo, total_calls),
        active_attempt_rate=rate(total_manager, total_calls),
        stt_mention_rate=rate(total_stt, total_calls),
        conversion_rate=rate(total_successes, total_manager),
        activation_rate=rate(total_activations, total_successes),
        last_checkpoint=projector.checkpoint,
        cumulative_weight=projector.weight,
        daily_goal=goal,
        current_achievement=achievement(total_successes, goal),
        predicted_successes=predicted_successes,
        predicted_activations=predicted_activations,
        predicted_achievement=achievement(predicted_successes, goal),
        daily_activation_goal=activation_goal,
        current_activation_achievement=achievement(total_activations, activation_goal),
        predicted_activation_achievement=achievement(predicted_activations, activation_goal),
        product_summaries=products,
    )


def compare_with_previous(entries: List[CheckpointEntry],
                          previous_entries: Optional[List[CheckpointEntry]]) -> Optional[Dict[str, int]]:
    """Previous day's successes and activations up to today's last checkpoint"""
    if not entries or previous_entries is None:
        return None
    cutoff = last_checkpoint(entries) or 0
    relevant = [e for e in previous_entries if e.reporting_time <= cutoff]
    return {
        'successes': sum(e.total_successes for e in relevant),
        'activations': sum(e.activations or 0 for e in relevant),
    }


def trend(current: int, previous: Optional[int]) -> Optional[Dict]:
    if previous is None:
        return None
    diff = current - previous
    if previous != 0:
        percent = int(abs(diff / previous * 100) + 0.5)
    else:
        percent = 100 if diff > 0 else 0
    direction = 'up' if diff > 0 else 'down' if diff < 0 else 'flat'
    return {'diff': diff, 'percent': percent, 'direction': direction}


class DayLedger:
    """Ordered, de-duplicated entry set for one team's day"""

    def __init__(self, day: DateLike, entries: Optional[List[CheckpointEntry]] = None,
                 today: Optional[date] = None):
        self.day = to_date(day)
        self.today = today or date.today()
        self._entries: Dict[int, CheckpointEntry] = {}
        for entry in entries or []:
            self._entries[entry.reporting_time] = entry

    @property
    def is_read_only(self) -> bool:
        return self.day != self.today

    @property
    def entries(self) -> List[CheckpointEntry]:
        return [self._entries[t] for t in sorted(self._entries)]

    def ensure_writable(self) -> None:
        if self.is_read_only:
            raise ReadOnlyDayError(f"{self.day.isoformat()} is read-only")

    def upsert(self, entry: CheckpointEntry, editing_time: Optional[int] = None) -> bool:
        """
        Add or replace a checkpoint entry

        Args:
            entry: Operator-entered entry, validated before any change
            editing_time: Reporting time of the entry being edited, if any

        Returns:
            True if an existing entry was replaced
        """
        self.ensure_writable()
        entry.validate()
        replaced = entry.reporting_time in self._entries
        if editing_time is not None and editing_time != entry.reporting_time:
            replaced = self._entries.pop(editing_time, None) is not None or replaced
        self._entries[entry.reporting_time] = entry
        logger.info("%s entry for %s at %s:00",
                    "Replaced" if replaced else "Added", self.day, entry.reporting_time)
        return replaced

    def remove(self, reporting_time: int) -> bool:
        self.ensure_writable()
        return self._entries.pop(reporting_time, None) is not None

    def reset(self) -> None:
        self.ensure_writable()
        self._entries.clear()

    def available_times(self, editing_time: Optional[int] = None) -> List[int]:
        available = [t for t in REPORTING_TIMES if t not in self._entries]
        if editing_time and editing_time not in available:
            available.append(editing_time)
            available.sort()
        return available

    def next_time(self) -> int:
        """First free checkpoint, or 0 once every checkpoint is filled"""
        available = self.available_times()
        return available[0] if available else 0
