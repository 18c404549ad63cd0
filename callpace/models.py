"""Typed records for checkpoint entries, goals and monthly progress."""

from __future__ import annotations

import logging
import math
import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .calendar_service import REPORTING_TIMES

LOGGER = logging.getLogger(__name__)

UNSELECTED_TIME = 0

DEFAULT_WEIGHTS: Dict[int, int] = {
    10: 11, 11: 22, 12: 33, 13: 44, 14: 55, 15: 66, 16: 77, 17: 88, 18: 100
}


class EntryValidationError(ValueError):
    """Raised when a checkpoint entry is rejected at creation time."""


class ReadOnlyDayError(RuntimeError):
    """Raised when a historical day is mutated."""


def _coerce_count(value: Any) -> int:
    """Lenient integer parsing used for untrusted input (bad values become 0)."""
    if isinstance(value, bool):
        return 0
    if isinstance(value, int):
        return max(value, 0)
    if isinstance(value, float):
        if math.isnan(value) or math.isinf(value):
            return 0
        return max(int(value), 0)
    if isinstance(value, str):
        try:
            return max(int(value.strip()), 0)
        except ValueError:
            return 0
    return 0


def _require_count(name: str, value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise EntryValidationError(f"{name} must be an integer, got {value!r}")
    if value < 0:
        raise EntryValidationError(f"{name} must not be negative")
    return value


@dataclass
class CheckpointEntry:
    """One hourly report for a team's day."""

    reporting_time: int
    calls: int = 0
    memo_attempts: int = 0
    manager_attempts: int = 0
    stt_attempts: int = 0
    product_successes: Dict[str, int] = field(default_factory=dict)
    activations: int = 0

    @property
    def total_successes(self) -> int:
        return sum(self.product_successes.values())

    def validate(self, allow_unselected: bool = False) -> "CheckpointEntry":
        """
        Check the entry before it is accepted into a day

        Args:
            allow_unselected: Accept the sentinel reporting time used for parsed input

        Returns:
            The entry itself, for chaining

        Raises:
            EntryValidationError: on any invalid field
        """
        legal = REPORTING_TIMES + ((UNSELECTED_TIME,) if allow_unselected else ())
        if self.reporting_time not in legal:
            raise EntryValidationError(f"Unknown reporting time: {self.reporting_time!r}")
        _require_count("calls", self.calls)
        _require_count("memo_attempts", self.memo_attempts)
        _require_count("manager_attempts", self.manager_attempts)
        _require_count("stt_attempts", self.stt_attempts)
        _require_count("activations", self.activations)
        for name, count in self.product_successes.items():
            _require_count(f"product_successes[{name}]", count)
        if self.total_successes > self.calls:
            raise EntryValidationError(
                f"Total successes ({self.total_successes}) exceed calls ({self.calls})"
            )
        return self

    def to_dict(self) -> Dict[str, Any]:
        return {
            "reportingTime": self.reporting_time,
            "calls": self.calls,
            "memoAttempts": self.memo_attempts,
            "managerAttempts": self.manager_attempts,
            "sttAttempts": self.stt_attempts,
            "productSuccesses": dict(self.product_successes),
            "activations": self.activations,
        }

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "CheckpointEntry":
        """Build an entry from its stored form without leniency."""
        if not isinstance(payload, dict):
            raise EntryValidationError("Entry payload must be an object")
        successes = payload.get("productSuccesses") or {}
        if not isinstance(successes, dict):
            raise EntryValidationError("productSuccesses must be an object")
        return cls(
            reporting_time=payload.get("reportingTime"),
            calls=payload.get("calls", 0),
            memo_attempts=payload.get("memoAttempts", 0),
            manager_attempts=payload.get("managerAttempts", 0),
            stt_attempts=payload.get("sttAttempts", 0),
            product_successes={str(k): v for k, v in successes.items()},
            activations=payload.get("activations", 0) or 0,
        )

    @classmethod
    def from_untrusted(cls, payload: Any, product_names: Optional[List[str]] = None) -> "CheckpointEntry":
        """
        Re-validate a partial record coming from free-text parsing

        Missing or malformed counts default to 0, an illegal reporting time
        becomes the unselected sentinel, and successes for products that are
        not tracked are dropped when ``product_names`` is given.
        """
        if not isinstance(payload, dict):
            payload = {}

        reporting_time = payload.get("reportingTime")
        if isinstance(reporting_time, bool) or reporting_time not in REPORTING_TIMES:
            reporting_time = UNSELECTED_TIME
        else:
            reporting_time = int(reporting_time)

        raw_successes = payload.get("productSuccesses")
        if not isinstance(raw_successes, dict):
            raw_successes = {}
        successes = {}
        for name, count in raw_successes.items():
            if product_names is not None and name not in product_names:
                continue
            successes[str(name)] = _coerce_count(count)
        for name in product_names or []:
            successes.setdefault(name, 0)

        return cls(
            reporting_time=reporting_time,
            calls=_coerce_count(payload.get("calls")),
            memo_attempts=_coerce_count(payload.get("memoAttempts")),
            manager_attempts=_coerce_count(payload.get("managerAttempts")),
            stt_attempts=_coerce_count(payload.get("sttAttempts")),
            product_successes=successes,
            activations=_coerce_count(payload.get("activations")),
        )


@dataclass
class ProductGoal:
    id: int
    name: str
    goal: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "name": self.name, "goal": self.goal}

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "ProductGoal":
        return cls(
            id=int(payload.get("id", 0)),
            name=str(payload.get("name", "")),
            goal=_coerce_count(payload.get("goal")),
        )


def default_product_goals() -> List[ProductGoal]:
    base = int(time.time() * 1000)
    return [
        ProductGoal(id=base, name="주력상품A", goal=500),
        ProductGoal(id=base + 1, name="프로모션B", goal=200),
    ]


@dataclass
class MonthlyCoreGoals:
    """Scalar monthly targets; rates are percentages."""

    attempt_rate: int = 90
    active_attempt_rate: int = 50
    stt_mention_rate: int = 70
    activation_goal: int = 120

    def to_dict(self) -> Dict[str, int]:
        return {
            "attemptRate": self.attempt_rate,
            "activeAttemptRate": self.active_attempt_rate,
            "sttMentionRate": self.stt_mention_rate,
            "activationGoal": self.activation_goal,
        }

    @classmethod
    def from_dict(cls, payload: Optional[Dict[str, Any]]) -> "MonthlyCoreGoals":
        if not isinstance(payload, dict):
            return cls()
        defaults = cls()
        return cls(
            attempt_rate=_coerce_count(payload.get("attemptRate", defaults.attempt_rate)),
            active_attempt_rate=_coerce_count(payload.get("activeAttemptRate", defaults.active_attempt_rate)),
            stt_mention_rate=_coerce_count(payload.get("sttMentionRate", defaults.stt_mention_rate)),
            activation_goal=_coerce_count(payload.get("activationGoal", defaults.activation_goal)),
        )


@dataclass
class MonthInfoOverride:
    """Manual day counts for the displayed month; ``None`` means use the calendar."""

    opening_days: Optional[int] = None
    net_application_days: Optional[int] = None

    @property
    def is_empty(self) -> bool:
        return self.opening_days is None and self.net_application_days is None

    def to_dict(self) -> Optional[Dict[str, int]]:
        if self.is_empty:
            return None
        payload = {}
        if self.opening_days is not None:
            payload["openingDays"] = self.opening_days
        if self.net_application_days is not None:
            payload["netApplicationDays"] = self.net_application_days
        return payload

    @classmethod
    def from_dict(cls, payload: Optional[Dict[str, Any]]) -> Optional["MonthInfoOverride"]:
        if not isinstance(payload, dict):
            return None
        override = cls(
            opening_days=_optional_day_count(payload.get("openingDays")),
            net_application_days=_optional_day_count(payload.get("netApplicationDays")),
        )
        return None if override.is_empty else override


def _optional_day_count(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    try:
        number = int(value)
    except (TypeError, ValueError):
        return None
    return number if number >= 0 else None


@dataclass
class MonthlyProgressSnapshot:
    products: Dict[str, int] = field(default_factory=dict)
    activations: int = 0
    overridden: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {"products": dict(self.products), "activations": self.activations}

    @classmethod
    def from_dict(cls, payload: Dict[str, Any], overridden: bool = False) -> "MonthlyProgressSnapshot":
        products = payload.get("products") or {}
        if not isinstance(products, dict):
            products = {}
        return cls(
            products={str(k): _coerce_count(v) for k, v in products.items()},
            activations=_coerce_count(payload.get("activations")),
            overridden=overridden,
        )


@dataclass
class DaySettings:
    """Per-team settings passed explicitly into every aggregation call."""

    weights: Dict[int, int] = field(default_factory=lambda: dict(DEFAULT_WEIGHTS))
    month_info_override: Optional[MonthInfoOverride] = None
    core_goals: MonthlyCoreGoals = field(default_factory=MonthlyCoreGoals)
    product_goals: List[ProductGoal] = field(default_factory=default_product_goals)

    @property
    def final_weight(self) -> int:
        return self.weights.get(REPORTING_TIMES[-1], 0)

    @property
    def weights_complete(self) -> bool:
        """False when the final checkpoint does not reach 100%."""
        return self.final_weight == 100

    @property
    def product_names(self) -> List[str]:
        return [goal.name for goal in self.product_goals]

    def reset_weights(self) -> None:
        self.weights = dict(DEFAULT_WEIGHTS)

    def set_weight(self, checkpoint: int, value: Any) -> None:
        if checkpoint not in REPORTING_TIMES:
            raise EntryValidationError(f"Unknown reporting time: {checkpoint!r}")
        self.weights[checkpoint] = _coerce_count(value)

    def add_product_goal(self, name: str = "", goal: int = 0) -> ProductGoal:
        next_id = max((p.id for p in self.product_goals), default=0) + 1
        product = ProductGoal(id=next_id, name=name, goal=goal)
        self.product_goals.append(product)
        return product

    def update_product_goal(self, product_id: int, name: Optional[str] = None, goal: Optional[int] = None) -> None:
        for product in self.product_goals:
            if product.id == product_id:
                if name is not None:
                    product.name = name
                if goal is not None:
                    product.goal = _coerce_count(goal)
                return
        raise KeyError(product_id)

    def remove_product_goal(self, product_id: int) -> None:
        self.product_goals = [p for p in self.product_goals if p.id != product_id]


@dataclass
class DailyRecord:
    entries: List[CheckpointEntry] = field(default_factory=list)
    settings: DaySettings = field(default_factory=DaySettings)

    def to_dict(self) -> Dict[str, Any]:
        override = self.settings.month_info_override
        return {
            "entries": [entry.to_dict() for entry in self.entries],
            "predictionWeights": {str(k): v for k, v in self.settings.weights.items()},
            "monthInfoOverrides": override.to_dict() if override else None,
            "monthlyGoals": self.settings.core_goals.to_dict(),
            "monthlyProductGoals": [p.to_dict() for p in self.settings.product_goals],
        }
