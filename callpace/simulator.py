"""
Simulation Projector Module
What-if adjustment of the day-end forecast
"""

from dataclasses import asdict, dataclass
from enum import Enum
from typing import Dict, Optional

from .aggregator import DailySummary

OVERALL = 'overall'


class GuideType(str, Enum):
    FINISHED = "finished"
    SUCCESS = "success"
    DANGER = "danger"


@dataclass
class Simulation:
    simulated_total: float
    simulated_achievement: float
    remaining_hours: int
    guide: GuideType
    gap: float
    required_per_hour: Optional[float] = None

    def to_dict(self) -> Dict:
        payload = asdict(self)
        payload['guide'] = self.guide.value
        return payload


def simulate(base_forecast: float, goal: float, adjustment: int, remaining_hours: int) -> Simulation:
    """
    Apply a per-hour adjustment to the base forecast

    Args:
        base_forecast: Day-end forecast for the selected scope
        goal: Daily goal for the selected scope
        adjustment: Extra units per remaining hour (may be negative)
        remaining_hours: Hours left in the shift

    Returns:
        Simulation with the adjusted total and guidance
    """
    simulated_total = max(0.0, base_forecast + adjustment * remaining_hours)
    simulated_achievement = (simulated_total / goal * 100) if goal > 0 else 0.0
    gap = goal - base_forecast

    if remaining_hours <= 0:
        guide = GuideType.FINISHED
        required = None
    elif gap <= 0:
        guide = GuideType.SUCCESS
        required = 0.0
    else:
        guide = GuideType.DANGER
        required = max(0.0, gap / remaining_hours)

    return Simulation(
        simulated_total=simulated_total,
        simulated_achievement=simulated_achievement,
        remaining_hours=remaining_hours,
        guide=guide,
        gap=gap,
        required_per_hour=required,
    )


def simulate_scope(summary: DailySummary, scope: str, adjustment: int, remaining_hours: int) -> Simulation:
    """Simulate either the overall forecast or one product's"""
    if scope == OVERALL:
        base, goal = summary.predicted_successes, summary.daily_goal
    else:
        product = summary.product_summaries.get(scope)
        base = product.predicted_successes if product else 0.0
        goal = product.daily_goal if product else 0.0
    return simulate(base, goal, adjustment, remaining_hours)
