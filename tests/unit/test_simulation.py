"""
What-if simulation of the day-end forecast
"""

import pytest

from callpace.aggregator import DailySummary, ProductSummary
from callpace.simulator import OVERALL, GuideType, simulate, simulate_scope


class TestSimulate:

    def test_adjustment_per_remaining_hour(self):
        result = simulate(base_forecast=40, goal=50, adjustment=2, remaining_hours=5)
        assert result.simulated_total == 50
        assert result.simulated_achievement == pytest.approx(100)
        assert result.guide is GuideType.DANGER
        assert result.gap == 10
        assert result.required_per_hour == pytest.approx(2)

    def test_negative_adjustment_is_floored_at_zero(self):
        result = simulate(base_forecast=4, goal=50, adjustment=-3, remaining_hours=5)
        assert result.simulated_total == 0

    def test_goal_already_covered(self):
        result = simulate(base_forecast=60, goal=50, adjustment=0, remaining_hours=3)
        assert result.guide is GuideType.SUCCESS
        assert result.required_per_hour == 0

    def test_shift_finished(self):
        result = simulate(base_forecast=30, goal=50, adjustment=5, remaining_hours=0)
        assert result.guide is GuideType.FINISHED
        assert result.simulated_total == 30
        assert result.required_per_hour is None

    def test_zero_goal(self):
        assert simulate(base_forecast=3, goal=0, adjustment=1, remaining_hours=2).simulated_achievement == 0

    def test_to_dict(self):
        payload = simulate(10, 20, 1, 4).to_dict()
        assert payload["guide"] == "danger"
        assert payload["remaining_hours"] == 4


class TestSimulateScope:

    @pytest.fixture
    def summary(self):
        return DailySummary(
            predicted_successes=30,
            daily_goal=40,
            product_summaries={
                "A": ProductSummary(total_successes=5, predicted_successes=20, daily_goal=15,
                                    current_achievement=0, predicted_achievement=0),
            },
        )

    def test_overall_scope(self, summary):
        assert simulate_scope(summary, OVERALL, 0, 4).gap == 10

    def test_product_scope(self, summary):
        result = simulate_scope(summary, "A", 0, 4)
        assert result.gap == -5
        assert result.guide is GuideType.SUCCESS

    def test_unknown_product_scope(self, summary):
        result = simulate_scope(summary, "Missing", 1, 4)
        assert result.simulated_total == 4
        assert result.simulated_achievement == 0
