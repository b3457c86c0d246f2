"""
Tests for learning-curve evaluation and daily production.
"""
from datetime import date, timedelta

import pytest

from planview.scheduling.learning_curve import (
    daily_capacity,
    efficiency_for_day,
    generate_standard_points,
    linear_ramp_efficiency,
    production_from_linear_ramp,
    production_from_points,
)
from planview.scheduling.models import LearningCurvePoint


def points(*pairs):
    return [LearningCurvePoint(day=d, efficiency=e) for d, e in pairs]


# ==============================================================================
# efficiency_for_day
# ==============================================================================

class TestEfficiencyForDay:
    """Point lookup, interpolation and flat extrapolation."""

    @pytest.fixture
    def curve(self):
        return points((1, 40), (10, 75))

    def test_exact_match(self, curve):
        assert efficiency_for_day(1, curve) == 40
        assert efficiency_for_day(10, curve) == 75

    def test_interpolates_and_rounds_to_two_decimals(self, curve):
        assert efficiency_for_day(5, curve) == 55.56

    def test_flat_extrapolation_after_last_point(self, curve):
        assert efficiency_for_day(20, curve) == 75

    def test_flat_extrapolation_before_first_point(self, curve):
        assert efficiency_for_day(0, curve) == 40

    def test_empty_points_give_zero(self):
        assert efficiency_for_day(3, []) == 0

    def test_points_in_any_order(self):
        unsorted = points((10, 75), (1, 40), (5, 60))
        assert efficiency_for_day(3, unsorted) == 50
        assert efficiency_for_day(5, unsorted) == 60

    def test_exact_match_beats_interpolation(self):
        curve = points((1, 40), (3, 90), (5, 60))
        assert efficiency_for_day(3, curve) == 90


# ==============================================================================
# Capacity formula and production calculators
# ==============================================================================

class TestDailyCapacity:
    """capacity = (efficiency / 100) * operators * minutes / smv"""

    def test_formula(self):
        assert daily_capacity(80, 8, 480, 20) == 960.0

    def test_rounds_to_two_decimals(self):
        assert daily_capacity(55.56, 15, 480, 22) == 391.14

    @pytest.mark.parametrize("smv", [None, 0, -5])
    def test_missing_smv_gives_zero(self, smv):
        assert daily_capacity(80, smv, 480, 20) == 0


class TestProductionFromPoints:
    """Consecutive calendar days, one entry per day."""

    def test_one_entry_per_consecutive_day(self):
        start = date(2030, 1, 7)
        entries = production_from_points(points((1, 50), (3, 100)), 10, 480, 10, 4, start)

        assert [e.date for e in entries] == [start + timedelta(days=i) for i in range(4)]
        assert [e.efficiency for e in entries] == [50, 75, 100, 100]
        assert [e.capacity for e in entries] == [240.0, 360.0, 480.0, 480.0]

    def test_without_smv_capacity_is_zero(self):
        entries = production_from_points(points((1, 50)), None, 480, 10, 3, date(2030, 1, 7))
        assert [e.capacity for e in entries] == [0, 0, 0]

    def test_zero_duration(self):
        assert production_from_points(points((1, 50)), 10, 480, 10, 0, date(2030, 1, 7)) == []


class TestLinearRamp:
    """Legacy initial/target/ramp-days curves."""

    def test_ramp_then_hold(self):
        values = [linear_ramp_efficiency(i, 40, 80, 4) for i in range(6)]
        assert values == [40, 50, 60, 70, 80, 80]

    def test_no_ramp_days_means_target_from_day_one(self):
        assert linear_ramp_efficiency(0, 40, 80, 0) == 80

    def test_clamped_to_initial_and_target(self):
        for i in range(10):
            assert 40 <= linear_ramp_efficiency(i, 40, 80, 3) <= 80

    def test_production_uses_shared_formula(self):
        entries = production_from_linear_ramp(50, 100, 2, 10, 480, 10, 3, date(2030, 1, 7))
        assert [e.efficiency for e in entries] == [50, 75, 100]
        assert [e.capacity for e in entries] == [240.0, 360.0, 480.0]


class TestGenerateStandardPoints:
    """Point lists built from a ramp description."""

    def test_ramp_and_hold_point(self):
        result = generate_standard_points(40, 60, 3)
        assert [(p.day, p.efficiency) for p in result] == [(1, 40.0), (2, 50.0), (3, 60), (4, 60)]

    def test_last_ramp_day_lands_on_target(self):
        result = generate_standard_points(45, 80, 7)
        assert result[-2].day == 7
        assert result[-2].efficiency == 80
        assert max(p.efficiency for p in result) == 80

    def test_no_ramp(self):
        result = generate_standard_points(40, 75, 0)
        assert [(p.day, p.efficiency) for p in result] == [(1, 75)]
