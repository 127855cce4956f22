import math

import pytest

from spend_forecast.volatility import (
    calculate_confidence_intervals,
    calculate_volatility,
    volatility_level,
    z_score,
)


class TestVolatility:
    def test_constant_series_is_stable(self):
        result = calculate_volatility([100, 100, 100])
        assert result.volatility == 0.0
        assert result.level == "stable"

    def test_needs_two_points(self):
        result = calculate_volatility([5])
        assert result.volatility == 0.0
        assert result.level == "stable"

    def test_zero_mean_is_guarded(self):
        result = calculate_volatility([0, 0, 0])
        assert result.volatility == 0.0
        assert not math.isnan(result.volatility)

    def test_coefficient_of_variation_uses_population_std(self):
        result = calculate_volatility([75, 125])
        assert result.mean == pytest.approx(100.0)
        assert result.std_dev == pytest.approx(25.0)
        assert result.volatility == pytest.approx(25.0)
        assert result.level == "high"

    @pytest.mark.parametrize(
        "value, level",
        [
            (45.0, "very high"),
            (30.0, "high"),
            (20.5, "high"),
            (20.0, "moderate"),
            (10.0, "low"),
            (5.1, "low"),
            (5.0, "stable"),
            (0.0, "stable"),
        ],
    )
    def test_level_bounds_are_exclusive(self, value, level):
        assert volatility_level(value) == level


class TestConfidenceIntervals:
    def test_short_history_returns_forecast_unchanged(self):
        result = calculate_confidence_intervals([10], [12, 13])
        assert result.upper == [12, 13]
        assert result.lower == [12, 13]
        assert result.std_dev == 0.0

    def test_margin_uses_sample_std_and_widens(self):
        result = calculate_confidence_intervals([10, 20], [15, 15, 15])
        sd = math.sqrt(50)
        assert result.std_dev == pytest.approx(sd)
        assert result.margin == pytest.approx(sd * 1.96)
        for step, upper in enumerate(result.upper):
            assert upper == pytest.approx(15 + sd * 1.96 * math.sqrt(1 + (step + 1) / 2))
        widths = [u - 15 for u in result.upper]
        assert widths == sorted(widths)

    def test_lower_bound_never_negative(self):
        result = calculate_confidence_intervals([1, 1000, 5, 800, 2, 900], [10, 10, 10])
        assert all(value >= 0 for value in result.lower)
        assert result.lower == [0.0, 0.0, 0.0]

    def test_z_score_lookup(self):
        assert z_score(0.99) == 2.576
        assert z_score(0.95) == 1.96
        assert z_score(0.9) == 1.645
        assert z_score(0.8) == 1.96

    def test_higher_confidence_is_wider(self):
        history = [100, 120, 90, 110]
        narrow = calculate_confidence_intervals(history, [100], 0.90)
        wide = calculate_confidence_intervals(history, [100], 0.99)
        assert wide.upper[0] > narrow.upper[0]
