import math

import pytest

from spend_forecast.stats import (
    Outlier,
    as_series,
    detect_outliers,
    mean,
    quartiles,
    std_dev,
    variance,
)


class TestDescriptiveStatistics:
    def test_mean_of_empty_series_is_zero(self):
        assert mean([]) == 0.0

    def test_population_and_sample_variance(self):
        data = [2, 4, 4, 4, 5, 5, 7, 9]
        assert variance(data) == pytest.approx(4.0)
        assert variance(data, ddof=1) == pytest.approx(32 / 7)
        assert std_dev(data) == pytest.approx(2.0)

    def test_sample_variance_of_single_point_is_zero(self):
        assert variance([5.0], ddof=1) == 0.0
        assert std_dev([], ddof=1) == 0.0

    def test_as_series_drops_non_numeric_values(self):
        assert as_series([1, "2", None, float("nan"), math.inf, "abc", 3.5]) == [1.0, 2.0, 3.5]
        assert as_series(None) == []


class TestQuartiles:
    def test_lower_index_rule(self):
        # n=4 -> q1 at index 1, q3 at index 3 of the sorted values
        assert quartiles([4, 1, 3, 2]) == (2.0, 4.0)

    def test_odd_length(self):
        assert quartiles([1, 2, 3, 4, 100]) == (2.0, 4.0)

    def test_empty(self):
        assert quartiles([]) == (0.0, 0.0)


class TestDetectOutliers:
    def test_too_few_points_pass_through(self):
        result = detect_outliers([1, 2, 3])
        assert result.outliers == []
        assert result.clean_data == [1, 2, 3]
        assert result.q1 is None
        assert result.iqr is None

    def test_none_input(self):
        result = detect_outliers(None)
        assert result.outliers == []
        assert result.clean_data == []

    def test_high_outlier_flagged_with_original_index(self):
        result = detect_outliers([1, 2, 3, 4, 100])
        assert result.q1 == 2
        assert result.q3 == 4
        assert result.iqr == 2
        assert result.lower_bound == pytest.approx(-1.0)
        assert result.upper_bound == pytest.approx(7.0)
        assert result.outliers == [Outlier(index=4, value=100.0)]
        assert result.clean_data == [1, 2, 3, 4]
        assert result.count == 1

    def test_low_outlier_keeps_order_of_clean_values(self):
        result = detect_outliers([13, 10, -50, 12, 11])
        assert [o.index for o in result.outliers] == [2]
        assert result.clean_data == [13, 10, 12, 11]

    def test_skipped_values_do_not_shift_outlier_index(self):
        result = detect_outliers([1, None, 2, float("nan"), 3, 4, 100])
        assert result.outliers == [Outlier(index=6, value=100.0)]
        assert result.clean_data == [1, 2, 3, 4]

    def test_too_few_finite_points_pass_through(self):
        result = detect_outliers([1, None, float("inf"), 2, 3])
        assert result.outliers == []
        assert result.clean_data == [1, 2, 3]

    def test_values_on_the_bounds_are_kept(self):
        # q1=2, q3=4 -> upper bound 7 exactly
        result = detect_outliers([1, 2, 3, 4, 7])
        assert result.outliers == []
        assert result.clean_data == [1, 2, 3, 4, 7]

    def test_input_is_not_mutated(self):
        data = [5, 1, 4, 2, 100]
        detect_outliers(data)
        assert data == [5, 1, 4, 2, 100]

    def test_to_dict(self):
        payload = detect_outliers([1, 2, 3, 4, 100]).to_dict()
        assert payload["outliers"] == [{"index": 4, "value": 100.0}]
        assert payload["clean_data"] == [1, 2, 3, 4]
