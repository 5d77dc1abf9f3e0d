"""Tests for Pearson correlation and its interpretation."""

import numpy as np
import pytest

from src.analytics import (
    CorrelationAnalyzer,
    CorrelationDirection,
    CorrelationStrength,
    InvalidInputError,
    calculate_correlation,
)


class TestCalculateCorrelation:

    def test_perfect_positive(self):
        assert calculate_correlation([1, 2, 3], [2, 4, 6]) == pytest.approx(1.0)

    def test_perfect_negative(self):
        assert calculate_correlation([1, 2, 3], [3, 2, 1]) == pytest.approx(-1.0)

    def test_zero_variance_is_zero(self):
        assert calculate_correlation([5, 5, 5], [1, 2, 3]) == 0
        assert calculate_correlation([1, 2, 3], [5, 5, 5]) == 0

    def test_empty_is_zero(self):
        assert calculate_correlation([], []) == 0
        assert calculate_correlation([], [1, 2, 3]) == 0

    def test_self_correlation_is_exactly_one(self):
        series = [3.1, 4.7, 2.2, 9.9, 5.5]
        assert calculate_correlation(series, series) == 1.0
        assert calculate_correlation(series, list(series)) == 1.0

    def test_flat_series_against_itself(self):
        flat = [100] * 30
        assert calculate_correlation(flat, flat) == 1.0

    def test_truncates_to_shorter_series(self):
        assert calculate_correlation([1, 2, 3, 100], [2, 4, 6]) == pytest.approx(1.0)
        assert calculate_correlation([2, 4, 6], [1, 2, 3, -100]) == pytest.approx(1.0)

    def test_bounds_and_symmetry_on_random_pairs(self):
        rng = np.random.default_rng(7)
        for _ in range(200):
            n = int(rng.integers(1, 40))
            x = rng.normal(size=n).tolist()
            y = rng.normal(size=int(rng.integers(1, 40))).tolist()
            r = calculate_correlation(x, y)
            assert -1 <= r <= 1
            assert r == calculate_correlation(y, x)

    def test_matches_numpy(self):
        rng = np.random.default_rng(3)
        x = rng.normal(size=50)
        y = 0.5 * x + rng.normal(size=50)
        assert calculate_correlation(x.tolist(), y.tolist()) == pytest.approx(np.corrcoef(x, y)[0, 1])

    def test_non_numeric_rejected(self):
        with pytest.raises(InvalidInputError):
            calculate_correlation(["a", "b"], [1, 2])


class TestCorrelationAnalyzer:

    @pytest.mark.parametrize("r, expected", [
        (0.95, CorrelationStrength.STRONG),
        (-0.7, CorrelationStrength.STRONG),
        (0.5, CorrelationStrength.MODERATE),
        (-0.25, CorrelationStrength.WEAK),
        (0.1, CorrelationStrength.NEGLIGIBLE),
        (0.0, CorrelationStrength.NEGLIGIBLE),
    ])
    def test_strength_bands(self, r, expected):
        assert CorrelationAnalyzer().strength(r) == expected

    def test_direction(self):
        assert CorrelationAnalyzer.direction(0.3) == CorrelationDirection.POSITIVE
        assert CorrelationAnalyzer.direction(-0.3) == CorrelationDirection.NEGATIVE
        assert CorrelationAnalyzer.direction(0.0) == CorrelationDirection.NONE

    def test_report(self):
        report = CorrelationAnalyzer().analyze([1, 2, 3, 4, 5], [2, 4, 5, 4, 5])

        assert report.sample_size == 5
        assert report.coefficient == pytest.approx(np.corrcoef([1, 2, 3, 4, 5], [2, 4, 5, 4, 5])[0, 1])
        assert report.strength == CorrelationStrength.STRONG
        assert report.direction == CorrelationDirection.POSITIVE
        assert 0 < report.p_value < 1

    def test_p_value_undefined_for_degenerate_input(self):
        assert CorrelationAnalyzer().analyze([5, 5, 5], [1, 2, 3]).p_value is None
        assert CorrelationAnalyzer().analyze([1, 2], [2, 1]).p_value is None

    def test_constant_series_with_inexact_mean(self):
        """0.1 has no exact binary mean; the report must still be degenerate."""
        assert calculate_correlation([0.1] * 3, [1, 2, 4]) == 0
        assert calculate_correlation([1, 2, 4], [0.1] * 3) == 0

        report = CorrelationAnalyzer().analyze([0.1] * 3, [1, 2, 4])
        assert report.direction == CorrelationDirection.NONE
        assert report.strength == CorrelationStrength.NEGLIGIBLE
        assert report.p_value is None
