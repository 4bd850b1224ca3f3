"""
Tests for the calculations package.

Covers:
- SOC <-> kWh conversion and signed energy deltas
- Efficiency and average speed guards
- Finite-value statistics and weighted ratios
- Named policies: first_non_empty, discard_if_below, downsample
"""

import math

import pytest

from analyzer.calculations import (
    calculate_avg_speed_kph,
    calculate_energy_added,
    calculate_energy_used,
    calculate_finite_mean,
    calculate_flag_ratio,
    calculate_kwh_per_km,
    calculate_weighted_ratio,
    discard_if_below,
    downsample,
    first_matching,
    first_non_empty,
    is_finite_number,
    last_matching,
    soc_to_kwh,
)
from analyzer.calculations.policies import is_empty


class TestEnergy:
    """Tests for SOC/energy conversions."""

    def test_soc_to_kwh(self):
        assert soc_to_kwh(50.0, 75.0) == 37.5
        assert soc_to_kwh(0.0, 75.0) == 0.0

    def test_energy_used_is_signed(self):
        """A rising battery gives negative energy used, not clamped."""
        assert calculate_energy_used(80.0, 75.0, 100.0) == 5.0
        assert calculate_energy_used(75.0, 80.0, 100.0) == -5.0

    def test_energy_used_rounds_to_three_places(self):
        assert calculate_energy_used(80.0, 79.0, 77.7777) == 0.778

    def test_energy_added_positive_gain(self):
        assert calculate_energy_added(20.0, 80.0, 50.0) == 30.0

    @pytest.mark.parametrize("start,end", [(50.0, 50.0), (60.0, 40.0), (None, 40.0)])
    def test_energy_added_without_gain(self, start, end):
        """No net gain (or missing data) means no energy added."""
        assert calculate_energy_added(start, end, 50.0) is None


class TestEfficiency:
    """Tests for efficiency and speed helpers."""

    def test_kwh_per_km(self):
        assert calculate_kwh_per_km(5.0, 5.0) == 1.0
        assert calculate_kwh_per_km(1.0, 3.0) == 0.333

    def test_kwh_per_km_zero_distance(self):
        assert calculate_kwh_per_km(5.0, 0.0) == 0.0

    def test_avg_speed(self):
        assert calculate_avg_speed_kph(30.0, 30.0) == 60.0

    @pytest.mark.parametrize("distance,minutes", [(0.0, 10.0), (10.0, 0.0), (-1.0, 10.0)])
    def test_avg_speed_guards(self, distance, minutes):
        assert calculate_avg_speed_kph(distance, minutes) == 0.0


class TestStatistics:
    """Tests for finite means and ratios."""

    def test_is_finite_number(self):
        assert is_finite_number(1)
        assert is_finite_number(2.5)
        assert not is_finite_number(True)
        assert not is_finite_number(None)
        assert not is_finite_number(float('nan'))
        assert not is_finite_number(float('inf'))
        assert not is_finite_number('3')

    def test_finite_mean_ignores_missing(self):
        assert calculate_finite_mean([10.0, None, 20.0, float('nan')]) == 15.0

    def test_finite_mean_precision(self):
        assert calculate_finite_mean([1.0, 2.0, 2.0], precision=1) == 1.7

    def test_finite_mean_empty(self):
        assert calculate_finite_mean([None, float('nan')]) is None
        assert calculate_finite_mean([]) is None

    def test_flag_ratio(self):
        assert calculate_flag_ratio([True, False, True, True]) == 0.75
        assert calculate_flag_ratio([]) == 0.0

    def test_weighted_ratio(self):
        assert calculate_weighted_ratio(1.0, 30.0, 0.0, 10.0) == 0.75

    def test_weighted_ratio_zero_weight(self):
        """Zero total weight divides by 1, yielding 0 for zero weights."""
        assert calculate_weighted_ratio(0.5, 0.0, 0.2, 0.0) == 0.0


class TestPolicies:
    """Tests for the named business-rule policies."""

    def test_is_empty(self):
        assert is_empty(None)
        assert is_empty('')
        assert not is_empty(0)
        assert not is_empty('x')

    def test_first_non_empty_skips_empty(self):
        assert first_non_empty([None, '', 'VIN1', 'VIN2']) == 'VIN1'

    def test_first_non_empty_returns_string(self):
        assert first_non_empty([None, 2024.5]) == '2024.5'

    def test_first_non_empty_none_found(self):
        assert first_non_empty([None, '']) is None
        assert first_non_empty([]) is None

    def test_first_and_last_matching(self):
        values = [0, 3, 0, 7, 0]
        assert first_matching(values, lambda v: v > 0) == 3
        assert last_matching(values, lambda v: v > 0) == 7
        assert first_matching([0, 0], lambda v: v > 0) is None
        assert last_matching([], lambda v: v > 0) is None

    def test_discard_if_below_boundary(self):
        """Values at the threshold are discarded, values above are kept."""
        too_short = discard_if_below(0.1)
        assert too_short(0.1)
        assert too_short(0.05)
        assert too_short(None)
        assert not too_short(0.11)

    def test_downsample_short_sequence_untouched(self):
        items = [1, 2, 3]
        result = downsample(items, 5)
        assert result == [1, 2, 3]
        assert result is not items

    def test_downsample_fixed_stride(self):
        """Stride is ceil(n / max); the first item of each bucket survives."""
        assert downsample(list(range(10)), 5) == [0, 2, 4, 6, 8]
        assert downsample(list(range(11)), 5) == [0, 3, 6, 9]

    def test_downsample_bound(self):
        items = list(range(1001))
        result = downsample(items, 200)
        assert len(result) <= 200
        assert result[0] == 0
        assert result[1] - result[0] == math.ceil(1001 / 200)
