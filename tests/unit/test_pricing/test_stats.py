"""
Unit tests for price statistics
"""

import pytest

from pricing.stats import (
    PriceStats, PricingStrategy, calculate_stats, unit_value_for_strategy,
    estimated_total, methodology_label
)


@pytest.mark.unit
class TestCalculateStats:

    def test_empty_list_is_all_zero(self):
        stats = calculate_stats([], 10)
        assert stats == PriceStats()
        assert stats.count == 0

    def test_single_price(self):
        stats = calculate_stats([5.0], 4)
        assert stats.min == 5.0
        assert stats.mean == 5.0
        assert stats.median == 5.0
        assert stats.std_dev == 0.0
        assert stats.cv == 0.0
        assert stats.sanitized_mean == 5.0
        assert stats.valid_quotes == 1
        assert stats.outliers_count == 0
        assert stats.total_estimated == 20.0

    def test_outlier_excluded_from_sanitized_mean(self):
        stats = calculate_stats([10.0, 12.0, 11.0, 30.0], 2)

        assert stats.min == 10.0
        assert stats.mean == pytest.approx(15.75)
        assert stats.median == pytest.approx(11.5)
        # population standard deviation
        assert stats.std_dev == pytest.approx(8.2576, abs=1e-4)
        assert stats.cv == pytest.approx(52.43, abs=1e-2)
        assert stats.lower_limit == pytest.approx(15.75 - 8.2576, abs=1e-4)
        assert stats.upper_limit == pytest.approx(15.75 + 8.2576, abs=1e-4)
        assert stats.sanitized_mean == pytest.approx(11.0)
        assert stats.valid_quotes == 3
        assert stats.outliers_count == 1
        assert stats.total_estimated == pytest.approx(22.0)

    def test_band_is_inclusive(self):
        # mean 55, std 45: both prices sit exactly on the limits
        stats = calculate_stats([10.0, 100.0], 1)
        assert stats.lower_limit == pytest.approx(10.0)
        assert stats.upper_limit == pytest.approx(100.0)
        assert stats.valid_quotes == 2
        assert stats.sanitized_mean == pytest.approx(55.0)

    def test_accepts_quote_dicts(self, sample_quotes):
        from_dicts = calculate_stats(sample_quotes, 1)
        from_prices = calculate_stats([q['unit_price'] for q in sample_quotes], 1)
        assert from_dicts == from_prices

    def test_order_does_not_matter(self):
        assert calculate_stats([3, 1, 2, 50], 1) == calculate_stats([50, 2, 1, 3], 1)

    @pytest.mark.parametrize("prices", [
        [1.0, 2.0, 3.0, 4.0, 100.0],
        [7.5, 7.5, 7.5],
        [2.0, 4.0, 4.0, 4.0, 5.0, 5.0, 7.0, 9.0],
        [19.9, 20.1, 20.0, 18.0, 25.0, 19.0],
        [0.1] * 3,
        [0.1] * 7,
        [1.1] * 7,
        [0.05] * 3,
        [0.09] * 7,
    ])
    def test_invariants(self, prices):
        stats = calculate_stats(prices, 3)

        assert stats.valid_quotes + stats.outliers_count == len(prices)
        assert stats.valid_quotes >= 1
        assert min(prices) <= stats.sanitized_mean <= max(prices)
        assert stats.lower_limit <= stats.mean <= stats.upper_limit
        assert stats.total_estimated == pytest.approx(stats.sanitized_mean * 3)

    def test_is_within_band(self):
        stats = calculate_stats([10.0, 12.0, 11.0, 30.0], 1)
        assert stats.is_within_band(11.0)
        assert not stats.is_within_band(30.0)

    def test_to_dict_keys(self):
        keys = set(calculate_stats([1.0], 1).to_dict())
        assert keys == {
            'min', 'mean', 'median', 'std_dev', 'cv', 'lower_limit', 'upper_limit',
            'sanitized_mean', 'total_estimated', 'valid_quotes', 'outliers_count'
        }


@pytest.mark.unit
class TestPricingStrategy:

    def test_unit_value_for_strategy(self):
        stats = calculate_stats([10.0, 12.0, 11.0, 30.0], 1)
        assert unit_value_for_strategy(stats, 'mean') == pytest.approx(15.75)
        assert unit_value_for_strategy(stats, PricingStrategy.MEDIAN) == pytest.approx(11.5)
        assert unit_value_for_strategy(stats, 'sanitized') == pytest.approx(11.0)

    def test_estimated_total(self):
        stats = calculate_stats([10.0, 20.0], 1)
        assert estimated_total(stats, 'mean', 3) == pytest.approx(45.0)

    def test_unknown_strategy(self):
        with pytest.raises(ValueError):
            unit_value_for_strategy(PriceStats(), 'max')

    @pytest.mark.parametrize("strategies, label", [
        ([], "Média Saneada"),
        (['sanitized'], "Média Saneada"),
        (['mean', 'median', 'sanitized'], "Média Saneada"),
        (['mean', 'median'], "Mediana"),
        (['median'], "Mediana"),
        (['mean', 'mean'], "Média Comum"),
    ])
    def test_methodology_label(self, strategies, label):
        assert methodology_label(strategies) == label
