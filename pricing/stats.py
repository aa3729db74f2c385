"""
Price statistics for an item's quotes.
Turns a list of unit prices into the estimators used by the price map.
"""

from dataclasses import dataclass, asdict
from enum import Enum
from typing import Any, Dict, Iterable, List, Union

import pandas as pd


class PricingStrategy(str, Enum):
    """Which estimator an item's reference price uses"""
    SANITIZED = "sanitized"
    MEAN = "mean"
    MEDIAN = "median"


METHODOLOGY_LABELS = {
    PricingStrategy.SANITIZED: "Média Saneada",
    PricingStrategy.MEAN: "Média Comum",
    PricingStrategy.MEDIAN: "Mediana",
}


@dataclass
class PriceStats:
    """Derived estimator values for one item"""
    min: float = 0.0
    mean: float = 0.0
    median: float = 0.0
    std_dev: float = 0.0
    cv: float = 0.0
    lower_limit: float = 0.0
    upper_limit: float = 0.0
    sanitized_mean: float = 0.0
    total_estimated: float = 0.0
    valid_quotes: int = 0
    outliers_count: int = 0

    @property
    def count(self) -> int:
        return self.valid_quotes + self.outliers_count

    def is_within_band(self, price: float) -> bool:
        return self.lower_limit <= price <= self.upper_limit

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def _extract_prices(quotes: Iterable[Union[float, int, Dict[str, Any]]]) -> List[float]:
    prices = []
    for quote in quotes:
        if isinstance(quote, dict):
            prices.append(float(quote['unit_price']))
        else:
            prices.append(float(quote))
    return prices


def calculate_stats(quotes: Iterable[Union[float, int, Dict[str, Any]]],
                    quantity: float) -> PriceStats:
    """
    Compute the statistics of a quote list.

    Args:
        quotes: unit prices, or quote dicts carrying a ``unit_price`` key
        quantity: target quantity of the item

    Returns:
        PriceStats: all fields are zero for an empty list. The standard
        deviation is the population one, the band is mean +/- one standard
        deviation (inclusive) and the sanitized mean falls back to the mean
        when no price lies inside the band.
    """
    prices = pd.Series(sorted(_extract_prices(quotes)), dtype='float64')
    n = len(prices)

    if n == 0:
        return PriceStats()

    mean = float(prices.mean())
    median = float(prices.median())
    std_dev = float(prices.std(ddof=0))
    cv = (std_dev / mean) * 100 if mean != 0 else 0.0

    lower_limit = mean - std_dev
    upper_limit = mean + std_dev

    within_band = prices[(prices >= lower_limit) & (prices <= upper_limit)]
    kept = within_band if len(within_band) > 0 else prices
    # a float mean of repeated prices can drift one ulp outside them
    sanitized_mean = min(max(float(kept.mean()), float(kept.iloc[0])), float(kept.iloc[-1]))

    return PriceStats(
        min=float(prices.iloc[0]),
        mean=mean,
        median=median,
        std_dev=std_dev,
        cv=cv,
        lower_limit=lower_limit,
        upper_limit=upper_limit,
        sanitized_mean=sanitized_mean,
        total_estimated=sanitized_mean * quantity,
        valid_quotes=len(within_band),
        outliers_count=n - len(within_band),
    )


def unit_value_for_strategy(stats: PriceStats, strategy: Union[str, PricingStrategy]) -> float:
    """Reference unit price chosen by the item's pricing strategy"""
    strategy = PricingStrategy(strategy)
    if strategy == PricingStrategy.MEAN:
        return stats.mean
    if strategy == PricingStrategy.MEDIAN:
        return stats.median
    return stats.sanitized_mean


def estimated_total(stats: PriceStats, strategy: Union[str, PricingStrategy], quantity: float) -> float:
    return unit_value_for_strategy(stats, strategy) * quantity


def methodology_label(strategies: Iterable[Union[str, PricingStrategy]]) -> str:
    """
    Label for the methodology sentence of a process report.

    Sanitized mean wins whenever any item uses it (and for an empty
    process); median is reported only without sanitized items; common mean
    only when every item uses it.
    """
    used = {PricingStrategy(s) for s in strategies}

    if PricingStrategy.SANITIZED in used or not used:
        return METHODOLOGY_LABELS[PricingStrategy.SANITIZED]
    if PricingStrategy.MEDIAN in used:
        return METHODOLOGY_LABELS[PricingStrategy.MEDIAN]
    return METHODOLOGY_LABELS[PricingStrategy.MEAN]
