"""
Per-item and per-process price summaries.
Combines statistics, strategy and expiry into the structure consumed by the
summary endpoint and the price map report.
"""

from datetime import date
from typing import Any, Dict, List, Optional

from utils import PricingConfig, pricing_logger
from .stats import (
    PricingStrategy,
    METHODOLOGY_LABELS,
    calculate_stats,
    unit_value_for_strategy,
    methodology_label
)
from .expiry import classify_quote_expiry


def annotate_quotes(quotes: List[Dict[str, Any]], today: Optional[date] = None,
                    config: Optional[PricingConfig] = None) -> List[Dict[str, Any]]:
    """Copy of the quotes with their expiry status and remaining days"""
    annotated = []
    for quote in quotes:
        entry = dict(quote)
        entry['expiry_status'] = classify_quote_expiry(
            quote['quote_date'], quote['quote_type'], today, config
        ).value
        annotated.append(entry)
    return annotated


def summarize_item(item: Dict[str, Any], quotes: List[Dict[str, Any]],
                   today: Optional[date] = None,
                   config: Optional[PricingConfig] = None) -> Dict[str, Any]:
    stats = calculate_stats(quotes, item['quantity'])
    strategy = PricingStrategy(item.get('pricing_strategy') or PricingStrategy.SANITIZED)
    unit_value = unit_value_for_strategy(stats, strategy)

    quote_rows = annotate_quotes(quotes, today, config)
    for quote in quote_rows:
        quote['outside_band'] = not stats.is_within_band(quote['unit_price'])

    return {
        **item,
        'pricing_strategy': strategy.value,
        'strategy_label': METHODOLOGY_LABELS[strategy],
        'quotes': quote_rows,
        'stats': stats.to_dict(),
        'unit_value': unit_value,
        'total': unit_value * item['quantity'],
    }


def summarize_process(process: Dict[str, Any], items: List[Dict[str, Any]],
                      quotes_by_item: Dict[int, List[Dict[str, Any]]],
                      today: Optional[date] = None,
                      config: Optional[PricingConfig] = None) -> Dict[str, Any]:
    """
    Summary of a whole process.

    ``grand_total`` adds every item total valued by its own strategy;
    ``show_min_median`` and ``show_sanitized`` tell the price map which
    optional statistic columns apply to at least one item.
    """
    summaries = [
        summarize_item(item, quotes_by_item.get(item['id'], []), today, config)
        for item in items
    ]
    strategies = [s['pricing_strategy'] for s in summaries]

    summary = {
        'process': process,
        'items': summaries,
        'grand_total': sum(s['total'] for s in summaries),
        'methodology': methodology_label(strategies),
        'show_min_median': any(s in ('sanitized', 'median') for s in strategies),
        'show_sanitized': 'sanitized' in strategies,
    }
    pricing_logger.debug(
        f"[Summary] Process {process.get('id')}: {len(summaries)} items, total {summary['grand_total']:.2f}"
    )
    return summary
