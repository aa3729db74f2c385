"""
Pricing module
Statistics, pricing strategies, quote expiry and compliance alerts
"""

from .stats import (
    PriceStats,
    PricingStrategy,
    METHODOLOGY_LABELS,
    calculate_stats,
    unit_value_for_strategy,
    estimated_total,
    methodology_label
)
from .expiry import (
    QuoteType,
    ExpiryStatus,
    expiry_limit_days,
    quote_age_days,
    days_until_expiry,
    is_quote_expired,
    classify_quote_expiry
)
from .alerts import Alert, build_item_alerts, build_process_alerts
from .summary import annotate_quotes, summarize_item, summarize_process

__all__ = [
    'PriceStats', 'PricingStrategy', 'METHODOLOGY_LABELS', 'calculate_stats',
    'unit_value_for_strategy', 'estimated_total', 'methodology_label',
    'QuoteType', 'ExpiryStatus', 'expiry_limit_days', 'quote_age_days',
    'days_until_expiry', 'is_quote_expired', 'classify_quote_expiry',
    'Alert', 'build_item_alerts', 'build_process_alerts',
    'annotate_quotes', 'summarize_item', 'summarize_process',
]
