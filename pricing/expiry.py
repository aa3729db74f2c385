"""
Quote expiry classification.
Private quotes are valid for 180 days, public ones for 360 (configurable).
"""

from datetime import date, datetime
from enum import Enum
from typing import Optional, Union

from utils import config_manager, get_local_today, days_between, PricingConfig


class QuoteType(str, Enum):
    PUBLIC = "public"
    PRIVATE = "private"


class ExpiryStatus(str, Enum):
    """Four-level quote aging"""
    EXPIRED = "expired"
    WARNING = "warning"
    ATTENTION = "attention"
    VALID = "valid"


def expiry_limit_days(quote_type: Union[str, QuoteType], config: Optional[PricingConfig] = None) -> int:
    config = config or config_manager.get_pricing_config()
    if QuoteType(quote_type) == QuoteType.PUBLIC:
        return config.public_expiry_days
    return config.private_expiry_days


def quote_age_days(quote_date: Union[str, date, datetime], today: Optional[date] = None) -> int:
    """Calendar days elapsed since the quote date"""
    return days_between(quote_date, today or get_local_today())


def days_until_expiry(quote_date: Union[str, date, datetime], quote_type: Union[str, QuoteType],
                      today: Optional[date] = None, config: Optional[PricingConfig] = None) -> int:
    return expiry_limit_days(quote_type, config) - quote_age_days(quote_date, today)


def is_quote_expired(quote_date: Union[str, date, datetime], quote_type: Union[str, QuoteType],
                     today: Optional[date] = None, config: Optional[PricingConfig] = None) -> bool:
    """True once the quote is older than its validity window"""
    return quote_age_days(quote_date, today) > expiry_limit_days(quote_type, config)


def classify_quote_expiry(quote_date: Union[str, date, datetime], quote_type: Union[str, QuoteType],
                          today: Optional[date] = None,
                          config: Optional[PricingConfig] = None) -> ExpiryStatus:
    """Expired, warning (<= 15 days left), attention (<= 30 days left) or valid"""
    config = config or config_manager.get_pricing_config()
    remaining = days_until_expiry(quote_date, quote_type, today, config)

    if remaining < 0:
        return ExpiryStatus.EXPIRED
    if remaining <= config.warning_days:
        return ExpiryStatus.WARNING
    if remaining <= config.attention_days:
        return ExpiryStatus.ATTENTION
    return ExpiryStatus.VALID
