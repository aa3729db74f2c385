"""
Unit tests for quote expiry classification
"""

import pytest
from datetime import timedelta

from pricing.expiry import (
    ExpiryStatus, expiry_limit_days, quote_age_days, days_until_expiry,
    is_quote_expired, classify_quote_expiry
)
from utils.config_manager import PricingConfig


@pytest.mark.unit
class TestExpiry:

    def test_limits(self, pricing_config):
        assert expiry_limit_days('private', pricing_config) == 180
        assert expiry_limit_days('public', pricing_config) == 360

    def test_age_and_remaining(self, today, pricing_config):
        quote_date = today - timedelta(days=100)
        assert quote_age_days(quote_date, today) == 100
        assert days_until_expiry(quote_date, 'private', today, pricing_config) == 80
        assert days_until_expiry(quote_date.isoformat(), 'public', today, pricing_config) == 260

    @pytest.mark.parametrize("quote_type, age, expired", [
        ('private', 180, False),
        ('private', 181, True),
        ('public', 360, False),
        ('public', 361, True),
        ('private', 0, False),
    ])
    def test_is_quote_expired(self, today, pricing_config, quote_type, age, expired):
        quote_date = today - timedelta(days=age)
        assert is_quote_expired(quote_date, quote_type, today, pricing_config) is expired

    def test_future_dated_quote_is_not_expired(self, today, pricing_config):
        quote_date = today + timedelta(days=400)
        assert not is_quote_expired(quote_date, 'private', today, pricing_config)
        assert classify_quote_expiry(quote_date, 'private', today, pricing_config) == ExpiryStatus.VALID

    @pytest.mark.parametrize("age, status", [
        (181, ExpiryStatus.EXPIRED),
        (180, ExpiryStatus.WARNING),
        (165, ExpiryStatus.WARNING),
        (164, ExpiryStatus.ATTENTION),
        (150, ExpiryStatus.ATTENTION),
        (149, ExpiryStatus.VALID),
        (0, ExpiryStatus.VALID),
    ])
    def test_classify_private(self, today, pricing_config, age, status):
        quote_date = today - timedelta(days=age)
        assert classify_quote_expiry(quote_date, 'private', today, pricing_config) == status

    def test_classify_public_uses_longer_window(self, today, pricing_config):
        quote_date = today - timedelta(days=200)
        assert classify_quote_expiry(quote_date, 'private', today, pricing_config) == ExpiryStatus.EXPIRED
        assert classify_quote_expiry(quote_date, 'public', today, pricing_config) == ExpiryStatus.VALID

    def test_configured_windows(self, today):
        config = PricingConfig(private_expiry_days=30, warning_days=5, attention_days=10)
        assert classify_quote_expiry(today - timedelta(days=31), 'private', today, config) == ExpiryStatus.EXPIRED
        assert classify_quote_expiry(today - timedelta(days=25), 'private', today, config) == ExpiryStatus.WARNING
        assert classify_quote_expiry(today - timedelta(days=20), 'private', today, config) == ExpiryStatus.ATTENTION
        assert classify_quote_expiry(today - timedelta(days=19), 'private', today, config) == ExpiryStatus.VALID

    def test_unknown_quote_type(self, pricing_config):
        with pytest.raises(ValueError):
            expiry_limit_days('internal', pricing_config)
