"""
Date and time utilities for the price research system.
Local-time helpers and calendar-day arithmetic used by quote expiry.
"""

from datetime import datetime, date
from typing import Optional, Union
from zoneinfo import ZoneInfo

from .config_manager import config_manager


def get_local_time() -> datetime:
    """Current time in the configured timezone (naive, for storage)"""
    tz = ZoneInfo(config_manager.get_pricing_config().timezone)
    return datetime.now(tz).replace(tzinfo=None)


def get_local_today() -> date:
    return get_local_time().date()


def ensure_date(value: Union[str, date, datetime, None]) -> Optional[date]:
    """Coerce an ISO string, datetime or date into a date"""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value).strip()[:10])


def days_between(start: Union[str, date, datetime], end: Union[str, date, datetime]) -> int:
    """Calendar days from start to end (negative when end is earlier)"""
    return (ensure_date(end) - ensure_date(start)).days


def format_date_br(value: Union[str, date, datetime, None]) -> str:
    """dd/mm/yyyy, '-' for missing values"""
    if not value:
        return '-'
    return ensure_date(value).strftime('%d/%m/%Y')
