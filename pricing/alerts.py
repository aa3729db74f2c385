"""
Compliance alerts for a process: too few valid quotes, high dispersion and
expired quotes.
"""

from dataclasses import dataclass, asdict
from datetime import date
from typing import Any, Dict, List, Optional

from utils import config_manager, PricingConfig, pricing_logger
from .stats import calculate_stats
from .expiry import is_quote_expired, expiry_limit_days


@dataclass
class Alert:
    level: str  # error | warning
    message: str
    process_number: str
    item_id: Optional[int] = None
    item_number: Optional[int] = None
    item: Optional[str] = None
    quote_id: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def build_item_alerts(item: Dict[str, Any], quotes: List[Dict[str, Any]], process_number: str = "",
                      today: Optional[date] = None, config: Optional[PricingConfig] = None) -> List[Alert]:
    """Alerts raised by a single item and its quotes"""
    config = config or config_manager.get_pricing_config()
    stats = calculate_stats(quotes, item['quantity'])
    alerts = []

    def _alert(level: str, message: str, quote_id: int = None) -> Alert:
        return Alert(
            level=level,
            message=message,
            process_number=process_number,
            item_id=item.get('id'),
            item_number=item.get('item_number'),
            item=item.get('specification'),
            quote_id=quote_id,
        )

    if stats.valid_quotes < config.min_valid_quotes:
        alerts.append(_alert(
            'error',
            f"O item possui apenas {stats.valid_quotes} cotação(ões) válida(s) (desconsiderando outliers). "
            f"O ideal para conformidade são pelo menos {config.min_valid_quotes}."
        ))

    if stats.cv > config.max_cv:
        alerts.append(_alert(
            'warning',
            f"Coeficiente de Variação elevado ({stats.cv:.2f}%). "
            f"Recomenda-se obter mais cotações para maior precisão da média."
        ))

    for quote in quotes:
        if is_quote_expired(quote['quote_date'], quote['quote_type'], today, config):
            limit = expiry_limit_days(quote['quote_type'], config)
            alerts.append(_alert(
                'warning',
                f"Cotação de \"{quote['source']}\" está com data vencida (>{limit} dias).",
                quote.get('id')
            ))

    return alerts


def build_process_alerts(process: Dict[str, Any], items: List[Dict[str, Any]],
                         quotes_by_item: Dict[int, List[Dict[str, Any]]],
                         today: Optional[date] = None,
                         config: Optional[PricingConfig] = None) -> List[Alert]:
    """Alerts for every item of a process, errors first"""
    alerts = []
    for item in items:
        alerts.extend(build_item_alerts(
            item, quotes_by_item.get(item['id'], []),
            process.get('process_number', ''), today, config
        ))

    pricing_logger.debug(f"[Alerts] Process {process.get('id')}: {len(alerts)} alerts")
    return sorted(alerts, key=lambda a: 0 if a.level == 'error' else 1)
