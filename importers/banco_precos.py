"""
Parser for the tab separated export of the "Banco de Preços" service.

The export lists each item as a header line ``<n>\\t<specification>\\t\\t...``
followed by one row per price found, where field 1 is the source, field 7
the date (dd/mm/yyyy) and field 8 the unit price.
"""

import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .base import BaseTextParser, ParseResult, non_blank_lines, parse_br_number, parse_br_date

ITEM_HEADER = re.compile(r'^(\d+)\t([^\t]+)\t\t')
MIN_ROW_FIELDS = 9
MATCH_PREFIX = 20


@dataclass
class BancoPrecosGroup:
    specification: str
    quotes: List[Dict[str, Any]] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {'specification': self.specification, 'quotes': self.quotes}


class BancoPrecosParser(BaseTextParser):
    """Groups public quotes under the item header they follow"""

    name = "BancoPrecosParser"

    def parse(self, text: str) -> ParseResult:
        result = ParseResult()
        current: Optional[BancoPrecosGroup] = None

        for line_number, line in non_blank_lines(text):
            header = ITEM_HEADER.match(line)
            if header and 'ComprasNet' not in line:
                current = BancoPrecosGroup(header.group(2).strip())
                result.records.append(current)
                continue

            parts = line.split('\t')
            if len(parts) < MIN_ROW_FIELDS or not parts[0].strip().isdigit():
                continue
            if current is None:
                result.skip(line_number, line, "quote row before any item header")
                continue

            source, date_text, price_text = parts[1].strip(), parts[7].strip(), parts[8].strip()
            if not (source and date_text and price_text):
                result.skip(line_number, line, "missing source, date or price")
                continue

            quote_date = parse_br_date(date_text) if '/' in date_text else None
            unit_price = parse_br_number(price_text, default=None)
            if quote_date is None or unit_price is None:
                result.skip(line_number, line, f"invalid date or price: {date_text!r} {price_text!r}")
                continue

            current.quotes.append({
                'source': source,
                'quote_date': quote_date,
                'quote_type': 'public',
                'unit_price': unit_price,
            })

        self._log_result(result)
        return result


def specifications_match(a: str, b: str) -> bool:
    """Either specification contains the first 20 characters of the other"""
    a, b = a.lower(), b.lower()
    return b[:MATCH_PREFIX] in a or a[:MATCH_PREFIX] in b


def match_specification(items: List[Dict[str, Any]], specification: str) -> Optional[Dict[str, Any]]:
    """First item whose specification matches, in list order"""
    for item in items:
        if specifications_match(item['specification'], specification):
            return item
    return None


def parse_banco_precos(text: str) -> ParseResult:
    return BancoPrecosParser().parse(text)
