"""
Parsers for item and quote rows pasted from a spreadsheet.
"""

from typing import Any, Dict

from .base import BaseTextParser, ParseResult, non_blank_lines, split_fields, parse_br_number, parse_br_date


class ItemsTextParser(BaseTextParser):
    """Columns: specification, unit, quantity"""

    name = "ItemsTextParser"

    def parse(self, text: str) -> ParseResult:
        result = ParseResult()

        for line_number, line in non_blank_lines(text):
            parts = split_fields(line) + [''] * 3
            specification, unit, quantity = (p.strip() for p in parts[:3])

            if not specification:
                result.skip(line_number, line, "empty specification")
                continue

            result.records.append({
                'specification': specification,
                'unit': unit or 'UN',
                'quantity': parse_br_number(quantity),
                'pricing_strategy': 'sanitized',
            })

        self._log_result(result)
        return result


def _quote_type(value: str) -> str:
    lowered = value.lower()
    return 'public' if 'pub' in lowered or 'púb' in lowered else 'private'


class QuotesTextParser(BaseTextParser):
    """Columns: source, date, type, unit price"""

    name = "QuotesTextParser"

    def parse(self, text: str) -> ParseResult:
        result = ParseResult()

        for line_number, line in non_blank_lines(text):
            parts = split_fields(line) + [''] * 4
            source, date_text, type_text, price_text = (p.strip() for p in parts[:4])

            if not source:
                result.skip(line_number, line, "empty source")
                continue

            unit_price = parse_br_number(price_text)
            if unit_price <= 0:
                result.skip(line_number, line, f"invalid price: {price_text!r}")
                continue

            quote_date = parse_br_date(date_text, self.today)
            if quote_date is None:
                result.skip(line_number, line, f"invalid date: {date_text!r}")
                continue

            quote: Dict[str, Any] = {
                'source': source,
                'quote_date': quote_date,
                'quote_type': _quote_type(type_text),
                'unit_price': unit_price,
            }
            result.records.append(quote)

        self._log_result(result)
        return result


def parse_items_text(text: str) -> ParseResult:
    return ItemsTextParser().parse(text)


def parse_quotes_text(text: str, today=None) -> ParseResult:
    return QuotesTextParser(today).parse(text)
