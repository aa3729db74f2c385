"""
Importers module
Parsers turning pasted spreadsheet text and Banco de Preços exports into records
"""

from .base import (
    BaseTextParser,
    ParseResult,
    SkippedLine,
    split_fields,
    parse_br_number,
    parse_br_date,
    PT_MONTHS
)
from .spreadsheet import ItemsTextParser, QuotesTextParser, parse_items_text, parse_quotes_text
from .banco_precos import (
    BancoPrecosParser,
    BancoPrecosGroup,
    parse_banco_precos,
    match_specification,
    specifications_match
)

__all__ = [
    'BaseTextParser', 'ParseResult', 'SkippedLine', 'split_fields', 'parse_br_number',
    'parse_br_date', 'PT_MONTHS', 'ItemsTextParser', 'QuotesTextParser', 'parse_items_text',
    'parse_quotes_text', 'BancoPrecosParser', 'BancoPrecosGroup', 'parse_banco_precos',
    'match_specification', 'specifications_match',
]
