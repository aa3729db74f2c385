"""
base text parser for the price research system.
Shared helpers for pasted spreadsheet text: field splitting, Brazilian number
and Portuguese date parsing.
"""

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, List, Optional

from utils import importer_logger, get_local_today

SEPARATORS = ('\t', ';', ',')

PT_MONTHS = {
    'janeiro': 1, 'fevereiro': 2, 'março': 3, 'marco': 3, 'abril': 4,
    'maio': 5, 'junho': 6, 'julho': 7, 'agosto': 8, 'setembro': 9,
    'outubro': 10, 'novembro': 11, 'dezembro': 12,
}

_ISO_DATE = re.compile(r'^\d{4}-\d{1,2}-\d{1,2}$')


@dataclass
class SkippedLine:
    line_number: int
    text: str
    reason: str

    def to_dict(self) -> Dict[str, Any]:
        return {'line_number': self.line_number, 'text': self.text, 'reason': self.reason}


@dataclass
class ParseResult:
    """Records extracted from a text plus the lines that were left out"""
    records: List[Any] = field(default_factory=list)
    skipped: List[SkippedLine] = field(default_factory=list)

    def skip(self, line_number: int, text: str, reason: str):
        self.skipped.append(SkippedLine(line_number, text, reason))

    def to_dict(self) -> Dict[str, Any]:
        return {
            'records': [r.to_dict() if hasattr(r, 'to_dict') else r for r in self.records],
            'skipped': [s.to_dict() for s in self.skipped],
        }


def non_blank_lines(text: str):
    """(1-based line number, line) for every non-blank line"""
    for number, line in enumerate((text or '').splitlines(), start=1):
        if line.strip():
            yield number, line


def split_fields(line: str) -> List[str]:
    """Split on tab, then semicolon, then comma; the first giving two fields wins"""
    parts = [line]
    for separator in SEPARATORS:
        parts = line.split(separator)
        if len(parts) >= 2:
            return parts
    return parts


def parse_br_number(value: Optional[str], default: Optional[float] = 0.0) -> Optional[float]:
    """
    Parse a Brazilian formatted number such as "R$ 1.234,56".

    The currency symbol and thousands dots are dropped and the decimal comma
    becomes a dot. Unparseable input returns ``default``.
    """
    if value is None:
        return default
    cleaned = str(value).replace('R$', '').replace('.', '').replace(',', '.').strip()
    if not cleaned:
        return default
    try:
        return float(cleaned)
    except ValueError:
        return default


def parse_br_date(value: Optional[str], today: Optional[date] = None) -> Optional[date]:
    """
    Parse dd/mm/yyyy, "10 de Dezembro de 2025" or ISO dates.

    Blank input is today. An unknown month name falls back to January. Any
    other format returns None.
    """
    text = (value or '').strip()
    if not text:
        return today or get_local_today()

    try:
        if '/' in text:
            parts = text.split('/')
            if len(parts) != 3:
                return None
            day, month, year = (int(p.strip()) for p in parts)
            return date(year, month, day)

        if ' de ' in text:
            parts = text.lower().replace(' de ', ' ').split()
            if len(parts) != 3:
                return None
            return date(int(parts[2]), PT_MONTHS.get(parts[1], 1), int(parts[0]))

        if _ISO_DATE.match(text):
            year, month, day = (int(p) for p in text.split('-'))
            return date(year, month, day)
    except ValueError:
        return None

    return None


class BaseTextParser(ABC):
    """Parser for one kind of pasted text"""

    name = "base"

    def __init__(self, today: Optional[date] = None):
        self.today = today

    @abstractmethod
    def parse(self, text: str) -> ParseResult:
        ...

    def _log_result(self, result: ParseResult):
        importer_logger.info(
            f"[{self.name}] Parsed {len(result.records)} records, skipped {len(result.skipped)} lines"
        )
        for skipped in result.skipped:
            importer_logger.debug(f"[{self.name}] Line {skipped.line_number} skipped: {skipped.reason}")
