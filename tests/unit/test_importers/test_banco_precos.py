"""
Unit tests for the Banco de Preços export parser
"""

import pytest
from datetime import date

from importers import BancoPrecosParser, parse_banco_precos, match_specification, specifications_match


@pytest.mark.unit
class TestBancoPrecosParser:

    def test_groups_quotes_under_headers(self, banco_precos_export):
        result = parse_banco_precos(banco_precos_export)

        assert [g.specification for g in result.records] == [
            'Caneta esferográfica azul ponta média 1.0mm',
            'Papel A4 75g/m² resma com 500 folhas',
        ]
        pens, paper = result.records
        assert pens.quotes == [
            {'source': 'Prefeitura de Recife', 'quote_date': date(2025, 1, 10), 'quote_type': 'public', 'unit_price': 1.5},
            {'source': 'Prefeitura de Olinda', 'quote_date': date(2025, 2, 15), 'quote_type': 'public', 'unit_price': 1.7},
        ]
        assert paper.quotes == [
            {'source': 'Universidade Federal', 'quote_date': date(2024, 12, 20), 'quote_type': 'public', 'unit_price': 24.9},
        ]

    def test_invalid_rows_are_reported(self, banco_precos_export):
        result = parse_banco_precos(banco_precos_export)

        assert len(result.skipped) == 1
        assert result.skipped[0].line_number == 8
        assert "sem data" in result.skipped[0].reason

    def test_comprasnet_line_is_not_a_header(self):
        text = "1\tComprasNet\t\tsomething\n1\tOrgão\ta\tb\tc\td\te\t01/01/2025\t2,00"
        result = BancoPrecosParser().parse(text)

        assert result.records == []
        assert result.skipped[0].reason == "quote row before any item header"

    def test_short_rows_are_ignored(self):
        text = "1\tCaneta\t\tUN\n1\tOrgão\t01/01/2025\t2,00"
        result = parse_banco_precos(text)

        assert len(result.records) == 1
        assert result.records[0].quotes == []
        assert result.skipped == []

    def test_missing_fields(self):
        text = "1\tCaneta\t\tUN\n1\t\ta\tb\tc\td\te\t01/01/2025\t2,00\n2\tOrgão\ta\tb\tc\td\te\t01/01/2025\tn/d"
        result = parse_banco_precos(text)

        assert result.records[0].quotes == []
        assert [s.line_number for s in result.skipped] == [2, 3]
        assert result.skipped[0].reason == "missing source, date or price"


@pytest.mark.unit
class TestSpecificationMatching:

    def test_prefix_match_either_direction(self):
        assert specifications_match('Caneta esferográfica azul', 'CANETA ESFEROGRÁFICA AZUL PONTA MÉDIA')
        assert specifications_match('Caneta esferográfica azul ponta média', 'caneta esferográfica')
        assert not specifications_match('Caneta esferográfica azul', 'Papel A4 75g/m² resma')

    def test_match_specification_first_in_order(self):
        items = [
            {'id': 1, 'specification': 'Papel A4 75g/m² resma com 500 folhas'},
            {'id': 2, 'specification': 'Caneta esferográfica azul'},
            {'id': 3, 'specification': 'Caneta esferográfica azul ponta fina'},
        ]
        assert match_specification(items, 'Caneta esferográfica azul ponta média')['id'] == 2
        assert match_specification(items, 'Grampeador de mesa') is None
