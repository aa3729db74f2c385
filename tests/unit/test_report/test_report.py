"""
Unit tests for the report system
"""

import pytest
import json
from datetime import date, datetime

from pricing.summary import summarize_process
from utils.config_manager import ReportConfig
from utils.exceptions import ReportError, ErrorCodes
from utils.report import (
    ReportEngine, ReportFormatter, TemplateManager, generate_report, reload_report_config,
    format_currency, format_number, format_percent
)


@pytest.fixture
def price_map_data(today, pricing_config):
    process = {'id': 1, 'process_number': '23/2025', 'object': 'Aquisição de material de expediente',
               'created_at': datetime(2025, 6, 1, 9, 30)}
    items = [
        {'id': 1, 'process_id': 1, 'item_number': 1, 'specification': 'Caneta azul', 'unit': 'UN',
         'quantity': 100, 'pricing_strategy': 'sanitized'},
        {'id': 2, 'process_id': 1, 'item_number': 2, 'specification': 'Papel A4', 'unit': 'RESMA',
         'quantity': 10, 'pricing_strategy': 'mean'},
        {'id': 3, 'process_id': 1, 'item_number': 3, 'specification': 'Grampeador', 'unit': 'UN',
         'quantity': 2, 'pricing_strategy': 'median'},
    ]

    def quote(quote_id, item_id, source, price):
        return {'id': quote_id, 'item_id': item_id, 'source': source, 'quote_date': date(2025, 6, 10),
                'unit_price': price, 'quote_type': 'private', 'is_outlier': False}

    quotes_by_item = {
        1: [quote(1, 1, 'Loja A', 10.0), quote(2, 1, 'Loja B', 12.0),
            quote(3, 1, 'Loja C', 11.0), quote(4, 1, 'Loja D', 30.0)],
        2: [quote(5, 2, 'Loja A', 25.0), quote(6, 2, 'Loja B', 27.0)],
    }
    return summarize_process(process, items, quotes_by_item, today, pricing_config)


@pytest.mark.unit
class TestFormatting:

    @pytest.mark.parametrize("value, text", [
        (1234.56, "R$ 1.234,56"),
        (0, "R$ 0,00"),
        (1234567.891, "R$ 1.234.567,89"),
        (None, "-"),
    ])
    def test_format_currency(self, value, text):
        assert format_currency(value) == text

    def test_format_number(self):
        assert format_number(100.0) == "100"
        assert format_number(2.5) == "2,50"
        assert format_number(1500.25) == "1.500,25"

    def test_format_percent(self):
        assert format_percent(52.4298) == "52,4%"


@pytest.mark.unit
class TestTemplates:

    def test_configured_templates(self):
        manager = TemplateManager()
        assert set(manager.list_available_templates()) >= {'price_map', 'alerts'}
        assert manager.validate_template('price_map')
        assert not manager.validate_template('unknown')

    def test_disabled_template_is_invalid(self):
        config = ReportConfig(templates={
            'price_map': {'name': 'Mapa', 'enabled': False, 'sections': [{'name': 'a', 'type': 'static'}]}
        })
        assert not TemplateManager(config).validate_template('price_map')


@pytest.mark.unit
class TestFormatter:

    def test_unknown_section_type_is_skipped(self):
        template = {
            'name': 'Mapa',
            'sections': [
                {'name': 'summary', 'type': 'metrics', 'fields': ['grand_total']},
                {'name': 'total', 'type': 'static', 'content': 'Total {grand_total_brl}'},
            ],
        }
        sections = ReportFormatter(ReportConfig()).format(template, {'grand_total': 10.0}, 'console')

        assert [s['name'] for s in sections] == ['total']
        assert sections[0]['text'] == 'Total R$ 10,00'

    def test_false_condition_hides_section(self):
        template = {'name': 'Mapa', 'sections': [
            {'name': 'note', 'type': 'static', 'content': 'x', 'condition': 'grand_total > 0'},
        ]}
        formatter = ReportFormatter(ReportConfig())

        assert formatter.format(template, {'grand_total': 0.0}, 'console') == []
        assert len(formatter.format(template, {'grand_total': 5.0}, 'console')) == 1


@pytest.mark.unit
class TestPriceMapReport:

    def test_console(self, price_map_data):
        report = generate_report('price_map', price_map_data, 'console')

        assert "Mapa Comparativo de Preços" in report
        assert "Processo nº 23/2025" in report
        assert "Objeto: Aquisição de material de expediente" in report
        assert "R$ 30,00 *" in report
        assert "R$ 27,00 *" not in report
        assert "Média Saneada" in report
        # 100 x 11,00 + 10 x 26,00 + 0
        assert "R$ 1.360,00" in report
        assert "a metologia aplicada foi a “Média Saneada”" in report
        assert "(*) Valor fora do intervalo" in report

    def test_html(self, price_map_data):
        report = generate_report('price_map', price_map_data, 'html')

        assert report.startswith("<!DOCTYPE html>")
        assert "<h1>Mapa Comparativo de Preços</h1>" in report
        assert 'class="dataframe report-table"' in report
        assert "Grampeador" in report
        assert "total de R$ 1.360,00" in report

    def test_csv(self, price_map_data):
        report = generate_report('price_map', price_map_data, 'csv')
        lines = report.strip().split('\n')

        header = lines[0].split(';')
        assert header[:7] == ['Item', 'Especificação Sucinta', 'UNID', 'Quant', 'Fornecedor', 'Data', 'Vlr. Unit.']
        assert header[-1] == 'Total Estimado'
        # four quotes, two quotes, one empty item row and the grand total
        assert len(lines) == 1 + 4 + 2 + 1 + 1
        assert lines[1].startswith('1;Caneta azul;UN;100;Loja A;10/06/2025;R$ 10,00')
        assert lines[2].startswith(';;;;Loja B;10/06/2025;R$ 12,00')
        assert lines[-1].endswith('R$ 1.360,00')

    def test_optional_columns_follow_strategies(self, price_map_data):
        only_mean = {**price_map_data, 'show_min_median': False, 'show_sanitized': False}
        header = generate_report('price_map', only_mean, 'csv').split('\n')[0].split(';')

        assert 'Média (Unitário)' in header
        assert 'Mediana (Unitário)' not in header
        assert 'Média Saneada' not in header

    def test_json(self, price_map_data):
        payload = json.loads(generate_report('price_map', price_map_data, 'json'))

        assert payload['title'] == 'Mapa Comparativo de Preços'
        assert payload['grand_total'] == pytest.approx(1360.0)
        assert payload['methodology'] == 'Média Saneada'
        assert payload['items'][0]['quotes'][0]['quote_date'] == '2025-06-10'

    def test_default_format_from_template(self, price_map_data):
        assert generate_report('price_map', price_map_data).startswith("<!DOCTYPE html>")


@pytest.mark.unit
class TestAlertsReport:

    def test_alerts_console(self):
        data = {
            'process': {'id': 1, 'process_number': '23/2025', 'object': 'x'},
            'alerts': [
                {'level': 'error', 'message': 'O item possui apenas 1 cotação(ões) válida(s)',
                 'process_number': '23/2025', 'item_number': 1, 'item': 'Caneta azul'},
                {'level': 'warning', 'message': 'Coeficiente de Variação elevado (40.00%).',
                 'process_number': '23/2025', 'item_number': 2, 'item': 'Papel A4'},
            ],
        }
        report = generate_report('alerts', data, 'console')

        assert "Central de Avisos" in report
        assert "Erros: 1 | Avisos: 1" in report
        assert "ERRO" in report
        assert "AVISO" in report
        assert "Nenhuma pendência" not in report

    def test_no_alerts(self):
        data = {'process': {'id': 1, 'process_number': '23/2025', 'object': 'x'}, 'alerts': []}
        report = generate_report('alerts', data, 'console')

        assert "Nenhuma pendência encontrada." in report
        assert "Erros: 0 | Avisos: 0" in report


@pytest.mark.unit
class TestReportErrors:

    def test_unknown_report_type(self):
        with pytest.raises(ReportError) as exc_info:
            ReportEngine().generate('inventory', {}, 'html')
        assert exc_info.value.error_code == ErrorCodes.REPORT_UNKNOWN_TYPE

    def test_unknown_format(self, price_map_data):
        with pytest.raises(ReportError) as exc_info:
            generate_report('price_map', price_map_data, 'pdf')
        assert exc_info.value.error_code == ErrorCodes.REPORT_UNKNOWN_FORMAT

    def test_reload_report_config(self, price_map_data):
        assert reload_report_config() is True
        assert "Mapa Comparativo de Preços" in generate_report('price_map', price_map_data, 'console')
