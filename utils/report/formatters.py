"""
Report formatter
Turns report data into titled text and table sections; currency and dates
follow the Brazilian conventions (R$ 1.234,56 and dd/mm/yyyy).
"""

from typing import Dict, List, Any, Optional

from utils.config_manager import ReportConfig
from utils.date_utils import format_date_br
from utils.logging_manager import report_logger

DEFAULT_LABELS = {
    'item_number': 'Item',
    'specification': 'Especificação Sucinta',
    'unit': 'UNID',
    'quantity': 'Quant',
    'source': 'Fornecedor',
    'quote_date': 'Data',
    'unit_price': 'Vlr. Unit.',
    'min': 'Menor Valor Unitário',
    'mean': 'Média (Unitário)',
    'median': 'Mediana (Unitário)',
    'std_dev': 'Desvio Padrão',
    'cv': 'CV (%)',
    'lower_limit': 'Limite Inferior',
    'upper_limit': 'Limite Superior',
    'sanitized_mean': 'Média Saneada',
    'total': 'Total Estimado',
    'grand_total': 'Valor Total da Pesquisa de Preços',
    'level': 'Nível',
    'item': 'Especificação',
    'message': 'Mensagem',
    'processes': 'Processos',
    'items': 'Itens',
    'quotes': 'Cotações',
}

LEVEL_LABELS = {'error': 'ERRO', 'warning': 'AVISO'}

OUTLIER_MARK = ' *'
EMPTY_CELL = '-'


def format_currency(value: Optional[float]) -> str:
    """R$ 1.234,56"""
    if value is None:
        return EMPTY_CELL
    formatted = f"{value:,.2f}".replace(',', '_').replace('.', ',').replace('_', '.')
    return f"R$ {formatted}"


def format_number(value: Optional[float]) -> str:
    """Integral values without decimals, others with a decimal comma"""
    if value is None:
        return EMPTY_CELL
    if float(value).is_integer():
        return f"{int(value)}"
    return f"{value:,.2f}".replace(',', '_').replace('.', ',').replace('_', '.')


def format_percent(value: Optional[float]) -> str:
    if value is None:
        return EMPTY_CELL
    return f"{value:.1f}%".replace('.', ',')


class SafeDict(dict):
    def __missing__(self, key):
        return f"{{{key}}}"


class ReportFormatter:
    """Report formatter"""

    def __init__(self, config: ReportConfig):
        self.config = config

    def format(self, template: Dict[str, Any], data: Dict[str, Any],
               output_format: str) -> List[Dict[str, Any]]:
        """
        Format a report into sections

        Returns:
            List of sections, each either ``{'kind': 'text', 'text', 'style'}``
            or ``{'kind': 'table', 'columns', 'rows'}``, both with ``name``
            and an optional ``title``.
        """
        sections = []

        for section_config in template.get('sections', []):
            section = self._format_section(section_config, data, output_format)
            if section:
                sections.append(section)

        report_logger.debug(f"[Report] Formatted {len(sections)} sections for {template.get('name')}")
        return sections

    def _format_section(self, section: Dict[str, Any], data: Dict[str, Any],
                        output_format: str) -> Optional[Dict[str, Any]]:
        condition = section.get('condition')
        if condition:
            try:
                if not eval(condition, {}, dict(data)):
                    return None
            except Exception as e:
                report_logger.warning(f"Error evaluating condition '{condition}': {e}")
                return None

        section_type = section.get('type')

        if section_type == 'static':
            content = self._format_static_section(section, data)
        elif section_type == 'price_table':
            content = self._format_price_table(data)
        elif section_type == 'alerts_table':
            content = self._format_alerts_table(data)
        else:
            report_logger.error(f"Invalid section type: {section_type}")
            return None

        if content is None:
            return None

        content.update({'name': section.get('name', ''), 'title': section.get('title')})
        return content

    def _format_static_section(self, section: Dict[str, Any], data: Dict[str, Any]) -> Dict[str, Any]:
        process = data.get('process') or {}
        template_data = {
            'name': data.get('name', ''),
            'process_number': process.get('process_number', ''),
            'object': process.get('object', ''),
            'created_at': format_date_br(process.get('created_at')),
            'grand_total_brl': format_currency(data.get('grand_total', 0.0)),
            **data
        }
        text = section.get('content', '').format_map(SafeDict(template_data))
        return {'kind': 'text', 'text': text, 'style': section.get('style', 'paragraph')}

    def _price_columns(self, data: Dict[str, Any]) -> List[str]:
        columns = ['item_number', 'specification', 'unit', 'quantity', 'source', 'quote_date', 'unit_price']
        if data.get('show_min_median'):
            columns.append('min')
        columns.append('mean')
        if data.get('show_min_median'):
            columns.append('median')
        if data.get('show_sanitized'):
            columns.extend(['std_dev', 'cv', 'lower_limit', 'upper_limit', 'sanitized_mean'])
        columns.append('total')
        return columns

    def _item_stat_cells(self, item: Dict[str, Any]) -> Dict[str, str]:
        stats = item.get('stats', {})
        strategy = item.get('pricing_strategy')
        sanitized = strategy == 'sanitized'
        with_min_median = strategy in ('sanitized', 'median')

        return {
            'min': format_currency(stats.get('min')) if with_min_median else EMPTY_CELL,
            'mean': format_currency(stats.get('mean')),
            'median': format_currency(stats.get('median')) if with_min_median else EMPTY_CELL,
            'std_dev': format_currency(stats.get('std_dev')) if sanitized else EMPTY_CELL,
            'cv': format_percent(stats.get('cv')) if sanitized else EMPTY_CELL,
            'lower_limit': format_currency(stats.get('lower_limit')) if sanitized else EMPTY_CELL,
            'upper_limit': format_currency(stats.get('upper_limit')) if sanitized else EMPTY_CELL,
            'sanitized_mean': format_currency(stats.get('sanitized_mean')) if sanitized else EMPTY_CELL,
            'total': format_currency(item.get('total', 0.0)),
        }

    def _format_price_table(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """One row per quote; item and statistic cells only on the item's first row"""
        columns = self._price_columns(data)
        rows = []

        for item in data.get('items', []):
            quotes = item.get('quotes', [])
            item_cells = {
                'item_number': str(item.get('item_number', '')),
                'specification': item.get('specification', ''),
                'unit': item.get('unit', ''),
                'quantity': format_number(item.get('quantity')),
                **self._item_stat_cells(item),
            }
            mark_outliers = item.get('pricing_strategy') == 'sanitized'

            for index in range(max(1, len(quotes))):
                quote = quotes[index] if index < len(quotes) else None
                if quote:
                    price = format_currency(quote['unit_price'])
                    if mark_outliers and quote.get('outside_band'):
                        price += OUTLIER_MARK
                    quote_cells = {
                        'source': quote['source'],
                        'quote_date': format_date_br(quote['quote_date']),
                        'unit_price': price,
                    }
                else:
                    quote_cells = {'source': EMPTY_CELL, 'quote_date': EMPTY_CELL, 'unit_price': EMPTY_CELL}

                cells = {**item_cells, **quote_cells} if index == 0 else quote_cells
                rows.append([cells.get(column, '') for column in columns])

        total_row = [''] * len(columns)
        total_row[0] = f"{self._get_field_label('grand_total')}:"
        total_row[-1] = format_currency(data.get('grand_total', 0.0))
        rows.append(total_row)

        return {
            'kind': 'table',
            'columns': [self._get_field_label(column) for column in columns],
            'rows': rows,
        }

    def _format_alerts_table(self, data: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        alerts = data.get('alerts', [])
        if not alerts:
            return None

        columns = ['level', 'item_number', 'item', 'message']
        rows = [
            [
                LEVEL_LABELS.get(alert.get('level'), alert.get('level')),
                str(alert.get('item_number') or ''),
                alert.get('item') or '',
                alert.get('message', ''),
            ]
            for alert in alerts
        ]
        return {
            'kind': 'table',
            'columns': [self._get_field_label(column) for column in columns],
            'rows': rows,
        }

    def _get_field_label(self, field_name: str) -> str:
        labels = self.config.field_labels or {}
        return labels.get(field_name, DEFAULT_LABELS.get(field_name, field_name.replace('_', ' ').title()))
