"""
Report output adapters
Renders formatted sections as a printable HTML page, a console text with
prettytable tables, CSV through pandas, or JSON.
"""

import html
import json
from datetime import datetime, date
from io import StringIO
from typing import Dict, List, Any, Optional

import pandas as pd
from prettytable import PrettyTable

from utils.config_manager import ReportConfig
from utils.logging_manager import report_logger

HTML_PAGE = """<!DOCTYPE html>
<html lang="pt-BR">
<head>
<meta charset="utf-8">
<title>{title}</title>
<style>
body {{ font-family: Arial, Helvetica, sans-serif; font-size: 11px; color: #1f2937; margin: 24px; }}
h1 {{ text-align: center; text-transform: uppercase; color: #326131; margin-bottom: 4px; }}
.subtitle {{ text-align: center; margin: 2px 0; }}
table.report-table {{ border-collapse: collapse; width: 100%; margin: 16px 0; }}
table.report-table th {{ background: #326131; color: #fff; text-transform: uppercase; padding: 4px; }}
table.report-table td {{ border: 1px solid #e2e8f0; padding: 4px; }}
table.report-table tr:last-child td {{ background: #1e3a1d; color: #fff; font-weight: bold; }}
.note {{ white-space: pre-line; }}
.strong {{ font-weight: bold; }}
@media print {{ body {{ margin: 0; }} }}
</style>
</head>
<body>
{body}
</body>
</html>
"""


def _json_default(value):
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if hasattr(value, 'to_dict'):
        return value.to_dict()
    return str(value)


class OutputAdapter:
    """Renders formatted sections in an output format"""

    def __init__(self, config: ReportConfig):
        self.config = config
        self.format_configs = config.formats or {}

    def adapt(self, sections: List[Dict[str, Any]], output_format: str,
              title: str = '', data: Optional[Dict[str, Any]] = None) -> str:
        """
        Render sections in the requested format

        Args:
            sections: sections produced by ReportFormatter
            output_format: 'html', 'console', 'csv' or 'json'
            title: report title
            data: prepared report data, serialized as is for 'json'
        """
        if output_format == 'html':
            content = self._adapt_html(sections, title)
        elif output_format == 'console':
            content = self._adapt_console(sections, title)
        elif output_format == 'csv':
            content = self._adapt_csv(sections)
        elif output_format == 'json':
            content = self._adapt_json(data or {}, title)
        else:
            report_logger.warning(f"[Report] Unsupported output format: {output_format}")
            return ''

        report_logger.debug(f"[Report] Adapted for {output_format}: {len(content)} chars")
        return content

    def _adapt_html(self, sections: List[Dict[str, Any]], title: str) -> str:
        parts = []
        for section in sections:
            if section.get('title'):
                parts.append(f"<h2>{html.escape(section['title'])}</h2>")

            if section['kind'] == 'table':
                frame = pd.DataFrame(section['rows'], columns=section['columns'])
                parts.append(frame.to_html(index=False, border=0, classes='report-table', escape=True))
                continue

            text = html.escape(section['text'])
            style = section.get('style', 'paragraph')
            if style == 'title':
                parts.append(f"<h1>{text}</h1>")
            elif style == 'subtitle':
                parts.append(f'<p class="subtitle">{text}</p>')
            elif style == 'strong':
                parts.append(f'<p class="strong">{text}</p>')
            else:
                parts.append(f'<p class="note">{text}</p>')

        return HTML_PAGE.format(title=html.escape(title), body='\n'.join(parts))

    def _adapt_console(self, sections: List[Dict[str, Any]], title: str) -> str:
        config = self.format_configs.get('console', {})
        max_width = config.get('max_width', 100)

        blocks = []
        for section in sections:
            lines = []
            if section.get('title'):
                lines.append(section['title'])

            if section['kind'] == 'table':
                table = PrettyTable(section['columns'])
                table.align = "l"
                for row in section['rows']:
                    table.add_row(row)
                if config.get('max_cell_width'):
                    table.max_width = config['max_cell_width']
                lines.append(str(table))
            else:
                for line in section['text'].split('\n'):
                    lines.extend(self._wrap(line, max_width))
            blocks.append('\n'.join(lines))

        return '\n\n'.join(blocks)

    def _wrap(self, line: str, max_width: int) -> List[str]:
        if len(line) <= max_width:
            return [line]

        wrapped = []
        current_line = ''
        for word in line.split(' '):
            if len(current_line + ' ' + word) <= max_width:
                current_line += (' ' if current_line else '') + word
            else:
                if current_line:
                    wrapped.append(current_line)
                current_line = word
        if current_line:
            wrapped.append(current_line)
        return wrapped

    def _adapt_csv(self, sections: List[Dict[str, Any]]) -> str:
        config = self.format_configs.get('csv', {})
        separator = config.get('separator', ';')

        buffer = StringIO()
        tables = [s for s in sections if s['kind'] == 'table']
        for index, section in enumerate(tables):
            if index:
                buffer.write('\n')
            frame = pd.DataFrame(section['rows'], columns=section['columns'])
            frame.to_csv(buffer, sep=separator, index=False)
        return buffer.getvalue()

    def _adapt_json(self, data: Dict[str, Any], title: str) -> str:
        config = self.format_configs.get('json', {})
        payload = {'title': title, **data}
        return json.dumps(payload, ensure_ascii=False, indent=config.get('indent', 2), default=_json_default)

    def get_supported_formats(self) -> list:
        return list(self.format_configs.keys()) or ['html', 'console', 'csv', 'json']

    def validate_format(self, output_format: str) -> bool:
        return output_format in self.get_supported_formats()
