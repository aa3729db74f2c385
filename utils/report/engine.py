"""
Report engine
Validates the request, prepares the data and renders the report
"""

from typing import Dict, Any, Optional

from utils.config_manager import config_manager, ReportConfig
from utils.date_utils import get_local_time
from utils.exceptions import ReportError, ErrorCodes
from utils.logging_manager import report_logger
from .templates import TemplateManager
from .formatters import ReportFormatter
from .adapters import OutputAdapter


class ReportEngine:
    """Report engine"""

    def __init__(self, config: Optional[ReportConfig] = None):
        """
        Create the engine

        Args:
            config: report configuration, taken from config_manager when None
        """
        self.config = config or config_manager.get_report_config()
        self.template_manager = TemplateManager(self.config)
        self.formatter = ReportFormatter(self.config)
        self.adapter = OutputAdapter(self.config)

    def generate(self, report_type: str, data: Dict[str, Any],
                 output_format: str = 'html') -> str:
        """
        Generate a report

        Raises:
            ReportError: unknown or disabled report type, unsupported format
        """
        report_logger.debug(f"[ReportEngine] Starting report generation: type={report_type}, format={output_format}")

        if not self.template_manager.validate_template(report_type):
            report_logger.error(f"[ReportEngine] Invalid report type: {report_type}")
            raise ReportError(
                f"Unsupported or invalid report type: {report_type}",
                ErrorCodes.REPORT_UNKNOWN_TYPE,
                {"report_type": report_type}
            )

        if not self.adapter.validate_format(output_format):
            report_logger.error(f"[ReportEngine] Invalid output format: {output_format}")
            raise ReportError(
                f"Unsupported output format: {output_format}",
                ErrorCodes.REPORT_UNKNOWN_FORMAT,
                {"output_format": output_format, "supported": self.adapter.get_supported_formats()}
            )

        template = self.template_manager.get_template(report_type)
        prepared_data = self._prepare_data(report_type, data, template)

        sections = self.formatter.format(template, prepared_data, output_format)
        return self.adapter.adapt(sections, output_format, template.get('name', ''), prepared_data)

    def _prepare_data(self, report_type: str, data: Dict[str, Any],
                      template: Dict[str, Any]) -> Dict[str, Any]:
        prepared_data = data.copy()

        prepared_data.update({
            'report_type': report_type,
            'name': template.get('name', ''),
            'generated_at': get_local_time().strftime('%d/%m/%Y %H:%M'),
        })

        if report_type == 'price_map':
            prepared_data.setdefault('items', [])
            prepared_data.setdefault('grand_total', 0.0)
            prepared_data.setdefault('methodology', 'Média Saneada')
        elif report_type == 'alerts':
            alerts = prepared_data.get('alerts', [])
            prepared_data['alerts'] = [a.to_dict() if hasattr(a, 'to_dict') else a for a in alerts]
            prepared_data['error_count'] = sum(1 for a in prepared_data['alerts'] if a.get('level') == 'error')
            prepared_data['warning_count'] = sum(1 for a in prepared_data['alerts'] if a.get('level') == 'warning')

        return prepared_data
