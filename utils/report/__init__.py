"""
Report system
Configurable price map and alerts reports
"""

from .engine import ReportEngine
from .formatters import ReportFormatter, format_currency, format_number, format_percent
from .templates import TemplateManager
from .adapters import OutputAdapter

from utils.logging_manager import report_logger
from utils.config_manager import config_manager

# Shared report engine
_report_engine = None


def _get_report_engine() -> ReportEngine:
    global _report_engine
    if _report_engine is None:
        _report_engine = ReportEngine()
        report_logger.debug("[Report] Report engine initialized")
    return _report_engine


def generate_report(report_type: str, data: dict,
                    output_format: str = None) -> str:
    """
    Generate a report

    Args:
        report_type: Report type ('price_map', 'alerts')
        data: report data, a process summary for 'price_map' or
            ``{'process', 'alerts'}`` for 'alerts'
        output_format: Output format ('html', 'console', 'csv', 'json'); the
            template's configured default when omitted

    Returns:
        str: the rendered report
    """
    if output_format is None:
        report_config = config_manager.get_report_config()
        template_config = report_config.templates.get(report_type, {})
        output_format = template_config.get('output_format', 'html')

    report_logger.info(f"[Report] Generating report: type={report_type}, format={output_format}, data_keys={list(data.keys())}")

    try:
        result = _get_report_engine().generate(report_type, data, output_format)
        report_logger.debug(f"[Report] Report generated successfully: type={report_type}, length={len(result)}")
        return result
    except Exception as e:
        report_logger.error(f"[Report] Failed to generate report: type={report_type}, error={str(e)}")
        raise


def reload_report_config() -> bool:
    """Recreate the engine from the current report_config"""
    global _report_engine
    try:
        report_logger.info("[Report] Reloading report configuration...")
        config_manager.clear_cache()
        _report_engine = ReportEngine()
        report_logger.info("[Report] Report configuration reloaded successfully")
        return True
    except Exception as e:
        report_logger.error(f"[Report] Failed to reload report configuration: {e}")
        return False


__all__ = [
    'ReportEngine',
    'ReportFormatter',
    'TemplateManager',
    'OutputAdapter',
    'format_currency',
    'format_number',
    'format_percent',
    'generate_report',
    'reload_report_config'
]
