"""
Report template manager
Loads the report templates (price map, alerts) from report_config
"""

from typing import Dict, List, Any, Optional
from utils.logging_manager import report_logger
from utils.config_manager import config_manager, ReportConfig


class TemplateManager:
    """Report template manager"""

    def __init__(self, config: Optional[ReportConfig] = None):
        """
        Create the manager

        Args:
            config: report configuration, taken from config_manager when None
        """
        if config is None:
            config = config_manager.get_report_config()

        self.config = config
        self.templates = self.config.templates
        self.formats = self.config.formats
        report_logger.debug(f"[Report] Template manager initialized with {len(self.templates)} templates and {len(self.formats)} formats.")

    def get_template(self, report_type: str) -> Optional[Dict[str, Any]]:
        return self.templates.get(report_type)

    def list_available_templates(self) -> List[str]:
        return list(self.templates.keys())

    def validate_template(self, report_type: str) -> bool:
        """
        Check that a template is usable

        A template must be enabled, have a name and a non-empty list of
        sections, each with a name and a type.
        """
        template = self.get_template(report_type)
        if not template:
            report_logger.warning(f"[Report] Template {report_type} not found")
            return False

        if not template.get("enabled", True):
            report_logger.warning(f"[Report] Template {report_type} is not enabled")
            return False

        for required in ('name', 'sections'):
            if required not in template:
                report_logger.warning(f"[Report] Template {report_type} is missing required field: {required}")
                return False

        sections = template.get('sections', [])
        if not sections:
            report_logger.warning(f"[Report] Template {report_type} has no sections")
            return False

        for section in sections:
            if 'name' not in section or 'type' not in section:
                report_logger.warning(f"[Report] Template {report_type} has a section missing required fields: name, type")
                return False

        report_logger.debug(f"[Report] Template {report_type} is valid")
        return True
