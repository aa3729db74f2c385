"""
Utility package
Configuration, logging, errors, dates and reports shared by the project
"""

from .config_manager import (
    config_manager,
    LoggingConfig,
    LoggingModuleConfig,
    StorageConfig,
    ApiConfig,
    PricingConfig,
    ReportConfig
)
from .exceptions import (
    PriceResearchError,
    ConfigurationError,
    StorageError,
    ValidationError,
    NotFoundError,
    ImportParseError,
    ReportError,
    ErrorCodes,
    create_error_response
)
from .logging_manager import (
    LogContext,
    log_execution,
    logging_manager,
    logger,
    LogConfig,
    initialize_logging,
    ModuleLoggers,
    rm_logger,
    db_logger,
    api_logger,
    pricing_logger,
    importer_logger,
    report_logger,
    config_logger
)
from .date_utils import get_local_time, get_local_today, ensure_date, days_between, format_date_br
from .path_utils import BASE_DIR, CONFIG_DIR, LOG_DIR, DATA_DIR, REPORT_DIR
from .report import generate_report

__version__ = "1.0.0"

__all__ = [
    # Configuration
    "config_manager",
    "LoggingConfig",
    "LoggingModuleConfig",
    "StorageConfig",
    "ApiConfig",
    "PricingConfig",
    "ReportConfig",

    # Errors
    "PriceResearchError",
    "ConfigurationError",
    "StorageError",
    "ValidationError",
    "NotFoundError",
    "ImportParseError",
    "ReportError",
    "ErrorCodes",
    "create_error_response",

    # Logging
    "LogContext",
    "log_execution",
    "logging_manager",
    "logger",
    "LogConfig",
    "initialize_logging",
    "ModuleLoggers",
    "rm_logger",
    "db_logger",
    "api_logger",
    "pricing_logger",
    "importer_logger",
    "report_logger",
    "config_logger",

    # Dates
    "get_local_time",
    "get_local_today",
    "ensure_date",
    "days_between",
    "format_date_br",

    # Paths
    "BASE_DIR",
    "CONFIG_DIR",
    "LOG_DIR",
    "DATA_DIR",
    "REPORT_DIR",

    # Reports
    "generate_report",
]
