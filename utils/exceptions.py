"""
Exception definitions for the price research system.
Provides project-specific exception classes and error handling helpers.
"""

from typing import Optional, Dict, Any


class PriceResearchError(Exception):
    """Base exception for the price research system"""

    def __init__(self, message: str, error_code: Optional[str] = None,
                 context: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.context = context or {}

    def __str__(self) -> str:
        return f"[{self.error_code}] {self.message}"


class ConfigurationError(PriceResearchError):
    """Configuration errors"""
    pass


class StorageError(PriceResearchError):
    """Persistence backend errors"""
    pass


class ValidationError(PriceResearchError):
    """Invalid input data"""
    pass


class NotFoundError(PriceResearchError):
    """A process, item or quote does not exist"""

    def __init__(self, resource: str, resource_id: Any,
                 error_code: Optional[str] = None):
        super().__init__(
            f"{resource} not found",
            error_code or ErrorCodes.RESOURCE_NOT_FOUND,
            {"resource": resource, "id": resource_id}
        )
        self.resource = resource
        self.resource_id = resource_id


class ImportParseError(PriceResearchError):
    """Pasted or exported text could not be parsed"""
    pass


class ReportError(PriceResearchError):
    """Report generation errors"""
    pass


class ErrorCodes:
    """Error code constants"""

    # Configuration
    CONFIG_NOT_FOUND = "CONFIG_001"
    CONFIG_INVALID_FORMAT = "CONFIG_002"
    CONFIG_MISSING_KEY = "CONFIG_003"

    # Storage
    STORAGE_CONNECTION_FAILED = "DB_001"
    STORAGE_QUERY_FAILED = "DB_002"
    STORAGE_TRANSACTION_FAILED = "DB_003"
    STORAGE_INTEGRITY_ERROR = "DB_004"
    STORAGE_BACKEND_UNKNOWN = "DB_005"

    # Validation
    VALIDATION_INVALID_DATE = "VAL_001"
    VALIDATION_INVALID_NUMBER = "VAL_002"
    VALIDATION_INVALID_STRATEGY = "VAL_003"
    VALIDATION_MISSING_REQUIRED_FIELD = "VAL_004"

    # Lookups
    RESOURCE_NOT_FOUND = "NF_001"

    # Import
    IMPORT_EMPTY = "IMP_001"
    IMPORT_NO_MATCH = "IMP_002"

    # Reports
    REPORT_UNKNOWN_TYPE = "REP_001"
    REPORT_UNKNOWN_FORMAT = "REP_002"


def create_error_response(error: PriceResearchError,
                          include_traceback: bool = False) -> Dict[str, Any]:
    """Build a standard error payload"""
    response = {
        "error": True,
        "error_code": error.error_code,
        "message": error.message,
        "context": error.context
    }

    if include_traceback:
        import traceback
        response["traceback"] = traceback.format_exc()

    return response

