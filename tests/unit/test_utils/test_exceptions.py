"""
Unit tests for exception classes
"""

import pytest

from utils.exceptions import (
    PriceResearchError, StorageError, NotFoundError, ImportParseError,
    ErrorCodes, create_error_response
)


@pytest.mark.unit
class TestExceptions:

    def test_error_code_defaults_to_class_name(self):
        error = StorageError("disk full")
        assert error.error_code == "StorageError"
        assert str(error) == "[StorageError] disk full"
        assert isinstance(error, PriceResearchError)

    def test_not_found_carries_resource(self):
        error = NotFoundError("Item", 42)
        assert error.message == "Item not found"
        assert error.error_code == ErrorCodes.RESOURCE_NOT_FOUND
        assert error.context == {"resource": "Item", "id": 42}

    def test_error_response(self):
        error = ImportParseError("nothing to import", ErrorCodes.IMPORT_EMPTY, {"skipped": 3})
        response = create_error_response(error)

        assert response["error"] is True
        assert response["error_code"] == ErrorCodes.IMPORT_EMPTY
        assert response["message"] == "nothing to import"
        assert response["context"] == {"skipped": 3}
        assert "traceback" not in response
