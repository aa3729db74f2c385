"""
Unit tests for API error mapping and request models
"""

import pytest
from fastapi import HTTPException
from pydantic import ValidationError as PydanticValidationError

from api.models import ItemCreateRequest, QuoteCreateRequest, ReorderRequest
from api.routes import _http_error
from utils.exceptions import (
    NotFoundError, ValidationError, ImportParseError, ReportError, StorageError
)


@pytest.mark.unit
class TestErrorMapping:

    @pytest.mark.parametrize("error, status", [
        (NotFoundError("Item", 1), 404),
        (ValidationError("bad strategy"), 400),
        (ImportParseError("nothing to import"), 400),
        (ReportError("unknown report"), 400),
        (StorageError("disk I/O error"), 500),
        (RuntimeError("boom"), 500),
    ])
    def test_status_codes(self, error, status):
        assert _http_error(error, "test").status_code == status

    def test_internal_errors_hide_details(self):
        assert _http_error(StorageError("disk I/O error"), "test").detail == "Internal Server Error"

    def test_http_exception_passes_through(self):
        original = HTTPException(status_code=409, detail="conflict")
        assert _http_error(original, "test") is original


@pytest.mark.unit
class TestRequestModels:

    def test_item_defaults(self):
        request = ItemCreateRequest(specification="Caneta", quantity=10, unit="  ")
        data = request.model_dump()

        assert data['unit'] == "UN"
        assert data['pricing_strategy'] == "sanitized"
        assert data['item_number'] is None

    def test_item_strategy_is_plain_value(self):
        request = ItemCreateRequest(specification="Caneta", quantity=10, pricing_strategy="median")
        assert request.model_dump()['pricing_strategy'] == "median"

    def test_quote_requires_iso_date(self):
        request = QuoteCreateRequest(source="Loja", quote_date="2025-06-01", unit_price=3)
        assert request.model_dump()['quote_type'] == "private"

        with pytest.raises(PydanticValidationError):
            QuoteCreateRequest(source="Loja", quote_date="01/06/2025", unit_price=3)

    def test_reorder_requires_positive_numbers(self):
        with pytest.raises(PydanticValidationError):
            ReorderRequest(items=[{"id": 1, "item_number": 0}])
