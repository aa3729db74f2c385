"""
API data models for the price research system.
Pydantic models for request/response validation.
"""

from datetime import datetime, date
from typing import Optional, List, Dict, Any

from pydantic import BaseModel, Field, validator

from database.models import Process, Item, Quote, HistoryEntry
from pricing import PricingStrategy, QuoteType, ExpiryStatus


# === Requests ===

class ProcessCreateRequest(BaseModel):
    """Create process request"""
    process_number: str = Field(..., min_length=1, description="Número do processo")
    object: str = Field(..., min_length=1, description="Objeto da contratação")


class ProcessUpdateRequest(BaseModel):
    process_number: Optional[str] = Field(None, min_length=1)
    object: Optional[str] = Field(None, min_length=1)


class ItemCreateRequest(BaseModel):
    item_number: Optional[int] = Field(None, ge=1, description="Next free number when omitted")
    specification: str = Field(..., min_length=1)
    unit: str = Field("UN", description="Unidade de fornecimento")
    quantity: float = Field(..., ge=0)
    pricing_strategy: PricingStrategy = Field(PricingStrategy.SANITIZED.value)

    @validator('unit')
    def default_unit(cls, v):
        return v.strip() or "UN"

    class Config:
        use_enum_values = True


class ItemUpdateRequest(BaseModel):
    item_number: Optional[int] = Field(None, ge=1)
    specification: Optional[str] = Field(None, min_length=1)
    unit: Optional[str] = None
    quantity: Optional[float] = Field(None, ge=0)
    pricing_strategy: Optional[PricingStrategy] = None

    class Config:
        use_enum_values = True


class ItemsBatchRequest(BaseModel):
    items: List[ItemCreateRequest] = Field(..., min_length=1)


class ItemOrder(BaseModel):
    id: int
    item_number: int = Field(..., ge=1)


class ReorderRequest(BaseModel):
    items: List[ItemOrder] = Field(..., min_length=1)


class PricingStrategyRequest(BaseModel):
    pricing_strategy: PricingStrategy

    class Config:
        use_enum_values = True


class QuoteCreateRequest(BaseModel):
    source: str = Field(..., min_length=1, description="Fornecedor ou fonte do preço")
    quote_date: date
    unit_price: float = Field(..., ge=0)
    quote_type: QuoteType = Field(QuoteType.PRIVATE.value)
    is_outlier: bool = False

    class Config:
        use_enum_values = True


class QuoteUpdateRequest(BaseModel):
    source: Optional[str] = Field(None, min_length=1)
    quote_date: Optional[date] = None
    unit_price: Optional[float] = Field(None, ge=0)
    quote_type: Optional[QuoteType] = None
    is_outlier: Optional[bool] = None

    class Config:
        use_enum_values = True


class QuotesBatchRequest(BaseModel):
    quotes: List[QuoteCreateRequest] = Field(..., min_length=1)


class TextImportRequest(BaseModel):
    """Texto colado de uma planilha ou exportação do Banco de Preços"""
    text: str = Field(..., min_length=1)


# === Responses ===

class CreatedResponse(BaseModel):
    id: int


class BatchCreatedResponse(BaseModel):
    ids: List[int]


class SuccessResponse(BaseModel):
    success: bool = True
    message: Optional[str] = None


class ProcessResponse(Process):
    pass


class ItemResponse(Item):
    pass


class QuoteResponse(Quote):
    expiry_status: Optional[ExpiryStatus] = None


class HistoryResponse(HistoryEntry):
    pass


class StatsResponse(BaseModel):
    min: float
    mean: float
    median: float
    std_dev: float
    cv: float
    lower_limit: float
    upper_limit: float
    sanitized_mean: float
    total_estimated: float
    valid_quotes: int
    outliers_count: int


class ItemStatsResponse(BaseModel):
    item_id: int
    pricing_strategy: PricingStrategy
    stats: StatsResponse
    unit_value: float = Field(..., description="Unit price chosen by the pricing strategy")
    total: float


class SummaryQuote(QuoteResponse):
    outside_band: bool = False


class ItemSummary(Item):
    strategy_label: str
    quotes: List[SummaryQuote]
    stats: StatsResponse
    unit_value: float
    total: float


class ProcessSummaryResponse(BaseModel):
    process: ProcessResponse
    items: List[ItemSummary]
    grand_total: float
    methodology: str
    show_min_median: bool
    show_sanitized: bool


class AlertResponse(BaseModel):
    level: str
    message: str
    process_number: str
    item_id: Optional[int] = None
    item_number: Optional[int] = None
    item: Optional[str] = None
    quote_id: Optional[int] = None


class SkippedLineResponse(BaseModel):
    line_number: int
    text: str
    reason: str


class ImportResponse(BaseModel):
    ids: List[int]
    imported: int
    skipped: List[SkippedLineResponse] = []


class BancoPrecosMatch(BaseModel):
    item_id: int
    item_number: int
    specification: str
    quotes: int


class BancoPrecosImportResponse(BaseModel):
    imported: int
    matched: List[BancoPrecosMatch] = []
    unmatched: List[str] = []
    skipped: List[SkippedLineResponse] = []


class StrategyUpdateResponse(SuccessResponse):
    updated: int = 0


class ErrorResponse(BaseModel):
    detail: str
    error_code: Optional[str] = None
    context: Optional[Dict[str, Any]] = None
    timestamp: datetime = Field(default_factory=datetime.now)
