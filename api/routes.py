"""
API routes for the price research system.
Defines the REST endpoints for processes, items, quotes, imports and exports.
"""

from typing import List

from fastapi import APIRouter, HTTPException, Query, Depends, Request
from fastapi.responses import HTMLResponse, PlainTextResponse, Response

from research_manager import PriceResearchManager
from utils import (
    api_logger, PriceResearchError, NotFoundError, ValidationError,
    ImportParseError, ReportError
)
from .models import *

router = APIRouter(responses={
    404: {"model": ErrorResponse, "description": "Process, item or quote not found"},
    400: {"model": ErrorResponse, "description": "Invalid input or nothing to import"},
})

EXPORT_MEDIA_TYPES = {
    'csv': 'text/csv; charset=utf-8',
    'json': 'application/json',
}


def get_manager(request: Request) -> PriceResearchManager:
    return request.app.state.manager


def _http_error(error: Exception, action: str) -> HTTPException:
    """Map an exception raised while serving a request to its HTTP error"""
    if isinstance(error, HTTPException):
        return error
    if isinstance(error, NotFoundError):
        return HTTPException(status_code=404, detail=error.message)
    if isinstance(error, (ValidationError, ImportParseError, ReportError)):
        api_logger.warning(f"[API] Failed to {action}: {error}")
        return HTTPException(status_code=400, detail=error.message)

    api_logger.error(f"[API] Failed to {action}: {error}", exc_info=not isinstance(error, PriceResearchError))
    return HTTPException(status_code=500, detail="Internal Server Error")


# Processes
@router.get("/processes", response_model=List[ProcessResponse], tags=["Processes"])
async def list_processes(manager: PriceResearchManager = Depends(get_manager)):
    """Processos, mais recentes primeiro"""
    try:
        return await manager.list_processes()
    except Exception as e:
        raise _http_error(e, "list processes")


@router.post("/processes", response_model=CreatedResponse, tags=["Processes"])
async def create_process(request: ProcessCreateRequest,
                         manager: PriceResearchManager = Depends(get_manager)):
    try:
        return CreatedResponse(id=await manager.create_process(request.model_dump()))
    except Exception as e:
        raise _http_error(e, "create process")


@router.get("/processes/{process_id}", response_model=ProcessResponse, tags=["Processes"])
async def get_process(process_id: int, manager: PriceResearchManager = Depends(get_manager)):
    try:
        return await manager.get_process(process_id)
    except Exception as e:
        raise _http_error(e, f"get process {process_id}")


@router.put("/processes/{process_id}", response_model=SuccessResponse, tags=["Processes"])
async def update_process(process_id: int, request: ProcessUpdateRequest,
                         manager: PriceResearchManager = Depends(get_manager)):
    try:
        await manager.update_process(process_id, request.model_dump(exclude_unset=True))
        return SuccessResponse()
    except Exception as e:
        raise _http_error(e, f"update process {process_id}")


@router.delete("/processes/{process_id}", response_model=SuccessResponse, tags=["Processes"])
async def delete_process(process_id: int, manager: PriceResearchManager = Depends(get_manager)):
    """Remove o processo com seus itens e cotações"""
    try:
        await manager.delete_process(process_id)
        return SuccessResponse()
    except Exception as e:
        raise _http_error(e, f"delete process {process_id}")


# Items of a process
@router.get("/processes/{process_id}/items", response_model=List[ItemResponse], tags=["Items"])
async def list_items(process_id: int, manager: PriceResearchManager = Depends(get_manager)):
    try:
        return await manager.list_items(process_id)
    except Exception as e:
        raise _http_error(e, f"list items of process {process_id}")


@router.post("/processes/{process_id}/items", response_model=CreatedResponse, tags=["Items"])
async def create_item(process_id: int, request: ItemCreateRequest,
                      manager: PriceResearchManager = Depends(get_manager)):
    try:
        return CreatedResponse(id=await manager.create_item(process_id, request.model_dump()))
    except Exception as e:
        raise _http_error(e, f"create item in process {process_id}")


@router.post("/processes/{process_id}/items/batch", response_model=BatchCreatedResponse, tags=["Items"])
async def create_items_batch(process_id: int, request: ItemsBatchRequest,
                             manager: PriceResearchManager = Depends(get_manager)):
    """Inserção em lote, tudo ou nada"""
    try:
        ids = await manager.create_items_batch(process_id, [item.model_dump() for item in request.items])
        return BatchCreatedResponse(ids=ids)
    except Exception as e:
        raise _http_error(e, f"create items in process {process_id}")


@router.post("/processes/{process_id}/items/import", response_model=ImportResponse, tags=["Imports"])
async def import_items(process_id: int, request: TextImportRequest,
                       manager: PriceResearchManager = Depends(get_manager)):
    """Itens colados de uma planilha: especificação, unidade, quantidade"""
    try:
        return await manager.import_items_text(process_id, request.text)
    except Exception as e:
        raise _http_error(e, f"import items into process {process_id}")


@router.post("/processes/{process_id}/pricing-strategy", response_model=StrategyUpdateResponse, tags=["Items"])
async def set_pricing_strategy(process_id: int, request: PricingStrategyRequest,
                               manager: PriceResearchManager = Depends(get_manager)):
    try:
        updated = await manager.set_pricing_strategy(process_id, request.pricing_strategy)
        return StrategyUpdateResponse(updated=updated)
    except Exception as e:
        raise _http_error(e, f"set pricing strategy of process {process_id}")


@router.post("/processes/{process_id}/banco-precos", response_model=BancoPrecosImportResponse, tags=["Imports"])
async def import_banco_precos(process_id: int, request: TextImportRequest,
                              manager: PriceResearchManager = Depends(get_manager)):
    try:
        return await manager.import_banco_precos(process_id, request.text)
    except Exception as e:
        raise _http_error(e, f"import Banco de Preços into process {process_id}")


# Process analysis
@router.get("/processes/{process_id}/summary", response_model=ProcessSummaryResponse, tags=["Analysis"])
async def get_process_summary(process_id: int, manager: PriceResearchManager = Depends(get_manager)):
    """Itens com estatísticas, totais e metodologia"""
    try:
        return await manager.get_process_summary(process_id)
    except Exception as e:
        raise _http_error(e, f"summarize process {process_id}")


@router.get("/processes/{process_id}/alerts", response_model=List[AlertResponse], tags=["Analysis"])
async def get_process_alerts(process_id: int, manager: PriceResearchManager = Depends(get_manager)):
    try:
        return await manager.get_process_alerts(process_id)
    except Exception as e:
        raise _http_error(e, f"get alerts of process {process_id}")


@router.get("/processes/{process_id}/export", tags=["Analysis"])
async def export_price_map(
    process_id: int,
    format: str = Query("html", description="html, csv, json ou console", pattern="^(html|csv|json|console)$"),
    manager: PriceResearchManager = Depends(get_manager)
):
    """Mapa comparativo de preços"""
    try:
        content = await manager.export_price_map(process_id, format)
    except Exception as e:
        raise _http_error(e, f"export process {process_id}")

    if format == 'html':
        return HTMLResponse(content)
    if format == 'console':
        return PlainTextResponse(content)

    headers = {}
    if format == 'csv':
        headers["Content-Disposition"] = f'attachment; filename="mapa_precos_{process_id}.csv"'
    return Response(content=content, media_type=EXPORT_MEDIA_TYPES[format], headers=headers)


# Items
@router.post("/items/reorder", response_model=SuccessResponse, tags=["Items"])
async def reorder_items(request: ReorderRequest, manager: PriceResearchManager = Depends(get_manager)):
    """Renumera itens numa única transação; nenhum muda se algum id não existir"""
    try:
        await manager.reorder_items([order.model_dump() for order in request.items])
        return SuccessResponse()
    except Exception as e:
        raise _http_error(e, "reorder items")


@router.put("/items/{item_id}", response_model=SuccessResponse, tags=["Items"])
async def update_item(item_id: int, request: ItemUpdateRequest,
                      manager: PriceResearchManager = Depends(get_manager)):
    try:
        await manager.update_item(item_id, request.model_dump(exclude_unset=True))
        return SuccessResponse()
    except Exception as e:
        raise _http_error(e, f"update item {item_id}")


@router.delete("/items/{item_id}", response_model=SuccessResponse, tags=["Items"])
async def delete_item(item_id: int, manager: PriceResearchManager = Depends(get_manager)):
    try:
        await manager.delete_item(item_id)
        return SuccessResponse()
    except Exception as e:
        raise _http_error(e, f"delete item {item_id}")


@router.get("/items/{item_id}/stats", response_model=ItemStatsResponse, tags=["Analysis"])
async def get_item_stats(item_id: int, manager: PriceResearchManager = Depends(get_manager)):
    try:
        return await manager.get_item_stats(item_id)
    except Exception as e:
        raise _http_error(e, f"get stats of item {item_id}")


# Quotes
@router.get("/items/{item_id}/quotes", response_model=List[QuoteResponse], tags=["Quotes"])
async def list_quotes(item_id: int, manager: PriceResearchManager = Depends(get_manager)):
    """Cotações do item, mais recentes primeiro, com situação de validade"""
    try:
        return await manager.list_quotes(item_id)
    except Exception as e:
        raise _http_error(e, f"list quotes of item {item_id}")


@router.post("/items/{item_id}/quotes", response_model=CreatedResponse, tags=["Quotes"])
async def create_quote(item_id: int, request: QuoteCreateRequest,
                       manager: PriceResearchManager = Depends(get_manager)):
    try:
        return CreatedResponse(id=await manager.create_quote(item_id, request.model_dump()))
    except Exception as e:
        raise _http_error(e, f"create quote for item {item_id}")


@router.post("/items/{item_id}/quotes/batch", response_model=BatchCreatedResponse, tags=["Quotes"])
async def create_quotes_batch(item_id: int, request: QuotesBatchRequest,
                              manager: PriceResearchManager = Depends(get_manager)):
    try:
        ids = await manager.create_quotes_batch(item_id, [quote.model_dump() for quote in request.quotes])
        return BatchCreatedResponse(ids=ids)
    except Exception as e:
        raise _http_error(e, f"create quotes for item {item_id}")


@router.post("/items/{item_id}/quotes/import", response_model=ImportResponse, tags=["Imports"])
async def import_quotes(item_id: int, request: TextImportRequest,
                        manager: PriceResearchManager = Depends(get_manager)):
    """Cotações coladas de uma planilha: fonte, data, tipo, valor unitário"""
    try:
        return await manager.import_quotes_text(item_id, request.text)
    except Exception as e:
        raise _http_error(e, f"import quotes into item {item_id}")


@router.put("/quotes/{quote_id}", response_model=SuccessResponse, tags=["Quotes"])
async def update_quote(quote_id: int, request: QuoteUpdateRequest,
                       manager: PriceResearchManager = Depends(get_manager)):
    try:
        await manager.update_quote(quote_id, request.model_dump(exclude_unset=True))
        return SuccessResponse()
    except Exception as e:
        raise _http_error(e, f"update quote {quote_id}")


@router.delete("/quotes/{quote_id}", response_model=SuccessResponse, tags=["Quotes"])
async def delete_quote(quote_id: int, manager: PriceResearchManager = Depends(get_manager)):
    try:
        await manager.delete_quote(quote_id)
        return SuccessResponse()
    except Exception as e:
        raise _http_error(e, f"delete quote {quote_id}")


# History
@router.get("/history", response_model=List[HistoryResponse], tags=["History"])
async def list_history(manager: PriceResearchManager = Depends(get_manager)):
    """Todos os itens com número e objeto do processo"""
    try:
        return await manager.list_history()
    except Exception as e:
        raise _http_error(e, "list history")
