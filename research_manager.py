"""
Research Manager for the price research system.
High-level operations over processes, items and quotes: persistence, statistics,
pasted-text imports and report exports.
"""

from typing import List, Dict, Any, Optional

from utils import (
    rm_logger, config_manager, log_execution, LogContext, generate_report,
    NotFoundError, ValidationError, ImportParseError, ErrorCodes
)
from database import BaseStorage, create_storage
from pricing import (
    PricingStrategy,
    annotate_quotes,
    summarize_item,
    summarize_process,
    build_process_alerts
)
from importers import parse_items_text, parse_quotes_text, parse_banco_precos, match_specification


class PriceResearchManager:
    """Facade over storage, statistics, imports and reports"""

    def __init__(self, storage: Optional[BaseStorage] = None):
        self.config = config_manager
        self.storage = storage
        self._initialized = False

    @log_execution("ResearchManager", "initialize")
    async def initialize(self) -> None:
        if self._initialized:
            return
        if self.storage is None:
            self.storage = create_storage(self.config.get_storage_config())
        await self.storage.initialize()
        self._initialized = True
        rm_logger.info(f"PriceResearchManager ready ({self.storage.backend_name} backend)")

    async def close(self) -> None:
        if self.storage is not None:
            await self.storage.close()
        self._initialized = False

    # === Lookups raising NotFoundError ===

    async def get_process(self, process_id: int) -> Dict[str, Any]:
        process = await self.storage.get_process(process_id)
        if process is None:
            raise NotFoundError("Process", process_id)
        return process

    async def get_item(self, item_id: int) -> Dict[str, Any]:
        item = await self.storage.get_item(item_id)
        if item is None:
            raise NotFoundError("Item", item_id)
        return item

    async def get_quote(self, quote_id: int) -> Dict[str, Any]:
        quote = await self.storage.get_quote(quote_id)
        if quote is None:
            raise NotFoundError("Quote", quote_id)
        return quote

    # === Processes ===

    async def list_processes(self) -> List[Dict[str, Any]]:
        return await self.storage.list_processes()

    async def create_process(self, data: Dict[str, Any]) -> int:
        return await self.storage.create_process(data)

    async def update_process(self, process_id: int, data: Dict[str, Any]) -> None:
        if not await self.storage.update_process(process_id, data):
            raise NotFoundError("Process", process_id)

    @log_execution("ResearchManager", "delete_process")
    async def delete_process(self, process_id: int) -> None:
        if not await self.storage.delete_process(process_id):
            raise NotFoundError("Process", process_id)

    # === Items ===

    async def list_items(self, process_id: int) -> List[Dict[str, Any]]:
        await self.get_process(process_id)
        return await self.storage.list_items(process_id)

    async def create_item(self, process_id: int, data: Dict[str, Any]) -> int:
        item_id = await self.storage.create_item(process_id, data)
        if item_id is None:
            raise NotFoundError("Process", process_id)
        return item_id

    async def create_items_batch(self, process_id: int, items: List[Dict[str, Any]]) -> List[int]:
        ids = await self.storage.create_items_batch(process_id, items)
        if ids is None:
            raise NotFoundError("Process", process_id)
        return ids

    async def update_item(self, item_id: int, data: Dict[str, Any]) -> None:
        if 'pricing_strategy' in data and data['pricing_strategy'] is not None:
            data = {**data, 'pricing_strategy': self._validate_strategy(data['pricing_strategy'])}
        if not await self.storage.update_item(item_id, data):
            raise NotFoundError("Item", item_id)

    async def delete_item(self, item_id: int) -> None:
        if not await self.storage.delete_item(item_id):
            raise NotFoundError("Item", item_id)

    async def reorder_items(self, orders: List[Dict[str, int]]) -> None:
        """All orders applied or, when any item is unknown, none"""
        missing = await self.storage.reorder_items(orders)
        if missing:
            raise NotFoundError("Item", missing[0] if len(missing) == 1 else missing)

    def _validate_strategy(self, strategy: str) -> str:
        try:
            return PricingStrategy(strategy).value
        except ValueError as e:
            raise ValidationError(
                f"Invalid pricing strategy: {strategy}",
                ErrorCodes.VALIDATION_INVALID_STRATEGY,
                {"allowed": [s.value for s in PricingStrategy]}
            ) from e

    async def set_pricing_strategy(self, process_id: int, strategy: str) -> int:
        strategy = self._validate_strategy(strategy)
        await self.get_process(process_id)
        updated = await self.storage.set_pricing_strategy(process_id, strategy)
        rm_logger.info(f"Process {process_id}: {updated} items set to {strategy}")
        return updated

    # === Quotes ===

    async def list_quotes(self, item_id: int) -> List[Dict[str, Any]]:
        """Quotes of an item, each with its expiry status"""
        await self.get_item(item_id)
        return annotate_quotes(await self.storage.list_quotes(item_id))

    async def create_quote(self, item_id: int, data: Dict[str, Any]) -> int:
        quote_id = await self.storage.create_quote(item_id, data)
        if quote_id is None:
            raise NotFoundError("Item", item_id)
        return quote_id

    async def create_quotes_batch(self, item_id: int, quotes: List[Dict[str, Any]]) -> List[int]:
        ids = await self.storage.create_quotes_batch(item_id, quotes)
        if ids is None:
            raise NotFoundError("Item", item_id)
        return ids

    async def update_quote(self, quote_id: int, data: Dict[str, Any]) -> None:
        if not await self.storage.update_quote(quote_id, data):
            raise NotFoundError("Quote", quote_id)

    async def delete_quote(self, quote_id: int) -> None:
        if not await self.storage.delete_quote(quote_id):
            raise NotFoundError("Quote", quote_id)

    # === Statistics & reports ===

    async def get_item_stats(self, item_id: int) -> Dict[str, Any]:
        item = await self.get_item(item_id)
        quotes = await self.storage.list_quotes(item_id)
        summary = summarize_item(item, quotes)
        return {
            'item_id': item_id,
            'pricing_strategy': summary['pricing_strategy'],
            'stats': summary['stats'],
            'unit_value': summary['unit_value'],
            'total': summary['total'],
        }

    async def get_process_summary(self, process_id: int) -> Dict[str, Any]:
        process = await self.get_process(process_id)
        items = await self.storage.list_items(process_id)
        quotes_by_item = await self.storage.list_quotes_for_process(process_id)
        return summarize_process(process, items, quotes_by_item)

    async def get_process_alerts(self, process_id: int) -> List[Dict[str, Any]]:
        process = await self.get_process(process_id)
        items = await self.storage.list_items(process_id)
        quotes_by_item = await self.storage.list_quotes_for_process(process_id)
        return [alert.to_dict() for alert in build_process_alerts(process, items, quotes_by_item)]

    async def export_price_map(self, process_id: int, output_format: str = 'html') -> str:
        with LogContext("ResearchManager", "export_price_map", process_id=process_id):
            summary = await self.get_process_summary(process_id)
            return generate_report('price_map', summary, output_format)

    async def export_alerts(self, process_id: int, output_format: str = 'console') -> str:
        process = await self.get_process(process_id)
        alerts = await self.get_process_alerts(process_id)
        return generate_report('alerts', {'process': process, 'alerts': alerts}, output_format)

    async def list_history(self) -> List[Dict[str, Any]]:
        return await self.storage.list_history()

    # === Imports ===

    def _import_response(self, ids: List[int], skipped) -> Dict[str, Any]:
        return {
            'ids': ids,
            'imported': len(ids),
            'skipped': [s.to_dict() for s in skipped],
        }

    @log_execution("ResearchManager", "import_items_text")
    async def import_items_text(self, process_id: int, text: str) -> Dict[str, Any]:
        await self.get_process(process_id)
        result = parse_items_text(text)
        if not result.records:
            raise ImportParseError(
                "Nenhum dado válido encontrado. Verifique o formato das colunas.",
                ErrorCodes.IMPORT_EMPTY,
                {"skipped": len(result.skipped)}
            )
        ids = await self.create_items_batch(process_id, result.records)
        return self._import_response(ids, result.skipped)

    @log_execution("ResearchManager", "import_quotes_text")
    async def import_quotes_text(self, item_id: int, text: str) -> Dict[str, Any]:
        await self.get_item(item_id)
        result = parse_quotes_text(text)
        if not result.records:
            raise ImportParseError(
                "Nenhum dado válido encontrado. Verifique o formato das colunas.",
                ErrorCodes.IMPORT_EMPTY,
                {"skipped": len(result.skipped)}
            )
        ids = await self.create_quotes_batch(item_id, result.records)
        return self._import_response(ids, result.skipped)

    @log_execution("ResearchManager", "import_banco_precos")
    async def import_banco_precos(self, process_id: int, text: str) -> Dict[str, Any]:
        """
        Import a Banco de Preços export into the matching items of a process.

        Groups without quotes are ignored; groups matching no item are
        reported in ``unmatched``.
        """
        await self.get_process(process_id)
        items = await self.storage.list_items(process_id)
        result = parse_banco_precos(text)

        imported = 0
        matched = []
        unmatched = []
        for group in result.records:
            if not group.quotes:
                continue

            target = match_specification(items, group.specification)
            if target is None:
                unmatched.append(group.specification)
                continue

            await self.create_quotes_batch(target['id'], group.quotes)
            imported += len(group.quotes)
            matched.append({
                'item_id': target['id'],
                'item_number': target['item_number'],
                'specification': group.specification,
                'quotes': len(group.quotes),
            })

        rm_logger.info(f"Banco de Preços import into process {process_id}: {imported} quotes, {len(unmatched)} unmatched groups")
        return {
            'imported': imported,
            'matched': matched,
            'unmatched': unmatched,
            'skipped': [s.to_dict() for s in result.skipped],
        }

    # === Status ===

    async def get_system_status(self) -> Dict[str, Any]:
        pricing = self.config.get_pricing_config()
        return {
            'storage': await self.storage.get_storage_statistics(),
            'pricing': {
                'private_expiry_days': pricing.private_expiry_days,
                'public_expiry_days': pricing.public_expiry_days,
                'min_valid_quotes': pricing.min_valid_quotes,
                'max_cv': pricing.max_cv,
            },
        }


# Shared manager
research_manager = PriceResearchManager()
