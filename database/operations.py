"""
SQLite storage backend for the price research system.
Async SQLAlchemy sessions over aiosqlite; cascades are enforced by the database.
"""

from typing import List, Dict, Any, Optional

from sqlalchemy import func, desc, asc, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.future import select

from utils import db_logger, StorageError, ErrorCodes, ensure_date, get_local_time
from .base import BaseStorage, pick_fields, PROCESS_FIELDS, ITEM_FIELDS, QUOTE_FIELDS
from .connection import DatabaseManager
from .models import ProcessDB, ItemDB, QuoteDB, Process, Item, Quote, HistoryEntry


def _process_dict(row: ProcessDB) -> Dict[str, Any]:
    return Process.model_validate(row).model_dump()


def _item_dict(row: ItemDB) -> Dict[str, Any]:
    return Item.model_validate(row).model_dump()


def _quote_dict(row: QuoteDB) -> Dict[str, Any]:
    return Quote.model_validate(row).model_dump()


def _normalize_quote_fields(data: Dict[str, Any]) -> Dict[str, Any]:
    if 'quote_date' in data:
        data['quote_date'] = ensure_date(data['quote_date'])
    return data


class SQLiteStorage(BaseStorage):
    """database operations backed by SQLite"""

    backend_name = "sqlite"

    def __init__(self, db_path: str):
        self.db = DatabaseManager(db_path)
        self.db_logger = db_logger

    async def initialize(self):
        """Bind the storage to a database file"""
        self.db_logger.info("Initializing SQLiteStorage...")
        if not self.db.is_initialized:
            self.db.initialize()
        await self.db.create_tables()
        self.db_logger.info("SQLiteStorage initialized successfully")

    async def close(self):
        await self.db.close()

    def _wrap_error(self, operation: str, error: SQLAlchemyError) -> StorageError:
        self.db_logger.error(f"Failed to {operation}: {error}")
        return StorageError(f"Failed to {operation}: {error}", ErrorCodes.STORAGE_QUERY_FAILED)

    # === Process Operations ===

    async def list_processes(self) -> List[Dict[str, Any]]:
        try:
            async with self.db.get_async_session() as session:
                stmt = select(ProcessDB).order_by(desc(ProcessDB.created_at), desc(ProcessDB.id))
                result = await session.execute(stmt)
                return [_process_dict(row) for row in result.scalars().all()]
        except SQLAlchemyError as e:
            raise self._wrap_error("list processes", e) from e

    async def get_process(self, process_id: int) -> Optional[Dict[str, Any]]:
        try:
            async with self.db.get_async_session() as session:
                row = await session.get(ProcessDB, process_id)
                return _process_dict(row) if row else None
        except SQLAlchemyError as e:
            raise self._wrap_error(f"get process {process_id}", e) from e

    async def create_process(self, data: Dict[str, Any]) -> int:
        try:
            async with self.db.transaction() as session:
                row = ProcessDB(
                    process_number=data['process_number'],
                    object=data['object'],
                    created_at=data.get('created_at') or get_local_time()
                )
                session.add(row)
                await session.flush()
                self.db_logger.info(f"Created process {row.id} ({row.process_number})")
                return row.id
        except SQLAlchemyError as e:
            raise self._wrap_error("create process", e) from e

    async def update_process(self, process_id: int, data: Dict[str, Any]) -> bool:
        try:
            async with self.db.transaction() as session:
                row = await session.get(ProcessDB, process_id)
                if row is None:
                    return False
                for key, value in pick_fields(data, PROCESS_FIELDS).items():
                    setattr(row, key, value)
                return True
        except SQLAlchemyError as e:
            raise self._wrap_error(f"update process {process_id}", e) from e

    async def delete_process(self, process_id: int) -> bool:
        try:
            async with self.db.transaction() as session:
                row = await session.get(ProcessDB, process_id)
                if row is None:
                    return False
                await session.delete(row)
                self.db_logger.info(f"Deleted process {process_id} with its items and quotes")
                return True
        except SQLAlchemyError as e:
            raise self._wrap_error(f"delete process {process_id}", e) from e

    # === Item Operations ===

    async def list_items(self, process_id: int) -> List[Dict[str, Any]]:
        try:
            async with self.db.get_async_session() as session:
                stmt = select(ItemDB).filter(ItemDB.process_id == process_id) \
                    .order_by(asc(ItemDB.item_number), asc(ItemDB.id))
                result = await session.execute(stmt)
                return [_item_dict(row) for row in result.scalars().all()]
        except SQLAlchemyError as e:
            raise self._wrap_error(f"list items of process {process_id}", e) from e

    async def get_item(self, item_id: int) -> Optional[Dict[str, Any]]:
        try:
            async with self.db.get_async_session() as session:
                row = await session.get(ItemDB, item_id)
                return _item_dict(row) if row else None
        except SQLAlchemyError as e:
            raise self._wrap_error(f"get item {item_id}", e) from e

    async def _next_item_number(self, session, process_id: int) -> int:
        result = await session.execute(
            select(func.max(ItemDB.item_number)).filter(ItemDB.process_id == process_id)
        )
        return (result.scalar() or 0) + 1

    async def _insert_items(self, session, process_id: int, items: List[Dict[str, Any]]) -> List[int]:
        next_number = await self._next_item_number(session, process_id)
        rows = []
        for data in items:
            item_number = data.get('item_number')
            if item_number is None:
                item_number = next_number
            next_number = max(next_number, item_number) + 1

            rows.append(ItemDB(
                process_id=process_id,
                item_number=item_number,
                specification=data['specification'],
                unit=data.get('unit') or 'UN',
                quantity=data['quantity'],
                pricing_strategy=data.get('pricing_strategy') or 'sanitized'
            ))
        session.add_all(rows)
        await session.flush()
        return [row.id for row in rows]

    async def create_item(self, process_id: int, data: Dict[str, Any]) -> Optional[int]:
        ids = await self.create_items_batch(process_id, [data])
        return ids[0] if ids else None

    async def create_items_batch(self, process_id: int, items: List[Dict[str, Any]]) -> Optional[List[int]]:
        try:
            async with self.db.transaction() as session:
                if await session.get(ProcessDB, process_id) is None:
                    return None
                ids = await self._insert_items(session, process_id, items)
                self.db_logger.info(f"Inserted {len(ids)} items into process {process_id}")
                return ids
        except SQLAlchemyError as e:
            raise self._wrap_error(f"insert items into process {process_id}", e) from e

    async def update_item(self, item_id: int, data: Dict[str, Any]) -> bool:
        try:
            async with self.db.transaction() as session:
                row = await session.get(ItemDB, item_id)
                if row is None:
                    return False
                for key, value in pick_fields(data, ITEM_FIELDS).items():
                    setattr(row, key, value)
                return True
        except SQLAlchemyError as e:
            raise self._wrap_error(f"update item {item_id}", e) from e

    async def delete_item(self, item_id: int) -> bool:
        try:
            async with self.db.transaction() as session:
                row = await session.get(ItemDB, item_id)
                if row is None:
                    return False
                await session.delete(row)
                return True
        except SQLAlchemyError as e:
            raise self._wrap_error(f"delete item {item_id}", e) from e

    async def reorder_items(self, orders: List[Dict[str, int]]) -> List[int]:
        ids = [int(order['id']) for order in orders]
        try:
            async with self.db.transaction() as session:
                result = await session.execute(select(ItemDB.id).filter(ItemDB.id.in_(ids)))
                found = set(result.scalars().all())
                missing = [item_id for item_id in ids if item_id not in found]
                if missing:
                    self.db_logger.warning(f"Reorder aborted, unknown items: {missing}")
                    return missing

                for order in orders:
                    await session.execute(
                        update(ItemDB)
                        .where(ItemDB.id == int(order['id']))
                        .values(item_number=int(order['item_number']))
                    )
                self.db_logger.info(f"Reordered {len(orders)} items")
                return []
        except SQLAlchemyError as e:
            raise self._wrap_error("reorder items", e) from e

    async def set_pricing_strategy(self, process_id: int, strategy: str) -> int:
        try:
            async with self.db.transaction() as session:
                result = await session.execute(
                    update(ItemDB)
                    .where(ItemDB.process_id == process_id)
                    .values(pricing_strategy=strategy)
                )
                return result.rowcount
        except SQLAlchemyError as e:
            raise self._wrap_error(f"set pricing strategy of process {process_id}", e) from e

    # === Quote Operations ===

    async def list_quotes(self, item_id: int) -> List[Dict[str, Any]]:
        try:
            async with self.db.get_async_session() as session:
                stmt = select(QuoteDB).filter(QuoteDB.item_id == item_id) \
                    .order_by(desc(QuoteDB.quote_date), desc(QuoteDB.id))
                result = await session.execute(stmt)
                return [_quote_dict(row) for row in result.scalars().all()]
        except SQLAlchemyError as e:
            raise self._wrap_error(f"list quotes of item {item_id}", e) from e

    async def list_quotes_for_process(self, process_id: int) -> Dict[int, List[Dict[str, Any]]]:
        try:
            async with self.db.get_async_session() as session:
                stmt = select(QuoteDB).join(ItemDB, QuoteDB.item_id == ItemDB.id) \
                    .filter(ItemDB.process_id == process_id) \
                    .order_by(desc(QuoteDB.quote_date), desc(QuoteDB.id))
                result = await session.execute(stmt)

                grouped: Dict[int, List[Dict[str, Any]]] = {}
                for row in result.scalars().all():
                    grouped.setdefault(row.item_id, []).append(_quote_dict(row))
                return grouped
        except SQLAlchemyError as e:
            raise self._wrap_error(f"list quotes of process {process_id}", e) from e

    async def get_quote(self, quote_id: int) -> Optional[Dict[str, Any]]:
        try:
            async with self.db.get_async_session() as session:
                row = await session.get(QuoteDB, quote_id)
                return _quote_dict(row) if row else None
        except SQLAlchemyError as e:
            raise self._wrap_error(f"get quote {quote_id}", e) from e

    async def create_quote(self, item_id: int, data: Dict[str, Any]) -> Optional[int]:
        ids = await self.create_quotes_batch(item_id, [data])
        return ids[0] if ids else None

    async def create_quotes_batch(self, item_id: int, quotes: List[Dict[str, Any]]) -> Optional[List[int]]:
        try:
            async with self.db.transaction() as session:
                if await session.get(ItemDB, item_id) is None:
                    return None

                rows = [
                    QuoteDB(
                        item_id=item_id,
                        source=data['source'],
                        quote_date=ensure_date(data['quote_date']),
                        unit_price=data['unit_price'],
                        quote_type=data.get('quote_type') or 'private',
                        is_outlier=bool(data.get('is_outlier', False))
                    )
                    for data in quotes
                ]
                session.add_all(rows)
                await session.flush()
                self.db_logger.info(f"Inserted {len(rows)} quotes into item {item_id}")
                return [row.id for row in rows]
        except SQLAlchemyError as e:
            raise self._wrap_error(f"insert quotes into item {item_id}", e) from e

    async def update_quote(self, quote_id: int, data: Dict[str, Any]) -> bool:
        try:
            async with self.db.transaction() as session:
                row = await session.get(QuoteDB, quote_id)
                if row is None:
                    return False
                for key, value in _normalize_quote_fields(pick_fields(data, QUOTE_FIELDS)).items():
                    setattr(row, key, value)
                return True
        except SQLAlchemyError as e:
            raise self._wrap_error(f"update quote {quote_id}", e) from e

    async def delete_quote(self, quote_id: int) -> bool:
        try:
            async with self.db.transaction() as session:
                row = await session.get(QuoteDB, quote_id)
                if row is None:
                    return False
                await session.delete(row)
                return True
        except SQLAlchemyError as e:
            raise self._wrap_error(f"delete quote {quote_id}", e) from e

    # === Reporting ===

    async def list_history(self) -> List[Dict[str, Any]]:
        try:
            async with self.db.get_async_session() as session:
                stmt = select(ItemDB, ProcessDB).join(ProcessDB, ItemDB.process_id == ProcessDB.id) \
                    .order_by(desc(ProcessDB.created_at), desc(ProcessDB.id), asc(ItemDB.item_number))
                result = await session.execute(stmt)

                history = []
                for item, process in result.all():
                    entry = HistoryEntry(
                        **_item_dict(item),
                        process_number=process.process_number,
                        object=process.object,
                        process_created_at=process.created_at
                    )
                    history.append(entry.model_dump())
                return history
        except SQLAlchemyError as e:
            raise self._wrap_error("list history", e) from e

    async def get_storage_statistics(self) -> Dict[str, Any]:
        try:
            async with self.db.get_async_session() as session:
                counts = {}
                for name, model in (('processes', ProcessDB), ('items', ItemDB), ('quotes', QuoteDB)):
                    result = await session.execute(select(func.count()).select_from(model))
                    counts[name] = result.scalar() or 0

                return {
                    'backend': self.backend_name,
                    'path': self.db.db_path,
                    **counts
                }
        except SQLAlchemyError as e:
            raise self._wrap_error("get storage statistics", e) from e
