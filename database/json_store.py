"""
JSON file storage backend.
The whole dataset lives in one document that is rewritten atomically after
every change; cascades are applied by filtering child records.
"""

import json
import os
import tempfile
from copy import deepcopy
from datetime import date, datetime
from typing import List, Dict, Any, Optional

from utils import db_logger, StorageError, ErrorCodes, ensure_date, get_local_time
from .base import BaseStorage, pick_fields, PROCESS_FIELDS, ITEM_FIELDS, QUOTE_FIELDS
from .models import Process, Item, Quote, HistoryEntry

EMPTY_DOCUMENT = {
    'processes': [],
    'items': [],
    'quotes': [],
    'next_ids': {'processes': 1, 'items': 1, 'quotes': 1},
}


def _json_default(value):
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


class JsonFileStorage(BaseStorage):
    """Flat JSON document storage"""

    backend_name = "json"

    def __init__(self, json_path: str):
        self.json_path = json_path
        self._data: Dict[str, Any] = deepcopy(EMPTY_DOCUMENT)

    async def initialize(self):
        directory = os.path.dirname(self.json_path)
        if directory:
            os.makedirs(directory, exist_ok=True)

        if os.path.exists(self.json_path):
            try:
                with open(self.json_path, 'r', encoding='utf-8') as f:
                    loaded = json.load(f)
            except (OSError, json.JSONDecodeError) as e:
                raise StorageError(
                    f"Failed to read {self.json_path}: {e}",
                    ErrorCodes.STORAGE_CONNECTION_FAILED
                ) from e
            self._data = deepcopy(EMPTY_DOCUMENT)
            self._data.update(loaded)
            db_logger.info(f"[JsonStore] Loaded {self.json_path}")
        else:
            self._save()
            db_logger.info(f"[JsonStore] Created {self.json_path}")

    async def close(self):
        pass

    def _save(self, snapshot: Optional[Dict[str, Any]] = None):
        """Write the document atomically. On failure the in-memory document is rolled back to snapshot."""
        directory = os.path.dirname(self.json_path) or '.'
        fd, tmp_path = tempfile.mkstemp(prefix='.prices-', suffix='.json', dir=directory)
        try:
            with os.fdopen(fd, 'w', encoding='utf-8') as f:
                json.dump(self._data, f, ensure_ascii=False, indent=2, default=_json_default)
            os.replace(tmp_path, self.json_path)
        except OSError as e:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
            if snapshot is not None:
                self._data = snapshot
            db_logger.error(f"[JsonStore] Failed to write {self.json_path}: {e}")
            raise StorageError(f"Failed to write {self.json_path}: {e}", ErrorCodes.STORAGE_TRANSACTION_FAILED) from e

    def _next_id(self, table: str) -> int:
        next_id = self._data['next_ids'][table]
        self._data['next_ids'][table] = next_id + 1
        return next_id

    def _find(self, table: str, record_id: int) -> Optional[Dict[str, Any]]:
        for record in self._data[table]:
            if record['id'] == record_id:
                return record
        return None

    # === Process Operations ===

    async def list_processes(self) -> List[Dict[str, Any]]:
        processes = [Process(**p).model_dump() for p in self._data['processes']]
        return sorted(processes, key=lambda p: (p['created_at'], p['id']), reverse=True)

    async def get_process(self, process_id: int) -> Optional[Dict[str, Any]]:
        record = self._find('processes', process_id)
        return Process(**record).model_dump() if record else None

    async def create_process(self, data: Dict[str, Any]) -> int:
        snapshot = deepcopy(self._data)
        created_at = data.get('created_at') or get_local_time()
        record = {
            'id': self._next_id('processes'),
            'process_number': data['process_number'],
            'object': data['object'],
            'created_at': created_at.isoformat() if isinstance(created_at, datetime) else created_at,
        }
        self._data['processes'].append(record)
        self._save(snapshot)
        db_logger.info(f"[JsonStore] Created process {record['id']} ({record['process_number']})")
        return record['id']

    async def update_process(self, process_id: int, data: Dict[str, Any]) -> bool:
        snapshot = deepcopy(self._data)
        record = self._find('processes', process_id)
        if record is None:
            return False
        record.update(pick_fields(data, PROCESS_FIELDS))
        self._save(snapshot)
        return True

    async def delete_process(self, process_id: int) -> bool:
        snapshot = deepcopy(self._data)
        if self._find('processes', process_id) is None:
            return False
        item_ids = {i['id'] for i in self._data['items'] if i['process_id'] == process_id}
        self._data['quotes'] = [q for q in self._data['quotes'] if q['item_id'] not in item_ids]
        self._data['items'] = [i for i in self._data['items'] if i['process_id'] != process_id]
        self._data['processes'] = [p for p in self._data['processes'] if p['id'] != process_id]
        self._save(snapshot)
        db_logger.info(f"[JsonStore] Deleted process {process_id} with {len(item_ids)} items")
        return True

    # === Item Operations ===

    async def list_items(self, process_id: int) -> List[Dict[str, Any]]:
        items = [Item(**i).model_dump() for i in self._data['items'] if i['process_id'] == process_id]
        return sorted(items, key=lambda i: (i['item_number'], i['id']))

    async def get_item(self, item_id: int) -> Optional[Dict[str, Any]]:
        record = self._find('items', item_id)
        return Item(**record).model_dump() if record else None

    async def create_item(self, process_id: int, data: Dict[str, Any]) -> Optional[int]:
        ids = await self.create_items_batch(process_id, [data])
        return ids[0] if ids else None

    async def create_items_batch(self, process_id: int, items: List[Dict[str, Any]]) -> Optional[List[int]]:
        snapshot = deepcopy(self._data)
        if self._find('processes', process_id) is None:
            return None

        numbers = [i['item_number'] for i in self._data['items'] if i['process_id'] == process_id]
        next_number = max(numbers, default=0) + 1

        records = []
        for data in items:
            item_number = data.get('item_number')
            if item_number is None:
                item_number = next_number
            next_number = max(next_number, item_number) + 1

            records.append({
                'process_id': process_id,
                'item_number': item_number,
                'specification': data['specification'],
                'unit': data.get('unit') or 'UN',
                'quantity': data['quantity'],
                'pricing_strategy': data.get('pricing_strategy') or 'sanitized',
            })

        # ids are assigned only once every record was built
        for record in records:
            record['id'] = self._next_id('items')
        self._data['items'].extend(records)
        self._save(snapshot)
        return [r['id'] for r in records]

    async def update_item(self, item_id: int, data: Dict[str, Any]) -> bool:
        snapshot = deepcopy(self._data)
        record = self._find('items', item_id)
        if record is None:
            return False
        record.update(pick_fields(data, ITEM_FIELDS))
        self._save(snapshot)
        return True

    async def delete_item(self, item_id: int) -> bool:
        snapshot = deepcopy(self._data)
        if self._find('items', item_id) is None:
            return False
        self._data['quotes'] = [q for q in self._data['quotes'] if q['item_id'] != item_id]
        self._data['items'] = [i for i in self._data['items'] if i['id'] != item_id]
        self._save(snapshot)
        return True

    async def reorder_items(self, orders: List[Dict[str, int]]) -> List[int]:
        snapshot = deepcopy(self._data)
        records = {}
        missing = []
        for order in orders:
            record = self._find('items', int(order['id']))
            if record is None:
                missing.append(int(order['id']))
            else:
                records[record['id']] = record

        if missing:
            db_logger.warning(f"[JsonStore] Reorder aborted, unknown items: {missing}")
            return missing

        for order in orders:
            records[int(order['id'])]['item_number'] = int(order['item_number'])
        self._save(snapshot)
        return []

    async def set_pricing_strategy(self, process_id: int, strategy: str) -> int:
        snapshot = deepcopy(self._data)
        updated = 0
        for record in self._data['items']:
            if record['process_id'] == process_id:
                record['pricing_strategy'] = strategy
                updated += 1
        self._save(snapshot)
        return updated

    # === Quote Operations ===

    def _sorted_quotes(self, records) -> List[Dict[str, Any]]:
        quotes = [Quote(**q).model_dump() for q in records]
        return sorted(quotes, key=lambda q: (q['quote_date'], q['id']), reverse=True)

    async def list_quotes(self, item_id: int) -> List[Dict[str, Any]]:
        return self._sorted_quotes(q for q in self._data['quotes'] if q['item_id'] == item_id)

    async def list_quotes_for_process(self, process_id: int) -> Dict[int, List[Dict[str, Any]]]:
        item_ids = {i['id'] for i in self._data['items'] if i['process_id'] == process_id}
        grouped: Dict[int, List[Dict[str, Any]]] = {}
        for quote in self._sorted_quotes(q for q in self._data['quotes'] if q['item_id'] in item_ids):
            grouped.setdefault(quote['item_id'], []).append(quote)
        return grouped

    async def get_quote(self, quote_id: int) -> Optional[Dict[str, Any]]:
        record = self._find('quotes', quote_id)
        return Quote(**record).model_dump() if record else None

    async def create_quote(self, item_id: int, data: Dict[str, Any]) -> Optional[int]:
        ids = await self.create_quotes_batch(item_id, [data])
        return ids[0] if ids else None

    async def create_quotes_batch(self, item_id: int, quotes: List[Dict[str, Any]]) -> Optional[List[int]]:
        snapshot = deepcopy(self._data)
        if self._find('items', item_id) is None:
            return None

        records = [
            {
                'item_id': item_id,
                'source': data['source'],
                'quote_date': ensure_date(data['quote_date']).isoformat(),
                'unit_price': float(data['unit_price']),
                'quote_type': data.get('quote_type') or 'private',
                'is_outlier': bool(data.get('is_outlier', False)),
            }
            for data in quotes
        ]
        for record in records:
            record['id'] = self._next_id('quotes')
        self._data['quotes'].extend(records)
        self._save(snapshot)
        return [r['id'] for r in records]

    async def update_quote(self, quote_id: int, data: Dict[str, Any]) -> bool:
        snapshot = deepcopy(self._data)
        record = self._find('quotes', quote_id)
        if record is None:
            return False
        changes = pick_fields(data, QUOTE_FIELDS)
        if 'quote_date' in changes:
            changes['quote_date'] = ensure_date(changes['quote_date']).isoformat()
        record.update(changes)
        self._save(snapshot)
        return True

    async def delete_quote(self, quote_id: int) -> bool:
        snapshot = deepcopy(self._data)
        if self._find('quotes', quote_id) is None:
            return False
        self._data['quotes'] = [q for q in self._data['quotes'] if q['id'] != quote_id]
        self._save(snapshot)
        return True

    # === Reporting ===

    async def list_history(self) -> List[Dict[str, Any]]:
        processes = {p['id']: Process(**p) for p in self._data['processes']}
        history = []
        for record in self._data['items']:
            process = processes.get(record['process_id'])
            if process is None:
                continue
            history.append(HistoryEntry(
                **record,
                process_number=process.process_number,
                object=process.object,
                process_created_at=process.created_at
            ).model_dump())

        history.sort(key=lambda h: h['item_number'])
        history.sort(key=lambda h: (h['process_created_at'], h['process_id']), reverse=True)
        return history

    async def get_storage_statistics(self) -> Dict[str, Any]:
        return {
            'backend': self.backend_name,
            'path': self.json_path,
            'processes': len(self._data['processes']),
            'items': len(self._data['items']),
            'quotes': len(self._data['quotes']),
        }
