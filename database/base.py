"""
Storage interface shared by the SQLite and JSON file backends.
Every record is exchanged as a plain dict shaped like the pydantic models in
database.models.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

ITEM_FIELDS = ('item_number', 'specification', 'unit', 'quantity', 'pricing_strategy')
QUOTE_FIELDS = ('source', 'quote_date', 'unit_price', 'quote_type', 'is_outlier')
PROCESS_FIELDS = ('process_number', 'object')


def pick_fields(data: Dict[str, Any], fields) -> Dict[str, Any]:
    """Only the known, supplied (non-None) fields of a partial update"""
    return {k: data[k] for k in fields if k in data and data[k] is not None}


class BaseStorage(ABC):
    """Persistence backend for processes, items and quotes"""

    backend_name = "base"

    @abstractmethod
    async def initialize(self):
        ...

    @abstractmethod
    async def close(self):
        ...

    # === Process Operations ===

    @abstractmethod
    async def list_processes(self) -> List[Dict[str, Any]]:
        """Newest first"""

    @abstractmethod
    async def get_process(self, process_id: int) -> Optional[Dict[str, Any]]:
        ...

    @abstractmethod
    async def create_process(self, data: Dict[str, Any]) -> int:
        ...

    @abstractmethod
    async def update_process(self, process_id: int, data: Dict[str, Any]) -> bool:
        """False when the process does not exist"""

    @abstractmethod
    async def delete_process(self, process_id: int) -> bool:
        """Removes the process with its items and their quotes"""

    # === Item Operations ===

    @abstractmethod
    async def list_items(self, process_id: int) -> List[Dict[str, Any]]:
        """Ordered by item_number"""

    @abstractmethod
    async def get_item(self, item_id: int) -> Optional[Dict[str, Any]]:
        ...

    @abstractmethod
    async def create_item(self, process_id: int, data: Dict[str, Any]) -> Optional[int]:
        """None when the process does not exist"""

    @abstractmethod
    async def create_items_batch(self, process_id: int, items: List[Dict[str, Any]]) -> Optional[List[int]]:
        """All items or none; None when the process does not exist"""

    @abstractmethod
    async def update_item(self, item_id: int, data: Dict[str, Any]) -> bool:
        ...

    @abstractmethod
    async def delete_item(self, item_id: int) -> bool:
        ...

    @abstractmethod
    async def reorder_items(self, orders: List[Dict[str, int]]) -> List[int]:
        """
        Apply {id, item_number} pairs in one transaction.

        Returns the ids that do not exist; when that list is not empty
        nothing was changed.
        """

    @abstractmethod
    async def set_pricing_strategy(self, process_id: int, strategy: str) -> int:
        """Number of items updated"""

    # === Quote Operations ===

    @abstractmethod
    async def list_quotes(self, item_id: int) -> List[Dict[str, Any]]:
        """Most recent quote date first"""

    @abstractmethod
    async def list_quotes_for_process(self, process_id: int) -> Dict[int, List[Dict[str, Any]]]:
        """Quotes of every item of a process keyed by item id"""

    @abstractmethod
    async def get_quote(self, quote_id: int) -> Optional[Dict[str, Any]]:
        ...

    @abstractmethod
    async def create_quote(self, item_id: int, data: Dict[str, Any]) -> Optional[int]:
        ...

    @abstractmethod
    async def create_quotes_batch(self, item_id: int, quotes: List[Dict[str, Any]]) -> Optional[List[int]]:
        ...

    @abstractmethod
    async def update_quote(self, quote_id: int, data: Dict[str, Any]) -> bool:
        ...

    @abstractmethod
    async def delete_quote(self, quote_id: int) -> bool:
        ...

    # === Reporting ===

    @abstractmethod
    async def list_history(self) -> List[Dict[str, Any]]:
        """Every item joined with its process, newest process first"""

    @abstractmethod
    async def get_storage_statistics(self) -> Dict[str, Any]:
        ...
