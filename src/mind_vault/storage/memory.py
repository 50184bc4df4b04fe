"""
In-memory vault storage.

Suitable for tests and for running the pipeline without a backend.
Data is lost on restart.
"""

import logging
from typing import Dict, List, Optional

from mind_vault.models import VaultItem

logger = logging.getLogger(__name__)


class InMemoryVaultStore:
    """
    In-memory implementation of the VaultStore protocol.

    Items are kept in a dict keyed by id and copied on the way in and out,
    so callers never share instances with the store.
    """

    def __init__(self, items: Optional[List[VaultItem]] = None):
        self._items: Dict[str, VaultItem] = {}
        for item in items or []:
            self._items[item.id] = item.model_copy(deep=True)

        logger.info(f"InMemoryVaultStore initialized ({len(self._items)} items)")

    async def get_all(self) -> List[VaultItem]:
        items = [item.model_copy(deep=True) for item in self._items.values()]
        items.sort(key=lambda i: i.created_at, reverse=True)
        return items

    async def put(self, item: VaultItem) -> None:
        self._items[item.id] = item.model_copy(deep=True)
        logger.debug(f"Stored item {item.id}")

    async def put_batch(self, items: List[VaultItem]) -> None:
        for item in items:
            self._items[item.id] = item.model_copy(deep=True)
        logger.debug(f"Stored batch of {len(items)} items")

    async def delete(self, item_id: str) -> None:
        if self._items.pop(item_id, None) is None:
            logger.debug(f"Delete of unknown item {item_id} ignored")

    def __len__(self) -> int:
        return len(self._items)

    def clear(self):
        """Remove every item from the store."""
        count = len(self._items)
        self._items.clear()
        logger.info(f"Cleared all items ({count} total)")
