"""
Storage protocol for the vault corpus.

The pipeline only needs a key-value style contract: read everything, upsert
one item, upsert many, delete by id. Implementations can be backed by a
remote HTTP key-value service, Redis, a SQL database or plain memory.
"""

from typing import List, Protocol

from typing_extensions import runtime_checkable

from mind_vault.models import VaultItem


@runtime_checkable
class VaultStore(Protocol):
    """
    Protocol for vault item storage.

    Every method may raise TransportError. Callers do not retry.
    """

    async def get_all(self) -> List[VaultItem]:
        """
        Load the whole corpus.

        Returns:
            All items, most recently created first
        """
        ...

    async def put(self, item: VaultItem) -> None:
        """
        Insert or overwrite a single item by id.

        Args:
            item: The item to store
        """
        ...

    async def put_batch(self, items: List[VaultItem]) -> None:
        """
        Upsert several items by id, merging into the existing corpus.

        Args:
            items: Items to store; items whose id exists replace the old record
        """
        ...

    async def delete(self, item_id: str) -> None:
        """
        Delete an item. Deleting an unknown id is not an error.

        Args:
            item_id: Id of the item to remove
        """
        ...
