"""
Tag propagation: adding a tag to one item and renaming a tag across the corpus.

Both operations write their changes and then reload the corpus.
"""

import logging
from typing import Awaitable, Callable, List, Optional

from mind_vault.execution.batch_writer import BatchWriter
from mind_vault.models import VaultItem
from mind_vault.storage.protocols import VaultStore

logger = logging.getLogger(__name__)


def replace_tag(tags: List[str], old_tag: str, new_tag: str) -> List[str]:
    """
    Replace old_tag with new_tag in place.

    new_tag takes the position of old_tag. Any other copy of new_tag is
    dropped, so the tag ends up exactly where old_tag was.
    """
    if old_tag not in tags:
        return list(tags)

    result: List[str] = []
    for tag in tags:
        if tag == old_tag:
            if new_tag not in result:
                result.append(new_tag)
        elif tag != new_tag:
            result.append(tag)
    return result


class TagPropagator:
    """Applies tag changes to stored items."""

    def __init__(
        self,
        store: VaultStore,
        writer: BatchWriter,
        on_complete: Optional[Callable[[], Awaitable[object]]] = None,
    ):
        """
        Args:
            store: Storage backend for single-item writes
            writer: Batch writer for renames
            on_complete: Awaited after each successful change (corpus reload)
        """
        self.store = store
        self.writer = writer
        self.on_complete = on_complete

    async def _finish(self):
        if self.on_complete is not None:
            await self.on_complete()

    async def assign_tag(self, item: VaultItem, tag: str) -> bool:
        """
        Add a tag to a single item.

        Returns:
            True if the item was changed and written, False if it already had the tag
        """
        if tag in item.tags:
            logger.debug(f"Item {item.id} already tagged {tag!r}")
            return False

        updated = item.model_copy(update={"tags": [*item.tags, tag]})
        await self.store.put(updated)
        logger.info(f"Tagged item {item.id} with {tag!r}")
        await self._finish()
        return True

    async def rename_tag(self, corpus: List[VaultItem], old_tag: str, new_tag: str) -> List[VaultItem]:
        """
        Rename a tag on every item that carries it.

        Args:
            corpus: Items to scan
            old_tag: Tag to replace
            new_tag: Replacement tag

        Returns:
            The updated items that were written

        Raises:
            ValueError: If new_tag is blank
            BatchWriteError: If writing the changed items fails
        """
        new_tag = new_tag.strip() if new_tag else ""
        if not new_tag:
            raise ValueError("New tag name must not be empty")
        if old_tag == new_tag:
            return []

        changed = [
            item.model_copy(update={"tags": replace_tag(item.tags, old_tag, new_tag)})
            for item in corpus
            if old_tag in item.tags
        ]
        if not changed:
            logger.info(f"No items tagged {old_tag!r}, nothing to rename")
            return []

        await self.writer.write(changed)
        logger.info(f"Renamed tag {old_tag!r} to {new_tag!r} on {len(changed)} items")
        await self._finish()
        return changed
