"""
Chunked batch writer.

Large writes are split into fixed-size chunks sent one after another, which
bounds the payload of each request. There is no rollback: when a chunk
fails, the chunks before it stay committed and the ones after it are never
sent.
"""

import logging
from typing import List

from mind_vault.errors import BatchWriteError
from mind_vault.models import BatchWriteResult, VaultItem
from mind_vault.storage.protocols import VaultStore

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 50


def chunked(items: List[VaultItem], size: int) -> List[List[VaultItem]]:
    return [items[i : i + size] for i in range(0, len(items), size)]


class BatchWriter:
    """Persists item lists through VaultStore.put_batch in sequential chunks."""

    def __init__(self, store: VaultStore, chunk_size: int = DEFAULT_CHUNK_SIZE):
        """
        Initialize the batch writer.

        Args:
            store: Storage backend
            chunk_size: Maximum number of items per put_batch call
        """
        if chunk_size < 1:
            raise ValueError("chunk_size must be at least 1")

        self.store = store
        self.chunk_size = chunk_size

        logger.info(f"BatchWriter initialized (chunk_size={chunk_size})")

    async def write(self, items: List[VaultItem]) -> BatchWriteResult:
        """
        Write items chunk by chunk, awaiting each chunk before the next.

        Args:
            items: Items to persist

        Returns:
            BatchWriteResult with the number of items and chunks written

        Raises:
            BatchWriteError: If a chunk fails; carries how much was written
        """
        result = BatchWriteResult()
        chunks = chunked(items, self.chunk_size)

        for index, chunk in enumerate(chunks):
            try:
                await self.store.put_batch(chunk)
            except Exception as e:
                logger.error(
                    f"Batch write failed on chunk {index + 1}/{len(chunks)} "
                    f"({result.written} items already written): {e}"
                )
                raise BatchWriteError(
                    f"Batch write failed on chunk {index + 1} of {len(chunks)}: {e}",
                    written=result.written,
                    failed_chunk=index,
                ) from e

            result.written += len(chunk)
            result.chunks += 1
            logger.debug(f"Wrote chunk {index + 1}/{len(chunks)} ({len(chunk)} items)")

        if chunks:
            logger.info(f"Batch write complete: {result.written} items in {result.chunks} chunks")
        return result
