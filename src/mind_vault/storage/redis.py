"""
Redis vault storage implementation.

Keeps the corpus in a single Redis hash (item id -> item JSON), which gives
the same upsert-by-id semantics as the HTTP key-value backend.
"""

import logging
from typing import List

from pydantic import ValidationError

from mind_vault.errors import TransportError
from mind_vault.models import VaultItem

try:
    import redis.asyncio as aioredis
    from redis.exceptions import RedisError
except ImportError:
    aioredis = None  # type: ignore
    RedisError = Exception  # type: ignore

logger = logging.getLogger(__name__)


class RedisVaultStore:
    """
    Redis implementation of the VaultStore protocol.

    Survives restarts and can be shared by several processes, although the
    pipeline itself assumes one operation at a time.
    """

    def __init__(
        self,
        host: str = "localhost",
        port: int = 6379,
        db: int = 0,
        key: str = "mindvault:items",
    ):
        """
        Initialize the Redis store.

        Args:
            host: Redis host
            port: Redis port
            db: Redis database number
            key: Name of the hash holding the corpus
        """
        if aioredis is None:
            raise ImportError(
                "redis package is required for RedisVaultStore. "
                "Install with: pip install mind-vault[redis]"
            )

        self.client = aioredis.Redis(host=host, port=port, db=db, decode_responses=True)
        self._key = key

        logger.info(f"RedisVaultStore initialized (host={host}:{port}, key={key})")

    async def ping(self) -> bool:
        try:
            return await self.client.ping()
        except RedisError as e:
            logger.error(f"Failed to connect to Redis: {e}")
            raise TransportError(f"Redis unreachable: {e}") from e

    async def get_all(self) -> List[VaultItem]:
        try:
            records = await self.client.hvals(self._key)
        except RedisError as e:
            raise TransportError(f"Redis read failed: {e}") from e

        items = []
        for record in records:
            try:
                items.append(VaultItem.model_validate_json(record))
            except ValidationError as e:
                logger.warning(f"Failed to deserialize item: {e}")
                continue

        items.sort(key=lambda i: i.created_at, reverse=True)
        return items

    async def put(self, item: VaultItem) -> None:
        try:
            await self.client.hset(self._key, item.id, item.model_dump_json(by_alias=True))
        except RedisError as e:
            raise TransportError(f"Redis write failed: {e}") from e
        logger.debug(f"Stored item {item.id}")

    async def put_batch(self, items: List[VaultItem]) -> None:
        if not items:
            return
        mapping = {item.id: item.model_dump_json(by_alias=True) for item in items}
        try:
            await self.client.hset(self._key, mapping=mapping)
        except RedisError as e:
            raise TransportError(f"Redis batch write failed: {e}") from e
        logger.debug(f"Stored batch of {len(items)} items")

    async def delete(self, item_id: str) -> None:
        try:
            await self.client.hdel(self._key, item_id)
        except RedisError as e:
            raise TransportError(f"Redis delete failed: {e}") from e
        logger.debug(f"Deleted item {item_id}")

    async def clear(self) -> int:
        """Delete the whole corpus. Returns the number of items removed."""
        count = await self.client.hlen(self._key)
        await self.client.delete(self._key)
        logger.info(f"Cleared {count} items from {self._key}")
        return count

    async def aclose(self):
        await self.client.aclose()
