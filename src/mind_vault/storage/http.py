"""
HTTP key-value backend client.

Talks to the vault worker API: the whole corpus lives under one key on the
server and is read and upserted through four endpoints:

    GET    /items          -> list of items
    POST   /items          -> upsert one item
    POST   /batch_items    -> upsert a list of items
    DELETE /items/{id}     -> delete one item

Requests carry ``Authorization: Bearer <token>``.
"""

import logging
from typing import Any, List, Optional

import httpx
from pydantic import ValidationError

from mind_vault.config import VaultSettings
from mind_vault.errors import TransportError
from mind_vault.models import VaultItem

logger = logging.getLogger(__name__)


class HttpVaultStore:
    """
    VaultStore backed by the remote worker API.

    Example:
        >>> store = HttpVaultStore("https://vault.example.workers.dev", "secret")
        >>> items = await store.get_all()
    """

    def __init__(
        self,
        endpoint: str,
        auth_token: str,
        timeout: float = 30.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        """
        Initialize the HTTP store.

        Args:
            endpoint: Base URL of the worker (trailing slash is ignored)
            auth_token: Bearer token expected by the worker
            timeout: Request timeout in seconds
            client: Pre-built client, mainly for tests (base_url and headers are the caller's)
        """
        self.endpoint = endpoint.rstrip("/")
        self._client = client or httpx.AsyncClient(
            base_url=self.endpoint,
            headers={"Authorization": f"Bearer {auth_token}"},
            timeout=timeout,
        )

        logger.info(f"HttpVaultStore initialized (endpoint={self.endpoint})")

    @classmethod
    def from_settings(cls, settings: VaultSettings) -> "HttpVaultStore":
        if not settings.api_endpoint:
            raise ValueError("VaultSettings.api_endpoint is required for HttpVaultStore")
        return cls(settings.api_endpoint, settings.auth_token or "", timeout=settings.timeout)

    async def _request(self, method: str, path: str, json: Any = None) -> httpx.Response:
        try:
            response = await self._client.request(method, path, json=json)
            response.raise_for_status()
            return response
        except httpx.HTTPStatusError as e:
            logger.error(f"{method} {path} failed: {e.response.status_code} {e.response.text}")
            raise TransportError(
                f"Vault backend rejected {method} {path}: {e.response.status_code}"
            ) from e
        except httpx.HTTPError as e:
            logger.error(f"{method} {path} failed: {e}")
            raise TransportError(f"Vault backend unreachable: {e}") from e

    async def verify_connection(self) -> bool:
        """
        Check the endpoint and token.

        Returns:
            True if the backend answered and accepted the token, False on 401

        Raises:
            TransportError: If the backend cannot be reached or fails otherwise
        """
        try:
            await self._request("GET", "/items")
        except TransportError as e:
            cause = e.__cause__
            if isinstance(cause, httpx.HTTPStatusError) and cause.response.status_code == 401:
                logger.warning("Vault backend rejected the auth token")
                return False
            raise
        return True

    async def get_all(self) -> List[VaultItem]:
        response = await self._request("GET", "/items")
        try:
            data = response.json()
        except ValueError as e:
            raise TransportError("Vault backend returned invalid JSON") from e
        if not isinstance(data, list):
            raise TransportError("Vault backend returned a non-list corpus")

        try:
            items = [VaultItem.model_validate(record) for record in data]
        except ValidationError as e:
            raise TransportError(f"Vault backend returned malformed items: {e}") from e
        items.sort(key=lambda i: i.created_at, reverse=True)
        logger.debug(f"Loaded {len(items)} items from {self.endpoint}")
        return items

    async def put(self, item: VaultItem) -> None:
        await self._request("POST", "/items", json=item.to_wire())
        logger.debug(f"Stored item {item.id}")

    async def put_batch(self, items: List[VaultItem]) -> None:
        await self._request("POST", "/batch_items", json=[item.to_wire() for item in items])
        logger.debug(f"Stored batch of {len(items)} items")

    async def delete(self, item_id: str) -> None:
        await self._request("DELETE", f"/items/{item_id}")
        logger.debug(f"Deleted item {item_id}")

    async def aclose(self):
        await self._client.aclose()
