"""
Configuration for the vault pipeline and its storage backend.

Pipeline tunables have fixed defaults; backend settings can be read from
MINDVAULT_* environment variables.
"""

import os
from typing import Optional

from pydantic import BaseModel, Field, field_validator

UNTITLED = "Untitled"
UNCATEGORIZED = "Uncategorized"
IMPORTED_GROUP = "Imported"
IMPORTED_BOOKMARKS = "Imported Bookmarks"
MANUALLY_ADDED = "Manually Added"


class PipelineSettings(BaseModel):
    """Tunables for batch writing and enrichment sweeps."""

    chunk_size: int = Field(default=50, ge=1, description="Items per batch write")
    enrichment_window: int = Field(
        default=5, ge=1, description="Analysis calls in flight at once"
    )
    min_summary_length: int = Field(
        default=10, ge=0, description="Summaries shorter than this are re-analysed"
    )
    untitled_title: str = UNTITLED
    uncategorized_tag: str = UNCATEGORIZED


class VaultSettings(BaseModel):
    """Connection settings for the remote key-value backend."""

    api_endpoint: Optional[str] = Field(
        default=None, description="Base URL of the backend; None means use a local store"
    )
    auth_token: Optional[str] = None
    timeout: float = 30.0

    @field_validator("api_endpoint")
    @classmethod
    def _strip_endpoint(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        value = value.strip()
        if value.endswith("/"):
            value = value[:-1]
        return value or None

    @classmethod
    def from_env(cls) -> "VaultSettings":
        timeout = os.getenv("MINDVAULT_TIMEOUT")
        return cls(
            api_endpoint=os.getenv("MINDVAULT_API_ENDPOINT"),
            auth_token=os.getenv("MINDVAULT_AUTH_TOKEN"),
            timeout=float(timeout) if timeout else 30.0,
        )

    @property
    def is_remote(self) -> bool:
        return self.api_endpoint is not None
