"""
Storage protocol and backends for the vault corpus.

Provides the VaultStore protocol and its implementations. Backends with
optional dependencies are only exported when those dependencies are
installed.
"""

from mind_vault.storage.http import HttpVaultStore
from mind_vault.storage.memory import InMemoryVaultStore
from mind_vault.storage.protocols import VaultStore

__all__ = [
    "VaultStore",
    "InMemoryVaultStore",
    "HttpVaultStore",
]

try:
    from mind_vault.storage.redis import RedisVaultStore  # noqa: F401

    __all__.append("RedisVaultStore")
except ImportError:
    pass

try:
    from mind_vault.storage.sqlalchemy import SQLAlchemyVaultStore  # noqa: F401

    __all__.append("SQLAlchemyVaultStore")
except ImportError:
    pass
