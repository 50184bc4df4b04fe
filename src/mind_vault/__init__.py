"""
mind-vault: personal content vault with file import, duplicate reconciliation
and AI enrichment.

Core components:
- parsers: structured JSON export and browser bookmark export parsers
- reconciliation: exact-URL duplicate detection and the conflict queue
- execution: chunked batch writer
- enrichment: content analysis and concurrency-windowed enrichment sweeps
- tags: tag assignment and corpus-wide rename
- storage: VaultStore protocol and backends (memory, HTTP, Redis, SQL)
- models: core data models (VaultItem, ConflictEntry, reports)
"""

__version__ = "0.1.0"

from mind_vault.config import PipelineSettings, VaultSettings
from mind_vault.errors import (
    AnalysisFailure,
    BatchWriteError,
    ConflictStateError,
    DuplicateDetectionError,
    FormatError,
    TransportError,
    UnsupportedFormatError,
    VaultError,
)
from mind_vault.models import (
    AnalysisResult,
    ConflictEntry,
    EnrichmentProgress,
    EnrichmentReport,
    ImportBatch,
    ImportReport,
    VaultItem,
)
from mind_vault.vault_service import VaultService

__all__ = [
    "__version__",
    # Models
    "VaultItem",
    "AnalysisResult",
    "ConflictEntry",
    "ImportBatch",
    "ImportReport",
    "EnrichmentProgress",
    "EnrichmentReport",
    # Config
    "PipelineSettings",
    "VaultSettings",
    # Errors
    "VaultError",
    "FormatError",
    "UnsupportedFormatError",
    "DuplicateDetectionError",
    "ConflictStateError",
    "TransportError",
    "BatchWriteError",
    "AnalysisFailure",
    "VaultService",
]
