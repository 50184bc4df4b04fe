"""
Write execution.

Provides the chunked batch writer used by imports, enrichment sweeps and
tag renames.
"""

from mind_vault.execution.batch_writer import DEFAULT_CHUNK_SIZE, BatchWriter, chunked

__all__ = [
    "BatchWriter",
    "DEFAULT_CHUNK_SIZE",
    "chunked",
]
