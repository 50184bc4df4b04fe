"""
Exception taxonomy for the vault pipeline.

Format errors abort an import before anything is written. Transport errors
come from storage or analysis collaborators and are never retried here.
Analysis failures are always recovered inside the pipeline.
"""

from typing import Optional


class VaultError(Exception):
    """Base class for all vault pipeline errors."""


class FormatError(VaultError):
    """The input document could not be parsed."""


class UnsupportedFormatError(VaultError):
    """The file type is neither a structured export nor a bookmark export."""


class DuplicateDetectionError(VaultError):
    """Duplicate detection received input it cannot classify (programmer error)."""


class ConflictStateError(VaultError):
    """A conflict action was issued while no conflict is being presented."""


class TransportError(VaultError):
    """A storage or analysis collaborator failed."""


class BatchWriteError(TransportError):
    """
    A chunk of a batch write failed.

    Chunks written before the failure stay committed.

    Attributes:
        written: Number of items persisted before the failing chunk
        failed_chunk: Zero-based index of the chunk that failed
    """

    def __init__(self, message: str, written: int, failed_chunk: int):
        super().__init__(message)
        self.written = written
        self.failed_chunk = failed_chunk


class AnalysisFailure(VaultError):
    """Content analysis failed for a single item."""

    def __init__(self, message: str, content: Optional[str] = None):
        super().__init__(message)
        self.content = content
