import uuid
import time
from dataclasses import dataclass, field
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

ItemType = Literal["link", "note", "snippet"]


def generate_id() -> str:
    return str(uuid.uuid4())


def now_ms() -> int:
    """Current time as epoch milliseconds."""
    return int(time.time() * 1000)


def dedupe_tags(tags: List[str]) -> List[str]:
    """Drop repeated tags, keeping the first occurrence of each."""
    seen = set()
    result = []
    for tag in tags:
        if tag in seen:
            continue
        seen.add(tag)
        result.append(tag)
    return result


class VaultItem(BaseModel):
    """A single vault record: a link, a note or a code snippet."""

    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(default_factory=generate_id, description="Opaque identifier, immutable")
    type: ItemType
    content: str = Field(..., description="URL for links, free text otherwise")
    title: str
    summary: Optional[str] = Field(
        default=None, description="Short description; empty string differs from absent"
    )
    tags: List[str] = Field(default_factory=list)
    created_at: int = Field(
        default_factory=now_ms, alias="createdAt", description="Creation time (epoch ms)"
    )

    @field_validator("tags")
    @classmethod
    def _collapse_duplicate_tags(cls, tags: List[str]) -> List[str]:
        return dedupe_tags(tags)

    def to_wire(self) -> dict:
        """Serialise with the field names the storage backends expect."""
        return self.model_dump(by_alias=True)


class AnalysisResult(BaseModel):
    """Output contract of the content-analysis collaborator."""

    title: str
    summary: str
    tags: List[str]
    type: ItemType


def apply_analysis(item: VaultItem, analysis: AnalysisResult) -> VaultItem:
    """Return a copy of item with the analysed fields overlaid."""
    return item.model_copy(
        update={
            "title": analysis.title,
            "summary": analysis.summary,
            "tags": dedupe_tags(analysis.tags),
            "type": analysis.type,
        }
    )


@dataclass(frozen=True)
class ConflictEntry:
    """An imported link whose URL already exists in the corpus."""

    new_item: VaultItem
    existing: VaultItem


@dataclass
class ImportBatch:
    """
    Parsed items split by duplicate detection.

    Exists only for the duration of one import.

    Attributes:
        ready_to_import: Items with no conflict, written straight away
        conflicts: Items colliding with an existing link, in parse order
    """

    ready_to_import: list[VaultItem] = field(default_factory=list)
    conflicts: list[ConflictEntry] = field(default_factory=list)


@dataclass
class BatchWriteResult:
    written: int = 0
    chunks: int = 0


@dataclass
class ImportReport:
    """
    Counts for one import operation.

    Attributes:
        parsed: Items produced by the format parser
        imported: Conflict-free items written by the batch writer
        conflicts: Items queued for conflict resolution
        kept: Conflicting items written after a "keep" decision
        skipped: Conflicting items discarded ("skip" or "skip-all")
        failed: Items not written because a write failed
    """

    parsed: int = 0
    imported: int = 0
    conflicts: int = 0
    kept: int = 0
    skipped: int = 0
    failed: int = 0


@dataclass(frozen=True)
class EnrichmentProgress:
    completed: int
    total: int


@dataclass
class EnrichmentReport:
    """
    Counts for one enrichment sweep.

    Attributes:
        total: Items in the target set
        analyzed: Items updated from a successful analysis
        unchanged: Items that did not need analysis
        failed: Items whose analysis failed (passed through unchanged)
        written: Items written back to storage
        cancelled: Whether the sweep stopped before the last window
    """

    total: int = 0
    analyzed: int = 0
    unchanged: int = 0
    failed: int = 0
    written: int = 0
    cancelled: bool = False
