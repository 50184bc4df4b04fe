import asyncio
import logging
import re
from typing import List, Optional, Union
from urllib.parse import urlparse

from mind_vault.config import MANUALLY_ADDED, PipelineSettings
from mind_vault.enrichment import ContentAnalyzer, EnrichmentCoordinator, fallback_analysis
from mind_vault.enrichment.coordinator import ProgressCallback
from mind_vault.errors import AnalysisFailure, BatchWriteError, ConflictStateError
from mind_vault.execution import BatchWriter
from mind_vault.models import (
    EnrichmentReport,
    ImportReport,
    VaultItem,
    apply_analysis,
)
from mind_vault.parsers import parse_import
from mind_vault.reconciliation import (
    ConflictAction,
    ConflictQueue,
    ConflictResolutionSession,
    ConflictTransition,
    detect_duplicates,
    find_duplicate_groups,
)
from mind_vault.storage import VaultStore
from mind_vault.tags import TagPropagator

logger = logging.getLogger(__name__)

URL_PATTERN = re.compile(r"^https?://", re.IGNORECASE)


def filter_items(
    items: List[VaultItem], search: Optional[str] = None, tag: Optional[str] = None
) -> List[VaultItem]:
    """Items carrying ``tag`` whose title, tags or summary contain ``search`` (case-insensitive)."""
    result = items
    if tag:
        result = [i for i in result if tag in i.tags]
    if search:
        lower = search.lower()
        result = [
            i
            for i in result
            if lower in i.title.lower()
            or any(lower in t.lower() for t in i.tags)
            or (i.summary and lower in i.summary.lower())
        ]
    return result


def heuristic_title(content: str) -> str:
    """Title for a manually added item: the host of a URL, else the first line."""
    if URL_PATTERN.match(content):
        host = urlparse(content).hostname
        return host or content[:30]

    title = content.split("\n")[0][:20]
    if len(title) < len(content):
        title += "..."
    return title


class VaultService:
    """
    Session object for one vault: holds the in-memory corpus and runs the
    import, reconciliation, enrichment and tagging operations against a store.

    Operations must be serialised by the caller; two running at once can
    overwrite each other's changes.
    """

    def __init__(
        self,
        store: VaultStore,
        analyzer: Optional[ContentAnalyzer] = None,
        settings: Optional[PipelineSettings] = None,
    ):
        self.store = store
        self.analyzer = analyzer
        self.settings = settings or PipelineSettings()
        self.writer = BatchWriter(store, chunk_size=self.settings.chunk_size)
        self.tags = TagPropagator(store, self.writer, on_complete=self.reload)
        self.items: List[VaultItem] = []
        self.conflict_session: Optional[ConflictResolutionSession] = None

    async def load(self) -> List[VaultItem]:
        """Replace the in-memory corpus with the store's, newest first."""
        items = await self.store.get_all()
        items.sort(key=lambda i: i.created_at, reverse=True)
        self.items = items
        logger.debug(f"Loaded {len(items)} items")
        return items

    async def reload(self) -> List[VaultItem]:
        return await self.load()

    def filter_items(self, search: Optional[str] = None, tag: Optional[str] = None) -> List[VaultItem]:
        return filter_items(self.items, search=search, tag=tag)

    # --- Import ---

    async def import_items(self, items: List[VaultItem]) -> ConflictResolutionSession:
        """
        Import parsed items: write the conflict-free ones, queue the rest.

        Returns:
            The conflict session. It is already finished (and the corpus
            reloaded) when there were no conflicts.

        Raises:
            BatchWriteError: If writing the conflict-free items fails
        """
        batch = detect_duplicates(items, self.items)
        report = ImportReport(parsed=len(items), conflicts=len(batch.conflicts))

        try:
            result = await self.writer.write(batch.ready_to_import)
        except BatchWriteError as e:
            report.imported = e.written
            report.failed = len(batch.ready_to_import) - e.written
            logger.error(f"Import aborted: {report}")
            raise
        report.imported = result.written

        session = ConflictResolutionSession(
            queue=ConflictQueue(tuple(batch.conflicts)),
            store=self.store,
            on_complete=self.reload,
            report=report,
        )

        if session.active:
            self.conflict_session = session
            logger.info(
                f"Imported {report.imported} items, {report.conflicts} conflicts awaiting resolution"
            )
        else:
            self.conflict_session = None
            await self.reload()
            session.completion_message = f"Imported {report.imported} items"
            logger.info(session.completion_message)

        return session

    async def import_file(
        self, filename: str, text: str, content_type: Optional[str] = None
    ) -> ConflictResolutionSession:
        """
        Parse an export file and import it.

        Raises:
            UnsupportedFormatError: If the file type is not supported
            FormatError: If the file cannot be parsed (nothing is written)
            BatchWriteError: If writing fails part way
        """
        items = parse_import(filename, text, content_type)
        return await self.import_items(items)

    async def resolve_conflict(self, action: Union[ConflictAction, str]) -> ConflictTransition:
        """
        Resolve the conflict currently presented by the active import.

        Args:
            action: "keep", "skip" or "skip-all"
        """
        if self.conflict_session is None:
            raise ConflictStateError("No import conflicts are pending")

        transition = await self.conflict_session.resolve(action)
        if not self.conflict_session.active:
            self.conflict_session = None
        return transition

    # --- Single items ---

    async def save_item(self, item: VaultItem) -> VaultItem:
        await self.store.put(item)
        await self.reload()
        return item

    async def delete_items(self, item_ids: List[str]):
        for item_id in item_ids:
            await self.store.delete(item_id)
        removed = set(item_ids)
        self.items = [i for i in self.items if i.id not in removed]
        logger.info(f"Deleted {len(item_ids)} items")

    async def add_content(self, content: str, analyze: bool = False) -> VaultItem:
        """
        Create an item from raw content and save it.

        With ``analyze`` the analyzer fills in title, summary, tags and type,
        falling back to heuristics if it fails. Without it a title is derived
        from the content and the item is tagged as manually added.
        """
        content = content.strip()
        if not content:
            raise ValueError("Content must not be empty")

        if analyze and self.analyzer is not None:
            try:
                analysis = await self.analyzer.analyze(content)
            except Exception as e:
                logger.warning(f"Analysis failed for new item, using fallback: {e}")
                analysis = fallback_analysis(content)
            item = VaultItem(
                content=content,
                title=analysis.title,
                summary=analysis.summary,
                tags=analysis.tags,
                type=analysis.type,
            )
        else:
            item = VaultItem(
                content=content,
                title=heuristic_title(content),
                summary="",
                tags=[MANUALLY_ADDED],
                type="link" if URL_PATTERN.match(content) else "note",
            )

        return await self.save_item(item)

    async def reanalyze_item(self, item: VaultItem) -> tuple[VaultItem, bool]:
        """
        Re-run analysis on one item and save the result.

        Returns:
            (item, True) when updated, or the unchanged item and False when
            analysis failed
        """
        if self.analyzer is None:
            raise AnalysisFailure("No content analyzer configured", content=item.content)

        try:
            analysis = await self.analyzer.analyze(item.content)
        except Exception as e:
            logger.warning(f"Re-analysis of item {item.id} failed: {e}")
            return item, False

        updated = apply_analysis(item, analysis)
        await self.save_item(updated)
        return updated, True

    # --- Enrichment ---

    async def batch_analyze(
        self,
        search: Optional[str] = None,
        tag: Optional[str] = None,
        on_progress: Optional[ProgressCallback] = None,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> EnrichmentReport:
        """
        Enrich the filtered view, or the whole corpus when no filter is active.
        """
        if self.analyzer is None:
            raise AnalysisFailure("No content analyzer configured")

        if search or tag:
            targets = self.filter_items(search=search, tag=tag)
        else:
            targets = list(self.items)

        coordinator = EnrichmentCoordinator(self.analyzer, self.writer, self.settings)
        return await coordinator.run(
            targets,
            on_progress=on_progress,
            cancel_event=cancel_event,
            on_complete=self.reload,
        )

    # --- Tags ---

    async def assign_tag(self, item_id: str, tag: str) -> bool:
        item = next((i for i in self.items if i.id == item_id), None)
        if item is None:
            logger.warning(f"Cannot tag item {item_id}: not loaded")
            return False
        return await self.tags.assign_tag(item, tag)

    async def rename_tag(self, old_tag: str, new_tag: str) -> List[VaultItem]:
        return await self.tags.rename_tag(self.items, old_tag, new_tag)

    # --- Cleanup ---

    async def remove_duplicates(self) -> List[str]:
        """
        Delete every link that repeats an older link's URL.

        Returns:
            Ids of the deleted items
        """
        to_delete = [
            item.id for group in find_duplicate_groups(self.items) for item in group[1:]
        ]
        if to_delete:
            await self.delete_items(to_delete)
        return to_delete
