"""
Enrichment sweep coordinator.

Runs the content analyzer across a target set in fixed-size windows. Calls
inside a window run concurrently; windows run one after another, so at most
``window_size`` analysis calls are in flight. Items that already look
annotated are passed through without a call, and a failed call passes its
item through unchanged. Once the sweep ends the processed items are batch
written and the corpus is reloaded once.
"""

import asyncio
import logging
from typing import Awaitable, Callable, List, Optional

from mind_vault.config import PipelineSettings
from mind_vault.enrichment.protocol import ContentAnalyzer
from mind_vault.execution.batch_writer import BatchWriter
from mind_vault.models import EnrichmentProgress, EnrichmentReport, VaultItem, apply_analysis

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[EnrichmentProgress], None]


def needs_enrichment(item: VaultItem, settings: Optional[PipelineSettings] = None) -> bool:
    """
    Whether an item looks unannotated.

    True when the summary is absent or short, the item carries the
    placeholder tag, or its title is the placeholder title.
    """
    settings = settings or PipelineSettings()
    return (
        not item.summary
        or len(item.summary) < settings.min_summary_length
        or settings.uncategorized_tag in item.tags
        or item.title == settings.untitled_title
    )


class EnrichmentCoordinator:
    """Concurrency-windowed analysis sweep over a set of items."""

    def __init__(
        self,
        analyzer: ContentAnalyzer,
        writer: BatchWriter,
        settings: Optional[PipelineSettings] = None,
    ):
        """
        Initialize the coordinator.

        Args:
            analyzer: Content-analysis collaborator
            writer: Batch writer used to persist the sweep
            settings: Window size and eligibility thresholds
        """
        self.analyzer = analyzer
        self.writer = writer
        self.settings = settings or PipelineSettings()

        logger.info(
            f"EnrichmentCoordinator initialized (window={self.settings.enrichment_window}, "
            f"min_summary_length={self.settings.min_summary_length})"
        )

    async def _enrich_one(self, item: VaultItem) -> tuple[VaultItem, str]:
        if not needs_enrichment(item, self.settings):
            return item, "unchanged"

        try:
            analysis = await self.analyzer.analyze(item.content)
        except Exception as e:
            logger.warning(f"Analysis failed for item {item.id}, keeping it unchanged: {e}")
            return item, "failed"

        return apply_analysis(item, analysis), "analyzed"

    async def run(
        self,
        items: List[VaultItem],
        on_progress: Optional[ProgressCallback] = None,
        cancel_event: Optional[asyncio.Event] = None,
        on_complete: Optional[Callable[[], Awaitable[object]]] = None,
    ) -> EnrichmentReport:
        """
        Sweep the analyzer over items and persist the result.

        Args:
            items: Target set, in the order items should be processed
            on_progress: Called after every window with completed/total counts
            cancel_event: When set, remaining windows are abandoned; items from
                finished windows are still written
            on_complete: Awaited once after the write (corpus reload)

        Returns:
            EnrichmentReport with per-outcome counts

        Raises:
            BatchWriteError: If persisting the sweep fails
        """
        total = len(items)
        window_size = self.settings.enrichment_window
        report = EnrichmentReport(total=total)
        processed: List[VaultItem] = []

        for start in range(0, total, window_size):
            if cancel_event is not None and cancel_event.is_set():
                report.cancelled = True
                logger.info(f"Enrichment cancelled after {len(processed)}/{total} items")
                break

            window = items[start : start + window_size]
            results = await asyncio.gather(*(self._enrich_one(item) for item in window))

            for item, outcome in results:
                processed.append(item)
                if outcome == "analyzed":
                    report.analyzed += 1
                elif outcome == "failed":
                    report.failed += 1
                else:
                    report.unchanged += 1

            if on_progress is not None:
                on_progress(EnrichmentProgress(completed=len(processed), total=total))

        write_result = await self.writer.write(processed)
        report.written = write_result.written

        if on_complete is not None:
            await on_complete()

        logger.info(
            f"Enrichment sweep finished: analyzed={report.analyzed}, "
            f"unchanged={report.unchanged}, failed={report.failed}, "
            f"written={report.written}, cancelled={report.cancelled}"
        )
        return report
