"""
Exact-URL duplicate detection for imports.

Only link items are checked, and only by exact, case-sensitive comparison of
their content against existing link items. Notes and snippets never
conflict. The scan is linear per item, which is fine at personal scale.
"""

import logging
from collections import defaultdict
from typing import Dict, List, Optional

from mind_vault.errors import DuplicateDetectionError
from mind_vault.models import ConflictEntry, ImportBatch, VaultItem

logger = logging.getLogger(__name__)


def find_existing_link(item: VaultItem, corpus: List[VaultItem]) -> Optional[VaultItem]:
    """First link in the corpus whose content equals the item's, if any."""
    for existing in corpus:
        if existing.type == "link" and existing.content == item.content:
            return existing
    return None


def detect_duplicates(items: List[VaultItem], corpus: List[VaultItem]) -> ImportBatch:
    """
    Split freshly parsed items into conflict-free items and conflicts.

    Args:
        items: Parsed items awaiting import
        corpus: Current in-memory corpus

    Returns:
        ImportBatch; both lists keep the order of ``items``

    Raises:
        DuplicateDetectionError: If an input is not a VaultItem
    """
    batch = ImportBatch()

    for item in items:
        if not isinstance(item, VaultItem):
            raise DuplicateDetectionError(
                f"Expected VaultItem, got {type(item).__name__}"
            )

        if item.type != "link":
            batch.ready_to_import.append(item)
            continue

        existing = find_existing_link(item, corpus)
        if existing is None:
            batch.ready_to_import.append(item)
        else:
            logger.debug(f"Import conflict: {item.content} already stored as {existing.id}")
            batch.conflicts.append(ConflictEntry(new_item=item, existing=existing))

    logger.info(
        f"Duplicate detection: {len(batch.ready_to_import)} ready, "
        f"{len(batch.conflicts)} conflicts (corpus={len(corpus)})"
    )
    return batch


def find_duplicate_groups(corpus: List[VaultItem]) -> List[List[VaultItem]]:
    """
    Group link items that share the same URL.

    Returns:
        Groups of two or more links, each sorted oldest first, ordered by
        the first appearance of the URL in the corpus
    """
    by_content: Dict[str, List[VaultItem]] = defaultdict(list)
    for item in corpus:
        if item.type == "link":
            by_content[item.content].append(item)

    groups = [
        sorted(group, key=lambda i: i.created_at)
        for group in by_content.values()
        if len(group) > 1
    ]
    logger.info(f"Found {len(groups)} duplicate link groups")
    return groups
