"""
Import reconciliation.

Detects imported links that already exist in the corpus and resolves them
one at a time through a conflict queue.
"""

from mind_vault.reconciliation.conflict_queue import (
    ConflictAction,
    ConflictQueue,
    ConflictResolutionSession,
    ConflictTransition,
    QueueState,
)
from mind_vault.reconciliation.duplicate_detector import (
    detect_duplicates,
    find_duplicate_groups,
    find_existing_link,
)

__all__ = [
    "ConflictAction",
    "ConflictQueue",
    "ConflictResolutionSession",
    "ConflictTransition",
    "QueueState",
    "detect_duplicates",
    "find_duplicate_groups",
    "find_existing_link",
]
