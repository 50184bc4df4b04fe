"""
Conflict resolution queue.

Conflicting imports are presented one at a time. ``ConflictQueue`` is the
pure state machine: ``resolve(action)`` returns the next queue and the side
effects the caller must perform. ``ConflictResolutionSession`` performs them
against a store and reloads the corpus once, when the queue runs empty.

"keep" writes the imported item by its own id. The existing item with the
same URL has a different id, so it is left in place and both end up in the
corpus.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Awaitable, Callable, Optional, Union

from mind_vault.errors import ConflictStateError
from mind_vault.models import ConflictEntry, ImportReport, VaultItem
from mind_vault.storage.protocols import VaultStore

logger = logging.getLogger(__name__)


class ConflictAction(str, Enum):
    KEEP = "keep"
    SKIP = "skip"
    SKIP_ALL = "skip-all"


class QueueState(str, Enum):
    IDLE = "idle"
    PRESENTING = "presenting"


@dataclass(frozen=True)
class ConflictTransition:
    """
    Result of resolving the head of a queue.

    Attributes:
        action: The action that was applied
        entry: The entry that was presented when the action was issued
        queue: The queue after the transition
        write: Item to persist with a single-item write, if any
        discarded: Entries dropped without writing
        completed: True when this transition emptied the queue
    """

    action: ConflictAction
    entry: ConflictEntry
    queue: "ConflictQueue"
    write: Optional[VaultItem] = None
    discarded: tuple[ConflictEntry, ...] = ()
    completed: bool = False

    @property
    def reload(self) -> bool:
        """Whether the corpus must be reloaded after this transition."""
        return self.completed


@dataclass(frozen=True)
class ConflictQueue:
    """FIFO queue of conflicts; the head is the entry being presented."""

    entries: tuple[ConflictEntry, ...] = ()

    @property
    def state(self) -> QueueState:
        return QueueState.PRESENTING if self.entries else QueueState.IDLE

    @property
    def head(self) -> Optional[ConflictEntry]:
        return self.entries[0] if self.entries else None

    @property
    def remaining(self) -> int:
        """Entries waiting behind the head."""
        return max(0, len(self.entries) - 1)

    def __len__(self) -> int:
        return len(self.entries)

    def resolve(self, action: Union[ConflictAction, str]) -> ConflictTransition:
        """
        Apply an action to the head of the queue.

        Args:
            action: ConflictAction or its string value ("keep", "skip", "skip-all")

        Returns:
            ConflictTransition describing the next queue and side effects

        Raises:
            ConflictStateError: If the queue is empty
            ValueError: If the action is unknown
        """
        action = ConflictAction(action)
        if not self.entries:
            raise ConflictStateError("No conflict is being presented")

        current = self.entries[0]

        if action is ConflictAction.SKIP_ALL:
            return ConflictTransition(
                action=action,
                entry=current,
                queue=ConflictQueue(),
                discarded=self.entries,
                completed=True,
            )

        rest = ConflictQueue(self.entries[1:])
        if action is ConflictAction.KEEP:
            return ConflictTransition(
                action=action,
                entry=current,
                queue=rest,
                write=current.new_item,
                completed=not rest.entries,
            )

        return ConflictTransition(
            action=action,
            entry=current,
            queue=rest,
            discarded=(current,),
            completed=not rest.entries,
        )


@dataclass
class ConflictResolutionSession:
    """
    Drives a ConflictQueue against a store.

    Attributes:
        queue: Current queue
        store: Storage backend used for "keep" writes
        on_complete: Awaited once when the queue empties (corpus reload)
        report: Counts for the import this session belongs to
        completion_message: User-facing message, set once the session ends
    """

    queue: ConflictQueue
    store: VaultStore
    on_complete: Optional[Callable[[], Awaitable[object]]] = None
    report: ImportReport = field(default_factory=ImportReport)
    completion_message: Optional[str] = None

    @property
    def active(self) -> bool:
        return self.queue.state is QueueState.PRESENTING

    @property
    def current(self) -> Optional[ConflictEntry]:
        return self.queue.head

    async def resolve(self, action: Union[ConflictAction, str]) -> ConflictTransition:
        """
        Resolve the presented conflict.

        A failed "keep" write propagates and leaves the queue unchanged,
        so the same conflict can be resolved again.
        """
        transition = self.queue.resolve(action)

        if transition.write is not None:
            await self.store.put(transition.write)
            self.report.kept += 1
            logger.debug(f"Kept imported item {transition.write.id} ({transition.write.content})")
        self.report.skipped += len(transition.discarded)

        self.queue = transition.queue

        if transition.completed:
            if transition.action is ConflictAction.SKIP_ALL:
                self.completion_message = "Skipped remaining duplicates and finished the import"
            else:
                self.completion_message = "Import complete"
            logger.info(
                f"Conflict resolution finished: kept={self.report.kept}, "
                f"skipped={self.report.skipped}"
            )
            if self.on_complete is not None:
                await self.on_complete()

        return transition
