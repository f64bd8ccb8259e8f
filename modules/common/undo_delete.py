"""
Undoable Delete: optimistic removal with a countdown before the remote delete.

Lifecycle of one deletion:
    idle → pending (countdown) → committed | restored_by_undo | restored_by_failure

The row disappears from the local list immediately. The remote delete only
runs when the countdown reaches zero (or the user chooses "Delete now").
Undo and a failed remote delete both put the row back at its old position.

No Streamlit imports here: pages hold an UndoableDelete in session state and
call sync() from a fragment that reruns every second.
"""

import logging
import time
from dataclasses import dataclass, field

from anchors.supabase_client import StoreError, error_message

log = logging.getLogger(__name__)

IDLE = "idle"
PENDING = "pending"
COMMITTED = "committed"
RESTORED_BY_UNDO = "restored_by_undo"
RESTORED_BY_FAILURE = "restored_by_failure"


@dataclass
class PendingDeletion:
    entity: dict
    original_index: int
    remaining_seconds: int
    started_at: float
    ticks_applied: int = field(default=0)

    @property
    def entity_id(self):
        return self.entity["id"]


class UndoableDelete:
    """
    Owns a local ordered list and at most one pending deletion.

    delete_fn(entity_id) performs the remote delete and raises StoreError on
    failure. notify(kind, message) surfaces outcomes. on_removed(entity_id)
    is called after a successful remote delete.
    """

    def __init__(self, items, delete_fn, notify, on_removed=None,
                 grace_period=5, label_key="name", noun="Item",
                 clock=time.monotonic):
        if grace_period < 1:
            raise ValueError("grace_period must be at least 1 second")
        self.items = list(items)
        self.delete_fn = delete_fn
        self.notify = notify
        self.on_removed = on_removed
        self.grace_period = int(grace_period)
        self.label_key = label_key
        self.noun = noun
        self.clock = clock
        self.pending = None
        self.state = IDLE

    # ── Queries ──────────────────────────────────────────────

    @property
    def is_pending(self):
        return self.pending is not None

    @property
    def progress(self):
        """Fraction of the grace period still left (1.0 → 0.0)."""
        if self.pending is None:
            return 0.0
        return self.pending.remaining_seconds / self.grace_period

    def label(self, entity):
        return entity.get(self.label_key) or str(entity.get("id"))

    def index_of(self, entity_id):
        for idx, item in enumerate(self.items):
            if item.get("id") == entity_id:
                return idx
        return -1

    # ── Operations ───────────────────────────────────────────

    def request_delete(self, item):
        """
        Hide `item` locally and start the countdown.
        An earlier pending deletion is committed first.
        """
        if self.pending is not None:
            log.info("Force-committing %s before new delete request", self.pending.entity_id)
            self.commit()

        idx = self.index_of(item.get("id"))
        if idx < 0:
            raise ValueError(f"{self.noun} {item.get('id')} is not in the list")

        entity = self.items.pop(idx)
        self.pending = PendingDeletion(
            entity=entity,
            original_index=idx,
            remaining_seconds=self.grace_period,
            started_at=self.clock(),
        )
        self.state = PENDING
        log.debug("Pending delete of %s at index %d", entity["id"], idx)
        return self.pending

    def tick(self):
        """One second elapsed. Commits when the countdown hits zero."""
        pending = self.pending
        if pending is None:
            return
        pending.ticks_applied += 1
        pending.remaining_seconds = max(0, pending.remaining_seconds - 1)
        if pending.remaining_seconds == 0:
            self.commit()

    def sync(self, now=None):
        """Apply every whole second elapsed since the request that has not been ticked yet."""
        pending = self.pending
        if pending is None:
            return
        now = self.clock() if now is None else now
        due = min(self.grace_period, int(now - pending.started_at))
        while self.pending is pending and pending.ticks_applied < due:
            self.tick()

    def undo(self):
        """Put the pending row back. No remote call is made."""
        pending = self.pending
        if pending is None:
            return False
        self.pending = None
        self._restore(pending)
        self.state = RESTORED_BY_UNDO
        self.notify("success", "Deletion undone")
        return True

    def commit(self):
        """
        Run the remote delete for the pending row.
        Returns True on success, False on failure or when nothing is pending.
        """
        pending = self.pending
        if pending is None:
            return False
        self.pending = None

        entity = pending.entity
        try:
            self.delete_fn(entity["id"])
        except Exception as e:
            if not isinstance(e, StoreError):
                log.exception("Delete of %s failed", entity["id"])
            self._restore(pending)
            self.state = RESTORED_BY_FAILURE
            self.notify("error", f"Failed to delete {self.label(entity)}: {error_message(e)}")
            return False

        self.state = COMMITTED
        self.notify("success", f"{self.noun} {self.label(entity)} has been deleted")
        if self.on_removed:
            self.on_removed(entity["id"])
        return True

    finalize_now = commit

    def replace_items(self, items):
        """Swap in a freshly loaded list, keeping a pending row hidden."""
        items = list(items)
        if self.pending is not None:
            hidden = self.pending.entity_id
            items = [i for i in items if i.get("id") != hidden]
        self.items = items

    # ── Internal ─────────────────────────────────────────────

    def _restore(self, pending):
        insert_at = min(pending.original_index, len(self.items))
        self.items.insert(insert_at, pending.entity)
