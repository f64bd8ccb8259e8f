import pytest

from anchors.supabase_client import StoreError
from modules.common.undo_delete import (
    UndoableDelete,
    IDLE,
    PENDING,
    COMMITTED,
    RESTORED_BY_UNDO,
    RESTORED_BY_FAILURE,
)

A = {"id": "a", "name": "Alice"}
B = {"id": "b", "name": "Bob"}
C = {"id": "c", "name": "Carol"}


class FakeDeleter:
    def __init__(self, fail_with=None):
        self.calls = []
        self.fail_with = fail_with

    def __call__(self, entity_id):
        self.calls.append(entity_id)
        if self.fail_with:
            raise StoreError(self.fail_with)


def make(clock, notes, deleter=None, removed=None, items=(A, B, C)):
    deleter = deleter or FakeDeleter()
    ctl = UndoableDelete(
        list(items),
        delete_fn=deleter,
        notify=notes,
        on_removed=(removed.append if removed is not None else None),
        grace_period=5,
        clock=clock,
    )
    return ctl, deleter


def ids(ctl):
    return [i["id"] for i in ctl.items]


def test_request_delete_hides_item_without_remote_call(clock, notes):
    ctl, deleter = make(clock, notes)

    pending = ctl.request_delete(B)

    assert ids(ctl) == ["a", "c"]
    assert pending.entity == B
    assert pending.original_index == 1
    assert pending.remaining_seconds == 5
    assert ctl.progress == 1.0
    assert ctl.state == PENDING
    assert deleter.calls == []
    assert notes.calls == []


def test_undo_after_two_seconds_restores_original_order(clock, notes):
    ctl, deleter = make(clock, notes)
    ctl.request_delete(B)
    ctl.tick()
    ctl.tick()

    assert ctl.undo() is True

    assert ids(ctl) == ["a", "b", "c"]
    assert ctl.pending is None
    assert ctl.state == RESTORED_BY_UNDO
    assert deleter.calls == []
    assert notes.calls == [("success", "Deletion undone")]


def test_undo_clamps_index_when_list_shrank(clock, notes):
    ctl, _ = make(clock, notes)
    ctl.request_delete(C)
    ctl.items.clear()

    ctl.undo()

    assert ids(ctl) == ["c"]


def test_undo_without_pending_is_noop(clock, notes):
    ctl, _ = make(clock, notes)
    assert ctl.undo() is False
    assert ctl.state == IDLE
    assert notes.calls == []


def test_countdown_decreases_by_one_and_commits_once(clock, notes):
    removed = []
    ctl, deleter = make(clock, notes, removed=removed)
    ctl.request_delete(B)

    seen = []
    for _ in range(5):
        seen.append(ctl.pending.remaining_seconds)
        ctl.tick()

    assert seen == [5, 4, 3, 2, 1]
    assert deleter.calls == ["b"]
    assert ids(ctl) == ["a", "c"]
    assert removed == ["b"]
    assert ctl.state == COMMITTED
    assert notes.kinds == ["success"]

    # Extra ticks after commit do nothing
    ctl.tick()
    assert deleter.calls == ["b"]


def test_commit_failure_restores_item_and_reports_error(clock, notes):
    removed = []
    deleter = FakeDeleter(fail_with="permission denied")
    ctl, _ = make(clock, notes, deleter=deleter, removed=removed)
    ctl.request_delete(B)

    for _ in range(5):
        ctl.tick()

    assert ids(ctl) == ["a", "b", "c"]
    assert removed == []
    assert ctl.pending is None
    assert ctl.state == RESTORED_BY_FAILURE
    assert notes.calls == [("error", "Failed to delete Bob: permission denied")]


def test_undo_after_commit_cannot_restore_again(clock, notes):
    ctl, deleter = make(clock, notes)
    ctl.request_delete(B)
    ctl.finalize_now()

    assert ctl.undo() is False
    assert ids(ctl) == ["a", "c"]
    assert deleter.calls == ["b"]


def test_commit_after_undo_makes_no_remote_call(clock, notes):
    ctl, deleter = make(clock, notes)
    ctl.request_delete(B)
    ctl.undo()

    assert ctl.commit() is False
    assert deleter.calls == []
    assert ids(ctl) == ["a", "b", "c"]


def test_sync_applies_elapsed_seconds_once(clock, notes):
    ctl, deleter = make(clock, notes)
    ctl.request_delete(B)

    clock.advance(0.4)
    ctl.sync()
    ctl.sync()
    assert ctl.pending.remaining_seconds == 5

    clock.advance(1.0)
    ctl.sync()
    ctl.sync()
    assert ctl.pending.remaining_seconds == 4

    clock.advance(2.0)
    ctl.sync()
    assert ctl.pending.remaining_seconds == 2
    assert deleter.calls == []


def test_late_sync_catches_up_and_commits_once(clock, notes):
    ctl, deleter = make(clock, notes)
    ctl.request_delete(B)

    clock.advance(60)
    ctl.sync()
    ctl.sync()

    assert deleter.calls == ["b"]
    assert ctl.pending is None


def test_second_request_force_commits_the_first(clock, notes):
    removed = []
    ctl, deleter = make(clock, notes, removed=removed)
    ctl.request_delete(A)
    ctl.tick()

    pending = ctl.request_delete(C)

    assert deleter.calls == ["a"]
    assert removed == ["a"]
    assert ids(ctl) == ["b"]
    assert pending.entity == C
    assert pending.original_index == 1
    assert pending.remaining_seconds == 5


def test_second_request_after_failed_force_commit_uses_restored_list(clock, notes):
    deleter = FakeDeleter(fail_with="offline")
    ctl, _ = make(clock, notes, deleter=deleter)
    ctl.request_delete(A)

    pending = ctl.request_delete(C)

    assert ids(ctl) == ["a", "b"]
    assert pending.original_index == 2
    assert notes.kinds == ["error"]


def test_request_delete_unknown_item_raises(clock, notes):
    ctl, _ = make(clock, notes)
    with pytest.raises(ValueError):
        ctl.request_delete({"id": "zzz"})
    assert ctl.pending is None


def test_replace_items_keeps_pending_row_hidden(clock, notes):
    ctl, _ = make(clock, notes)
    ctl.request_delete(B)

    ctl.replace_items([A, B, C, {"id": "d", "name": "Dan"}])

    assert ids(ctl) == ["a", "c", "d"]
    ctl.undo()
    assert ids(ctl) == ["a", "b", "c", "d"]


def test_progress_tracks_remaining_fraction(clock, notes):
    ctl, _ = make(clock, notes)
    ctl.request_delete(A)
    ctl.tick()
    ctl.tick()
    assert ctl.progress == pytest.approx(3 / 5)


def test_grace_period_must_be_positive(clock, notes):
    with pytest.raises(ValueError):
        UndoableDelete([], delete_fn=FakeDeleter(), notify=notes, grace_period=0)


def test_unexpected_delete_error_restores_item(clock, notes):
    def deleter(entity_id):
        raise ConnectionError("socket closed")

    ctl = UndoableDelete([A, B, C], delete_fn=deleter, notify=notes, clock=clock)
    ctl.request_delete(B)

    assert ctl.finalize_now() is False

    assert ids(ctl) == ["a", "b", "c"]
    assert ctl.pending is None
    assert ctl.state == RESTORED_BY_FAILURE
    assert notes.calls == [("error", "Failed to delete Bob: socket closed")]
