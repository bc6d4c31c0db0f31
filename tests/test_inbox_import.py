"""Unit tests for the pending-interaction import. Inbox is file-backed in tmp_path."""

import logging
from datetime import datetime, timezone

import pytest

from relate.application import (
    ORDER_BY_INSERTION,
    CommitFailure,
    ContextUpdate,
    MalformedRecord,
    decode_pending_interaction,
    import_pending_interactions,
)
from relate.domain import InteractionType
from relate.infrastructure import (
    InMemoryRelationshipStore,
    PendingInteractionInbox,
    SharedDefaults,
)

GROUP = "group.com.NightGard.Relate-CRM"


def _inbox(tmp_path) -> PendingInteractionInbox:
    return PendingInteractionInbox(SharedDefaults(tmp_path, GROUP))


def _seed(inbox: PendingInteractionInbox, records: list) -> None:
    inbox._defaults.set("pendingInteractions", records)


def test_scenario_phone_call_creates_context_and_clears_inbox(tmp_path) -> None:
    inbox = _inbox(tmp_path)
    _seed(inbox, [{"contactID": "abc", "type": "Phone call", "note": "Hi", "date": 1700000000}])
    store = InMemoryRelationshipStore()

    report = import_pending_interactions(inbox, store)

    assert report.imported == 1
    assert report.skipped == 0
    ctx = store.find_context("abc")
    assert ctx is not None
    assert ctx.contact_identifier == "abc"
    assert len(ctx.interactions) == 1
    interaction = ctx.interactions[0]
    assert interaction.type is InteractionType.CALL
    assert interaction.note == "Hi"
    assert interaction.date == datetime(2023, 11, 14, 22, 13, 20, tzinfo=timezone.utc)
    assert inbox._defaults.get("pendingInteractions") is None
    assert inbox.read_all() == []


def test_unknown_label_falls_back_to_note(tmp_path) -> None:
    inbox = _inbox(tmp_path)
    _seed(inbox, [{"contactID": "abc", "type": "Unknown Label", "note": "x", "date": 0}])
    store = InMemoryRelationshipStore()

    import_pending_interactions(inbox, store)

    interaction = store.find_context("abc").interactions[0]
    assert interaction.type is InteractionType.NOTE
    assert interaction.date == datetime(1970, 1, 1, tzinfo=timezone.utc)


def test_batch_with_distinct_ids_creates_one_context_each(tmp_path) -> None:
    inbox = _inbox(tmp_path)
    ids = ["a", "b", "c", "d"]
    _seed(
        inbox,
        [{"contactID": i, "type": "Email", "note": f"note {i}", "date": 1700000000.5} for i in ids],
    )
    store = InMemoryRelationshipStore()

    report = import_pending_interactions(inbox, store)

    assert report.imported == 4
    assert report.contact_ids == tuple(ids)
    contexts = store.list_contexts()
    assert sorted(c.contact_identifier for c in contexts) == ids
    assert all(len(c.interactions) == 1 for c in contexts)


def test_records_for_same_contact_append_in_inbox_order(tmp_path) -> None:
    inbox = _inbox(tmp_path)
    _seed(
        inbox,
        [
            {"contactID": "abc", "type": "Email", "note": "first", "date": 1700000100},
            {"contactID": "abc", "type": "Text message", "note": "second", "date": 1700000000},
        ],
    )
    store = InMemoryRelationshipStore()

    import_pending_interactions(inbox, store)

    ctx = store.find_context("abc")
    assert [i.note for i in store.list_interactions(ctx, ORDER_BY_INSERTION)] == ["first", "second"]
    assert len(store.list_contexts()) == 1


def test_merges_into_existing_context(tmp_path) -> None:
    store = InMemoryRelationshipStore()
    existing = store.find_or_create_context("abc")
    store.update_context(existing, ContextUpdate(how_we_met="WWDC"))
    store.commit()
    inbox = _inbox(tmp_path)
    _seed(inbox, [{"contactID": "abc", "type": "Video call", "note": "Sync", "date": 1700000000}])

    import_pending_interactions(inbox, store)

    assert store.find_context("abc") is existing
    assert existing.how_we_met == "WWDC"
    assert existing.interactions[-1].type is InteractionType.VIDEO


def test_missing_note_is_skipped_and_batch_continues(tmp_path, caplog) -> None:
    inbox = _inbox(tmp_path)
    _seed(
        inbox,
        [
            {"contactID": "a", "type": "Email", "note": "ok", "date": 1700000000},
            {"contactID": "bad", "type": "Email", "date": 1700000000},
            {"contactID": "b", "type": "Email", "note": "ok", "date": 1700000000},
        ],
    )
    store = InMemoryRelationshipStore()

    with caplog.at_level(logging.WARNING):
        report = import_pending_interactions(inbox, store)

    assert report.imported == 2
    assert report.skipped == 1
    assert store.find_context("bad") is None
    assert sum(len(c.interactions) for c in store.list_contexts()) == 2
    assert "missing 'note'" in caplog.text
    assert inbox.read_all() == []


def test_empty_or_absent_inbox_is_noop(tmp_path) -> None:
    store = InMemoryRelationshipStore()
    ctx = store.find_or_create_context("abc")
    store.commit()
    before = ctx.last_modified
    inbox = _inbox(tmp_path)

    assert import_pending_interactions(inbox, store).imported == 0
    _seed(inbox, [])
    assert import_pending_interactions(inbox, store).imported == 0
    assert ctx.last_modified == before
    assert not store.has_changes


def test_commit_failure_propagates_and_keeps_inbox(tmp_path) -> None:
    inbox = _inbox(tmp_path)
    records = [{"contactID": "abc", "type": "Note", "note": "keep me", "date": 1700000000}]
    _seed(inbox, records)
    store = InMemoryRelationshipStore()

    def failing_persist(*args, **kwargs):
        raise CommitFailure("store unavailable")

    store._persist = failing_persist

    with pytest.raises(CommitFailure):
        import_pending_interactions(inbox, store)
    assert inbox.read_all() == records
    assert not store.has_changes


def test_retry_after_failed_commit_imports_each_record_once(tmp_path) -> None:
    inbox = _inbox(tmp_path)
    _seed(inbox, [{"contactID": "abc", "type": "Note", "note": "once", "date": 1700000000}])
    backend = {}
    store = InMemoryRelationshipStore(backend)
    working_persist = store._persist
    calls = []

    def flaky_persist(*args, **kwargs):
        calls.append(1)
        if len(calls) == 1:
            raise CommitFailure("store unavailable")
        working_persist(*args, **kwargs)

    store._persist = flaky_persist

    with pytest.raises(CommitFailure):
        import_pending_interactions(inbox, store)
    report = import_pending_interactions(inbox, store)

    assert report.imported == 1
    assert inbox.read_all() == []
    saved = InMemoryRelationshipStore(backend).find_context("abc")
    assert [i.note for i in saved.interactions] == ["once"]


def test_all_malformed_batch_is_cleared(tmp_path) -> None:
    inbox = _inbox(tmp_path)
    _seed(inbox, [{"contactID": "abc"}, "garbage", None])
    store = InMemoryRelationshipStore()

    report = import_pending_interactions(inbox, store)

    assert report.imported == 0
    assert report.skipped == 3
    assert store.list_contexts() == []
    assert inbox.read_all() == []


def test_rerun_after_import_is_noop(tmp_path) -> None:
    inbox = _inbox(tmp_path)
    _seed(inbox, [{"contactID": "abc", "type": "Note", "note": "once", "date": 1700000000}])
    store = InMemoryRelationshipStore()

    import_pending_interactions(inbox, store)
    report = import_pending_interactions(inbox, store)

    assert report.imported == 0
    assert len(store.find_context("abc").interactions) == 1


def test_append_between_read_and_clear_is_lost(tmp_path) -> None:
    """Known gap: the drain reads, commits, then removes the whole key."""
    shared = _inbox(tmp_path)
    _seed(shared, [{"contactID": "abc", "type": "Note", "note": "first", "date": 1700000000}])
    producer = _inbox(tmp_path)

    class _RacingInbox:
        def read_all(self):
            records = shared.read_all()
            producer.append("late", "Note", "arrived mid-import")
            return records

        def clear(self):
            shared.clear()

    store = InMemoryRelationshipStore()
    report = import_pending_interactions(_RacingInbox(), store)

    assert report.imported == 1
    assert store.find_context("late") is None
    assert shared.read_all() == []


@pytest.mark.parametrize(
    "raw, reason",
    [
        ({"type": "Note", "note": "x", "date": 1}, "missing 'contactID'"),
        ({"contactID": "a", "note": "x", "date": 1}, "missing 'type'"),
        ({"contactID": "a", "type": "Note", "date": 1}, "missing 'note'"),
        ({"contactID": "a", "type": "Note", "note": "x"}, "missing 'date'"),
        ({"contactID": "a", "type": "Note", "note": "x", "date": "1700000000"}, "'date' is not numeric"),
        ({"contactID": "a", "type": "Note", "note": "x", "date": True}, "'date' is not numeric"),
        ({"contactID": "a", "type": "Note", "note": "x", "date": float("nan")}, "'date' is not finite"),
        ({"contactID": 5, "type": "Note", "note": "x", "date": 1}, "'contactID' is not a string"),
        ({"contactID": "  ", "type": "Note", "note": "x", "date": 1}, "'contactID' is empty"),
        (["a", "Note", "x", 1], "not a mapping"),
    ],
)
def test_decode_rejects_malformed(raw, reason) -> None:
    with pytest.raises(MalformedRecord) as exc:
        decode_pending_interaction(raw)
    assert reason in exc.value.reason


def test_decode_accepts_empty_note_and_float_date() -> None:
    pending = decode_pending_interaction(
        {"contactID": "abc", "type": "Met in person", "note": "", "date": 1700000000.25}
    )
    assert pending.note == ""
    assert pending.type is InteractionType.MET
    assert pending.date.timestamp() == 1700000000.25
