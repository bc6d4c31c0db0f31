"""Unit tests for domain entities and tag parsing."""

from datetime import datetime, timedelta, timezone

import pytest

from relate.domain import DEFAULT_PRIORITY, ContactContext, InteractionType, parse_tags


def test_parse_tags_trims_and_drops_empty() -> None:
    assert parse_tags(" a, b ,, c") == ["a", "b", "c"]


def test_parse_tags_keeps_duplicates_and_order() -> None:
    assert parse_tags("x,x") == ["x", "x"]
    assert parse_tags("work, family, work") == ["work", "family", "work"]


def test_parse_tags_empty_input() -> None:
    assert parse_tags("") == []
    assert parse_tags(None) == []
    assert parse_tags(" , ,") == []


def test_interaction_type_from_label_exact_match() -> None:
    assert InteractionType.from_label("Phone call") is InteractionType.CALL
    assert InteractionType.from_label("Met in person") is InteractionType.MET
    assert InteractionType.from_label("Video call") is InteractionType.VIDEO


def test_interaction_type_from_label_falls_back_to_note() -> None:
    assert InteractionType.from_label("Unknown Label") is InteractionType.NOTE
    assert InteractionType.from_label("phone call") is InteractionType.NOTE
    assert InteractionType.from_label("") is InteractionType.NOTE
    assert InteractionType.from_label(None) is InteractionType.NOTE


def test_context_defaults() -> None:
    ctx = ContactContext(contact_identifier="abc")
    assert ctx.how_we_met == ""
    assert ctx.notes == ""
    assert ctx.tags == []
    assert ctx.is_favorite is False
    assert ctx.priority == DEFAULT_PRIORITY == 3
    assert ctx.interactions == []
    assert ctx.last_modified == ctx.date_added


def test_context_requires_identifier() -> None:
    with pytest.raises(ValueError):
        ContactContext(contact_identifier="")
    with pytest.raises(ValueError):
        ContactContext(contact_identifier="   ")


def test_touch_never_moves_backwards() -> None:
    t0 = datetime(2024, 1, 1, tzinfo=timezone.utc)
    ctx = ContactContext(contact_identifier="abc", date_added=t0)
    ctx.touch(t0 - timedelta(hours=1))
    assert ctx.last_modified == t0
    ctx.touch(t0 + timedelta(seconds=1))
    assert ctx.last_modified == t0 + timedelta(seconds=1)


def test_append_sets_owner_and_position() -> None:
    ctx = ContactContext(contact_identifier="abc")
    when = datetime(2024, 5, 1, tzinfo=timezone.utc)
    first = ctx.append(when, "Coffee", InteractionType.MET)
    second = ctx.append(when, "Follow-up", InteractionType.EMAIL)
    assert first.contact_context is ctx
    assert (first.position, second.position) == (0, 1)
    assert ctx.interactions == [first, second]


def test_append_reads_naive_date_as_local_time() -> None:
    ctx = ContactContext(contact_identifier="abc")
    naive = datetime(2024, 1, 1, 10, 0)
    interaction = ctx.append(naive, "Walk-in", InteractionType.MET)
    assert interaction.date.tzinfo is not None
    assert interaction.date == naive.astimezone()
    assert interaction.date.replace(tzinfo=None) == naive
