"""Drain the pending-interaction inbox into the relationship store.

Records are decoded one by one; a malformed record is logged and skipped so
the rest of the batch still imports. The store is committed before the inbox
is cleared, so a failed commit leaves the inbox intact for the next run.
"""

import logging
import math
from collections.abc import Mapping
from datetime import datetime, timezone

from relate.application.dto import ImportReport, PendingInteraction
from relate.application.errors import MalformedRecord
from relate.application.ports import InteractionInbox, RelationshipStore
from relate.domain import InteractionType

logger = logging.getLogger(__name__)

PENDING_INTERACTIONS_KEY = "pendingInteractions"

_STRING_FIELDS = ("contactID", "type", "note")


def decode_pending_interaction(raw: object) -> PendingInteraction:
    """Decode one raw inbox record. Raises MalformedRecord if any field is missing or invalid."""
    if not isinstance(raw, Mapping):
        raise MalformedRecord(f"record is {type(raw).__name__}, not a mapping")
    for key in (*_STRING_FIELDS, "date"):
        if key not in raw or raw[key] is None:
            raise MalformedRecord(f"missing {key!r}")
    for key in _STRING_FIELDS:
        if not isinstance(raw[key], str):
            raise MalformedRecord(f"{key!r} is not a string")
    contact_id = raw["contactID"].strip()
    if not contact_id:
        raise MalformedRecord("'contactID' is empty")

    timestamp = raw["date"]
    if isinstance(timestamp, bool) or not isinstance(timestamp, (int, float)):
        raise MalformedRecord("'date' is not numeric")
    if not math.isfinite(timestamp):
        raise MalformedRecord("'date' is not finite")
    try:
        when = datetime.fromtimestamp(timestamp, tz=timezone.utc)
    except (OverflowError, OSError, ValueError) as e:
        raise MalformedRecord(f"'date' out of range: {timestamp}") from e

    return PendingInteraction(
        contact_id=contact_id,
        type=InteractionType.from_label(raw["type"]),
        note=raw["note"],
        date=when,
    )


def import_pending_interactions(
    inbox: InteractionInbox, store: RelationshipStore
) -> ImportReport:
    """Import every valid pending record, commit, then clear the inbox.

    An absent or empty inbox is a no-op. CommitFailure propagates, the store is
    rolled back and the inbox is left as it was.
    """
    records = inbox.read_all()
    if not records:
        return ImportReport()

    imported = 0
    skipped = 0
    contact_ids: list[str] = []
    for index, raw in enumerate(records):
        try:
            pending = decode_pending_interaction(raw)
        except MalformedRecord as e:
            skipped += 1
            logger.warning("Skipping malformed pending interaction #%d: %s", index, e.reason)
            continue
        context = store.find_or_create_context(pending.contact_id)
        store.append_interaction(context, pending.date, pending.note, pending.type)
        imported += 1
        if pending.contact_id not in contact_ids:
            contact_ids.append(pending.contact_id)

    try:
        store.commit()
    except Exception:
        logger.error("Import commit failed; leaving %d pending records in the inbox", len(records))
        # The next run re-imports the whole inbox, so drop this batch's staged copies.
        store.rollback()
        raise
    inbox.clear()
    logger.info("Imported %d pending interactions (%d skipped)", imported, skipped)
    return ImportReport(imported=imported, skipped=skipped, contact_ids=tuple(contact_ids))
