"""Domain entities: ContactContext, Interaction, and InteractionType."""

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum

DEFAULT_PRIORITY = 3


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class InteractionType(str, Enum):
    """Kind of touchpoint. Values are the user-facing labels shared with the share surface."""

    MET = "Met in person"
    CALL = "Phone call"
    EMAIL = "Email"
    TEXT = "Text message"
    VIDEO = "Video call"
    SOCIAL = "Social media"
    NOTE = "Note"
    OTHER = "Other"

    @classmethod
    def from_label(cls, label: str | None) -> "InteractionType":
        """Exact match on the label; anything else falls back to NOTE."""
        for member in cls:
            if member.value == label:
                return member
        return cls.NOTE


@dataclass(eq=False)
class Interaction:
    """
    One logged touchpoint with a contact.
    Only ever created as a child of a ContactContext (see ContactContext.append).
    """

    date: datetime
    note: str = ""
    type: InteractionType = InteractionType.NOTE
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    position: int = 0
    contact_context: "ContactContext | None" = field(default=None, repr=False)

    def __post_init__(self):
        # Naive dates are read as local time so all stored dates compare.
        if self.date.tzinfo is None:
            self.date = self.date.astimezone()


@dataclass(eq=False)
class ContactContext:
    """
    Relationship metadata for one external contact, keyed by contact_identifier.
    Owns its interactions exclusively.
    """

    contact_identifier: str
    how_we_met: str = ""
    notes: str = ""
    tags: list[str] = field(default_factory=list)
    is_favorite: bool = False
    priority: int = DEFAULT_PRIORITY
    date_added: datetime = field(default_factory=utc_now)
    last_modified: datetime | None = None
    interactions: list[Interaction] = field(default_factory=list, repr=False)

    def __post_init__(self):
        if not self.contact_identifier or not self.contact_identifier.strip():
            raise ValueError("ContactContext contact_identifier must be non-empty.")
        if self.last_modified is None:
            self.last_modified = self.date_added

    def touch(self, now: datetime) -> None:
        # Never move backwards, even if the wall clock does.
        if self.last_modified is None or now > self.last_modified:
            self.last_modified = now

    def append(self, date: datetime, note: str, type: InteractionType) -> Interaction:
        interaction = Interaction(
            date=date,
            note=note,
            type=type,
            position=len(self.interactions),
            contact_context=self,
        )
        self.interactions.append(interaction)
        return interaction


def parse_tags(text: str | None) -> list[str]:
    """Split on commas, trim each piece, drop empties. Order kept, duplicates kept."""
    if not text:
        return []
    return [piece.strip() for piece in text.split(",") if piece.strip()]
