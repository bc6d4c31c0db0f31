"""DTOs passed across the application boundary."""

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum

from relate.domain import ContactContext, Interaction, InteractionType


class AuthorizationStatus(str, Enum):
    NOT_DETERMINED = "notDetermined"
    AUTHORIZED = "authorized"
    DENIED = "denied"
    RESTRICTED = "restricted"


@dataclass(frozen=True)
class ContactRecord:
    """Immutable contact as returned by the contacts directory."""

    identifier: str
    display_name: str = ""
    organization: str = ""
    phone_numbers: tuple[str, ...] = ()
    email_addresses: tuple[str, ...] = ()
    birthday: date | None = None
    photo: bytes | None = None
    note: str = ""

    @property
    def primary_phone(self) -> str | None:
        return self.phone_numbers[0] if self.phone_numbers else None

    @property
    def primary_email(self) -> str | None:
        return self.email_addresses[0] if self.email_addresses else None

    @property
    def has_photo(self) -> bool:
        return bool(self.photo)


@dataclass(frozen=True)
class ContextUpdate:
    """Field-level edits for a ContactContext. None means "leave unchanged"."""

    how_we_met: str | None = None
    notes: str | None = None
    tags: list[str] | None = None
    priority: int | None = None
    is_favorite: bool | None = None


@dataclass(frozen=True)
class PendingInteraction:
    """One decoded record from the pending-interaction inbox."""

    contact_id: str
    type: InteractionType
    note: str
    date: datetime


@dataclass(frozen=True)
class ImportReport:
    imported: int = 0
    skipped: int = 0
    contact_ids: tuple[str, ...] = ()


@dataclass(frozen=True)
class ContactSummary:
    """Directory contact joined with its relationship context (if any)."""

    contact: ContactRecord
    context: ContactContext | None = None

    @property
    def is_favorite(self) -> bool:
        return bool(self.context and self.context.is_favorite)

    @property
    def subtitle(self) -> str:
        """How we met when known, else the organization."""
        if self.context and self.context.how_we_met:
            return self.context.how_we_met
        return self.contact.organization


@dataclass(frozen=True)
class ContactDetail:
    contact: ContactRecord
    context: ContactContext | None = None
    interactions: list[Interaction] = field(default_factory=list)
