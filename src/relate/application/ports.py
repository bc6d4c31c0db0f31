"""Application ports (interfaces). Implemented by infrastructure adapters."""

from collections.abc import Iterable
from datetime import datetime
from typing import Any, Protocol

from relate.application.dto import AuthorizationStatus, ContactRecord, ContextUpdate
from relate.domain import ContactContext, Interaction, InteractionType

ORDER_BY_DATE_DESC = "date_desc"
ORDER_BY_INSERTION = "insertion"


class RelationshipStore(Protocol):
    """Persists ContactContext records and the interactions they own."""

    def find_context(self, identifier: str) -> ContactContext | None:
        """Return the context for the identifier, or None."""
        ...

    def create_context(self, identifier: str) -> ContactContext:
        """Stage a new context with defaults. Duplicates fail with UniquenessViolation at commit."""
        ...

    def find_or_create_context(self, identifier: str) -> ContactContext:
        """Return the existing context or stage a new one, as one operation."""
        ...

    def update_context(self, context: ContactContext, update: ContextUpdate) -> None:
        """Apply all supplied fields and bump last_modified, or apply nothing."""
        ...

    def append_interaction(
        self,
        context: ContactContext,
        date: datetime,
        note: str,
        type: InteractionType,
    ) -> Interaction:
        """Append a new interaction owned by context and bump its last_modified."""
        ...

    def list_interactions(
        self, context: ContactContext, order: str = ORDER_BY_DATE_DESC
    ) -> Iterable[Interaction]:
        """Return the context's interactions, by date descending or insertion order."""
        ...

    def list_contexts(self, *, favorites_only: bool = False) -> list[ContactContext]:
        """Return all known contexts (committed and staged)."""
        ...

    def commit(self) -> None:
        """Persist all staged changes atomically. Raises CommitFailure or UniquenessViolation."""
        ...

    def rollback(self) -> None:
        """Discard staged changes so the next read starts from committed state."""
        ...


class ContactDirectory(Protocol):
    """Read-mostly gateway over the platform contacts store."""

    def authorization_status(self) -> AuthorizationStatus:
        ...

    def request_access(self) -> bool:
        ...

    def fetch_all(self) -> list[ContactRecord]:
        ...

    def get_by_identifier(self, identifier: str) -> ContactRecord | None:
        ...

    def search_by_name(self, query: str) -> list[ContactRecord]:
        ...


class InteractionInbox(Protocol):
    """Shared hand-off list written by the share surface and drained by the import."""

    def read_all(self) -> list[Any]:
        """Return every pending raw record (possibly malformed), in append order."""
        ...

    def clear(self) -> None:
        """Remove the pending list entirely."""
        ...
