"""Relationship use cases: edit context, favorite, log interactions, browse contacts."""

from datetime import datetime

from relate.application.dto import (
    AuthorizationStatus,
    ContactDetail,
    ContactSummary,
    ContextUpdate,
)
from relate.application.errors import PermissionDenied
from relate.application.ports import (
    ORDER_BY_DATE_DESC,
    ContactDirectory,
    RelationshipStore,
)
from relate.domain import ContactContext, Interaction, InteractionType


class RelationshipService:
    """Joins the contacts directory (read-only) with the relationship store (read/write).

    Contexts are only created on the first edit, favorite toggle, or logged interaction.
    """

    def __init__(self, store: RelationshipStore, directory: ContactDirectory) -> None:
        self._store = store
        self._directory = directory

    def _commit(self) -> None:
        # A failed save is retried by repeating the whole use case, so drop what it staged.
        try:
            self._store.commit()
        except Exception:
            self._store.rollback()
            raise

    def _require_access(self) -> None:
        status = self._directory.authorization_status()
        if status != AuthorizationStatus.AUTHORIZED:
            raise PermissionDenied(status)

    def authorization_status(self) -> AuthorizationStatus:
        return self._directory.authorization_status()

    def request_access(self) -> bool:
        return self._directory.request_access()

    def list_contacts(
        self, query: str | None = None, *, favorites_only: bool = False
    ) -> list[ContactSummary]:
        """Directory contacts (optionally name-searched) joined with their contexts."""
        self._require_access()
        query = (query or "").strip()
        records = (
            self._directory.search_by_name(query) if query else self._directory.fetch_all()
        )
        contexts = {
            ctx.contact_identifier: ctx
            for ctx in self._store.list_contexts(favorites_only=favorites_only)
        }
        out = []
        for record in records:
            ctx = contexts.get(record.identifier)
            if favorites_only and ctx is None:
                continue
            out.append(ContactSummary(contact=record, context=ctx))
        return out

    def contact_detail(self, contact_id: str) -> ContactDetail | None:
        """Return directory record, context and interaction log, or None if unknown."""
        self._require_access()
        record = self._directory.get_by_identifier(contact_id)
        if record is None:
            return None
        context = self._store.find_context(contact_id)
        return ContactDetail(
            contact=record,
            context=context,
            interactions=self.interaction_log(contact_id),
        )

    def get_context(self, contact_id: str) -> ContactContext | None:
        return self._store.find_context(contact_id)

    def interaction_log(self, contact_id: str) -> list[Interaction]:
        """Interactions newest first; empty when the contact has no context yet."""
        context = self._store.find_context(contact_id)
        if context is None:
            return []
        return list(self._store.list_interactions(context, ORDER_BY_DATE_DESC))

    def edit_context(self, contact_id: str, update: ContextUpdate) -> ContactContext:
        context = self._store.find_or_create_context(contact_id)
        self._store.update_context(context, update)
        self._commit()
        return context

    def toggle_favorite(self, contact_id: str) -> ContactContext:
        context = self._store.find_or_create_context(contact_id)
        self._store.update_context(
            context, ContextUpdate(is_favorite=not context.is_favorite)
        )
        self._commit()
        return context

    def log_interaction(
        self,
        contact_id: str,
        date: datetime,
        note: str,
        type: InteractionType = InteractionType.NOTE,
    ) -> Interaction:
        context = self._store.find_or_create_context(contact_id)
        interaction = self._store.append_interaction(context, date, note, type)
        self._commit()
        return interaction
