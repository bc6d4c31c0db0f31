"""Unit-of-work shared by the RelationshipStore adapters.

Loaded and created contexts live in an identity map so repeated lookups return
the same object. Creations, edits and new interactions are staged until
commit(); adapters implement _load, _load_all and _persist.
"""

from collections.abc import Callable, Iterator
from datetime import datetime

from relate.application.dto import ContextUpdate
from relate.application.errors import UniquenessViolation
from relate.application.ports import ORDER_BY_DATE_DESC, ORDER_BY_INSERTION
from relate.domain import ContactContext, Interaction, InteractionType
from relate.domain.entities import utc_now


class InteractionSequence:
    """Lazy, restartable view over a context's interactions."""

    def __init__(self, context: ContactContext, order: str = ORDER_BY_DATE_DESC) -> None:
        if order not in (ORDER_BY_DATE_DESC, ORDER_BY_INSERTION):
            raise ValueError(f"Unknown interaction order: {order!r}")
        self._context = context
        self._order = order

    def __iter__(self) -> Iterator[Interaction]:
        items = list(self._context.interactions)
        if self._order == ORDER_BY_DATE_DESC:
            # sorted() is stable, so same-date entries keep append order.
            items = sorted(items, key=lambda i: i.date, reverse=True)
        return iter(items)

    def __len__(self) -> int:
        return len(self._context.interactions)


def _validate_update(update: ContextUpdate) -> None:
    for name in ("how_we_met", "notes"):
        value = getattr(update, name)
        if value is not None and not isinstance(value, str):
            raise ValueError(f"{name} must be a string.")
    if update.tags is not None:
        if isinstance(update.tags, str) or not all(isinstance(t, str) for t in update.tags):
            raise ValueError("tags must be a list of strings.")
    if update.priority is not None:
        if isinstance(update.priority, bool) or not isinstance(update.priority, int):
            raise ValueError("priority must be an integer.")
    if update.is_favorite is not None and not isinstance(update.is_favorite, bool):
        raise ValueError("is_favorite must be a boolean.")


class StagedRelationshipStore:
    """Base for RelationshipStore adapters. Not safe for concurrent writers in one process."""

    def __init__(self, *, clock: Callable[[], datetime] = utc_now) -> None:
        self._clock = clock
        self._contexts: dict[str, ContactContext] = {}
        self._created: list[ContactContext] = []
        self._dirty: dict[int, ContactContext] = {}
        self._new_interactions: list[Interaction] = []

    # --- adapter hooks ---

    def _load(self, identifier: str) -> ContactContext | None:
        raise NotImplementedError

    def _load_all(self) -> list[ContactContext]:
        raise NotImplementedError

    def _persist(
        self,
        created: list[ContactContext],
        updated: list[ContactContext],
        interactions: list[Interaction],
    ) -> None:
        raise NotImplementedError

    # --- RelationshipStore ---

    def find_context(self, identifier: str) -> ContactContext | None:
        context = self._contexts.get(identifier)
        if context is not None:
            return context
        context = self._load(identifier)
        if context is not None:
            self._contexts[identifier] = context
        return context

    def create_context(self, identifier: str) -> ContactContext:
        now = self._clock()
        context = ContactContext(
            contact_identifier=identifier, date_added=now, last_modified=now
        )
        self._created.append(context)
        # A duplicate stays staged so commit() can reject it.
        self._contexts.setdefault(identifier, context)
        return context

    def find_or_create_context(self, identifier: str) -> ContactContext:
        context = self.find_context(identifier)
        if context is None:
            context = self.create_context(identifier)
        return context

    def update_context(self, context: ContactContext, update: ContextUpdate) -> None:
        _validate_update(update)
        if update.how_we_met is not None:
            context.how_we_met = update.how_we_met
        if update.notes is not None:
            context.notes = update.notes
        if update.tags is not None:
            context.tags = list(update.tags)
        if update.priority is not None:
            context.priority = update.priority
        if update.is_favorite is not None:
            context.is_favorite = update.is_favorite
        context.touch(self._clock())
        self._dirty[id(context)] = context

    def append_interaction(
        self,
        context: ContactContext,
        date: datetime,
        note: str,
        type: InteractionType = InteractionType.NOTE,
    ) -> Interaction:
        interaction = context.append(date, note, type)
        context.touch(self._clock())
        self._dirty[id(context)] = context
        self._new_interactions.append(interaction)
        return interaction

    def list_interactions(
        self, context: ContactContext, order: str = ORDER_BY_DATE_DESC
    ) -> InteractionSequence:
        return InteractionSequence(context, order)

    def list_contexts(self, *, favorites_only: bool = False) -> list[ContactContext]:
        out: list[ContactContext] = []
        seen: set[str] = set()
        for loaded in self._load_all():
            identifier = loaded.contact_identifier
            context = self._contexts.setdefault(identifier, loaded)
            out.append(context)
            seen.add(identifier)
        for identifier, context in self._contexts.items():
            if identifier not in seen:
                out.append(context)
        if favorites_only:
            out = [c for c in out if c.is_favorite]
        return out

    @property
    def has_changes(self) -> bool:
        return bool(self._created or self._dirty or self._new_interactions)

    def commit(self) -> None:
        if not self.has_changes:
            return
        seen: set[str] = set()
        for context in self._created:
            if context.contact_identifier in seen:
                raise UniquenessViolation(context.contact_identifier)
            seen.add(context.contact_identifier)
        created_ids = {id(c) for c in self._created}
        updated = [c for key, c in self._dirty.items() if key not in created_ids]
        self._persist(list(self._created), updated, list(self._new_interactions))
        self._created.clear()
        self._dirty.clear()
        self._new_interactions.clear()

    def rollback(self) -> None:
        """Discard staged changes and forget loaded contexts."""
        self._contexts.clear()
        self._created.clear()
        self._dirty.clear()
        self._new_interactions.clear()
