"""In-memory implementation of RelationshipStore (no DB)."""

import copy
from collections.abc import Callable
from datetime import datetime

from relate.application.errors import UniquenessViolation
from relate.domain import ContactContext, Interaction
from relate.domain.entities import utc_now
from relate.infrastructure.staging import StagedRelationshipStore


class InMemoryRelationshipStore(StagedRelationshipStore):
    """Keeps committed contexts as deep copies in a dict keyed by contact_identifier.

    Several stores may share one backend dict to model independent writers.
    Order of list_contexts is insertion order of the backend.
    """

    def __init__(
        self,
        backend: dict[str, ContactContext] | None = None,
        *,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        super().__init__(clock=clock)
        self._backend = backend if backend is not None else {}

    def _load(self, identifier: str) -> ContactContext | None:
        stored = self._backend.get(identifier)
        return copy.deepcopy(stored) if stored is not None else None

    def _load_all(self) -> list[ContactContext]:
        return [copy.deepcopy(c) for c in self._backend.values()]

    def _persist(
        self,
        created: list[ContactContext],
        updated: list[ContactContext],
        interactions: list[Interaction],
    ) -> None:
        for context in created:
            if context.contact_identifier in self._backend:
                raise UniquenessViolation(context.contact_identifier)
        # Build the next state aside and swap it in, so a failure leaves nothing half-written.
        snapshot = dict(self._backend)
        for context in (*created, *updated):
            snapshot[context.contact_identifier] = copy.deepcopy(context)
        self._backend.clear()
        self._backend.update(snapshot)
