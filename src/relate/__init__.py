"""
Relate core: clean-architecture layout.

- domain: entities (ContactContext, Interaction, InteractionType). No outer dependencies.
- application: use cases (RelationshipService, inbox import, deep links), ports, DTOs.
- infrastructure: adapters (in-memory and Neo4j stores, shared defaults inbox, contacts directories).
"""

from relate.application import (
    ContactRecord,
    ContextUpdate,
    RelationshipService,
    handle_deep_link,
    import_pending_interactions,
    parse_contact_link,
)
from relate.domain import ContactContext, Interaction, InteractionType, parse_tags
from relate.infrastructure import (
    InMemoryContactDirectory,
    InMemoryRelationshipStore,
    Neo4jRelationshipStore,
    PendingInteractionInbox,
    SharedDefaults,
)

__all__ = [
    "ContactContext",
    "ContactRecord",
    "ContextUpdate",
    "InMemoryContactDirectory",
    "InMemoryRelationshipStore",
    "Interaction",
    "InteractionType",
    "Neo4jRelationshipStore",
    "PendingInteractionInbox",
    "RelationshipService",
    "SharedDefaults",
    "handle_deep_link",
    "import_pending_interactions",
    "parse_contact_link",
    "parse_tags",
]
