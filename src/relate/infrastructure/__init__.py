"""Infrastructure layer: concrete implementations of application ports."""

from relate.infrastructure.contacts_directory import (
    InMemoryContactDirectory,
    JsonFileContactDirectory,
)
from relate.infrastructure.links import (
    contact_link,
    dial_link,
    email_link,
    reminder_link,
)
from relate.infrastructure.memory_store import InMemoryRelationshipStore
from relate.infrastructure.persistence.neo4j_store import (
    Neo4jRelationshipStore,
    ensure_contact_context_constraint,
)
from relate.infrastructure.shared_defaults import PendingInteractionInbox, SharedDefaults

__all__ = [
    "InMemoryContactDirectory",
    "InMemoryRelationshipStore",
    "JsonFileContactDirectory",
    "Neo4jRelationshipStore",
    "PendingInteractionInbox",
    "SharedDefaults",
    "contact_link",
    "dial_link",
    "email_link",
    "ensure_contact_context_constraint",
    "reminder_link",
]
