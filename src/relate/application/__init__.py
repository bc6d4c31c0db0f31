"""Application layer: use cases, ports, and DTOs. Depends only on domain."""

from relate.application.deep_link import (
    DEFAULT_URL_SCHEME,
    handle_deep_link,
    parse_contact_link,
)
from relate.application.dto import (
    AuthorizationStatus,
    ContactDetail,
    ContactRecord,
    ContactSummary,
    ContextUpdate,
    ImportReport,
    PendingInteraction,
)
from relate.application.errors import (
    CommitFailure,
    MalformedRecord,
    PermissionDenied,
    RelateError,
    UniquenessViolation,
)
from relate.application.inbox_import import (
    PENDING_INTERACTIONS_KEY,
    decode_pending_interaction,
    import_pending_interactions,
)
from relate.application.ports import (
    ORDER_BY_DATE_DESC,
    ORDER_BY_INSERTION,
    ContactDirectory,
    InteractionInbox,
    RelationshipStore,
)
from relate.application.relationship_service import RelationshipService

__all__ = [
    "DEFAULT_URL_SCHEME",
    "ORDER_BY_DATE_DESC",
    "ORDER_BY_INSERTION",
    "PENDING_INTERACTIONS_KEY",
    "AuthorizationStatus",
    "CommitFailure",
    "ContactDetail",
    "ContactDirectory",
    "ContactRecord",
    "ContactSummary",
    "ContextUpdate",
    "ImportReport",
    "InteractionInbox",
    "MalformedRecord",
    "PendingInteraction",
    "PermissionDenied",
    "RelateError",
    "RelationshipService",
    "RelationshipStore",
    "UniquenessViolation",
    "decode_pending_interaction",
    "handle_deep_link",
    "import_pending_interactions",
    "parse_contact_link",
]
