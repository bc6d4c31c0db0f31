"""Neo4j implementation of RelationshipStore.
Graph: (c:ContactContext {contact_identifier, ...})-[:HAS_INTERACTION]->(i:Interaction {id, ...}).
contact_identifier is unique (see ensure_contact_context_constraint); a second CREATE for
the same identifier fails the commit with UniquenessViolation.
Any future delete must DETACH DELETE the owned Interaction nodes in the same transaction.
"""

import logging
from collections.abc import Callable
from datetime import datetime

from neo4j.exceptions import ConstraintError, DriverError, Neo4jError

from relate.application.errors import CommitFailure, UniquenessViolation
from relate.domain import DEFAULT_PRIORITY, ContactContext, Interaction, InteractionType
from relate.domain.entities import utc_now
from relate.infrastructure.staging import StagedRelationshipStore

logger = logging.getLogger(__name__)

_CONTEXT_CONSTRAINT_QUERY = """
CREATE CONSTRAINT contact_context_identifier_unique IF NOT EXISTS
FOR (c:ContactContext) REQUIRE c.contact_identifier IS UNIQUE
"""

_INTERACTION_CONSTRAINT_QUERY = """
CREATE CONSTRAINT interaction_id_unique IF NOT EXISTS
FOR (i:Interaction) REQUIRE i.id IS UNIQUE
"""

_GET_CONTEXT_QUERY = """
MATCH (c:ContactContext { contact_identifier: $identifier })
OPTIONAL MATCH (c)-[:HAS_INTERACTION]->(i:Interaction)
RETURN c, collect(i) AS interactions
"""

_LIST_CONTEXTS_QUERY = """
MATCH (c:ContactContext)
OPTIONAL MATCH (c)-[:HAS_INTERACTION]->(i:Interaction)
WITH c, collect(i) AS interactions
RETURN c, interactions
ORDER BY c.date_added
"""

_CREATE_CONTEXT_QUERY = """
CREATE (c:ContactContext {
    contact_identifier: $identifier,
    how_we_met: $how_we_met,
    notes: $notes,
    tags: $tags,
    is_favorite: $is_favorite,
    priority: $priority,
    date_added: $date_added,
    last_modified: $last_modified
})
"""

_UPDATE_CONTEXT_QUERY = """
MATCH (c:ContactContext { contact_identifier: $identifier })
SET c.how_we_met = $how_we_met,
    c.notes = $notes,
    c.tags = $tags,
    c.is_favorite = $is_favorite,
    c.priority = $priority,
    c.last_modified = $last_modified
RETURN 1 AS ok
"""

_CREATE_INTERACTION_QUERY = """
MATCH (c:ContactContext { contact_identifier: $identifier })
CREATE (c)-[:HAS_INTERACTION]->(i:Interaction {
    id: $id,
    date: $date,
    note: $note,
    type: $type,
    position: $position
})
RETURN 1 AS ok
"""


def _datetime_to_iso(dt: datetime) -> str:
    return dt.isoformat()


def _iso_to_datetime(s: str) -> datetime:
    return datetime.fromisoformat(s.replace("Z", "+00:00"))


def ensure_contact_context_constraint(driver) -> None:
    """Create unique constraints on ContactContext(contact_identifier) and Interaction(id) if missing."""
    with driver.session() as session:
        session.run(_CONTEXT_CONSTRAINT_QUERY)
        session.run(_INTERACTION_CONSTRAINT_QUERY)


def _context_params(context: ContactContext) -> dict:
    return {
        "identifier": context.contact_identifier,
        "how_we_met": context.how_we_met,
        "notes": context.notes,
        "tags": list(context.tags),
        "is_favorite": context.is_favorite,
        "priority": context.priority,
        "date_added": _datetime_to_iso(context.date_added),
        "last_modified": _datetime_to_iso(context.last_modified),
    }


class Neo4jRelationshipStore(StagedRelationshipStore):
    """Stores ContactContext nodes and their Interaction nodes in Neo4j.
    commit() writes every staged change in one explicit transaction, without retries.
    """

    def __init__(
        self, driver: object, *, clock: Callable[[], datetime] = utc_now
    ) -> None:
        super().__init__(clock=clock)
        self._driver = driver

    def _load(self, identifier: str) -> ContactContext | None:
        with self._driver.session() as session:
            result = session.run(_GET_CONTEXT_QUERY, identifier=identifier)
            record = result.single()
        if not record or record["c"] is None:
            return None
        return _record_to_context(record)

    def _load_all(self) -> list[ContactContext]:
        with self._driver.session() as session:
            result = session.run(_LIST_CONTEXTS_QUERY)
            return [_record_to_context(rec) for rec in result]

    def _persist(
        self,
        created: list[ContactContext],
        updated: list[ContactContext],
        interactions: list[Interaction],
    ) -> None:
        try:
            with self._driver.session() as session:
                with session.begin_transaction() as tx:
                    for context in created:
                        _create_context(tx, context)
                    for context in updated:
                        record = tx.run(_UPDATE_CONTEXT_QUERY, **_context_params(context)).single()
                        if record is None:
                            raise CommitFailure(
                                f"ContactContext {context.contact_identifier!r} no longer exists."
                            )
                    for interaction in interactions:
                        owner = interaction.contact_context
                        if owner is None:
                            raise CommitFailure(f"Interaction {interaction.id} has no owner.")
                        created_interaction = tx.run(
                            _CREATE_INTERACTION_QUERY,
                            identifier=owner.contact_identifier,
                            id=interaction.id,
                            date=_datetime_to_iso(interaction.date),
                            note=interaction.note,
                            type=interaction.type.value,
                            position=interaction.position,
                        ).single()
                        if created_interaction is None:
                            raise CommitFailure(
                                f"ContactContext {owner.contact_identifier!r} no longer exists."
                            )
                    tx.commit()
        except (Neo4jError, DriverError) as e:
            logger.error("Neo4j commit failed: %s", e)
            raise CommitFailure(str(e)) from e


def _create_context(tx, context: ContactContext) -> None:
    try:
        tx.run(_CREATE_CONTEXT_QUERY, **_context_params(context)).consume()
    except ConstraintError as e:
        raise UniquenessViolation(context.contact_identifier) from e


def _record_to_interaction(node) -> Interaction:
    raw_type = node.get("type")
    try:
        interaction_type = InteractionType(raw_type)
    except ValueError:
        interaction_type = InteractionType.from_label(raw_type)
    return Interaction(
        id=node["id"],
        date=_iso_to_datetime(node["date"]),
        note=node.get("note") or "",
        type=interaction_type,
        position=node.get("position") or 0,
    )


def _record_to_context(record) -> ContactContext:
    c = record["c"]
    context = ContactContext(
        contact_identifier=c["contact_identifier"],
        how_we_met=c.get("how_we_met") or "",
        notes=c.get("notes") or "",
        tags=list(c.get("tags") or []),
        is_favorite=bool(c.get("is_favorite")),
        priority=c.get("priority") if c.get("priority") is not None else DEFAULT_PRIORITY,
        date_added=_iso_to_datetime(c["date_added"]),
        last_modified=_iso_to_datetime(c["last_modified"]),
    )
    nodes = [n for n in (record["interactions"] or []) if n is not None]
    for interaction in sorted((_record_to_interaction(n) for n in nodes), key=lambda i: i.position):
        interaction.contact_context = context
        context.interactions.append(interaction)
    return context
