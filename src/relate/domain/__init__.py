"""Domain layer: entities and value objects. No dependencies on outer layers."""

from relate.domain.entities import (
    DEFAULT_PRIORITY,
    ContactContext,
    Interaction,
    InteractionType,
    parse_tags,
)

__all__ = [
    "DEFAULT_PRIORITY",
    "ContactContext",
    "Interaction",
    "InteractionType",
    "parse_tags",
]
