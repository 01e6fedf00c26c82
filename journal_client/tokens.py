"""
Reference token codec for note content.

Notes store mentions as inline ``{type:id}`` tokens. The display name of the
referenced entity is never persisted, so renaming an entity is reflected in
every note that mentions it.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Callable, Dict, Iterable, List, Optional, Union

from journal_client.models import Entity, EntityType

TRIGGER_CHAR = "{"
CLOSE_CHAR = "}"

TOKEN_RE = re.compile(r"\{([A-Za-z0-9]+):([A-Za-z0-9_-]+)\}")

Resolver = Callable[[str], Optional[Entity]]


@dataclass(frozen=True)
class EntityReference:
    """One token occurrence inside a piece of note content."""

    entity_type: str
    entity_id: str
    start: int
    end: int

    @property
    def token(self) -> str:
        return format_token(self.entity_type, self.entity_id)


def format_token(entity_type: Union[EntityType, str], entity_id: str) -> str:
    """Build the storage token for an entity reference."""
    tag = entity_type.value if isinstance(entity_type, EntityType) else str(entity_type)
    return f"{TRIGGER_CHAR}{tag.lower()}:{entity_id}{CLOSE_CHAR}"


def token_for(entity: Entity) -> str:
    return format_token(entity.type, entity.id)


def to_storage(display: str) -> str:
    # The edit buffer already holds tokens, so this is a pass-through.
    return display


def to_display(storage: str, resolver: Resolver) -> str:
    """
    Replace every resolvable token with the entity's icon and name.

    Args:
        storage: Note content in storage form
        resolver: Maps an entity id to the entity, or None when unknown

    Returns:
        The content with resolved tokens rewritten; unresolved tokens and any
        text that is not an exact token are left as they are.
    """
    if not storage:
        return storage

    def replace(match: re.Match) -> str:
        entity = resolver(match.group(2))
        if entity is None:
            return match.group(0)
        if entity.icon:
            return f"{entity.icon} {entity.name}"
        return entity.name

    return TOKEN_RE.sub(replace, storage)


def extract_references(text: str) -> List[EntityReference]:
    """Return every token in ``text`` in left-to-right order."""
    return [
        EntityReference(
            entity_type=match.group(1),
            entity_id=match.group(2),
            start=match.start(),
            end=match.end(),
        )
        for match in TOKEN_RE.finditer(text or "")
    ]


def resolver_for(entities: Iterable[Entity]) -> Resolver:
    """Build a resolver backed by an id lookup over ``entities``."""
    by_id: Dict[str, Entity] = {entity.id: entity for entity in entities}
    return by_id.get
