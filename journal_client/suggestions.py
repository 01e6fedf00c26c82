"""Suggestion matching for the mention popup."""

from __future__ import annotations

from typing import Iterable, List

from journal_client.models import Entity

MAX_SUGGESTIONS = 6


def match_entities(entities: Iterable[Entity], query: str, limit: int = MAX_SUGGESTIONS) -> List[Entity]:
    """
    Pick the entities whose name contains ``query``.

    Archived entities never match and an empty query yields no suggestions.
    Results keep the order of ``entities``.
    """
    if not query:
        return []

    needle = query.casefold()
    matches: List[Entity] = []
    for entity in entities:
        if entity.archived:
            continue
        if needle in entity.name.casefold():
            matches.append(entity)
            if len(matches) >= limit:
                break
    return matches
