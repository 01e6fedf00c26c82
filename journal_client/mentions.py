"""Detection and insertion of in-progress entity mentions."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

from journal_client.models import Entity
from journal_client.tokens import CLOSE_CHAR, TRIGGER_CHAR, token_for


@dataclass(frozen=True)
class MentionQuery:
    query: str
    trigger_index: int
    cursor: int


def _clamp(cursor: int, text: str) -> int:
    return max(0, min(int(cursor), len(text)))


def find_trigger(text: str, cursor: int) -> Optional[int]:
    """
    Find the unterminated trigger character nearest before ``cursor``.

    The scan stops at the start of the current line, and a closing brace met
    before any trigger means the last mention is already complete.
    """
    index = _clamp(cursor, text) - 1
    while index >= 0:
        char = text[index]
        if char == TRIGGER_CHAR:
            return index
        if char == CLOSE_CHAR or char == "\n":
            return None
        index -= 1
    return None


def detect_mention(text: str, cursor: int) -> Optional[MentionQuery]:
    """Return the mention being typed at ``cursor``, or None."""
    text = text or ""
    cursor = _clamp(cursor, text)
    trigger_index = find_trigger(text, cursor)
    if trigger_index is None:
        return None

    query = text[trigger_index + 1 : cursor]
    if any(char.isspace() or char in (TRIGGER_CHAR, CLOSE_CHAR) for char in query):
        return None
    return MentionQuery(query=query, trigger_index=trigger_index, cursor=cursor)


def insert_mention(text: str, cursor: int, entity: Entity) -> Tuple[str, int]:
    """
    Splice the entity's token over the mention being typed.

    Returns the new text and the cursor offset just after the inserted token.
    Without an open mention the token is inserted at the cursor.
    """
    text = text or ""
    cursor = _clamp(cursor, text)
    mention = detect_mention(text, cursor)
    start = mention.trigger_index if mention else cursor

    token = token_for(entity)
    updated = text[:start] + token + text[cursor:]
    return updated, start + len(token)
