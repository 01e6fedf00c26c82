"""
Unit tests for the reference token codec.
"""

import os
import sys

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "../.."))

from journal_client.models import EntityType
from journal_client.tokens import (
    extract_references,
    format_token,
    resolver_for,
    to_display,
    to_storage,
)

from helpers import make_entity


def _no_entities(_entity_id):
    return None


@pytest.mark.unit
def test_format_token_lowercases_type():
    assert format_token(EntityType.HABIT, "h9") == "{habit:h9}"
    assert format_token("Person", "42") == "{person:42}"


@pytest.mark.unit
def test_to_storage_is_pass_through():
    text = "met {person:42} today"
    assert to_storage(text) == text


@pytest.mark.unit
@pytest.mark.parametrize(
    "text",
    ["", "plain journal entry", "braces { without } a token", "{}", "{person:}", "{:42}", "{per son:42}"],
)
def test_token_free_text_is_unchanged(text):
    resolver = resolver_for([make_entity("42", "Ana")])
    assert to_display(text, resolver) == text


@pytest.mark.unit
def test_unresolved_token_is_left_verbatim():
    assert to_display("{person:missing-id_1}", _no_entities) == "{person:missing-id_1}"


@pytest.mark.unit
def test_resolved_token_shows_icon_and_name():
    resolver = resolver_for([make_entity("42", "Ana", icon="🧑")])
    rendered = to_display("lunch with {person:42}", resolver)

    assert rendered == "lunch with 🧑 Ana"
    assert "42" not in rendered


@pytest.mark.unit
def test_resolved_token_without_icon_shows_name_only():
    resolver = resolver_for([make_entity("h9", "Run", EntityType.HABIT)])
    assert to_display("{habit:h9}", resolver) == "Run"


@pytest.mark.unit
def test_mixed_tokens_replaced_left_to_right():
    resolver = resolver_for([make_entity("a", "Ana"), make_entity("b", "Bruno")])
    text = "{person:a}{person:zzz} and {person:b} {broken:"
    assert to_display(text, resolver) == "Ana{person:zzz} and Bruno {broken:"


@pytest.mark.unit
def test_extract_references_reports_spans():
    text = "x {person:42} y {habit:h9}"
    refs = extract_references(text)

    assert [(r.entity_type, r.entity_id) for r in refs] == [("person", "42"), ("habit", "h9")]
    assert text[refs[0].start : refs[0].end] == "{person:42}"
    assert refs[1].token == "{habit:h9}"


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
