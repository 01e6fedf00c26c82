"""
Tests for the API service wrappers: paths, payloads and response models.
"""

import asyncio
import json
import os
import sys

import httpx
import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "../.."))

from journal_client.config import ClientSettings
from journal_client.gateway import HttpGateway
from journal_client.models import EntityCreateRequest, EntityType, TrackRequest
from journal_client.services import (
    AccountService,
    EntityService,
    MetricsService,
    NoteService,
    TrackingService,
)

from helpers import API_URL


class RecordingApi:
    def __init__(self, body):
        self.body = body
        self.requests = []

    def __call__(self, request):
        self.requests.append(request)
        return httpx.Response(200, json=self.body)

    @property
    def last(self):
        return self.requests[-1]

    @property
    def last_json(self):
        return json.loads(self.last.content) if self.last.content else None


def _gateway(api):
    return HttpGateway(
        ClientSettings(api_url=API_URL, state_path=None),
        token_provider=lambda: "tok",
        transport=httpx.MockTransport(api),
    )


class TestServices:
    """Test suite for the service layer."""

    def test_note_move_to_root_sends_null_folder(self):
        api = RecordingApi({})
        asyncio.run(NoteService(_gateway(api)).move("n1", None))

        assert api.last.method == "PATCH"
        assert api.last.url.path == "/api/notes/n1/move"
        assert api.last_json == {"folderId": None}

    def test_note_list_filters(self):
        api = RecordingApi([{"id": "n1", "title": "Monday", "folderId": "f1"}])
        notes = asyncio.run(NoteService(_gateway(api)).list(folder_id="f1", root_only=True))

        assert notes[0].folder_id == "f1"
        assert api.last.url.params["folderId"] == "f1"
        assert api.last.url.params["rootOnly"] == "true"
        assert "days" not in api.last.url.params

    def test_entity_create_payload_uses_wire_names(self):
        api = RecordingApi({"id": "e1", "type": "HABIT", "name": "Run"})
        request = EntityCreateRequest(name="Run", type=EntityType.HABIT, icon="🏃")

        entity = asyncio.run(EntityService(_gateway(api)).create(request))

        assert entity.type == EntityType.HABIT
        assert api.last_json == {"name": "Run", "type": "HABIT", "icon": "🏃"}

    def test_entity_list_type_filter(self):
        api = RecordingApi([])
        asyncio.run(EntityService(_gateway(api)).list(EntityType.PERSON))
        assert api.last.url.params["type"] == "PERSON"

    def test_track_and_untrack(self):
        api = RecordingApi({"id": "t1", "entityId": "h9", "date": "2026-10-19", "value": 1})
        service = TrackingService(_gateway(api))

        event = asyncio.run(service.track("h9", TrackRequest(date="2026-10-19", value=1)))
        assert event.entity_id == "h9"
        assert api.last_json == {"date": "2026-10-19", "value": 1}

        asyncio.run(service.untrack("h9", "2026-10-19"))
        assert api.last.method == "DELETE"
        assert api.last.url.params["date"] == "2026-10-19"

    def test_heatmap_and_timeline(self):
        api = RecordingApi({"2026-10-18": 1, "2026-10-19": 2})
        heatmap = asyncio.run(TrackingService(_gateway(api)).heatmap("h9", date_from="2026-10-01"))
        assert heatmap == {"2026-10-18": 1, "2026-10-19": 2}
        assert api.last.url.params["from"] == "2026-10-01"

        api.body = {
            "entityId": "h9",
            "entityType": "HABIT",
            "entityName": "Run",
            "totalMentions": 1,
            "heatmap": {"2026-10-19": 1},
            "mentions": [{"noteId": "n1", "noteTitle": "Monday", "date": "2026-10-19", "context": "ran 5k"}],
        }
        timeline = asyncio.run(MetricsService(_gateway(api)).timeline("h9"))
        assert timeline.mentions[0].note_id == "n1"

    def test_password_reset_is_unauthenticated(self):
        api = RecordingApi({})
        asyncio.run(AccountService(_gateway(api)).reset("reset-token", "new-pw"))

        assert "Authorization" not in api.last.headers
        assert api.last_json == {"token": "reset-token", "newPassword": "new-pw"}


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
