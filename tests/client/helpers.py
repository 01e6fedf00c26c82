"""Shared fixtures for the client tests."""

from __future__ import annotations

import os
import sys
from typing import Callable, List, Optional

import httpx

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "../.."))

from journal_client.app_state import JournalAppState
from journal_client.config import ClientSettings
from journal_client.models import Entity, EntityType
from journal_client.storage import LocalState

from fake_api import FakeBackend, create_app

API_URL = "http://journal.test"


def make_entity(entity_id: str, name: str, entity_type: EntityType = EntityType.PERSON, **extra) -> Entity:
    return Entity(id=entity_id, name=name, type=entity_type, **extra)


class _Handle:
    def __init__(self, scheduler: "FakeScheduler", when: float, callback: Callable[[], None]):
        self.scheduler = scheduler
        self.when = when
        self.callback = callback
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class FakeScheduler:
    """Manually advanced clock with a ``call_later`` like the asyncio loop's."""

    def __init__(self):
        self.now = 0.0
        self.handles: List[_Handle] = []
        self.fired_at: List[float] = []

    def call_later(self, delay: float, callback: Callable[[], None]) -> _Handle:
        handle = _Handle(self, self.now + delay, callback)
        self.handles.append(handle)
        return handle

    def advance(self, seconds: float) -> None:
        target = self.now + seconds
        while True:
            due = [h for h in self.handles if not h.cancelled and h.when <= target]
            if not due:
                break
            handle = min(due, key=lambda h: h.when)
            self.handles.remove(handle)
            self.now = handle.when
            self.fired_at.append(handle.when)
            handle.callback()
        self.now = target

    @property
    def pending(self) -> int:
        return sum(1 for h in self.handles if not h.cancelled)


class RecordingSleep:
    """Stand-in for asyncio.sleep that records the requested delays."""

    def __init__(self):
        self.delays: List[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


def build_app_state(
    backend: FakeBackend,
    local_state: Optional[LocalState] = None,
    redirects: Optional[List[str]] = None,
) -> JournalAppState:
    settings = ClientSettings(api_url=API_URL, state_path=None)
    return JournalAppState(
        settings,
        local_state=local_state or LocalState(),
        on_login_redirect=redirects.append if redirects is not None else None,
        transport=httpx.ASGITransport(app=create_app(backend)),
        sleep=RecordingSleep(),
    )
