"""
Editor session for a single journal note.

Owns the draft text and cursor, keeps the mention popup in sync with what is
being typed, autosaves existing notes after a quiet period and snapshots the
draft locally when the user is forced away from the page.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, List, Optional, Protocol, Set, Tuple

from journal_client.errors import EmptyNoteError
from journal_client.mentions import detect_mention, insert_mention
from journal_client.models import Entity, NoteResponse
from journal_client.services import EntityService, NoteService
from journal_client.storage import LocalState
from journal_client.suggestions import match_entities
from journal_client.tokens import to_display, to_storage, resolver_for

logger = logging.getLogger(__name__)


class EditorState(str, Enum):
    IDLE = "idle"
    DIRTY = "dirty"
    SAVING = "saving"


class TimerHandle(Protocol):
    def cancel(self) -> Any: ...


class Scheduler(Protocol):
    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle: ...


@dataclass(frozen=True)
class CaretPosition:
    top: int
    left: int


@dataclass(frozen=True)
class EditorMetrics:
    """Text layout constants used to estimate where the caret is on screen."""

    line_height: int = 20
    char_width: int = 8
    offset_top: int = 30
    offset_left: int = 20

    def caret_position(self, text: str, offset: int) -> CaretPosition:
        before = text[:offset]
        line = before.count("\n")
        column = len(before) - (before.rfind("\n") + 1)
        return CaretPosition(
            top=self.offset_top + line * self.line_height,
            left=self.offset_left + column * self.char_width,
        )


@dataclass(frozen=True)
class MentionPopup:
    query: str
    position: CaretPosition
    suggestions: Tuple[Entity, ...] = ()


class Debouncer:
    """A single cancellable timer; scheduling again replaces the pending one."""

    def __init__(self, delay: float, scheduler: Optional[Scheduler] = None):
        self.delay = delay
        self._scheduler = scheduler
        self._handle: Optional[TimerHandle] = None

    @property
    def pending(self) -> bool:
        return self._handle is not None

    def schedule(self, callback: Callable[[], None]) -> None:
        self.cancel()
        scheduler = self._scheduler or asyncio.get_running_loop()

        def fire() -> None:
            self._handle = None
            callback()

        self._handle = scheduler.call_later(self.delay, fire)

    def cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None


class EditorSession:
    """Editing state machine for one note: idle -> dirty -> saving -> idle/dirty."""

    def __init__(
        self,
        notes: NoteService,
        entities: Optional[EntityService] = None,
        local_state: Optional[LocalState] = None,
        *,
        note_id: Optional[str] = None,
        folder_id: Optional[str] = None,
        autosave_delay: float = 1.5,
        scheduler: Optional[Scheduler] = None,
        metrics: Optional[EditorMetrics] = None,
    ):
        self.notes = notes
        self.entity_service = entities
        self.local_state = local_state or LocalState()
        self.note_id = note_id
        self.folder_id = folder_id
        self.metrics = metrics or EditorMetrics()

        self.note: Optional[NoteResponse] = None
        self.entities: List[Entity] = []
        self.popup: Optional[MentionPopup] = None

        self._text = ""
        self._cursor = 0
        self._saved_text = ""
        self._loaded_folder_id: Optional[str] = folder_id
        self._state = EditorState.IDLE
        self._debouncer = Debouncer(autosave_delay, scheduler)
        self._in_flight = 0
        self._save_requested = False
        self._tasks: Set[asyncio.Future] = set()

    # ------------------------------------------------------------------
    # Read access
    # ------------------------------------------------------------------
    @property
    def text(self) -> str:
        return self._text

    @property
    def cursor(self) -> int:
        return self._cursor

    @property
    def state(self) -> EditorState:
        return self._state

    @property
    def is_new(self) -> bool:
        return self.note_id is None

    @property
    def autosave_pending(self) -> bool:
        return self._debouncer.pending

    def display_text(self) -> str:
        return to_display(self._text, resolver_for(self.entities))

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    async def open(self) -> None:
        """Load the entity collection and, for existing notes, the note itself."""
        if self.entity_service is not None:
            try:
                self.entities = await self.entity_service.list()
            except Exception as exc:
                logger.warning("Could not load entities for mentions: %s", exc)
                self.entities = []

        if self.note_id is None:
            return

        note = await self.notes.get(self.note_id)
        self.note = note
        self._text = note.content
        self._saved_text = note.content
        self._cursor = len(note.content)
        self.folder_id = note.folder_id
        self._loaded_folder_id = note.folder_id
        self._state = EditorState.IDLE

    def close(self) -> None:
        self._debouncer.cancel()
        self.popup = None

    async def wait_for_pending(self) -> None:
        """Wait for background saves and snapshot writes started so far."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    # ------------------------------------------------------------------
    # Editing
    # ------------------------------------------------------------------
    def input(self, text: str, cursor: Optional[int] = None) -> None:
        """Apply one keystroke's worth of change to the draft."""
        self._text = to_storage(text or "")
        self._cursor = len(self._text) if cursor is None else max(0, min(cursor, len(self._text)))
        self._refresh_popup()
        self._mark_dirty()

    def move_cursor(self, cursor: int) -> None:
        self._cursor = max(0, min(cursor, len(self._text)))
        self._refresh_popup()

    def set_folder(self, folder_id: Optional[str]) -> None:
        self.folder_id = folder_id

    def dismiss_mention(self) -> None:
        self.popup = None

    def insert_suggestion(self, entity: Entity) -> None:
        self._text, self._cursor = insert_mention(self._text, self._cursor, entity)
        self.popup = None
        self._mark_dirty()

    # ------------------------------------------------------------------
    # Drafts
    # ------------------------------------------------------------------
    def navigate_away(self) -> Optional[asyncio.Future]:
        """
        Snapshot the draft for recovery when the page is being torn down.

        The write runs off the event loop and is never awaited here.
        """
        note_id, content = self.note_id, self._text
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            self.local_state.save_draft(note_id, content)
            return None

        task = loop.create_task(asyncio.to_thread(self.local_state.save_draft, note_id, content))
        self._track(task, "draft snapshot")
        return task

    def recovered_draft(self) -> Optional[str]:
        draft = self.local_state.load_draft(self.note_id)
        if draft is None or draft == self._saved_text:
            return None
        return draft

    def restore_draft(self) -> bool:
        draft = self.recovered_draft()
        if draft is None:
            return False
        self.input(draft, len(draft))
        return True

    # ------------------------------------------------------------------
    # Saving
    # ------------------------------------------------------------------
    async def save(self) -> NoteResponse:
        """
        Save immediately, independent of the autosave timer.

        Existing notes are updated and moved if their folder changed since
        load; new notes are created and the session adopts the new id.
        Failures propagate to the caller.
        """
        content = self._text
        if not content.strip():
            raise EmptyNoteError("Cannot save an empty note")

        draft_note_id = self.note_id
        self._begin_save()
        try:
            if self.note_id is not None:
                note = await self.notes.update(self.note_id, content)
                if self.folder_id != self._loaded_folder_id:
                    await self.notes.move(self.note_id, self.folder_id)
                    self._loaded_folder_id = self.folder_id
            else:
                note = await self.notes.create(content, self.folder_id)
                self.note_id = note.id
                self._loaded_folder_id = note.folder_id if note.folder_id is not None else self.folder_id
        except Exception:
            self._finish_save(None)
            raise

        self.note = note
        self._finish_save(content)
        await asyncio.to_thread(self.local_state.clear_draft, draft_note_id)
        return note

    def _mark_dirty(self) -> None:
        self._state = EditorState.DIRTY
        if self.note_id is not None:
            self._debouncer.schedule(self._on_autosave_timer)
        elif self._in_flight:
            # The first create is still out; save again once it has assigned an id.
            self._save_requested = True

    def _on_autosave_timer(self) -> None:
        task = asyncio.ensure_future(self._autosave())
        self._track(task, "autosave")

    async def _autosave(self) -> None:
        if self.note_id is None or not self._text.strip():
            return
        if self._in_flight:
            # Picked up again once the in-flight save resolves.
            self._save_requested = True
            return

        note_id, content = self.note_id, self._text
        self._begin_save()
        try:
            await self.notes.update(note_id, content)
        except Exception as exc:
            logger.warning("Autosave of note %s failed: %s", note_id, exc)
            self._finish_save(None)
            return
        self._finish_save(content)

    def _begin_save(self) -> None:
        self._in_flight += 1
        self._state = EditorState.SAVING

    def _finish_save(self, saved_content: Optional[str]) -> None:
        self._in_flight -= 1
        if saved_content is not None:
            self._saved_text = saved_content
        if self._in_flight:
            return

        if saved_content is not None and self._text == self._saved_text:
            self._state = EditorState.IDLE
        else:
            self._state = EditorState.DIRTY

        if self._save_requested:
            self._save_requested = False
            if self._state == EditorState.DIRTY:
                self._on_autosave_timer()

    def _refresh_popup(self) -> None:
        mention = detect_mention(self._text, self._cursor)
        if mention is None:
            self.popup = None
            return
        self.popup = MentionPopup(
            query=mention.query,
            position=self.metrics.caret_position(self._text, mention.trigger_index),
            suggestions=tuple(match_entities(self.entities, mention.query)),
        )

    def _track(self, task: asyncio.Future, label: str) -> None:
        self._tasks.add(task)

        def done(finished: asyncio.Future) -> None:
            self._tasks.discard(finished)
            if finished.cancelled():
                return
            exc = finished.exception()
            if exc is not None:
                logger.warning("Background %s failed: %s", label, exc)

        task.add_done_callback(done)
