"""Client application state: the process-wide gateway, session and services."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Optional

import httpx

from journal_client.config import ClientSettings
from journal_client.editor import EditorSession, Scheduler
from journal_client.gateway import HttpGateway, Sleep
from journal_client.services import (
    AccountService,
    AuthService,
    EntityService,
    FolderService,
    MetricsService,
    NoteService,
    SubscriptionService,
    TrackingService,
)
from journal_client.session import SessionStore
from journal_client.signals import SignalBus
from journal_client.storage import LocalState

logger = logging.getLogger(__name__)


@dataclass
class ApiServices:
    auth: AuthService
    notes: NoteService
    entities: EntityService
    tracking: TrackingService
    metrics: MetricsService
    folders: FolderService
    subscriptions: SubscriptionService
    account: AccountService


class JournalAppState:
    """Holds the single gateway, session store and API services of the process."""

    def __init__(
        self,
        settings: Optional[ClientSettings] = None,
        *,
        local_state: Optional[LocalState] = None,
        on_login_redirect: Optional[Callable[[str], None]] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        sleep: Optional[Sleep] = None,
    ):
        self.settings = settings or ClientSettings.from_env()
        self.local_state = local_state or LocalState(self.settings.state_path)
        self.signals = SignalBus()
        self.gateway = HttpGateway(
            self.settings,
            self.signals,
            token_provider=self._current_credential,
            on_login_redirect=on_login_redirect,
            transport=transport,
            sleep=sleep,
        )
        self.services = ApiServices(
            auth=AuthService(self.gateway),
            notes=NoteService(self.gateway),
            entities=EntityService(self.gateway),
            tracking=TrackingService(self.gateway),
            metrics=MetricsService(self.gateway),
            folders=FolderService(self.gateway),
            subscriptions=SubscriptionService(self.gateway),
            account=AccountService(self.gateway),
        )
        self.session = SessionStore(self.services.auth, self.local_state, self.signals)

    async def start(self) -> None:
        """Restore any persisted session; call once at process start."""
        await self.session.hydrate()
        logger.info("Client started in %s phase", self.session.phase.value)

    async def close(self) -> None:
        self.session.close()
        await self.gateway.aclose()

    def open_editor(
        self,
        note_id: Optional[str] = None,
        *,
        folder_id: Optional[str] = None,
        scheduler: Optional[Scheduler] = None,
    ) -> EditorSession:
        return EditorSession(
            self.services.notes,
            self.services.entities,
            self.local_state,
            note_id=note_id,
            folder_id=folder_id,
            autosave_delay=self.settings.autosave_delay_s,
            scheduler=scheduler,
        )

    def _current_credential(self) -> Optional[str]:
        return self.session.credential
