"""Process-wide authentication state machine."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, List, Optional

from journal_client.models import PlanType, User
from journal_client.services import AuthService
from journal_client.signals import Signal, SignalBus
from journal_client.storage import LocalState

logger = logging.getLogger(__name__)


class SessionPhase(str, Enum):
    ANONYMOUS = "anonymous"
    HYDRATING = "hydrating"
    AUTHENTICATED = "authenticated"


@dataclass(frozen=True)
class SessionSnapshot:
    """Read-only view of the session handed to consumers."""

    phase: SessionPhase = SessionPhase.ANONYMOUS
    credential: Optional[str] = None
    user: Optional[User] = None

    @property
    def is_authenticated(self) -> bool:
        return self.phase == SessionPhase.AUTHENTICATED

    @property
    def plan(self) -> Optional[PlanType]:
        return self.user.plan if self.user else None


SessionListener = Callable[[SessionSnapshot], None]


class SessionStore:
    """
    Owns the credential, the profile and the authentication phase.

    State only changes through the transition methods below. Every real
    transition is pushed to subscribers as a new :class:`SessionSnapshot`.
    """

    def __init__(
        self,
        auth: AuthService,
        local_state: Optional[LocalState] = None,
        signals: Optional[SignalBus] = None,
    ):
        self.auth = auth
        self.local_state = local_state or LocalState()
        self._snapshot = SessionSnapshot()
        self._listeners: List[SessionListener] = []
        # Bumped by every logout so late results from older requests are discarded.
        self._epoch = 0
        self._disconnect = None
        if signals is not None:
            self._disconnect = signals.connect(Signal.LOGOUT, self._on_logout_signal)

    # ------------------------------------------------------------------
    # Read access
    # ------------------------------------------------------------------
    def snapshot(self) -> SessionSnapshot:
        return self._snapshot

    @property
    def phase(self) -> SessionPhase:
        return self._snapshot.phase

    @property
    def credential(self) -> Optional[str]:
        return self._snapshot.credential

    @property
    def user(self) -> Optional[User]:
        return self._snapshot.user

    @property
    def plan(self) -> Optional[PlanType]:
        return self._snapshot.plan

    def subscribe(self, listener: SessionListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------
    async def login(self, email: str, password: str) -> User:
        response = await self.auth.login(email, password)
        return await self._complete_sign_in(response.token)

    async def register(self, username: str, email: str, password: str) -> User:
        response = await self.auth.register(username, email, password)
        return await self._complete_sign_in(response.token)

    async def hydrate(self) -> None:
        """Restore a persisted credential at start-up; no-op without one."""
        token = self.local_state.load_token()
        if not token:
            return

        epoch = self._epoch
        self._set(SessionSnapshot(phase=SessionPhase.HYDRATING, credential=token))
        try:
            user = await self.auth.me(token)
        except Exception as exc:
            logger.info("Stored credential rejected during hydrate: %s", exc)
            if epoch == self._epoch:
                self.logout()
            return

        if epoch != self._epoch:
            logger.debug("Session ended while hydrating; discarding profile")
            return
        self._set(SessionSnapshot(phase=SessionPhase.AUTHENTICATED, credential=token, user=user))
        logger.info("Session restored for %s", user.username)

    async def refresh_user(self) -> Optional[User]:
        token = self.credential
        if not token:
            return None
        epoch = self._epoch
        try:
            user = await self.auth.me(token)
        except Exception as exc:
            logger.info("Profile refresh failed: %s", exc)
            if epoch == self._epoch:
                self.logout()
            return None
        if epoch != self._epoch:
            return None
        self._set(SessionSnapshot(phase=SessionPhase.AUTHENTICATED, credential=token, user=user))
        return user

    def update_user(self, **fields: Any) -> Optional[User]:
        """Merge local profile edits into the current user."""
        current = self._snapshot.user
        if current is None:
            return None
        updated = current.model_copy(update=fields)
        self._set(SessionSnapshot(phase=self._snapshot.phase, credential=self._snapshot.credential, user=updated))
        return updated

    def logout(self) -> bool:
        """
        End the session from any phase.

        Returns False when there was nothing to clear, which makes concurrent
        logouts (user action plus one or more unauthorized responses) collapse
        into a single transition.

        Runs synchronously, also from inside signal dispatch, so the stored
        credential is gone before the unauthorized request raises.
        """
        self._epoch += 1
        had_token = self.local_state.load_token() is not None
        self.local_state.clear_token()
        if self._snapshot.phase == SessionPhase.ANONYMOUS and self._snapshot.credential is None and not had_token:
            return False
        self._set(SessionSnapshot())
        logger.info("Session ended")
        return True

    def close(self) -> None:
        if self._disconnect is not None:
            self._disconnect()
            self._disconnect = None

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------
    async def _complete_sign_in(self, token: str) -> User:
        # Nothing is stored until the profile loads, so a failure leaves the prior state.
        user = await self.auth.me(token)
        self.local_state.save_token(token)
        self._set(SessionSnapshot(phase=SessionPhase.AUTHENTICATED, credential=token, user=user))
        logger.info("Signed in as %s", user.username)
        return user

    def _on_logout_signal(self, _payload: Any) -> None:
        self.logout()

    def _set(self, snapshot: SessionSnapshot) -> None:
        previous = self._snapshot
        self._snapshot = snapshot
        logger.debug("Session %s -> %s", previous.phase.value, snapshot.phase.value)
        for listener in list(self._listeners):
            listener(snapshot)
