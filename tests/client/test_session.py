"""
Integration tests for the session store against the fake API.
"""

import asyncio
import os
import sys

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "../.."))

from journal_client.errors import ConflictError, UnauthorizedError
from journal_client.models import PlanType
from journal_client.session import SessionPhase
from journal_client.signals import Signal
from journal_client.storage import LocalState

from fake_api import FakeBackend
from helpers import build_app_state


class TestSessionStore:
    """Test suite for SessionStore transitions."""

    def setup_method(self):
        """Set up test fixtures."""
        self.backend = FakeBackend()
        self.backend.add_user("ana", "ana@example.com", "hunter2")
        self.local_state = LocalState()
        self.redirects = []
        self.app = build_app_state(self.backend, self.local_state, self.redirects)
        self.snapshots = []
        self.app.session.subscribe(self.snapshots.append)

    def _run(self, coro):
        return asyncio.run(coro)

    def test_starts_anonymous(self):
        session = self.app.session
        assert session.phase == SessionPhase.ANONYMOUS
        assert session.credential is None
        assert session.user is None

    def test_login_stores_credential_and_profile(self):
        user = self._run(self.app.session.login("ana@example.com", "hunter2"))

        snapshot = self.app.session.snapshot()
        assert user.username == "ana"
        assert snapshot.phase == SessionPhase.AUTHENTICATED
        assert snapshot.user.email == "ana@example.com"
        assert snapshot.plan == PlanType.FREE
        assert self.local_state.load_token() == snapshot.credential
        assert [s.phase for s in self.snapshots] == [SessionPhase.AUTHENTICATED]

    def test_failed_login_keeps_prior_state(self):
        with pytest.raises(UnauthorizedError):
            self._run(self.app.session.login("ana@example.com", "wrong"))

        assert self.app.session.phase == SessionPhase.ANONYMOUS
        assert self.local_state.load_token() is None
        assert self.snapshots == []

    def test_register_then_duplicate_register(self):
        user = self._run(self.app.session.register("bruno", "bruno@example.com", "pw"))
        assert user.username == "bruno"
        assert self.app.session.phase == SessionPhase.AUTHENTICATED

        with pytest.raises(ConflictError):
            self._run(self.app.session.register("bruno", "bruno@example.com", "pw"))
        assert self.app.session.user.username == "bruno"

    def test_hydrate_without_credential_is_noop(self):
        self._run(self.app.start())

        assert self.app.session.phase == SessionPhase.ANONYMOUS
        assert self.snapshots == []
        assert self.backend.requests == []

    def test_hydrate_with_valid_credential(self):
        self.local_state.save_token(self.backend.issue_token("ana@example.com"))

        self._run(self.app.start())

        assert [s.phase for s in self.snapshots] == [SessionPhase.HYDRATING, SessionPhase.AUTHENTICATED]
        assert self.app.session.user.username == "ana"

    def test_hydrate_with_rejected_credential(self):
        self.local_state.save_token("stale")

        self._run(self.app.start())

        assert self.app.session.phase == SessionPhase.ANONYMOUS
        assert self.local_state.load_token() is None
        assert self.snapshots[-1].phase == SessionPhase.ANONYMOUS
        assert self.snapshots[-1].credential is None

    def test_logout_is_idempotent(self):
        self._run(self.app.session.login("ana@example.com", "hunter2"))

        assert self.app.session.logout() is True
        assert self.app.session.logout() is False
        assert self.app.session.phase == SessionPhase.ANONYMOUS
        assert self.app.session.user is None
        assert self.local_state.load_token() is None

    def test_concurrent_unauthorized_responses_log_out_once(self):
        self._run(self.app.session.login("ana@example.com", "hunter2"))
        self.backend.tokens.clear()
        self.snapshots.clear()

        async def two_calls():
            return await asyncio.gather(
                self.app.services.entities.list(),
                self.app.services.notes.get("n1"),
                return_exceptions=True,
            )

        results = self._run(two_calls())

        assert all(isinstance(r, UnauthorizedError) for r in results)
        assert [s.phase for s in self.snapshots] == [SessionPhase.ANONYMOUS]
        assert self.redirects == ["/login", "/login"]

    def test_logout_signal_drives_session(self):
        self._run(self.app.session.login("ana@example.com", "hunter2"))

        self.app.signals.emit(Signal.LOGOUT, {"status": 401})

        assert self.app.session.phase == SessionPhase.ANONYMOUS

    def test_failed_login_while_signed_in_ends_session(self):
        self._run(self.app.session.login("ana@example.com", "hunter2"))
        self.snapshots.clear()

        with pytest.raises(UnauthorizedError):
            self._run(self.app.session.login("ana@example.com", "wrong"))

        # Any 401 is a logout signal, a rejected re-login included.
        assert self.app.session.phase == SessionPhase.ANONYMOUS
        assert self.local_state.load_token() is None
        assert [s.phase for s in self.snapshots] == [SessionPhase.ANONYMOUS]
        assert self.redirects == ["/login"]

    def test_credential_file_is_cleared_before_unauthorized_error_surfaces(self, tmp_path):
        state_path = tmp_path / "state.json"
        app = build_app_state(self.backend, LocalState(state_path))
        self._run(app.session.login("ana@example.com", "hunter2"))
        self.backend.tokens.clear()
        seen_on_disk = []

        async def call():
            try:
                await app.services.entities.list()
            except UnauthorizedError:
                seen_on_disk.append(LocalState(state_path).load_token())

        self._run(call())

        assert seen_on_disk == [None]
        assert app.session.phase == SessionPhase.ANONYMOUS

    def test_update_user_merges_fields(self):
        self._run(self.app.session.login("ana@example.com", "hunter2"))

        updated = self.app.session.update_user(username="ana.b")

        assert updated.username == "ana.b"
        assert self.app.session.user.email == "ana@example.com"

    def test_refresh_user_with_revoked_credential_logs_out(self):
        self._run(self.app.session.login("ana@example.com", "hunter2"))
        self.backend.tokens.clear()

        assert self._run(self.app.session.refresh_user()) is None
        assert self.app.session.phase == SessionPhase.ANONYMOUS

    def test_credential_is_injected_after_login(self):
        self.backend.add_entity("p1", "PERSON", "Carla")
        self._run(self.app.session.login("ana@example.com", "hunter2"))

        entities = self._run(self.app.services.entities.list())

        assert [e.name for e in entities] == ["Carla"]


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
