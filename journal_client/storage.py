"""Local persisted state: the credential and per-note draft snapshots."""

from __future__ import annotations

import json
import logging
import threading
import time
from pathlib import Path
from typing import Dict, Optional

logger = logging.getLogger(__name__)

TOKEN_KEY = "token"
DRAFT_PREFIX = "draft:"
NEW_NOTE_KEY = "new"


def draft_key(note_id: Optional[str]) -> str:
    return f"{DRAFT_PREFIX}{note_id or NEW_NOTE_KEY}"


class LocalState:
    """
    Small string key/value store backed by one JSON file.

    With no path the values only live in memory.
    """

    def __init__(self, path: Optional[Path] = None):
        self.path = Path(path).expanduser() if path else None
        self._lock = threading.RLock()
        self._values: Dict[str, str] = self._read_state()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    def get(self, key: str) -> Optional[str]:
        with self._lock:
            return self._values.get(key)

    def set(self, key: str, value: str) -> None:
        with self._lock:
            self._values[key] = value
            self._write_state()

    def remove(self, key: str) -> None:
        with self._lock:
            if self._values.pop(key, None) is not None:
                self._write_state()

    def keys(self):
        with self._lock:
            return list(self._values.keys())

    # Credential ---------------------------------------------------------
    def load_token(self) -> Optional[str]:
        return self.get(TOKEN_KEY)

    def save_token(self, token: str) -> None:
        self.set(TOKEN_KEY, token)

    def clear_token(self) -> None:
        self.remove(TOKEN_KEY)

    # Drafts -------------------------------------------------------------
    def load_draft(self, note_id: Optional[str]) -> Optional[str]:
        return self.get(draft_key(note_id))

    def save_draft(self, note_id: Optional[str], content: str) -> None:
        self.set(draft_key(note_id), content)

    def clear_draft(self, note_id: Optional[str]) -> None:
        self.remove(draft_key(note_id))

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------
    def _read_state(self) -> Dict[str, str]:
        if self.path is None or not self.path.exists():
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                payload = json.load(f)
        except (OSError, ValueError) as exc:
            logger.warning("Ignoring unreadable state file %s: %s", self.path, exc)
            return {}
        values = payload.get("values") if isinstance(payload, dict) else None
        if not isinstance(values, dict):
            return {}
        return {str(k): str(v) for k, v in values.items() if isinstance(v, str)}

    def _write_state(self) -> None:
        if self.path is None:
            return
        payload = {"values": self._values, "updated_at": time.time()}
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump(payload, f, indent=2)
        tmp_path.replace(self.path)
