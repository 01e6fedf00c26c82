"""Environment-driven settings for the journal client."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

DEFAULT_API_URL = "http://localhost:8080"
DEFAULT_STATE_PATH = Path.home() / ".journal_client" / "state.json"


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError:
        logging.getLogger(__name__).warning("Ignoring invalid %s=%r", name, raw)
        return default


def _env_int(name: str, default: int) -> int:
    return int(_env_float(name, float(default)))


@dataclass(frozen=True)
class ClientSettings:
    api_url: str = DEFAULT_API_URL
    timeout_s: float = 30.0
    max_retries: int = 2
    retry_base_delay_s: float = 0.5
    autosave_delay_s: float = 1.5
    state_path: Optional[Path] = DEFAULT_STATE_PATH
    log_level: str = "INFO"
    login_route: str = "/login"

    @classmethod
    def from_env(cls) -> "ClientSettings":
        state_path = os.environ.get("JOURNAL_STATE_PATH")
        return cls(
            api_url=os.environ.get("JOURNAL_API_URL", DEFAULT_API_URL).rstrip("/"),
            timeout_s=_env_float("JOURNAL_TIMEOUT_S", 30.0),
            max_retries=max(0, _env_int("JOURNAL_MAX_RETRIES", 2)),
            retry_base_delay_s=_env_float("JOURNAL_RETRY_BASE_DELAY_S", 0.5),
            autosave_delay_s=_env_float("JOURNAL_AUTOSAVE_DELAY_S", 1.5),
            state_path=Path(state_path).expanduser() if state_path else DEFAULT_STATE_PATH,
            log_level=os.environ.get("JOURNAL_LOG_LEVEL", "INFO").upper(),
        )


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
