"""Process-wide failure signals and their subscriber lists."""

from __future__ import annotations

import logging
import threading
from enum import Enum
from typing import Any, Callable, Dict, List

logger = logging.getLogger(__name__)

Listener = Callable[[Any], None]


class Signal(str, Enum):
    LOGOUT = "auth:logout"
    FORBIDDEN = "api:forbidden"
    SERVER_ERROR = "api:serverError"


class SignalBus:
    """
    Explicit broadcast channel owned by the HTTP gateway.

    Listeners run synchronously inside ``emit`` so they have finished before
    the failing call's exception reaches its caller. Delivery order between
    listeners is not part of the contract and listeners must tolerate
    receiving the same signal more than once.
    """

    def __init__(self):
        self._lock = threading.RLock()
        self._listeners: Dict[Signal, List[Listener]] = {signal: [] for signal in Signal}

    def connect(self, signal: Signal, listener: Listener) -> Callable[[], None]:
        """Register ``listener`` and return a callable that removes it."""
        with self._lock:
            self._listeners[signal].append(listener)

        def disconnect() -> None:
            with self._lock:
                if listener in self._listeners[signal]:
                    self._listeners[signal].remove(listener)

        return disconnect

    def emit(self, signal: Signal, payload: Any = None) -> int:
        """Deliver ``payload`` to every listener of ``signal``; returns how many ran."""
        with self._lock:
            listeners = list(self._listeners[signal])

        logger.debug("Emitting %s to %d listener(s)", signal.value, len(listeners))
        delivered = 0
        for listener in listeners:
            try:
                listener(payload)
            except Exception:
                logger.exception("Listener for %s failed", signal.value)
                continue
            delivered += 1
        return delivered

    def listener_count(self, signal: Signal) -> int:
        with self._lock:
            return len(self._listeners[signal])
