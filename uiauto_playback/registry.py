"""
@file registry.py
@brief Keyed store of live playback sessions.
"""

from __future__ import annotations

import threading
import uuid
from typing import Callable, Dict, List, Optional, Tuple

from .config import PlaybackConfig
from .emitter import EventEmitter
from .exceptions import SessionNotFoundError
from .interfaces import ISurface
from .log import get_logger
from .models.document import Document
from .models.events import PlaybackEvent, now_ms
from .models.results import SessionSnapshot
from .session import PlaybackSession

logger = get_logger(__name__)

ID_PREFIX = "playback"

_BASE36 = "0123456789abcdefghijklmnopqrstuvwxyz"


def _base36(value: int) -> str:
    if value == 0:
        return "0"
    digits = []
    while value:
        value, rem = divmod(value, 36)
        digits.append(_BASE36[rem])
    return "".join(reversed(digits))


def generate_session_id(prefix: str = ID_PREFIX) -> str:
    """Opaque id: "<prefix>-<base36 ms timestamp>-<random hex>"."""
    return f"{prefix}-{_base36(now_ms())}-{uuid.uuid4().hex[:8]}"


class SessionRegistry:
    """
    Holds every live PlaybackSession of one host.

    The registry is a plain object: whoever hosts playback creates it and
    calls dispose_all() when shutting down. Events of every session are
    re-broadcast to on_event() listeners as (session_id, event).
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._sessions: Dict[str, PlaybackSession] = {}
        self._events: EventEmitter[Tuple[str, PlaybackEvent]] = EventEmitter()

    def create(
        self,
        document: Document,
        surface: ISurface,
        config: Optional[PlaybackConfig] = None,
    ) -> str:
        """
        Construct and register a session bound to document and surface.

        @return The new session id
        """
        with self._lock:
            session_id = generate_session_id()
            while session_id in self._sessions:
                session_id = generate_session_id()
            session = PlaybackSession(session_id, document, surface, config)
            self._sessions[session_id] = session

        session.on(lambda event: self._events.emit((session_id, event)))
        logger.info(f"Created session {session_id} ({session.total_steps} steps)")
        return session_id

    def get(self, session_id: str) -> Optional[PlaybackSession]:
        """Return the session, or None when the id is unknown."""
        with self._lock:
            return self._sessions.get(session_id)

    def require(self, session_id: str) -> PlaybackSession:
        """Return the session or raise SessionNotFoundError."""
        session = self.get(session_id)
        if session is None:
            raise SessionNotFoundError(session_id)
        return session

    def remove(self, session_id: str) -> bool:
        """
        Dispose the session and drop it from the store.

        @return False when the id was not registered
        """
        with self._lock:
            session = self._sessions.pop(session_id, None)
        if session is None:
            return False
        session.dispose()
        logger.info(f"Removed session {session_id}")
        return True

    def ids(self) -> List[str]:
        with self._lock:
            return list(self._sessions)

    def snapshots(self) -> List[SessionSnapshot]:
        with self._lock:
            sessions = list(self._sessions.values())
        return [s.snapshot() for s in sessions]

    def on_event(self, listener: Callable[[str, PlaybackEvent], None]) -> Callable[[], None]:
        """Listen to events from every session. Returns an unsubscribe function."""
        return self._events.on(lambda item: listener(item[0], item[1]))

    def dispose_all(self) -> None:
        """Dispose every session and drop registry-wide listeners."""
        for session_id in self.ids():
            try:
                self.remove(session_id)
            except Exception:
                logger.exception(f"Listener failed while disposing session {session_id}")
        self._events.clear()

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, session_id: object) -> bool:
        return session_id in self._sessions
