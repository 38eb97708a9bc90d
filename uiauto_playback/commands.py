"""
@file commands.py
@brief Command surface over a SessionRegistry that never raises to its caller.

Every method returns a CommandResult. Session usage errors, unknown ids
and configuration errors come back as ok=False with the exception class
name in error_type, so a UI or IPC bridge can forward them as data.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Optional

from .config import PlaybackConfig
from .exceptions import PlaybackError
from .interfaces import ISurface
from .log import get_logger
from .models.document import Document
from .models.events import PlaybackEvent
from .registry import SessionRegistry

logger = get_logger(__name__)


@dataclass(frozen=True)
class CommandResult:
    """
    Immutable outcome of one playback command.

    Attributes:
        command: Command name (create, start, step, ...)
        session_id: Target session (the new id for create)
        ok: True when the command was accepted and completed
        value: Command payload (session id, run result, snapshot, ...)
        error: Error message when ok is False
        error_type: Exception class name when ok is False
    """
    command: str
    session_id: Optional[str]
    ok: bool
    value: Any = None
    error: Optional[str] = None
    error_type: Optional[str] = None

    def to_log_dict(self) -> dict:
        """Convert to dictionary for logging."""
        return {
            "command": self.command,
            "session_id": self.session_id,
            "ok": self.ok,
            "error": self.error,
            "error_type": self.error_type,
        }


class PlaybackCommands:
    """
    Facade translating command calls into session operations.

    @param registry Registry holding the sessions
    @param surface Execution surface bound to sessions created here
    @param defaults Configuration used when create() gets none
    """

    def __init__(
        self,
        registry: SessionRegistry,
        surface: ISurface,
        defaults: Optional[PlaybackConfig] = None,
    ):
        self.registry = registry
        self.surface = surface
        self.defaults = defaults or PlaybackConfig()

    def _invoke(self, command: str, session_id: Optional[str], fn: Callable[[], Any]) -> CommandResult:
        try:
            value = fn()
        except PlaybackError as e:
            logger.warning(f"{command}({session_id}) rejected: {e}")
            return CommandResult(
                command=command,
                session_id=session_id,
                ok=False,
                error=str(e),
                error_type=type(e).__name__,
            )
        except Exception as e:
            logger.exception(f"{command}({session_id}) failed unexpectedly")
            return CommandResult(
                command=command,
                session_id=session_id,
                ok=False,
                error=str(e) or type(e).__name__,
                error_type=type(e).__name__,
            )
        return CommandResult(command=command, session_id=session_id, ok=True, value=value)

    def create(self, document: Document, config: Optional[PlaybackConfig] = None) -> CommandResult:
        """Create a session; value and session_id carry the new id."""
        result = self._invoke(
            "create", None, lambda: self.registry.create(document, self.surface, config or self.defaults)
        )
        if result.ok:
            return CommandResult(command="create", session_id=result.value, ok=True, value=result.value)
        return result

    def start(self, session_id: str) -> CommandResult:
        """Run until completion or pause; value is {success, duration}."""
        return self._invoke("start", session_id, lambda: self.registry.require(session_id).start().to_dict())

    def step(self, session_id: str) -> CommandResult:
        return self._invoke("step", session_id, lambda: self.registry.require(session_id).step().to_dict())

    def resume(self, session_id: str) -> CommandResult:
        return self._invoke("resume", session_id, lambda: self.registry.require(session_id).resume().to_dict())

    def pause(self, session_id: str) -> CommandResult:
        return self._invoke("pause", session_id, lambda: self.registry.require(session_id).pause())

    def stop(self, session_id: str) -> CommandResult:
        """Stop the session. It stays registered so snapshot() keeps working."""
        return self._invoke("stop", session_id, lambda: self.registry.require(session_id).stop())

    def dispose(self, session_id: str) -> CommandResult:
        """Dispose the session and remove it from the registry."""
        def _dispose() -> None:
            self.registry.require(session_id)
            self.registry.remove(session_id)

        return self._invoke("dispose", session_id, _dispose)

    def snapshot(self, session_id: str) -> CommandResult:
        """Value is the snapshot as a dict of state, position and results."""
        return self._invoke("snapshot", session_id, lambda: self.registry.require(session_id).snapshot().to_dict())

    def subscribe(self, session_id: str, listener: Callable[[PlaybackEvent], None]) -> CommandResult:
        """Value is the unsubscribe function."""
        return self._invoke("subscribe", session_id, lambda: self.registry.require(session_id).on(listener))
