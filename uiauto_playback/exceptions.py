"""
@file exceptions.py
@brief Exception hierarchy for the playback engine.
"""

from __future__ import annotations

from typing import Any, Optional


class PlaybackError(Exception):
    """Base exception for the playback engine."""
    pass


class ConfigError(PlaybackError):
    """Raised when playback configuration is invalid."""
    pass


class DocumentError(ConfigError):
    """Raised when a document or a single step is malformed."""
    pass


class TimeoutError(PlaybackError):
    """
    Raised when a step or a wait exceeds its timeout.

    Preserves the last exception observed while waiting so the step
    result can carry a useful message.

    Attributes:
        original_exception: The last exception raised before timeout
        description: Human-readable description of what was awaited
        timeout: The timeout value in seconds
        attempt_count: Number of attempts made (if applicable)
        elapsed_time: Actual elapsed time in seconds (if applicable)
    """

    def __init__(self, message: str):
        super().__init__(message)
        self.original_exception: Optional[BaseException] = None
        self.description: Optional[str] = None
        self.timeout: Optional[float] = None
        self.attempt_count: Optional[int] = None
        self.elapsed_time: Optional[float] = None

    def __str__(self) -> str:
        base_msg = super().__str__()

        details = []
        if self.original_exception is not None:
            details.append(f"Original exception: {type(self.original_exception).__name__}")
        if self.attempt_count is not None:
            details.append(f"Attempts: {self.attempt_count}")
        if self.elapsed_time is not None:
            details.append(f"Elapsed: {self.elapsed_time:.2f}s")

        if details:
            return f"{base_msg} [{', '.join(details)}]"
        return base_msg

    def get_root_cause(self) -> Optional[BaseException]:
        """
        Get the root cause exception by traversing the chain.

        @return The deepest original_exception in the chain, or None
        """
        current = self.original_exception
        while current is not None:
            if getattr(current, "original_exception", None) is not None:
                current = current.original_exception
            else:
                return current
        return None


class ActionError(PlaybackError):
    """
    Raised when a step action fails on the execution surface.
    """

    def __init__(
        self,
        action: str,
        selector: Optional[str] = None,
        details: Optional[str] = None,
        cause: Optional[BaseException] = None,
    ):
        self.action = action
        self.selector = selector
        self.details = details
        self.cause = cause
        super().__init__(self.__str__())

    def __str__(self) -> str:
        base = f"action '{self.action}' failed"
        if self.selector:
            base += f" on '{self.selector}'"
        if self.details:
            base += f": {self.details}"
        if self.cause:
            base += f" ({type(self.cause).__name__}: {self.cause})"
        return base


class AssertionFailedError(PlaybackError):
    """Raised when a step expectation does not hold."""

    def __init__(self, message: str, expected: Any = None, actual: Any = None):
        self.expected = expected
        self.actual = actual
        super().__init__(message)


class SessionUsageError(PlaybackError):
    """
    Raised when a session command is issued in a state that does not allow it.

    Indicates a programming error in the caller, never a runtime condition
    of the script being played.
    """
    pass


class SessionDisposedError(SessionUsageError):
    """Raised when a command is issued on a disposed session."""

    def __init__(self, session_id: str, command: str):
        self.session_id = session_id
        self.command = command
        super().__init__(f"Session '{session_id}' is disposed; cannot {command}()")


class SessionBusyError(SessionUsageError):
    """Raised when a run command is issued while the run loop is in flight."""

    def __init__(self, session_id: str, command: str):
        self.session_id = session_id
        self.command = command
        super().__init__(f"Session '{session_id}' is already running; cannot {command}()")


class InvalidStateError(SessionUsageError):
    """Raised when a command is not valid from the current state."""

    def __init__(self, session_id: str, command: str, state: str):
        self.session_id = session_id
        self.command = command
        self.state = state
        super().__init__(f"Cannot {command}() session '{session_id}' from state: {state}")


class SessionNotFoundError(PlaybackError):
    """Raised when a session id is not registered."""

    def __init__(self, session_id: str):
        self.session_id = session_id
        super().__init__(f"Session not found: {session_id}")
