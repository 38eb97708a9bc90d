"""
Result models produced during playback.
Immutable once created.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from .document import Position
from .steps import Step


@dataclass(frozen=True)
class StepResult:
    """
    Outcome of one executed step.

    Attributes:
        success: Whether the action and its expectation both held
        duration: Milliseconds spent on action plus expectation
        value: Captured value (expectation output when present)
        error: Failure message when success is False
    """
    success: bool
    duration: int
    value: Any = None
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"success": self.success, "duration": self.duration}
        if self.value is not None:
            data["value"] = self.value
        if self.error is not None:
            data["error"] = self.error
        return data


@dataclass(frozen=True)
class StepYield:
    """One advance of a step sequence."""
    position: Position
    step: Step
    result: StepResult


@dataclass(frozen=True)
class PlaybackResult:
    """Return value of the run commands."""
    success: bool
    duration: int

    def to_dict(self) -> Dict[str, Any]:
        return {"success": self.success, "duration": self.duration}


@dataclass(frozen=True)
class SessionSnapshot:
    """Synchronous view of a session for callers that join late."""
    session_id: str
    state: str
    position: Optional[Position]
    results: Dict[str, StepResult] = field(default_factory=dict)
    group_id: str = ""
    suite_id: str = ""
    created_at: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "sessionId": self.session_id,
            "state": self.state,
            "position": self.position.to_dict() if self.position else None,
            "results": {key: result.to_dict() for key, result in self.results.items()},
            "groupId": self.group_id,
            "suiteId": self.suite_id,
            "createdAt": self.created_at,
        }
