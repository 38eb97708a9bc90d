"""
Playback events broadcast to session listeners.
"""

import time
from dataclasses import dataclass, field
from typing import Any, ClassVar, Dict, Optional, Union

from .document import Position
from .results import StepResult
from .steps import Step


def now_ms() -> int:
    """Wall-clock timestamp in milliseconds."""
    return int(time.time() * 1000)


@dataclass(frozen=True)
class SessionStateEvent:
    state: str
    position: Optional[Position] = None
    error: Optional[str] = None
    timestamp: int = field(default_factory=now_ms)

    type: ClassVar[str] = "session-state"

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"type": self.type, "state": self.state, "timestamp": self.timestamp}
        if self.position is not None:
            data["position"] = self.position.to_dict()
        if self.error is not None:
            data["error"] = self.error
        return data


@dataclass(frozen=True)
class StepStartEvent:
    position: Position
    step: Step
    timestamp: int = field(default_factory=now_ms)

    type: ClassVar[str] = "step-start"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type,
            "position": self.position.to_dict(),
            "action": self.step.action,
            "timestamp": self.timestamp,
        }


@dataclass(frozen=True)
class StepCompleteEvent:
    position: Position
    step: Step
    result: StepResult
    timestamp: int = field(default_factory=now_ms)

    type: ClassVar[str] = "step-complete"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type,
            "position": self.position.to_dict(),
            "action": self.step.action,
            "result": self.result.to_dict(),
            "timestamp": self.timestamp,
        }


@dataclass(frozen=True)
class PlaybackCompleteEvent:
    success: bool
    duration: int
    timestamp: int = field(default_factory=now_ms)

    type: ClassVar[str] = "playback-complete"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type,
            "success": self.success,
            "duration": self.duration,
            "timestamp": self.timestamp,
        }


PlaybackEvent = Union[SessionStateEvent, StepStartEvent, StepCompleteEvent, PlaybackCompleteEvent]
