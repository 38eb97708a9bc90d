"""
Step model: one declared action plus an optional expectation.

Steps are immutable. Every action kind is its own frozen dataclass with
an `action` tag, so the executor can dispatch on the class and the
loader can build steps from the tag.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, ClassVar, Dict, Optional, Type, Union


class AssertOperator(Enum):
    """Operators for value-based expectations."""
    EQUALS = "equals"
    NOT_EQUALS = "notEquals"
    GREATER_THAN = "greaterThan"
    LESS_THAN = "lessThan"
    CONTAINS = "contains"
    MATCHES = "matches"


@dataclass(frozen=True)
class SelectorExpectation:
    """Element existence check, evaluated after the action."""
    selector: str
    exists: bool = True

    kind: ClassVar[str] = "selector"


@dataclass(frozen=True)
class ValueExpectation:
    """Comparison of the action's captured value against an expected value."""
    expected: Any = None
    operator: AssertOperator = AssertOperator.EQUALS

    kind: ClassVar[str] = "value"


Expectation = Union[SelectorExpectation, ValueExpectation]


@dataclass(frozen=True)
class Step:
    """
    Common fields shared by every step.

    Attributes:
        why: Human rationale, documentation only
        timeout: Per-step timeout override in milliseconds
        returns: Label for the captured value (output path for screenshots)
        expect: Optional post-action expectation
    """
    why: str = ""
    timeout: Optional[int] = None
    returns: Optional[str] = None
    expect: Optional[Expectation] = None

    action: ClassVar[str] = ""

    def describe(self) -> str:
        """Short label used in logs and reports."""
        target = getattr(self, "selector", None) or getattr(self, "key", None)
        if target:
            return f"{self.action} '{target}'"
        return self.action


@dataclass(frozen=True)
class ClickStep(Step):
    selector: str = ""
    text: Optional[str] = None
    context: Optional[str] = None

    action: ClassVar[str] = "click"


@dataclass(frozen=True)
class TypeStep(Step):
    selector: str = ""
    text: str = ""
    context: Optional[str] = None

    action: ClassVar[str] = "type"


@dataclass(frozen=True)
class EvaluateStep(Step):
    code: str = ""
    context: Optional[str] = None

    action: ClassVar[str] = "evaluate"


@dataclass(frozen=True)
class WaitStep(Step):
    """No action; waits on the required expect block."""

    action: ClassVar[str] = "wait"


@dataclass(frozen=True)
class PollStep(Step):
    """Poll until the selector exists."""
    selector: str = ""
    context: Optional[str] = None

    action: ClassVar[str] = "poll"


@dataclass(frozen=True)
class AssertStep(Step):
    """Existence assertion as the primary action."""
    selector: str = ""
    exists: bool = True

    action: ClassVar[str] = "assert"


@dataclass(frozen=True)
class ScreenshotStep(Step):
    """Capture the surface (or one element) to the path given in `returns`."""
    selector: Optional[str] = None

    action: ClassVar[str] = "screenshot"


@dataclass(frozen=True)
class HoverStep(Step):
    selector: str = ""
    context: Optional[str] = None

    action: ClassVar[str] = "hover"


@dataclass(frozen=True)
class KeyboardStep(Step):
    key: str = ""

    action: ClassVar[str] = "keyboard"


STEP_TYPES: Dict[str, Type[Step]] = {
    cls.action: cls
    for cls in (
        ClickStep,
        TypeStep,
        EvaluateStep,
        WaitStep,
        PollStep,
        AssertStep,
        ScreenshotStep,
        HoverStep,
        KeyboardStep,
    )
}
