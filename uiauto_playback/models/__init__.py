"""
Data models for playback: steps, documents, results and events.
"""

from .document import Document, Macro, Position, TestCase, TestSuite, iter_positions, step_count
from .events import (
    PlaybackCompleteEvent,
    PlaybackEvent,
    SessionStateEvent,
    StepCompleteEvent,
    StepStartEvent,
)
from .results import PlaybackResult, SessionSnapshot, StepResult, StepYield
from .steps import (
    STEP_TYPES,
    AssertOperator,
    AssertStep,
    ClickStep,
    EvaluateStep,
    Expectation,
    HoverStep,
    KeyboardStep,
    PollStep,
    ScreenshotStep,
    SelectorExpectation,
    Step,
    TypeStep,
    ValueExpectation,
    WaitStep,
)

__all__ = [
    "AssertOperator",
    "AssertStep",
    "ClickStep",
    "Document",
    "EvaluateStep",
    "Expectation",
    "HoverStep",
    "KeyboardStep",
    "Macro",
    "PlaybackCompleteEvent",
    "PlaybackEvent",
    "PlaybackResult",
    "PollStep",
    "Position",
    "STEP_TYPES",
    "ScreenshotStep",
    "SelectorExpectation",
    "SessionSnapshot",
    "SessionStateEvent",
    "Step",
    "StepCompleteEvent",
    "StepResult",
    "StepStartEvent",
    "StepYield",
    "TestCase",
    "TestSuite",
    "TypeStep",
    "ValueExpectation",
    "WaitStep",
    "iter_positions",
    "step_count",
]
