# tests/test_models.py
"""
Tests for document, result and event models.
"""

import pytest

from uiauto_playback.exceptions import DocumentError
from uiauto_playback.models import (
    ClickStep,
    KeyboardStep,
    Macro,
    PlaybackCompleteEvent,
    PlaybackResult,
    Position,
    SessionSnapshot,
    SessionStateEvent,
    StepCompleteEvent,
    StepResult,
    TestCase,
    TestSuite,
    iter_positions,
    step_count,
)


class TestPosition:
    """Tests for Position."""

    def test_flat_key(self):
        assert Position(step_index=3).key == "3"
        assert Position(step_index=3).to_dict() == {"stepIndex": 3}

    def test_hierarchical_key(self):
        pos = Position(step_index=1, test_case_index=2, test_case_id="checkout")
        assert pos.key == "2:1"
        assert pos.to_dict() == {"stepIndex": 1, "testCaseIndex": 2, "testCaseId": "checkout"}

    def test_ordering(self):
        assert Position(0, 0, "a") < Position(1, 0, "a") < Position(0, 1, "b")


class TestDocuments:
    """Tests for Macro and TestSuite."""

    def test_step_count_and_positions(self):
        suite = TestSuite(test_cases=[
            TestCase(id="a", steps=[ClickStep(selector="#1")]),
            TestCase(id="b", steps=[ClickStep(selector="#2"), KeyboardStep(key="Tab")]),
        ])
        assert step_count(suite) == 3
        assert [p.key for p, _ in iter_positions(suite)] == ["0:0", "1:0", "1:1"]

    def test_macro_steps_are_immutable(self):
        macro = Macro(steps=[ClickStep(selector="#1")])
        assert isinstance(macro.steps, tuple)

    def test_get_test_case(self):
        suite = TestSuite(test_cases=[TestCase(id="a", steps=[])])
        assert suite.get_test_case("a").id == "a"
        assert suite.get_test_case("z") is None

    def test_dependency_order(self):
        suite = TestSuite(test_cases=[
            TestCase(id="checkout", steps=[], depends=["cart"]),
            TestCase(id="login", steps=[]),
            TestCase(id="cart", steps=[], depends=["login"]),
        ])
        assert suite.dependency_order() == ["login", "cart", "checkout"]

    def test_unknown_dependency(self):
        suite = TestSuite(test_cases=[TestCase(id="a", steps=[], depends=["ghost"])])
        with pytest.raises(DocumentError):
            suite.dependency_order()

    def test_step_describe(self):
        assert ClickStep(selector="#ok").describe() == "click '#ok'"
        assert KeyboardStep(key="Enter").describe() == "keyboard 'Enter'"


class TestEventsAndResults:
    """Serialized shapes."""

    def test_step_result_omits_empty_fields(self):
        assert StepResult(success=True, duration=5).to_dict() == {"success": True, "duration": 5}
        assert StepResult(success=False, duration=1, error="x").to_dict()["error"] == "x"

    def test_playback_result(self):
        assert PlaybackResult(success=False, duration=12).to_dict() == {"success": False, "duration": 12}

    def test_session_snapshot(self):
        snapshot = SessionSnapshot(
            session_id="playback-1",
            state="paused",
            position=Position(step_index=1),
            results={"0": StepResult(success=True, duration=2)},
            created_at=5,
        )
        assert snapshot.to_dict() == {
            "sessionId": "playback-1",
            "state": "paused",
            "position": {"stepIndex": 1},
            "results": {"0": {"success": True, "duration": 2}},
            "groupId": "",
            "suiteId": "",
            "createdAt": 5,
        }

    def test_session_state_event(self):
        event = SessionStateEvent(state="paused", position=Position(step_index=2), timestamp=10)
        assert event.to_dict() == {
            "type": "session-state",
            "state": "paused",
            "timestamp": 10,
            "position": {"stepIndex": 2},
        }

    def test_step_complete_event(self):
        event = StepCompleteEvent(
            position=Position(step_index=0),
            step=ClickStep(selector="#a"),
            result=StepResult(success=True, duration=3),
            timestamp=1,
        )
        data = event.to_dict()
        assert data["type"] == "step-complete"
        assert data["action"] == "click"
        assert data["result"] == {"success": True, "duration": 3}

    def test_playback_complete_event(self):
        event = PlaybackCompleteEvent(success=False, duration=42)
        assert event.type == "playback-complete"
        assert event.timestamp > 0
        assert event.to_dict()["success"] is False
