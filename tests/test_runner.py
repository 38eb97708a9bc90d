# tests/test_runner.py
"""
Tests for the headless runner.
"""

import pytest

from uiauto_playback.models import ClickStep, EvaluateStep, Macro, ValueExpectation
from uiauto_playback.registry import SessionRegistry
from uiauto_playback.runner import Runner


@pytest.fixture
def registry():
    reg = SessionRegistry()
    yield reg
    reg.dispose_all()


class TestRunner:
    """Tests for Runner.run."""

    def test_passed_report(self, registry, surface, config, macro_of):
        report = Runner(registry, surface, config).run(macro_of(3))

        assert report["status"] == "passed"
        assert [s["key"] for s in report["steps"]] == ["0", "1", "2"]
        assert all(s["status"] == "passed" for s in report["steps"])
        assert report["errors"] == []
        assert report["duration_ms"] >= 0
        assert report["run_id"]

    def test_failed_report_stops_at_failure(self, registry, surface, config):
        surface.values["document.title"] = "Login"
        document = Macro(steps=[
            ClickStep(selector="#home", why="open home page"),
            EvaluateStep(code="document.title", expect=ValueExpectation(expected="Home")),
            ClickStep(selector="#never"),
        ])

        report = Runner(registry, surface, config).run(document)

        assert report["status"] == "failed"
        assert len(report["steps"]) == 2
        assert report["steps"][0]["why"] == "open home page"
        assert report["steps"][1]["action"] == "evaluate"
        assert "'Home'" in report["steps"][1]["error"]
        assert report["errors"][0].startswith("step 1:")

    def test_session_removed_after_run(self, registry, surface, config, macro_of):
        report = Runner(registry, surface, config).run(macro_of(1))
        assert report["session_id"] not in registry
        assert len(registry) == 0
