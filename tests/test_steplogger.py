# tests/test_steplogger.py
"""
Tests for the structured step logger.
"""

import json

import pytest

from uiauto_playback.models import Macro, TypeStep
from uiauto_playback.session import PlaybackSession
from uiauto_playback.steplogger import STEP_LOGGER, StepLogger


def _read_jsonl(path):
    return [json.loads(line) for line in path.read_text(encoding="utf-8").splitlines()]


class TestStepLogger:
    """Tests for StepLogger."""

    def test_disabled_by_default(self, capsys):
        logger = StepLogger()
        logger.log(event="step_start")
        assert capsys.readouterr().out == ""

    def test_line_format(self, capsys):
        logger = StepLogger()
        logger.enable()
        logger.log(event="step_finish", session_id="s1", action="click", position="0", duration_ms=12)

        out = capsys.readouterr().out.strip()
        assert "step_finish" in out
        assert "session_id=s1" in out
        assert "duration_ms=12" in out

    def test_rejects_unknown_format(self):
        with pytest.raises(ValueError):
            StepLogger().configure(format="xml")

    def test_redacts_sensitive_and_masks_typed_text(self, tmp_path):
        path = tmp_path / "log.jsonl"
        logger = StepLogger()
        logger.configure(console=False, file_path=str(path), format="jsonl")
        logger.enable()

        logger.log(event="x", action="type", metadata={"text": "a very long secret phrase", "password": "pw"})

        meta = _read_jsonl(path)[0]["metadata"]
        assert meta["text"] == "a very lon..."
        assert meta["password"] == "***"

    def test_exception_details(self, tmp_path):
        path = tmp_path / "log.jsonl"
        logger = StepLogger()
        logger.configure(console=False, file_path=str(path), format="jsonl")
        logger.enable()

        try:
            raise RuntimeError("boom")
        except RuntimeError as e:
            logger.log(event="x", status="error", exception=e)

        exc = _read_jsonl(path)[0]["exception"]
        assert exc["type"] == "RuntimeError"
        assert exc["message"] == "boom"
        assert "Traceback" in exc["traceback"]


class TestSessionLogging:
    """The session records its lifecycle to the global step logger."""

    def test_session_events_logged(self, tmp_path, surface, config):
        path = tmp_path / "session.jsonl"
        STEP_LOGGER.configure(console=False, file_path=str(path), format="jsonl")
        STEP_LOGGER.enable()

        session = PlaybackSession("s-log", Macro(steps=[TypeStep(selector="#a", text="hi")]), surface, config)
        session.start()

        records = _read_jsonl(path)
        events = [r["event"] for r in records]
        assert events == ["step_start", "step_finish", "playback_complete"]
        assert all(r["session_id"] == "s-log" for r in records)
        assert records[1]["action"] == "type"
        assert records[1]["position"] == "0"

    def test_typed_text_is_masked(self, tmp_path, surface, config):
        path = tmp_path / "session.jsonl"
        STEP_LOGGER.configure(console=False, file_path=str(path), format="jsonl")
        STEP_LOGGER.enable()

        step = TypeStep(selector="#note", text="a rather long sentence")
        PlaybackSession("s-log", Macro(steps=[step]), surface, config).start()

        start = _read_jsonl(path)[0]
        assert start["event"] == "step_start"
        assert start["metadata"] == {"selector": "#note", "text": "a rather l..."}

    def test_failed_step_logs_exception(self, tmp_path, surface, config):
        path = tmp_path / "session.jsonl"
        STEP_LOGGER.configure(console=False, file_path=str(path), format="jsonl")
        STEP_LOGGER.enable()
        surface.failures["type_text"] = LookupError("selector not found")

        session = PlaybackSession("s-log", Macro(steps=[TypeStep(selector="#a", text="hi")]), surface, config)
        assert session.start().success is False

        records = _read_jsonl(path)
        assert [r["event"] for r in records] == ["step_start", "step_error", "step_finish", "playback_complete"]
        exc = records[1]["exception"]
        assert exc["type"] == "ActionError"
        assert exc["cause_type"] == "LookupError"
        assert "selector not found" in exc["traceback"]
