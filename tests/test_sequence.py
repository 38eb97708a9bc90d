# tests/test_sequence.py
"""
Tests for the lazy step sequence.
"""

import pytest

from uiauto_playback.models import ClickStep, Macro, Position, TestCase, TestSuite
from uiauto_playback.sequence import StepSequence


class TestStepSequence:
    """Tests for StepSequence iteration."""

    def test_executes_lazily(self, surface, config, macro_of):
        """Nothing runs until the sequence is advanced."""
        seq = StepSequence(macro_of(3), surface, config)
        assert surface.calls == []

        first = next(seq)
        assert first.position == Position(step_index=0)
        assert first.result.success is True
        assert surface.calls == [("click", "#b0", None)]

    def test_one_step_per_advance(self, surface, config, macro_of):
        """Each advance executes exactly one step."""
        seq = StepSequence(macro_of(3), surface, config)
        next(seq)
        next(seq)
        assert seq.executed == 2
        assert len(surface.calls) == 2
        assert seq.has_next is True

    def test_exhaustion_raises_stop_iteration(self, surface, config, macro_of):
        """Running out of steps is distinct from a failed step."""
        seq = StepSequence(macro_of(1), surface, config)
        next(seq)
        assert seq.has_next is False
        with pytest.raises(StopIteration):
            next(seq)
        assert seq.is_exhausted is True

    def test_failed_step_is_yielded(self, surface, config, macro_of):
        """A failing step still produces a yield."""
        surface.failures[("click", "#b0")] = RuntimeError("nope")
        seq = StepSequence(macro_of(2), surface, config)
        item = next(seq)
        assert item.result.success is False
        assert seq.has_next is True

    def test_close_stops_execution(self, surface, config, macro_of):
        """After close() no further step executes."""
        seq = StepSequence(macro_of(3), surface, config)
        next(seq)
        seq.close()
        seq.close()
        with pytest.raises(StopIteration):
            next(seq)
        assert len(surface.calls) == 1

    def test_iterates_as_generator(self, surface, config, macro_of):
        """Works in a for loop."""
        items = list(StepSequence(macro_of(4), surface, config))
        assert [i.position.step_index for i in items] == [0, 1, 2, 3]

    def test_hierarchical_positions(self, surface, config):
        """Test cases are flattened in order with their ids."""
        suite = TestSuite(test_cases=[
            TestCase(id="login", steps=[ClickStep(selector="#a"), ClickStep(selector="#b")]),
            TestCase(id="logout", steps=[ClickStep(selector="#c")]),
        ])
        keys = [item.position.key for item in StepSequence(suite, surface, config)]
        assert keys == ["0:0", "0:1", "1:0"]

    def test_step_start_callback_precedes_execution(self, surface, config, macro_of):
        """The callback sees each step before the surface does."""
        seen = []

        def on_start(position, step):
            seen.append((position.step_index, len(surface.calls)))

        list(StepSequence(macro_of(2), surface, config, on_step_start=on_start))
        assert seen == [(0, 0), (1, 1)]

    def test_raising_callback_does_not_skip(self, surface, config, macro_of):
        """A step whose start callback raised is retried on the next advance."""
        calls = {"n": 0}

        def on_start(position, step):
            calls["n"] += 1
            if calls["n"] == 1:
                raise RuntimeError("listener broke")

        seq = StepSequence(macro_of(2), surface, config, on_step_start=on_start)
        with pytest.raises(RuntimeError):
            next(seq)
        item = next(seq)
        assert item.position.step_index == 0

    def test_empty_document(self, surface, config):
        """An empty document is exhausted from the start."""
        seq = StepSequence(Macro(steps=[]), surface, config)
        assert seq.total == 0
        assert seq.has_next is False
