# tests/test_emitter.py
"""
Tests for the synchronous event emitter.
"""

import pytest

from uiauto_playback.emitter import EventEmitter


class TestEventEmitter:
    """Tests for EventEmitter."""

    def test_calls_listeners_in_registration_order(self):
        emitter = EventEmitter()
        calls = []
        emitter.on(lambda e: calls.append(("a", e)))
        emitter.on(lambda e: calls.append(("b", e)))

        emitter.emit(1)

        assert calls == [("a", 1), ("b", 1)]

    def test_unsubscribe(self):
        """The returned function removes only that listener."""
        emitter = EventEmitter()
        calls = []
        off = emitter.on(lambda e: calls.append("a"))
        emitter.on(lambda e: calls.append("b"))

        off()
        off()
        emitter.emit(None)

        assert calls == ["b"]
        assert emitter.listener_count == 1

    def test_listener_exception_propagates(self):
        """Errors are not swallowed; later listeners are not called."""
        emitter = EventEmitter()
        calls = []

        def broken(event):
            raise ValueError("bad listener")

        emitter.on(broken)
        emitter.on(lambda e: calls.append(e))

        with pytest.raises(ValueError):
            emitter.emit("x")
        assert calls == []

    def test_listener_added_during_emit_waits_for_next_event(self):
        """Delivery uses the listeners registered when emit() started."""
        emitter = EventEmitter()
        late = []

        def adder(event):
            emitter.on(lambda e: late.append(e))

        emitter.on(adder)
        emitter.emit(1)
        assert late == []

        emitter.emit(2)
        assert late == [2]

    def test_clear(self):
        emitter = EventEmitter()
        emitter.on(lambda e: None)
        emitter.clear()
        assert emitter.listener_count == 0

    def test_same_callable_registered_twice(self):
        """Each registration is removed only by its own unsubscribe function."""
        emitter = EventEmitter()
        calls = []

        def listener(event):
            calls.append(event)

        first_off = emitter.on(listener)
        emitter.on(listener)
        emitter.emit(1)
        assert calls == [1, 1]

        first_off()
        first_off()
        emitter.emit(2)

        assert calls == [1, 1, 2]
        assert emitter.listener_count == 1
