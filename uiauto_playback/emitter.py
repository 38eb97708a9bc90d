"""
@file emitter.py
@brief Synchronous multi-listener event broadcast.
"""

from __future__ import annotations

import threading
from typing import Callable, Generic, List, Tuple, TypeVar

T = TypeVar("T")

Listener = Callable[[T], None]


class EventEmitter(Generic[T]):
    """
    Ordered list of listener callbacks.

    emit() calls every listener synchronously, in registration order.
    Exceptions raised by a listener are not caught: they propagate to the
    code that raised the event. Listeners must not issue run commands on
    the emitting session from inside their callback.

    Each on() call is its own registration: the same callable registered
    twice is called twice, and each unsubscribe function removes only the
    registration that returned it.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._listeners: List[Tuple[object, Listener]] = []

    def on(self, listener: Listener) -> Callable[[], None]:
        """Register a listener. Returns an unsubscribe function."""
        token = object()
        with self._lock:
            self._listeners.append((token, listener))

        def _unsubscribe() -> None:
            with self._lock:
                self._listeners = [entry for entry in self._listeners if entry[0] is not token]

        return _unsubscribe

    def emit(self, event: T) -> None:
        """Deliver an event to all listeners registered at call time."""
        with self._lock:
            listeners = [listener for _, listener in self._listeners]
        for listener in listeners:
            listener(event)

    def clear(self) -> None:
        """Remove all listeners."""
        with self._lock:
            self._listeners = []

    @property
    def listener_count(self) -> int:
        return len(self._listeners)
