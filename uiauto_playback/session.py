"""
@file session.py
@brief Playback session: the state machine driving one document's execution.
"""

from __future__ import annotations

import threading
from enum import Enum
from typing import Callable, Dict, Optional

from .config import PlaybackConfig
from .emitter import EventEmitter
from .exceptions import InvalidStateError, SessionBusyError, SessionDisposedError
from .interfaces import ISurface
from .log import get_logger
from .models.document import Document, Position, step_count
from .models.events import (
    PlaybackCompleteEvent,
    PlaybackEvent,
    SessionStateEvent,
    StepCompleteEvent,
    StepStartEvent,
    now_ms,
)
from .models.results import PlaybackResult, SessionSnapshot, StepResult
from .models.steps import Step, TypeStep
from .sequence import StepSequence
from .steplogger import STEP_LOGGER

logger = get_logger(__name__)


class PlaybackState(Enum):
    """Session lifecycle states."""
    IDLE = "idle"
    RUNNING = "running"
    PAUSED = "paused"
    COMPLETED = "completed"


class PlaybackSession:
    """
    Drives a StepSequence one step at a time and broadcasts progress.

    States: IDLE -> RUNNING -> {PAUSED, COMPLETED}; PAUSED -> RUNNING;
    stop() returns any state to IDLE and releases the sequence for good.

    The run loop stops at the first failing step. pause() is honored at
    the next step boundary, never mid-step. Run commands are not
    reentrant: issuing start/step/resume while a run loop is in flight
    raises SessionBusyError. pause() and stop() may be called from
    another thread while the loop runs.
    """

    def __init__(
        self,
        session_id: str,
        document: Document,
        surface: ISurface,
        config: Optional[PlaybackConfig] = None,
    ):
        """
        @param session_id Opaque unique id
        @param document Parsed document to play (flat or hierarchical)
        @param surface Execution capability the steps run against
        @param config Session configuration (defaults if None)
        """
        self.id = session_id
        self.document = document
        self.config = config or PlaybackConfig()
        self.created_at = now_ms()
        self.total_steps = step_count(document)

        self._lock = threading.Lock()
        self._events: EventEmitter[PlaybackEvent] = EventEmitter()
        self._pause_requested = threading.Event()

        self._state = PlaybackState.IDLE
        self._position: Optional[Position] = None
        self._results: Dict[str, StepResult] = {}
        self._run_started_at: Optional[int] = None
        self._stopped = False
        self._disposed = False

        self._sequence: Optional[StepSequence] = StepSequence(
            document, surface, self.config, on_step_start=self._on_step_start
        )

    # =========================================================================
    # Events
    # =========================================================================

    def on(self, listener: Callable[[PlaybackEvent], None]) -> Callable[[], None]:
        """Register an event listener. Returns an unsubscribe function."""
        if self._disposed:
            raise SessionDisposedError(self.id, "on")
        return self._events.on(listener)

    def _emit(self, event: PlaybackEvent) -> None:
        self._events.emit(event)

    def _on_step_start(self, position: Position, step: Step) -> None:
        logger.debug(f"[{self.id}] step {position.key} start: {step.describe()}")
        STEP_LOGGER.log(
            event="step_start",
            session_id=self.id,
            action=step.action,
            position=position.key,
            status="running",
            metadata={"selector": step.selector, "text": step.text} if isinstance(step, TypeStep) else None,
        )
        self._emit(StepStartEvent(position=position, step=step))

    # =========================================================================
    # Commands
    # =========================================================================

    def start(self) -> PlaybackResult:
        """Run from IDLE (or continue from PAUSED) until completion or pause."""
        self._enter_running("start", (PlaybackState.IDLE, PlaybackState.PAUSED))
        return self._run_loop(single_step=False)

    def resume(self) -> PlaybackResult:
        """Continue a PAUSED session until completion or the next pause."""
        self._enter_running("resume", (PlaybackState.PAUSED,))
        return self._run_loop(single_step=False)

    def step(self) -> PlaybackResult:
        """Execute exactly one step, then pause (or complete)."""
        self._enter_running("step", (PlaybackState.IDLE, PlaybackState.PAUSED))
        return self._run_loop(single_step=True)

    def pause(self) -> None:
        """Request a pause at the next step boundary. No-op unless RUNNING."""
        with self._lock:
            if self._disposed:
                raise SessionDisposedError(self.id, "pause")
            if self._state is PlaybackState.RUNNING:
                self._pause_requested.set()
                logger.debug(f"[{self.id}] pause requested")

    def stop(self) -> None:
        """
        Release the sequence, emit session-state(idle) and drop all listeners.

        A step already executing runs to completion but its result is
        discarded. Calling stop() again is a no-op.
        """
        with self._lock:
            if self._stopped:
                return
            self._stopped = True
            sequence, self._sequence = self._sequence, None
            self._state = PlaybackState.IDLE
            self._pause_requested.set()
            position = self._position

        if sequence is not None:
            sequence.close()
        logger.info(f"[{self.id}] stopped")
        try:
            self._emit(SessionStateEvent(state=PlaybackState.IDLE.value, position=position))
        finally:
            self._events.clear()

    def dispose(self) -> None:
        """Stop and permanently invalidate the session. Idempotent."""
        if self._disposed:
            return
        try:
            self.stop()
        finally:
            self._disposed = True
            logger.debug(f"[{self.id}] disposed")

    # =========================================================================
    # Run loop
    # =========================================================================

    def _enter_running(self, command: str, allowed: tuple) -> None:
        with self._lock:
            if self._disposed:
                raise SessionDisposedError(self.id, command)
            if self._state is PlaybackState.RUNNING:
                raise SessionBusyError(self.id, command)
            if self._sequence is None:
                state = "stopped" if self._stopped else self._state.value
                raise InvalidStateError(self.id, command, state)
            if self._state not in allowed:
                raise InvalidStateError(self.id, command, self._state.value)

            if self._state is PlaybackState.IDLE:
                self._results.clear()
                self._position = None
                self._run_started_at = now_ms()
            self._state = PlaybackState.RUNNING
            self._pause_requested.clear()

        logger.info(f"[{self.id}] {command}: running")

    def _run_loop(self, single_step: bool) -> PlaybackResult:
        try:
            self._emit(SessionStateEvent(state=PlaybackState.RUNNING.value, position=self._position))
            return self._drive(single_step)
        except BaseException:
            # a listener raised mid-run; the session must not stay RUNNING
            with self._lock:
                if self._state is PlaybackState.RUNNING:
                    self._state = PlaybackState.PAUSED
            logger.warning(f"[{self.id}] run loop interrupted by listener error", exc_info=True)
            raise

    def _drive(self, single_step: bool) -> PlaybackResult:
        while not self._pause_requested.is_set():
            sequence = self._sequence
            if sequence is None:
                break
            try:
                item = next(sequence)
            except StopIteration:
                return self._finalize(True)

            # a run that ends on this step is COMPLETED before step-complete is emitted
            with self._lock:
                if self._stopped:
                    break
                self._position = item.position
                self._results[item.position.key] = item.result
                finished = not item.result.success or not sequence.has_next
                if finished:
                    self._state = PlaybackState.COMPLETED
                    self._sequence = None
            if finished:
                sequence.close()

            STEP_LOGGER.log(
                event="step_finish",
                session_id=self.id,
                action=item.step.action,
                position=item.position.key,
                status="ok" if item.result.success else "error",
                duration_ms=item.result.duration,
                metadata={"error": item.result.error} if item.result.error else None,
            )
            if not item.result.success:
                logger.info(f"[{self.id}] step {item.position.key} failed: {item.result.error}")

            try:
                self._emit(StepCompleteEvent(position=item.position, step=item.step, result=item.result))
            finally:
                if finished:
                    outcome = self._announce_completion(item.result.success)
            if finished:
                return outcome
            if single_step:
                break

        with self._lock:
            if self._stopped:
                return PlaybackResult(success=False, duration=self._elapsed())
            self._state = PlaybackState.PAUSED
            position = self._position

        logger.info(f"[{self.id}] paused at {position.key if position else '-'}")
        self._emit(SessionStateEvent(state=PlaybackState.PAUSED.value, position=position))
        return PlaybackResult(success=True, duration=self._elapsed())

    def _finalize(self, success: bool) -> PlaybackResult:
        with self._lock:
            if self._stopped:
                return PlaybackResult(success=False, duration=self._elapsed())
            self._state = PlaybackState.COMPLETED
            sequence, self._sequence = self._sequence, None
        if sequence is not None:
            sequence.close()
        return self._announce_completion(success)

    def _announce_completion(self, success: bool) -> PlaybackResult:
        """Emit the completion events of a run already marked COMPLETED."""
        with self._lock:
            stopped = self._stopped
            position = self._position
        duration = self._elapsed()
        if stopped:
            return PlaybackResult(success=False, duration=duration)

        logger.info(f"[{self.id}] completed success={success} in {duration}ms")
        STEP_LOGGER.log(
            event="playback_complete",
            session_id=self.id,
            status="ok" if success else "error",
            duration_ms=duration,
        )
        self._emit(SessionStateEvent(state=PlaybackState.COMPLETED.value, position=position))
        self._emit(PlaybackCompleteEvent(success=success, duration=duration))
        return PlaybackResult(success=success, duration=duration)

    def _elapsed(self) -> int:
        if self._run_started_at is None:
            return 0
        return now_ms() - self._run_started_at

    # =========================================================================
    # State accessors
    # =========================================================================

    @property
    def state(self) -> PlaybackState:
        return self._state

    @property
    def position(self) -> Optional[Position]:
        """Position of the last completed step."""
        return self._position

    @property
    def results(self) -> Dict[str, StepResult]:
        """Copy of the results map keyed by Position.key."""
        with self._lock:
            return dict(self._results)

    @property
    def is_active(self) -> bool:
        """True while the sequence can still execute steps."""
        return self._sequence is not None

    @property
    def is_disposed(self) -> bool:
        return self._disposed

    def snapshot(self) -> SessionSnapshot:
        """Synchronous view of state, position and results."""
        with self._lock:
            return SessionSnapshot(
                session_id=self.id,
                state=self._state.value,
                position=self._position,
                results=dict(self._results),
                group_id=self.config.group_id,
                suite_id=self.config.suite_id,
                created_at=self.created_at,
            )
