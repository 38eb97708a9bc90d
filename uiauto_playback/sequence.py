"""
@file sequence.py
@brief Lazy, single-pass iterator executing one document step per advance.
"""

from __future__ import annotations

from typing import Callable, List, Optional, Tuple

from .config import PlaybackConfig
from .executor import execute_step
from .interfaces import ISurface
from .models.document import Document, Position, iter_positions
from .models.results import StepYield
from .models.steps import Step

StepStartCallback = Callable[[Position, Step], None]


class StepSequence:
    """
    Explicit resumable cursor over a document.

    Each call to next() notifies the step-start callback, executes exactly
    one step and returns its StepYield. Exhaustion raises StopIteration,
    which is distinct from a step failing. The sequence is not restartable;
    after close() or exhaustion it never executes another step.
    """

    def __init__(
        self,
        document: Document,
        surface: ISurface,
        config: PlaybackConfig,
        on_step_start: Optional[StepStartCallback] = None,
    ):
        """
        @param document Document to walk (flat or hierarchical)
        @param surface Execution surface used for every step
        @param config Session configuration (timeouts, polling)
        @param on_step_start Called with (position, step) before each step executes
        """
        self._entries: List[Tuple[Position, Step]] = list(iter_positions(document))
        self._surface: Optional[ISurface] = surface
        self._config = config
        self._on_step_start = on_step_start
        self._index = 0
        self._closed = False

    def __iter__(self) -> StepSequence:
        return self

    def __next__(self) -> StepYield:
        if self._closed or self._index >= len(self._entries):
            self.close()
            raise StopIteration

        position, step = self._entries[self._index]
        # a raising callback leaves the cursor on this step
        if self._on_step_start is not None:
            self._on_step_start(position, step)
        self._index += 1

        result = execute_step(step, self._surface, self._config)
        return StepYield(position=position, step=step, result=result)

    @property
    def has_next(self) -> bool:
        """True if another advance would execute a step. Executes nothing."""
        return not self._closed and self._index < len(self._entries)

    @property
    def is_exhausted(self) -> bool:
        return not self.has_next

    @property
    def total(self) -> int:
        return len(self._entries)

    @property
    def executed(self) -> int:
        """Number of steps started so far."""
        return self._index

    def close(self) -> None:
        """Release the surface and mark the sequence exhausted. Idempotent."""
        self._closed = True
        self._surface = None
        self._on_step_start = None
