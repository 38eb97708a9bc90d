"""
@file runner.py
@brief Headless document runner producing a report dict.
"""

from __future__ import annotations

import time
from typing import Any, Dict, Optional
from uuid import uuid4

from .config import PlaybackConfig
from .exceptions import PlaybackError
from .interfaces import ISurface
from .log import get_logger
from .models.document import Document
from .models.events import PlaybackCompleteEvent, PlaybackEvent, StepCompleteEvent
from .registry import SessionRegistry

logger = get_logger(__name__)


class Runner:
    """
    Plays a document start to finish without a UI and reports the outcome.

    Step records are built from step-complete events, so the report lists
    exactly the steps that executed: a failing step is the last entry.
    """

    def __init__(
        self,
        registry: SessionRegistry,
        surface: ISurface,
        config: Optional[PlaybackConfig] = None,
    ):
        """
        @param registry Registry the run's session is created in
        @param surface Execution surface for every step
        @param config Session configuration (defaults if None)
        """
        self.registry = registry
        self.surface = surface
        self.config = config or PlaybackConfig()

    def run(self, document: Document) -> Dict[str, Any]:
        """Run a document to completion and return its report."""
        start_ts = time.time()
        run_id = str(uuid4())
        report: Dict[str, Any] = {
            "run_id": run_id,
            "session_id": None,
            "started_at": time.strftime("%Y-%m-%d %H:%M:%S"),
            "status": "unknown",
            "steps": [],
            "errors": [],
        }

        def on_event(event: PlaybackEvent) -> None:
            if isinstance(event, StepCompleteEvent):
                step_rec: Dict[str, Any] = {
                    "key": event.position.key,
                    "action": event.step.action,
                    "status": "passed" if event.result.success else "failed",
                    "duration_ms": event.result.duration,
                }
                if event.step.why:
                    step_rec["why"] = event.step.why
                if event.result.error:
                    step_rec["error"] = event.result.error
                    report["errors"].append(f"step {event.position.key}: {event.result.error}")
                report["steps"].append(step_rec)
            elif isinstance(event, PlaybackCompleteEvent):
                report["status"] = "passed" if event.success else "failed"

        session_id: Optional[str] = None
        try:
            session_id = self.registry.create(document, self.surface, self.config)
            report["session_id"] = session_id
            session = self.registry.require(session_id)
            session.on(on_event)
            logger.info(f"Run {run_id}: session {session_id}, {session.total_steps} steps")
            session.start()
            return report

        except PlaybackError as e:
            report["status"] = "failed"
            report["errors"].append(f"{type(e).__name__}: {e}")
            return report
        finally:
            report["duration_ms"] = int((time.time() - start_ts) * 1000)
            if session_id is not None:
                self.registry.remove(session_id)
            logger.info(f"Run {run_id} {report['status']} in {report['duration_ms']}ms")
