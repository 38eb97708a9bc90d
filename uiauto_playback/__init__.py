# uiauto_playback/__init__.py
"""
UIAuto Playback - Session engine for recorded UI automation documents.

This package provides:
- Models: typed steps, flat macros and hierarchical test suites
- Executor: runs one step (action plus optional expectation)
- PlaybackSession: start/step/pause/resume/stop state machine with events
- SessionRegistry: store of concurrently live sessions
- PlaybackCommands: command surface that reports errors as data
- Runner: headless run producing a report dict
- Loader: YAML/mapping to document with schema validation
"""

from uiauto_playback.config import PlaybackConfig, available_presets
from uiauto_playback.commands import CommandResult, PlaybackCommands
from uiauto_playback.exceptions import (
    ActionError,
    AssertionFailedError,
    ConfigError,
    DocumentError,
    InvalidStateError,
    PlaybackError,
    SessionBusyError,
    SessionDisposedError,
    SessionNotFoundError,
    SessionUsageError,
    TimeoutError,
)
from uiauto_playback.executor import execute_step
from uiauto_playback.interfaces import ISurface
from uiauto_playback.loader import load_document, loads_document, parse_document
from uiauto_playback.registry import SessionRegistry
from uiauto_playback.runner import Runner
from uiauto_playback.sequence import StepSequence
from uiauto_playback.session import PlaybackSession, PlaybackState

__version__ = "1.0.0"

__all__ = [
    "PlaybackConfig",
    "available_presets",
    "CommandResult",
    "PlaybackCommands",
    "PlaybackError",
    "ConfigError",
    "DocumentError",
    "TimeoutError",
    "ActionError",
    "AssertionFailedError",
    "SessionUsageError",
    "SessionDisposedError",
    "SessionBusyError",
    "InvalidStateError",
    "SessionNotFoundError",
    "execute_step",
    "ISurface",
    "load_document",
    "loads_document",
    "parse_document",
    "SessionRegistry",
    "Runner",
    "StepSequence",
    "PlaybackSession",
    "PlaybackState",
]
