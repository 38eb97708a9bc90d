# tests/conftest.py
"""
Shared fixtures: a scripted in-memory surface and a recording listener.
"""

import logging
import time

import pytest

from uiauto_playback.config import PlaybackConfig
from uiauto_playback import log as playback_log
from uiauto_playback.interfaces import ISurface
from uiauto_playback.models import ClickStep, Macro, TypeStep, WaitStep, SelectorExpectation
from uiauto_playback.steplogger import STEP_LOGGER


class FakeSurface(ISurface):
    """
    Surface double driven by plain dicts.

    present: selectors that exist
    failures: method name or (method, selector) -> exception to raise
    values: evaluate() code -> return value
    hooks: method name -> callable run during the call (before failing)
    delay: seconds every action sleeps
    """

    def __init__(self):
        self.calls = []
        self.present = set()
        self.failures = {}
        self.values = {}
        self.hooks = {}
        self.image = b"\x89PNG\r\n\x1a\nfake"
        self.delay = 0.0

    def _act(self, method, target=None, *extra):
        self.calls.append((method, target) + extra)
        hook = self.hooks.get(method)
        if hook is not None:
            hook()
        if self.delay:
            time.sleep(self.delay)
        error = self.failures.get((method, target)) or self.failures.get(method)
        if error is not None:
            raise error

    def click(self, selector, timeout, text=None, context=None):
        self._act("click", selector, text)
        return None

    def type_text(self, selector, text, timeout, context=None):
        self._act("type_text", selector, text)
        return None

    def evaluate(self, code, context=None):
        self._act("evaluate", code)
        return self.values.get(code)

    def hover(self, selector, timeout, context=None):
        self._act("hover", selector)
        return None

    def press_key(self, key):
        self._act("press_key", key)
        return None

    def exists(self, selector, context=None):
        return selector in self.present

    def capture(self, selector=None):
        self._act("capture", selector)
        return self.image

    def actions(self):
        """Names of the effectful calls made so far."""
        return [c[0] for c in self.calls]


class EventRecorder:
    """Listener collecting events in arrival order."""

    def __init__(self):
        self.events = []

    def __call__(self, event):
        self.events.append(event)

    def types(self):
        return [e.type for e in self.events]

    def of_type(self, type_tag):
        return [e for e in self.events if e.type == type_tag]

    def states(self):
        return [e.state for e in self.of_type("session-state")]


@pytest.fixture
def surface():
    return FakeSurface()


@pytest.fixture
def recorder():
    return EventRecorder()


@pytest.fixture
def config(tmp_path):
    return PlaybackConfig(default_timeout_ms=300, poll_interval_ms=10, base_path=str(tmp_path))


@pytest.fixture
def three_step_macro():
    """[click, type, wait] document."""
    return Macro(steps=[
        ClickStep(selector="#open"),
        TypeStep(selector="#name", text="Ada"),
        WaitStep(expect=SelectorExpectation(selector="#done")),
    ])


@pytest.fixture
def macro_of():
    """Factory for an N-click document."""
    def _make(count):
        return Macro(steps=[ClickStep(selector=f"#b{i}") for i in range(count)])
    return _make


@pytest.fixture(autouse=True)
def _reset_step_logger():
    STEP_LOGGER.disable()
    STEP_LOGGER.configure()
    yield
    STEP_LOGGER.disable()
    STEP_LOGGER.configure()


@pytest.fixture(autouse=True)
def _reset_logging():
    yield
    root = logging.getLogger(playback_log.ROOT_LOGGER_NAME)
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()
    root.setLevel(logging.NOTSET)
    playback_log._initialized = False
