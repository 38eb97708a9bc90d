"""
@file executor.py
@brief Stateless step execution: one action plus one optional expectation.

Nothing here raises to the caller of execute_step(). Execution errors,
timeouts, failed expectations and malformed steps all come back as a
StepResult with success=False.
"""

from __future__ import annotations

import builtins
import os
import re
import time
from typing import Any, Callable, Dict, Optional, Type

from .config import PlaybackConfig
from .exceptions import ActionError, AssertionFailedError, DocumentError, TimeoutError
from .interfaces import ISurface
from .log import get_logger
from .models.results import StepResult
from .models.steps import (
    AssertOperator,
    AssertStep,
    ClickStep,
    EvaluateStep,
    HoverStep,
    KeyboardStep,
    PollStep,
    ScreenshotStep,
    SelectorExpectation,
    Step,
    TypeStep,
    ValueExpectation,
    WaitStep,
)
from .steplogger import STEP_LOGGER
from .waits import wait_until, wait_until_not

logger = get_logger(__name__)

TIMEOUT_PREFIX = "Timeout: "

ActionHandler = Callable[[Any, ISurface, PlaybackConfig, float], Any]


def _require(step: Step, field_name: str) -> Any:
    value = getattr(step, field_name, None)
    if value is None or value == "":
        raise DocumentError(f"{step.action} step is missing required field '{field_name}'")
    return value


def _wait_for_presence(
    surface: ISurface,
    selector: str,
    present: bool,
    timeout: float,
    config: PlaybackConfig,
    context: Optional[str] = None,
) -> bool:
    """Poll until the selector's existence matches `present`. Returns `present`."""
    if present:
        wait_until(
            lambda: surface.exists(selector, context),
            timeout=timeout,
            interval=config.poll_interval,
            description=f"'{selector}' to exist",
        )
    else:
        wait_until_not(
            lambda: surface.exists(selector, context),
            timeout=timeout,
            interval=config.poll_interval,
            description=f"'{selector}' to disappear",
        )
    return present


# =============================================================================
# Action handlers
# =============================================================================

def _click(step: ClickStep, surface: ISurface, config: PlaybackConfig, timeout: float) -> Any:
    selector = _require(step, "selector")
    text = step.text
    # "button:has-text('Save')" is shorthand for selector + text match
    match = re.match(r"^(.+):has-text\(['\"](.+)['\"]\)$", selector)
    if match:
        selector, text = match.group(1), match.group(2)
    return surface.click(selector, timeout, text=text, context=step.context)


def _type(step: TypeStep, surface: ISurface, config: PlaybackConfig, timeout: float) -> Any:
    selector = _require(step, "selector")
    if step.text is None:
        raise DocumentError("type step is missing required field 'text'")
    return surface.type_text(selector, step.text, timeout, context=step.context)


def _evaluate(step: EvaluateStep, surface: ISurface, config: PlaybackConfig, timeout: float) -> Any:
    return surface.evaluate(_require(step, "code"), context=step.context)


def _wait(step: WaitStep, surface: ISurface, config: PlaybackConfig, timeout: float) -> Any:
    if step.expect is None:
        raise DocumentError("wait step requires an expect block")
    return None


def _poll(step: PollStep, surface: ISurface, config: PlaybackConfig, timeout: float) -> Any:
    selector = _require(step, "selector")
    return _wait_for_presence(surface, selector, True, timeout, config, context=step.context)


def _assert(step: AssertStep, surface: ISurface, config: PlaybackConfig, timeout: float) -> Any:
    selector = _require(step, "selector")
    try:
        return _wait_for_presence(surface, selector, step.exists, timeout, config)
    except TimeoutError as e:
        expectation = "exist" if step.exists else "not exist"
        raise AssertionFailedError(
            f"Expected '{selector}' to {expectation} within {timeout}s",
            expected=step.exists,
            actual=not step.exists,
        ) from e


def _screenshot(step: ScreenshotStep, surface: ISurface, config: PlaybackConfig, timeout: float) -> Any:
    if not step.returns:
        return {"skipped": True, "reason": "No output path specified"}

    path = step.returns
    if not os.path.isabs(path):
        path = os.path.join(config.base_path, path)
    os.makedirs(os.path.dirname(os.path.abspath(path)) or ".", exist_ok=True)

    image = surface.capture(step.selector)
    if not image:
        target = f"element '{step.selector}'" if step.selector else "surface"
        raise ActionError("screenshot", selector=step.selector, details=f"nothing captured for {target}")

    with open(path, "wb") as f:
        f.write(image)
    return {"captured": True, "path": path, "size": len(image)}


def _hover(step: HoverStep, surface: ISurface, config: PlaybackConfig, timeout: float) -> Any:
    return surface.hover(_require(step, "selector"), timeout, context=step.context)


def _keyboard(step: KeyboardStep, surface: ISurface, config: PlaybackConfig, timeout: float) -> Any:
    return surface.press_key(_require(step, "key"))


ACTION_HANDLERS: Dict[Type[Step], ActionHandler] = {
    ClickStep: _click,
    TypeStep: _type,
    EvaluateStep: _evaluate,
    WaitStep: _wait,
    PollStep: _poll,
    AssertStep: _assert,
    ScreenshotStep: _screenshot,
    HoverStep: _hover,
    KeyboardStep: _keyboard,
}


# =============================================================================
# Public API
# =============================================================================

def execute_action(step: Step, surface: ISurface, config: PlaybackConfig) -> Any:
    """
    Perform the step's primary effect against the surface.

    @return Captured value (may be None)
    @throws ActionError, TimeoutError, AssertionFailedError, DocumentError
    """
    handler = ACTION_HANDLERS.get(type(step))
    if handler is None:
        raise DocumentError(f"Unsupported step type: {type(step).__name__}")

    timeout_ms = config.effective_timeout_ms(step)
    timeout = timeout_ms / 1000.0
    start = time.monotonic()
    try:
        value = handler(step, surface, config, timeout)
    except (ActionError, AssertionFailedError, DocumentError, TimeoutError):
        raise
    except builtins.TimeoutError as e:
        raise TimeoutError(f"{step.action} timed out after {timeout_ms}ms: {e}") from e
    except Exception as e:
        raise ActionError(step.action, selector=getattr(step, "selector", None), cause=e) from e

    elapsed_ms = int((time.monotonic() - start) * 1000)
    if elapsed_ms > timeout_ms:
        error = TimeoutError(f"{step.action} exceeded its {timeout_ms}ms timeout ({elapsed_ms}ms)")
        error.timeout = timeout
        error.elapsed_time = elapsed_ms / 1000.0
        raise error
    return value


def _compare(operator: AssertOperator, actual: Any, expected: Any) -> bool:
    if operator is AssertOperator.EQUALS:
        return actual == expected
    if operator is AssertOperator.NOT_EQUALS:
        return actual != expected
    if operator is AssertOperator.GREATER_THAN:
        return actual > expected
    if operator is AssertOperator.LESS_THAN:
        return actual < expected
    if operator is AssertOperator.CONTAINS:
        return expected in actual
    if operator is AssertOperator.MATCHES:
        return re.search(str(expected), str(actual)) is not None
    raise DocumentError(f"Unsupported assert operator: {operator}")


def execute_expect(step: Step, surface: ISurface, action_value: Any, config: PlaybackConfig) -> Any:
    """
    Evaluate the step's expectation, if any.

    Selector expectations return the observed existence (bool); value
    expectations return {verified, actual, expected}.

    @throws AssertionFailedError when the expectation does not hold
    """
    expect = step.expect
    if expect is None:
        return None

    if isinstance(expect, SelectorExpectation):
        timeout = config.effective_timeout_ms(step) / 1000.0
        try:
            return _wait_for_presence(surface, expect.selector, expect.exists, timeout, config)
        except TimeoutError as e:
            expectation = "exist" if expect.exists else "not exist"
            raise AssertionFailedError(
                f"Expected '{expect.selector}' to {expectation} within {timeout}s",
                expected=expect.exists,
                actual=not expect.exists,
            ) from e

    if isinstance(expect, ValueExpectation):
        try:
            held = _compare(expect.operator, action_value, expect.expected)
        except (TypeError, re.error) as e:
            raise AssertionFailedError(
                f"Cannot apply {expect.operator.value} to {action_value!r} and {expect.expected!r}: {e}",
                expected=expect.expected,
                actual=action_value,
            ) from e
        if not held:
            raise AssertionFailedError(
                f"Expected value {expect.operator.value} {expect.expected!r} but got {action_value!r}",
                expected=expect.expected,
                actual=action_value,
            )
        return {"verified": True, "actual": action_value, "expected": expect.expected}

    raise DocumentError(f"Unsupported expectation type: {type(expect).__name__}")


def _error_message(error: BaseException) -> str:
    if isinstance(error, TimeoutError):
        return f"{TIMEOUT_PREFIX}{error}"
    return str(error) or type(error).__name__


def execute_step(step: Step, surface: ISurface, config: PlaybackConfig) -> StepResult:
    """
    Run the action then the expectation and fold both into one StepResult.

    A failed action short-circuits the expectation. The duration spans both.
    """
    start = time.monotonic()
    try:
        action_value = execute_action(step, surface, config)
        expect_value = execute_expect(step, surface, action_value, config)
    except Exception as e:
        duration = int((time.monotonic() - start) * 1000)
        logger.debug(f"Step {step.describe()} failed after {duration}ms: {e}")
        STEP_LOGGER.log(
            event="step_error",
            action=step.action,
            status="error",
            duration_ms=duration,
            exception=e,
        )
        return StepResult(success=False, duration=duration, error=_error_message(e))

    duration = int((time.monotonic() - start) * 1000)
    return StepResult(
        success=True,
        duration=duration,
        value=expect_value if expect_value is not None else action_value,
    )
