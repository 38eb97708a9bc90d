"""
@file waits.py
@brief Polling utilities used by waiting and asserting steps.
"""

from __future__ import annotations

import time
from typing import Any, Callable, Optional, TypeVar

from .exceptions import TimeoutError
from .steplogger import STEP_LOGGER

T = TypeVar("T")


def _now() -> float:
    """Monotonic time source for deterministic timeout calculations."""
    return time.monotonic()


def _set_timeout_metadata(
    error: TimeoutError,
    *,
    description: str,
    timeout: float,
    attempt_count: int,
    elapsed: float,
) -> None:
    error.description = description
    error.timeout = timeout
    error.attempt_count = attempt_count
    error.elapsed_time = elapsed


def wait_until(
    predicate: Callable[[], T],
    timeout: float,
    interval: float = 0.1,
    description: str = "condition",
) -> T:
    """
    Repeatedly runs predicate until it returns a truthy value,
    or until timeout.

    The predicate is always evaluated at least once, so a zero timeout
    performs a single immediate check.
    """
    start_time = _now()
    last_exception: Optional[BaseException] = None
    attempt_count = 0

    STEP_LOGGER.log(
        event="wait_start",
        metadata={"description": description, "timeout_s": timeout, "interval_s": interval},
    )

    while True:
        attempt_count += 1
        try:
            result = predicate()
            if result:
                STEP_LOGGER.log(
                    event="wait_success",
                    metadata={
                        "description": description,
                        "attempts": attempt_count,
                        "elapsed_s": round(_now() - start_time, 3),
                    },
                )
                return result
        except Exception as e:
            last_exception = e

        elapsed = _now() - start_time
        time_left = timeout - elapsed
        if time_left <= 0:
            break
        time.sleep(min(interval, time_left))

    elapsed = _now() - start_time
    STEP_LOGGER.log(
        event="wait_timeout",
        status="error",
        metadata={
            "description": description,
            "timeout_s": timeout,
            "attempts": attempt_count,
            "elapsed_s": round(elapsed, 3),
        },
    )

    if last_exception:
        error = TimeoutError(
            f"Timed out waiting for {description} after {timeout}s: "
            f"{type(last_exception).__name__}: {last_exception}"
        )
        error.original_exception = last_exception
    else:
        error = TimeoutError(
            f"Timed out waiting for {description} after {timeout}s "
            f"(condition kept returning falsy)"
        )

    _set_timeout_metadata(
        error,
        description=description,
        timeout=timeout,
        attempt_count=attempt_count,
        elapsed=elapsed,
    )
    raise error


def wait_until_not(
    predicate: Callable[[], Any],
    timeout: float,
    interval: float = 0.1,
    description: str = "condition to become false",
) -> None:
    """
    Wait until predicate returns a falsy value.
    """
    start_time = _now()
    attempt_count = 0
    last_exception: Optional[BaseException] = None

    while True:
        attempt_count += 1
        try:
            if not predicate():
                return
        except Exception as e:
            last_exception = e

        elapsed = _now() - start_time
        time_left = timeout - elapsed
        if time_left <= 0:
            break
        time.sleep(min(interval, time_left))

    elapsed = _now() - start_time
    STEP_LOGGER.log(
        event="wait_timeout",
        status="error",
        metadata={
            "description": description,
            "timeout_s": timeout,
            "attempts": attempt_count,
            "elapsed_s": round(elapsed, 3),
        },
    )
    error = TimeoutError(
        f"Timed out waiting for {description} after {timeout}s "
        f"(condition kept returning truthy)"
    )
    error.original_exception = last_exception
    _set_timeout_metadata(
        error,
        description=description,
        timeout=timeout,
        attempt_count=attempt_count,
        elapsed=elapsed,
    )
    raise error
