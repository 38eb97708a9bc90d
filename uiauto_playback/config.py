"""
@file config.py
@brief Session configuration and timing presets for playback.
"""

from __future__ import annotations

from copy import deepcopy
from dataclasses import asdict, dataclass, fields, replace
from typing import TYPE_CHECKING, Any, Dict, Optional

from .exceptions import ConfigError

if TYPE_CHECKING:
    from .models.steps import Step


DEFAULT_TIMEOUT_MS = 5000
DEFAULT_POLL_INTERVAL_MS = 100

PRESET_OVERRIDES: Dict[str, Dict[str, Any]] = {
    "fast": {
        "default_timeout_ms": 3000,
        "poll_interval_ms": 50,
    },
    "slow": {
        "default_timeout_ms": 10000,
        "poll_interval_ms": 200,
        "timeout_multiplier": 1.5,
    },
    "ci": {
        "default_timeout_ms": 10000,
        "poll_interval_ms": 250,
        "timeout_multiplier": 2.0,
    },
}


def available_presets() -> Dict[str, Dict[str, Any]]:
    return {"default": {}, **deepcopy(PRESET_OVERRIDES)}


@dataclass(frozen=True)
class PlaybackConfig:
    """
    Configuration for one playback session.

    group_id and suite_id are carried through to snapshots and reports
    only; the engine's control flow never reads them.
    """
    default_timeout_ms: int = DEFAULT_TIMEOUT_MS
    poll_interval_ms: int = DEFAULT_POLL_INTERVAL_MS
    timeout_multiplier: float = 1.0
    group_id: str = ""
    suite_id: str = ""
    base_path: str = "."

    def __post_init__(self) -> None:
        if self.default_timeout_ms <= 0:
            raise ConfigError(f"default_timeout_ms must be positive, got: {self.default_timeout_ms}")
        if self.poll_interval_ms <= 0:
            raise ConfigError(f"poll_interval_ms must be positive, got: {self.poll_interval_ms}")
        if self.timeout_multiplier <= 0:
            raise ConfigError(f"timeout_multiplier must be positive, got: {self.timeout_multiplier}")

    @classmethod
    def build_from(
        cls,
        *,
        preset: str = "default",
        overrides: Optional[Dict[str, Any]] = None,
    ) -> PlaybackConfig:
        """Build a config snapshot: base defaults -> preset -> overrides."""
        preset_key = (preset or "default").lower()
        values: Dict[str, Any] = {}
        if preset_key != "default":
            preset_values = PRESET_OVERRIDES.get(preset_key)
            if preset_values is None:
                raise ConfigError(f"Unknown playback preset: {preset}")
            values.update(preset_values)
        cfg = cls(**values)
        if overrides:
            cfg = cfg.with_overrides(**overrides)
        return cfg

    def with_overrides(self, **overrides: Any) -> PlaybackConfig:
        """Return a new config with the given fields replaced."""
        known = {f.name for f in fields(self)}
        unknown = set(overrides) - known
        if unknown:
            raise ConfigError(f"Unknown PlaybackConfig field(s): {sorted(unknown)}")
        return replace(self, **overrides)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @property
    def poll_interval(self) -> float:
        """Polling interval in seconds."""
        return self.poll_interval_ms / 1000.0

    def effective_timeout_ms(self, step: Step) -> int:
        """Step-level timeout override, else the session default, scaled by the multiplier."""
        base = step.timeout if step.timeout is not None else self.default_timeout_ms
        return int(base * self.timeout_multiplier)
