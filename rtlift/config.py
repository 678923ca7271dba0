from __future__ import annotations

from dataclasses import dataclass
import os


def _env_flag(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    normalized = raw.strip().casefold()
    return normalized not in {"0", "false", "off", ""}


@dataclass(frozen=True)
class LiftConfig:
    diagnostics: bool
    trace: bool


def load_lift_config() -> LiftConfig:
    return LiftConfig(
        diagnostics=_env_flag("RTLIFT_DIAGNOSTICS", default=False),
        trace=_env_flag("RTLIFT_TRACE", default=False),
    )


__all__ = ["LiftConfig", "load_lift_config"]
