"""Engine configuration loaded from an optional TOML file."""

from __future__ import annotations

import logging
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping

logger = logging.getLogger(__name__)


def _as_int(value, *, default: int) -> int:
    if isinstance(value, bool):
        return int(default)
    try:
        return int(value)
    except Exception:  # noqa: BLE001
        return int(default)


def _as_float(value, *, default: float) -> float:
    if isinstance(value, bool):
        return float(default)
    try:
        return float(value)
    except Exception:  # noqa: BLE001
        return float(default)


def _as_offsets(value, *, default: tuple[int, ...]) -> tuple[int, ...]:
    """Exactly three non-negative day offsets, or ``default``."""

    if not isinstance(value, (list, tuple)) or len(value) != 3:
        return default
    out: list[int] = []
    for item in value:
        if isinstance(item, bool) or not isinstance(item, int) or item < 0:
            return default
        out.append(item)
    return tuple(out)


@dataclass(frozen=True)
class EngineConfig:
    max_insights: int = 6
    revision_offsets: tuple[int, int, int] = (3, 6, 12)
    default_working_hour: int = 9
    streak_fire_days: int = 7
    high_performance_rate: float = 80.0
    low_performance_rate: float = 50.0
    category_mastery_rate: float = 85.0
    priority_overload_share: float = 60.0
    balanced_priority_share: float = 20.0
    balanced_min_tasks: int = 5
    upcoming_window_days: int = 3
    velocity_window_days: int = 7
    timezone: str = "UTC"


def config_from_mapping(data: Mapping[str, Any]) -> EngineConfig:
    """Build a config from a mapping, keeping defaults for bad or missing values."""

    defaults = EngineConfig()
    section = data.get("engine", data) if isinstance(data, Mapping) else {}
    if not isinstance(section, Mapping):
        section = {}

    timezone_raw = section.get("timezone", defaults.timezone)
    return EngineConfig(
        max_insights=max(0, _as_int(section.get("max_insights"), default=defaults.max_insights)),
        revision_offsets=_as_offsets(section.get("revision_offsets"), default=defaults.revision_offsets),
        default_working_hour=_as_int(section.get("default_working_hour"), default=defaults.default_working_hour) % 24,
        streak_fire_days=_as_int(section.get("streak_fire_days"), default=defaults.streak_fire_days),
        high_performance_rate=_as_float(section.get("high_performance_rate"), default=defaults.high_performance_rate),
        low_performance_rate=_as_float(section.get("low_performance_rate"), default=defaults.low_performance_rate),
        category_mastery_rate=_as_float(section.get("category_mastery_rate"), default=defaults.category_mastery_rate),
        priority_overload_share=_as_float(
            section.get("priority_overload_share"), default=defaults.priority_overload_share
        ),
        balanced_priority_share=_as_float(
            section.get("balanced_priority_share"), default=defaults.balanced_priority_share
        ),
        balanced_min_tasks=_as_int(section.get("balanced_min_tasks"), default=defaults.balanced_min_tasks),
        upcoming_window_days=max(
            0, _as_int(section.get("upcoming_window_days"), default=defaults.upcoming_window_days)
        ),
        velocity_window_days=max(
            1, _as_int(section.get("velocity_window_days"), default=defaults.velocity_window_days)
        ),
        timezone=str(timezone_raw).strip() if isinstance(timezone_raw, str) and timezone_raw.strip() else "UTC",
    )


def load_config(path: str | Path | None) -> EngineConfig:
    """Load config from a TOML file; a missing file yields the defaults."""

    if path is None:
        return EngineConfig()

    config_path = Path(path)
    if not config_path.exists():
        logger.debug("Config file %s not found, using defaults", config_path)
        return EngineConfig()

    try:
        data = tomllib.loads(config_path.read_text(encoding="utf-8"))
    except (OSError, tomllib.TOMLDecodeError) as exc:
        raise ValueError(f"Cannot read config file {config_path}: {exc}") from exc

    return config_from_mapping(data)
