"""Period-over-period trend helpers."""

from __future__ import annotations


def pct_change(old: float, new: float) -> float:
    """Relative change from ``old`` to ``new`` in percent; 0 when ``old`` is 0."""

    if old == 0:
        return 0.0
    return ((new - old) / old) * 100.0


def trend_direction(old: float, new: float, tolerance_pct: float = 10.0) -> str:
    """Classify a change as "up", "down" or "stable"."""

    if old == 0:
        if new > 0:
            return "up"
        return "stable"
    change = pct_change(old, new)
    if change > tolerance_pct:
        return "up"
    if change < -tolerance_pct:
        return "down"
    return "stable"
