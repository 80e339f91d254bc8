from __future__ import annotations

from typing import Any

from store_commissions.domain.constants import ACHIEVEMENT_CAP, DISPLAY_CAP_PCT


def achievement(actual: Any, goal: Any) -> float:
    actual_value = float(actual or 0)
    goal_value = float(goal or 0)
    if goal_value <= 0:
        return 0.0
    return actual_value / goal_value


def capped_achievement(actual: Any, goal: Any, cap: float = ACHIEVEMENT_CAP) -> float:
    """Achievement used for scoring: clamped to ``[0, cap]``."""
    return max(0.0, min(achievement(actual, goal), cap))


def display_progress(actual: Any, goal: Any) -> dict[str, Any]:
    """Progress-bar values: uncapped percentage text, bar width clamped at 100%.

    >>> display_progress(150, 100)["label"]
    '150.0%'
    >>> display_progress(150, 100)["width_pct"]
    100.0
    """
    percentage = achievement(actual, goal) * 100
    return {
        "percentage": percentage,
        "width_pct": max(0.0, min(percentage, DISPLAY_CAP_PCT)),
        "label": f"{percentage:.1f}%",
    }
