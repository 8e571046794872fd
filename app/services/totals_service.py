"""
Totals Service

Pure aggregation over food-log entries: day totals, remaining budget against a
goal, per-day series for the summary endpoint and the end-of-day summary text.
Entries may be FoodLog rows, LogItem objects or plain dicts.
"""

import math
from datetime import date, datetime, timedelta
from typing import Any, Dict, Iterable, List, Optional

MACROS = ("calories", "protein", "carbs", "fat")
GOAL_KEYS = {
    "calories": ("target_calories", "targetCalories"),
    "protein": ("target_protein", "targetProtein"),
    "carbs": ("target_carbs", "targetCarbs"),
    "fat": ("target_fat", "targetFat"),
}


def round_half_up(value: Optional[float]) -> int:
    """Round .5 away from zero on the positive side, matching ``Math.round``."""
    return int(math.floor((value or 0) + 0.5))


def _field(entry: Any, name: str) -> Any:
    if isinstance(entry, dict):
        return entry.get(name)
    return getattr(entry, name, None)


def _entry_day(entry: Any) -> Optional[date]:
    day = _field(entry, "day")
    if isinstance(day, datetime):
        return day.date()
    if isinstance(day, date):
        return day
    logged_at = _field(entry, "logged_at")
    return logged_at.date() if logged_at is not None else None


def sum_logs(logs: Iterable[Any]) -> Dict[str, float]:
    totals = {name: 0.0 for name in MACROS}
    for entry in logs:
        for name in MACROS:
            totals[name] += float(_field(entry, name) or 0)
    return totals


def goal_targets(goal: Any) -> Dict[str, float]:
    """Targets from a Goal row or a serialized goal; missing targets count as zero."""
    targets = {name: 0.0 for name in MACROS}
    if not goal:
        return targets
    for name, keys in GOAL_KEYS.items():
        for key in keys:
            value = _field(goal, key)
            if value is not None:
                targets[name] = float(value)
                break
    return targets


def remaining_budget(totals: Dict[str, float], goal: Any) -> Dict[str, float]:
    """Target minus consumed. Not floored; callers clamp for display."""
    targets = goal_targets(goal)
    return {name: targets[name] - totals.get(name, 0.0) for name in MACROS}


def daily_series(logs: Iterable[Any], end_day: date, days: int) -> List[Dict[str, Any]]:
    """One zero-filled entry per day, oldest first, ending on ``end_day``."""
    start_day = end_day - timedelta(days=days - 1)
    by_day: Dict[date, Dict[str, Any]] = {}
    for offset in range(days):
        d = start_day + timedelta(days=offset)
        by_day[d] = {"day": d.isoformat(), "calories": 0.0, "protein": 0.0, "carbs": 0.0, "fat": 0.0,
                     "loggedItems": 0}

    for entry in logs:
        bucket = by_day.get(_entry_day(entry))
        if bucket is None:
            continue
        for name in MACROS:
            bucket[name] += float(_field(entry, name) or 0)
        bucket["loggedItems"] += 1

    return list(by_day.values())


def _target_text(goal: Any, name: str) -> str:
    for key in GOAL_KEYS[name]:
        value = _field(goal, key) if goal else None
        if value:
            return str(round_half_up(value))
    return "N/A"


def done_logging_summary(logs: Iterable[Any], goal: Any) -> str:
    totals = sum_logs(logs)
    remaining = remaining_budget(totals, goal)
    left = {name: max(0, round_half_up(remaining[name])) for name in MACROS}
    return (
        "Great! Here's your summary for today:\n\n"
        "📊 **Daily Totals:**\n"
        f"• Calories: ~{round_half_up(totals['calories'])} / {_target_text(goal, 'calories')}\n"
        f"• Protein: {round_half_up(totals['protein'])}g / {_target_text(goal, 'protein')}g\n"
        f"• Carbs: {round_half_up(totals['carbs'])}g / {_target_text(goal, 'carbs')}g\n"
        f"• Fat: {round_half_up(totals['fat'])}g / {_target_text(goal, 'fat')}g\n\n"
        "🎯 **Remaining:**\n"
        f"• Calories: ~{left['calories']}\n"
        f"• Protein: {left['protein']}g\n"
        f"• Carbs: {left['carbs']}g\n"
        f"• Fat: {left['fat']}g\n\n"
        "Have a great rest of your day! 🌟"
    )
