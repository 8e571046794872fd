"""
Coaching Service

Short coach-style messages written by the language model: a weekly progress
review and a daily encouragement. Both fall back to a fixed message when the
data or the model is unavailable.
"""

import logging
from datetime import date, timedelta
from typing import Any, Dict, List

from sqlalchemy.exc import SQLAlchemyError

from app.services.goal_service import get_goal
from app.services.llm_gateway import LLMGatewayError
from app.services.log_service import list_logs_between, list_logs_for_day
from app.services.totals_service import MACROS, daily_series, goal_targets, round_half_up, sum_logs

logger = logging.getLogger(__name__)

REVIEW_DAYS = 7
DEFAULT_TARGET_CALORIES = 2000
SWEET_SPOT = (0.9, 1.1)

REVIEW_FALLBACK = (
    "You're making great progress with your nutrition journey! "
    "Keep up the consistent logging and healthy choices."
)
ENCOURAGEMENT_FALLBACK = "You're doing great with your nutrition journey! Keep up the amazing work."

REVIEW_SYSTEM_PROMPT = """You are a supportive nutrition coach reviewing a user's recent progress. Write a brief, \
encouraging progress review (3-4 sentences) based on their nutrition data from the past week.

Be positive and motivating, but realistic. Consider how consistently they log and hit their calorie target, how \
their average intake compares to their goals, their macro balance and any food patterns you notice. Be specific and \
actionable, conversational and warm. Focus on progress and sustainable habits."""

ENCOURAGEMENT_SYSTEM_PROMPT = """You are a supportive nutrition coach. Write a brief, encouraging message \
(2-3 sentences) about the user's nutrition today.

Mention specific food choices when relevant, how they are tracking toward their goals and how today compares to \
yesterday. Keep it conversational and warm, not technical."""


def _target_text(targets: Dict[str, float], name: str) -> str:
    return str(round_half_up(targets[name])) if targets[name] else "not set"


def weekly_stats(series: List[Dict[str, Any]], goal: Any) -> Dict[str, Any]:
    """Averages over logged days and how many of them landed within 90-110% of the calorie target."""
    logged = [d for d in series if d["calories"] > 0]
    averages = {
        name: round_half_up(sum(d[name] for d in logged) / len(logged)) if logged else 0
        for name in MACROS
    }
    target = goal_targets(goal)["calories"] or DEFAULT_TARGET_CALORIES
    in_sweet_spot = [d for d in logged if target * SWEET_SPOT[0] <= d["calories"] <= target * SWEET_SPOT[1]]
    return {
        "days_logged": len(logged),
        "averages": averages,
        "days_in_sweet_spot": len(in_sweet_spot),
        "consistency": round_half_up(len(in_sweet_spot) / len(logged) * 100) if logged else 0,
    }


def build_review_prompt(series: List[Dict[str, Any]], goal: Any, items: List[str]) -> str:
    stats = weekly_stats(series, goal)
    targets = goal_targets(goal)
    avg = stats["averages"]
    breakdown = "\n".join(
        f"- {d['day']}: {round_half_up(d['calories'])} cal, {round_half_up(d['protein'])}g protein, "
        f"{round_half_up(d['carbs'])}g carbs, {round_half_up(d['fat'])}g fat"
        for d in series
    )
    return (
        f"User's nutrition data for the past {len(series)} days:\n"
        f"- Days logged: {stats['days_logged']}/{len(series)}\n"
        f"- Average calories: {avg['calories']} / {_target_text(targets, 'calories')} target\n"
        f"- Average protein: {avg['protein']}g / {_target_text(targets, 'protein')}g target\n"
        f"- Average carbs: {avg['carbs']}g / {_target_text(targets, 'carbs')}g target\n"
        f"- Average fat: {avg['fat']}g / {_target_text(targets, 'fat')}g target\n"
        f"- Days in sweet spot (90-110% of target): {stats['days_in_sweet_spot']}/{stats['days_logged']} "
        f"({stats['consistency']}%)\n\n"
        f"Recent food items: {', '.join(items[:20]) or 'none'}\n\n"
        f"Daily breakdown:\n{breakdown}\n\n"
        "Generate a brief progress review:"
    )


def build_encouragement_prompt(today_logs: List[Any], yesterday_logs: List[Any], goal: Any) -> str:
    totals = sum_logs(today_logs)
    targets = goal_targets(goal)
    remaining = round_half_up(targets["calories"] - totals["calories"])
    standing = f"{remaining} remaining" if remaining > 0 else f"{abs(remaining)} over"
    foods = ", ".join(
        f"{log.item} ({round_half_up(log.quantity) if log.quantity else 1} {log.unit or 'serving'})"
        for log in today_logs
    )
    return (
        "User's nutrition data for today:\n"
        f"- Today's food items: {foods or 'No food logged yet'}\n"
        f"- Calories consumed: {round_half_up(totals['calories'])} / {_target_text(targets, 'calories')} target "
        f"({standing})\n"
        f"- Protein: {round_half_up(totals['protein'])}g / {_target_text(targets, 'protein')}g target\n"
        f"- Carbs: {round_half_up(totals['carbs'])}g / {_target_text(targets, 'carbs')}g target\n"
        f"- Fat: {round_half_up(totals['fat'])}g / {_target_text(targets, 'fat')}g target\n\n"
        "Yesterday's comparison:\n"
        f"- Yesterday's calories: {round_half_up(sum_logs(yesterday_logs)['calories'])}\n"
        f"- Yesterday's food: {', '.join(log.item for log in yesterday_logs) or 'No food logged'}\n\n"
        "Generate a brief encouragement message:"
    )


def progress_review(gateway, user_id: int, today: date) -> str:
    start = today - timedelta(days=REVIEW_DAYS - 1)
    try:
        logs = list_logs_between(user_id, start, today)
        goal = get_goal(user_id)
        prompt = build_review_prompt(daily_series(logs, today, REVIEW_DAYS), goal, [log.item for log in logs])
        return gateway.generate_text(REVIEW_SYSTEM_PROMPT, prompt, max_tokens=200) or REVIEW_FALLBACK
    except (LLMGatewayError, SQLAlchemyError) as e:
        logger.warning(f"Progress review unavailable, using fallback: {e}")
        return REVIEW_FALLBACK


def encouragement(gateway, user_id: int, today: date) -> str:
    try:
        today_logs = list_logs_for_day(user_id, today)
        yesterday_logs = list_logs_for_day(user_id, today - timedelta(days=1))
        goal = get_goal(user_id)
        prompt = build_encouragement_prompt(today_logs, yesterday_logs, goal)
        return gateway.generate_text(ENCOURAGEMENT_SYSTEM_PROMPT, prompt, max_tokens=150) or ENCOURAGEMENT_FALLBACK
    except (LLMGatewayError, SQLAlchemyError) as e:
        logger.warning(f"Encouragement unavailable, using fallback: {e}")
        return ENCOURAGEMENT_FALLBACK
