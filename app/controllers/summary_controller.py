from datetime import timedelta

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from app.extensions import db
from app.services.goal_service import get_goal, serialize_goal
from app.services.log_service import list_logs_between
from app.services.totals_service import daily_series, remaining_budget, sum_logs
from app.utils.dates import reference_today, reference_zone
from app.utils.http import ok, arg_int

DEFAULT_SUMMARY_DAYS = 7
MAX_SUMMARY_DAYS = 90


def summary_handler():
    """
    Per-day totals for the last ``days`` days, ending today.

    Query parameters:
    - days (optional): Defaults to 7; invalid values fall back to 7
    - userId (optional)
    """
    user_id = arg_int("userId", current_app.config["DEFAULT_USER_ID"], min_value=1)
    days = arg_int("days", DEFAULT_SUMMARY_DAYS, min_value=1, max_value=MAX_SUMMARY_DAYS)
    today = reference_today(reference_zone())

    try:
        logs = list_logs_between(user_id, today - timedelta(days=days - 1), today)
        goal = get_goal(user_id)
    except SQLAlchemyError as e:
        db.session.rollback()
        current_app.logger.error(f"Failed to load summary for user {user_id}: {e}")
        logs, goal = [], None

    series = daily_series(logs, today, days)
    today_totals = sum_logs(log for log in logs if log.day == today)
    return ok({
        "days": days,
        "series": series,
        "goal": serialize_goal(goal),
        "today": {
            "totals": today_totals,
            "remaining": remaining_budget(today_totals, goal),
        },
    })
