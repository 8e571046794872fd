"""
Log Service

Food-log persistence: listing by day or range, atomic bulk creation and
deletion by id or by (item, meal type, day).
"""

import logging
from datetime import date
from typing import Any, Dict, Iterable, List, Optional, Union

from sqlalchemy import and_, func, or_
from sqlalchemy.exc import SQLAlchemyError

from app.extensions import db
from app.models.food_log import FoodLog
from app.services.conversation_state import LogItem, RemovalItem
from app.services.goal_service import ensure_user
from app.services.message_rules import is_generic_item, mentions, normalize
from app.services.totals_service import round_half_up
from app.utils.dates import day_bounds

logger = logging.getLogger(__name__)


def serialize_log(log: FoodLog) -> Dict[str, Any]:
    return {
        "id": log.id,
        "userId": log.user_id,
        "day": log.day.isoformat() if log.day else None,
        "loggedAt": log.logged_at.isoformat() if log.logged_at else None,
        "item": log.item,
        "mealType": log.meal_type,
        "quantity": log.quantity,
        "unit": log.unit,
        "calories": log.calories,
        "protein": log.protein,
        "carbs": log.carbs,
        "fat": log.fat,
        "fiber": log.fiber,
        "sugar": log.sugar,
        "sodium": log.sodium,
        "notes": log.notes,
    }


def list_logs_for_day(user_id: int, day: date) -> List[FoodLog]:
    """Entries attributed to ``day``, falling back to the logged time for rows without one."""
    start, end = day_bounds(day)
    return (
        FoodLog.query
        .filter(FoodLog.user_id == user_id)
        .filter(or_(
            FoodLog.day == day,
            and_(FoodLog.day.is_(None), FoodLog.logged_at >= start, FoodLog.logged_at < end),
        ))
        .order_by(FoodLog.logged_at, FoodLog.id)
        .all()
    )


def list_logs_between(user_id: int, start_day: date, end_day: date) -> List[FoodLog]:
    start, _ = day_bounds(start_day)
    _, end = day_bounds(end_day)
    return (
        FoodLog.query
        .filter(FoodLog.user_id == user_id)
        .filter(or_(
            and_(FoodLog.day >= start_day, FoodLog.day <= end_day),
            and_(FoodLog.day.is_(None), FoodLog.logged_at >= start, FoodLog.logged_at < end),
        ))
        .order_by(FoodLog.logged_at, FoodLog.id)
        .all()
    )


def create_log_entries(user_id: int, day: date, entries: Iterable[Union[LogItem, Dict[str, Any]]]) -> List[FoodLog]:
    """
    Persist several entries in one transaction.

    Args:
        user_id: Owner of the entries
        day: Day the entries count toward
        entries: LogItem objects or snake_case field dicts

    Returns:
        The created FoodLog rows

    Raises:
        ValueError: If an entry has no usable item name
        SQLAlchemyError: If the write fails; nothing is committed
    """
    items = [e if isinstance(e, LogItem) else LogItem.from_dict(e) for e in entries]
    for entry in items:
        if not entry.item or is_generic_item(entry.item):
            raise ValueError(f"INVALID_ITEM: {entry.item!r} is not a specific food")

    try:
        ensure_user(user_id, commit=False)
        rows = []
        for entry in items:
            fields_ = entry.to_log_fields()
            if fields_["calories"] is not None:
                fields_["calories"] = round_half_up(fields_["calories"])
            row = FoodLog(user_id=user_id, day=day, **fields_)
            db.session.add(row)
            rows.append(row)
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        logger.exception(f"Failed to create {len(items)} food log entries for user {user_id}")
        raise

    logger.info(f"Created {len(rows)} food log entries for user {user_id} on {day}")
    return rows


def delete_log(log_id: int, user_id: Optional[int] = None) -> bool:
    query = FoodLog.query.filter_by(id=log_id)
    if user_id is not None:
        query = query.filter_by(user_id=user_id)
    log = query.first()
    if not log:
        return False

    try:
        db.session.delete(log)
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        logger.exception(f"Failed to delete food log {log_id}")
        raise
    return True


def _matching_query(user_id: int, day: date, item: str, meal_type: Optional[str]):
    query = FoodLog.query.filter(
        FoodLog.user_id == user_id,
        FoodLog.day == day,
        func.lower(FoodLog.item) == normalize(item),
    )
    if meal_type:
        query = query.filter(func.lower(FoodLog.meal_type) == meal_type.lower())
    return query


def delete_matching_logs(user_id: int, day: date, item: str, meal_type: Optional[str] = None,
                         commit: bool = True) -> int:
    """Delete the day's entries named ``item`` (and of ``meal_type`` when given)."""
    try:
        count = _matching_query(user_id, day, item, meal_type).delete(synchronize_session=False)
        if commit:
            db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        logger.exception(f"Failed to delete {item!r} entries for user {user_id}")
        raise
    return count


def delete_removal_items(user_id: int, day: date, removals: List[RemovalItem]) -> int:
    """Apply a confirmed removal proposal in one transaction; returns rows deleted."""
    deleted = 0
    try:
        for removal in removals:
            if removal.id is not None:
                deleted += (
                    FoodLog.query
                    .filter_by(id=removal.id, user_id=user_id)
                    .delete(synchronize_session=False)
                )
            elif removal.item:
                deleted += delete_matching_logs(user_id, day, removal.item, removal.meal_type, commit=False)
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        logger.exception(f"Failed to remove {len(removals)} food log entries for user {user_id}")
        raise

    logger.info(f"Removed {deleted} food log entries for user {user_id} on {day}")
    return deleted


def find_matching_logs(logs: List[FoodLog], removal: RemovalItem) -> List[FoodLog]:
    """Rows of ``logs`` a removal request refers to: exact name first, then whole-word match."""
    if removal.id is not None:
        return [log for log in logs if log.id == removal.id]

    candidates = logs
    if removal.meal_type:
        candidates = [log for log in logs if (log.meal_type or "").lower() == removal.meal_type.lower()]

    exact = [log for log in candidates if normalize(log.item) == normalize(removal.item)]
    if exact:
        return exact
    return [log for log in candidates if mentions(log.item, removal.item) or mentions(removal.item, log.item)]
