"""
Goal Service

User and goal records: lazy user creation, goal upsert, bio updates and the
JSON shapes returned by the goals endpoints.
"""

import logging
from typing import Any, Dict, Optional

from sqlalchemy.exc import SQLAlchemyError

from app.extensions import db
from app.models.goal import Goal
from app.models.user import User

logger = logging.getLogger(__name__)

GOAL_TARGET_FIELDS = ("target_calories", "target_protein", "target_carbs", "target_fat")
GOAL_FIELDS = GOAL_TARGET_FIELDS + ("macro_split", "goal_type", "pace")
BIO_FIELDS = ("age", "biological_sex", "height", "weight", "activity_level")


def ensure_user(user_id: int, commit: bool = True) -> User:
    """Return the user, creating an empty record on first access."""
    user = db.session.get(User, user_id)
    if user is None:
        user = User(id=user_id)
        db.session.add(user)
        if commit:
            db.session.commit()
        else:
            db.session.flush()
        logger.info(f"Created user {user_id}")
    return user


def get_user(user_id: int) -> Optional[User]:
    return db.session.get(User, user_id)


def get_goal(user_id: int) -> Optional[Goal]:
    return Goal.query.filter_by(user_id=user_id).first()


def upsert_goal(user_id: int, fields: Dict[str, Any]) -> Goal:
    """
    Create or update the user's single goal row.

    Args:
        user_id: Owner of the goal
        fields: Any of GOAL_FIELDS; other keys are ignored

    Raises:
        SQLAlchemyError: If the write fails; the session is rolled back
    """
    try:
        ensure_user(user_id, commit=False)
        goal = get_goal(user_id)
        if goal is None:
            goal = Goal(user_id=user_id)
            db.session.add(goal)
        for name in GOAL_FIELDS:
            if name in fields:
                value = fields[name]
                if name in GOAL_TARGET_FIELDS and value is not None:
                    value = int(round(value))
                setattr(goal, name, value)
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        logger.exception(f"Failed to upsert goal for user {user_id}")
        raise

    logger.info(f"Updated goal for user {user_id}: {sorted(k for k in fields if k in GOAL_FIELDS)}")
    return goal


def update_bio(user_id: int, fields: Dict[str, Any]) -> User:
    try:
        user = ensure_user(user_id, commit=False)
        for name in BIO_FIELDS:
            if name in fields:
                setattr(user, name, fields[name])
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        logger.exception(f"Failed to update bio for user {user_id}")
        raise
    return user


def serialize_goal(goal: Optional[Goal]) -> Optional[Dict[str, Any]]:
    if goal is None:
        return None
    return {
        "id": goal.id,
        "userId": goal.user_id,
        "targetCalories": goal.target_calories,
        "targetProtein": goal.target_protein,
        "targetCarbs": goal.target_carbs,
        "targetFat": goal.target_fat,
        "macroSplit": goal.macro_split,
        "updatedAt": goal.updated_at.isoformat() if goal.updated_at else None,
    }


def serialize_bio(user: Optional[User]) -> Optional[Dict[str, Any]]:
    if user is None:
        return None
    return {
        "age": user.age,
        "biologicalSex": user.biological_sex,
        "height": user.height,
        "weight": user.weight,
        "activityLevel": user.activity_level,
    }


def serialize_goal_settings(goal: Optional[Goal]) -> Dict[str, Any]:
    return {
        "goalType": goal.goal_type if goal else None,
        "pace": goal.pace if goal else None,
    }
