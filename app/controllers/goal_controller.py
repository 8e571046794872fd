from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from app.schemas.goal_schema import CalculateGoalsSchema, GoalsRequestSchema
from app.services.goal_service import (
    get_goal,
    get_user,
    serialize_bio,
    serialize_goal,
    serialize_goal_settings,
    update_bio,
    upsert_goal,
)
from app.services.nutrition_service import calculate_goals_from_bio
from app.utils.http import ok, error, json_body, validate_schema, arg_int


def _goals_payload(user_id):
    goal = get_goal(user_id)
    return {
        "goal": serialize_goal(goal),
        "bio": serialize_bio(get_user(user_id)),
        "goalSettings": serialize_goal_settings(goal),
    }


def get_goals_handler():
    user_id = arg_int("userId", current_app.config["DEFAULT_USER_ID"], min_value=1)
    try:
        return ok(_goals_payload(user_id))
    except SQLAlchemyError as e:
        current_app.logger.error(f"Failed to load goals for user {user_id}: {e}")
        return error("DATABASE_ERROR", "Could not load goals", 500)


def save_goals_handler():
    """
    Create or update goals, bio and goal settings.

    Body parameters:
    - goal (optional): {targetCalories, targetProtein, targetCarbs, targetFat, macroSplit}
    - bio (optional): {age, biologicalSex, height, weight, activityLevel}
    - goalSettings (optional): {goalType, pace}
    """
    user_id = arg_int("userId", current_app.config["DEFAULT_USER_ID"], min_value=1)
    data, errors = validate_schema(GoalsRequestSchema, json_body())
    if errors:
        return error("VALIDATION_ERROR", "Invalid goals data", 400, details=errors)

    goal_fields = dict(data.get("goal") or {})
    goal_fields.update(data.get("goal_settings") or {})
    try:
        if data.get("bio"):
            update_bio(user_id, data["bio"])
        if goal_fields or get_goal(user_id) is None:
            upsert_goal(user_id, goal_fields)
        return ok(_goals_payload(user_id))
    except SQLAlchemyError as e:
        current_app.logger.error(f"Failed to save goals for user {user_id}: {e}")
        return error("DATABASE_ERROR", "Could not save goals", 500)


def calculate_goals_handler():
    """Preview targets derived from bio data; nothing is stored."""
    data, errors = validate_schema(CalculateGoalsSchema, json_body())
    if errors:
        return error("VALIDATION_ERROR", "Complete bio is required", 400, details=errors)

    try:
        targets = calculate_goals_from_bio(data["bio"], data.get("macro_split"), data.get("goal_settings"))
    except ValueError as e:
        code, _, message = str(e).partition(": ")
        return error(code or "VALIDATION_ERROR", message or str(e), 400)

    return ok({
        "targetCalories": targets["target_calories"],
        "targetProtein": targets.get("target_protein"),
        "targetCarbs": targets.get("target_carbs"),
        "targetFat": targets.get("target_fat"),
        "macroSplit": targets.get("macro_split"),
        "bmr": targets["bmr"],
        "tdee": targets["tdee"],
    })
