from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from app.extensions import db
from app.schemas.log_schema import CreateLogsSchema, DeleteLogSchema
from app.services.log_service import create_log_entries, delete_log, list_logs_for_day, serialize_log
from app.utils.dates import reference_today, reference_zone
from app.utils.http import ok, error, json_body, validate_schema, arg_int, arg_str, parse_iso_date


def list_logs_handler():
    user_id = arg_int("userId", current_app.config["DEFAULT_USER_ID"], min_value=1)
    raw_day = arg_str("day")
    day = parse_iso_date(raw_day) if raw_day else reference_today(reference_zone())
    if day is None:
        return error("VALIDATION_ERROR", "day must be YYYY-MM-DD", 400)

    try:
        logs = list_logs_for_day(user_id, day)
    except SQLAlchemyError as e:
        db.session.rollback()
        current_app.logger.error(f"Failed to list logs for user {user_id} on {day}: {e}")
        logs = []
    return ok({"day": day.isoformat(), "logs": [serialize_log(log) for log in logs]})


def create_logs_handler():
    """
    Insert several log entries in one transaction.

    Body parameters:
    - logs (required): [{item, mealType, quantity, unit, calories, protein, carbs, fat, ...}]
    - day (optional): YYYY-MM-DD, defaults to today
    - userId (optional)
    """
    data, errors = validate_schema(CreateLogsSchema, json_body())
    if errors:
        return error("VALIDATION_ERROR", "Invalid log entries", 400, details=errors)

    user_id = data.get("user_id") or current_app.config["DEFAULT_USER_ID"]
    day = data.get("day") or reference_today(reference_zone())
    try:
        created = create_log_entries(user_id, day, data["logs"])
    except ValueError as e:
        code, _, message = str(e).partition(": ")
        return error(code or "VALIDATION_ERROR", message or str(e), 400)
    except SQLAlchemyError as e:
        current_app.logger.error(f"Failed to create logs for user {user_id}: {e}")
        return error("DATABASE_ERROR", "Could not save log entries", 500)

    return ok({"logs": [serialize_log(log) for log in created]}, 201)


def delete_log_handler():
    data, errors = validate_schema(DeleteLogSchema, json_body())
    if errors:
        return error("VALIDATION_ERROR", "A valid log id is required", 400, details=errors)

    try:
        deleted = delete_log(data["id"])
    except SQLAlchemyError as e:
        current_app.logger.error(f"Failed to delete log {data['id']}: {e}")
        return error("DATABASE_ERROR", "Could not delete log entry", 500)

    if not deleted:
        return error("NOT_FOUND", "Log entry not found", 404)
    return ok({"ok": True})
