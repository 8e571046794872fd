from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from app.extensions import db
from app.schemas.chat_schema import ChatRequestSchema
from app.services.conversation_state import Neutral, state_from_dict
from app.services.goal_service import get_goal
from app.services.llm_gateway import get_llm_gateway
from app.services.log_service import list_logs_for_day
from app.services.proposal_service import recover_state_from_history
from app.services.reconciliation_service import ChatTurn, ReconciliationEngine
from app.utils.dates import reference_zone, resolve_day
from app.utils.http import ok, error, json_body, parse_iso_datetime, validate_schema


def _initial_state(data):
    state = state_from_dict(data.get("state"))
    if state is not None:
        return state
    if current_app.config.get("CHAT_RECOVER_STATE_FROM_HISTORY", True):
        return recover_state_from_history(data.get("conversation_history") or [])
    return Neutral()


def chat_handler():
    """
    Handle one chat turn.

    Body parameters:
    - message (required): What the user typed
    - userId (optional): Defaults to DEFAULT_USER_ID
    - day (optional): ISO timestamp from the client; "today" is derived from it
    - conversationHistory (optional): [{role, content}, ...]
    - state (optional): Conversation state returned by the previous turn
    """
    data, errors = validate_schema(ChatRequestSchema, json_body())
    if errors:
        return error("VALIDATION_ERROR", "Invalid chat request", 400, details=errors)

    user_id = data.get("user_id") or current_app.config["DEFAULT_USER_ID"]
    day = resolve_day(parse_iso_datetime(data.get("day")), reference_zone())
    state = _initial_state(data)

    try:
        logs = list_logs_for_day(user_id, day)
        goal = get_goal(user_id)
    except SQLAlchemyError as e:
        db.session.rollback()
        current_app.logger.error(f"Failed to load context for user {user_id}: {e}")
        logs, goal = [], None

    engine = ReconciliationEngine(
        get_llm_gateway(),
        history_limit=current_app.config.get("CHAT_HISTORY_LIMIT", 10),
        direct_logging=current_app.config.get("CHAT_DIRECT_LOGGING", False),
    )
    turn = ChatTurn(
        user_id=user_id,
        day=day,
        message=data["message"],
        history=data.get("conversation_history") or [],
        state=state,
        logs=logs,
        goal=goal,
    )
    result = engine.handle_turn(turn)
    current_app.logger.info(f"Chat turn for user {user_id} on {day}: {result.action.value}")
    return ok(result.to_dict())
