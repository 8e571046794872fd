"""
Intent Service

Validates the object extracted from model output and turns it into an Intent.
Anything that does not fit the output contract yields None, which the chat
engine treats as degraded input.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from app.schemas.chat_schema import ModelOutputSchema
from app.services.conversation_state import LogItem, RemovalItem
from app.utils.enums import ChatAction
from app.utils.http import validate_schema

logger = logging.getLogger(__name__)

GOAL_FIELDS = ("target_calories", "target_protein", "target_carbs", "target_fat")


@dataclass
class Intent:
    action: ChatAction
    reply: str = ""
    logs: List[LogItem] = field(default_factory=list)
    goals: Dict[str, int] = field(default_factory=dict)
    items_to_remove: List[RemovalItem] = field(default_factory=list)
    needs_confirmation: Optional[bool] = None
    day: Optional[str] = None
    clarify: List[str] = field(default_factory=list)


def _goal_fields(raw: Optional[Dict[str, Any]]) -> Dict[str, int]:
    if not raw:
        return {}
    return {name: int(round(raw[name])) for name in GOAL_FIELDS if raw.get(name) is not None}


def _infer_action(logs, removals, goals, reply) -> Optional[ChatAction]:
    if logs:
        return ChatAction.LOG
    if removals:
        return ChatAction.REMOVE
    if goals:
        return ChatAction.SET_GOALS
    if reply:
        return ChatAction.CHAT
    return None


def _shape_error(action: ChatAction, logs: List[LogItem], removals: List[RemovalItem],
                 goals: Dict[str, int]) -> Optional[str]:
    if action == ChatAction.LOG:
        if not logs:
            return "log requires at least one entry"
        if any(not entry.item for entry in logs):
            return "every log entry needs an item name"
    if action == ChatAction.REMOVE and not removals:
        return "remove requires itemsToRemove"
    if action == ChatAction.SET_GOALS and not goals:
        return "set_goals requires at least one goal field"
    if action == ChatAction.MIXED:
        if not logs and not goals:
            return "mixed requires logs or goals"
        if any(not entry.item for entry in logs):
            return "every log entry needs an item name"
    return None


def classify_intent(payload: Optional[Dict[str, Any]]) -> Optional[Intent]:
    """
    Validate an extracted model object against the output contract.

    Args:
        payload: Object returned by the response extractor, or None

    Returns:
        Intent, or None when the payload is missing or malformed
    """
    if not payload:
        return None

    data, errors = validate_schema(ModelOutputSchema, payload)
    if errors:
        logger.warning(f"Model output failed validation: {errors}")
        return None

    logs = [LogItem.from_dict({**entry, "mealType": entry.get("meal_type")}) for entry in data.get("logs") or []]
    removals = [
        RemovalItem(item=(r.get("item") or "").strip(), meal_type=r.get("meal_type"), id=r.get("id"))
        for r in data.get("items_to_remove") or []
        if (r.get("item") or "").strip() or r.get("id") is not None
    ]
    goals = _goal_fields(data.get("goals"))
    reply = (data.get("reply") or "").strip()

    action = ChatAction(data["action"]) if data.get("action") else _infer_action(logs, removals, goals, reply)
    if action is None:
        logger.warning("Model output has no action and nothing to infer one from")
        return None

    problem = _shape_error(action, logs, removals, goals)
    if problem:
        logger.warning(f"Model output rejected: {problem}")
        return None

    return Intent(
        action=action,
        reply=reply,
        logs=logs,
        goals=goals,
        items_to_remove=removals,
        needs_confirmation=data.get("needs_confirmation"),
        day=data.get("day"),
        clarify=[s.strip() for s in data.get("clarify") or [] if s and s.strip()],
    )
