"""
Conversation State

Explicit per-conversation state for the chat engine. The state travels with
every /chat response and is sent back by the client on the next turn:

- Neutral: nothing pending
- AwaitingDetails: a clarifying question is out; ``asked_about`` lists the
  subjects still unanswered, ``resolved_items`` the items already complete and
  ``pending_items`` the items waiting on an answer
- AwaitingConfirmation: a proposal (``kind`` add or remove) awaits yes/no
"""

import logging
from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Optional, Union

from app.utils.enums import ProposalKind

logger = logging.getLogger(__name__)

NUTRIENT_FIELDS = ("calories", "protein", "carbs", "fat", "fiber", "sugar", "sodium")
MACRO_FIELDS = ("calories", "protein", "carbs", "fat")


def _num(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _text(value: Any) -> Optional[str]:
    if value is None:
        return None
    value = str(value).strip()
    return value or None


@dataclass
class LogItem:
    item: str
    meal_type: Optional[str] = None
    quantity: Optional[float] = None
    unit: Optional[str] = None
    calories: Optional[float] = None
    protein: Optional[float] = None
    carbs: Optional[float] = None
    fat: Optional[float] = None
    fiber: Optional[float] = None
    sugar: Optional[float] = None
    sodium: Optional[float] = None
    notes: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LogItem":
        """Accepts camelCase (API, model output) or snake_case keys."""
        return cls(
            item=_text(data.get("item")) or "",
            meal_type=_text(data.get("mealType", data.get("meal_type"))),
            quantity=_num(data.get("quantity")),
            unit=_text(data.get("unit")),
            notes=_text(data.get("notes")),
            **{name: _num(data.get(name)) for name in NUTRIENT_FIELDS},
        )

    def to_dict(self) -> Dict[str, Any]:
        payload = {"item": self.item, "mealType": self.meal_type, "quantity": self.quantity, "unit": self.unit}
        payload.update({name: getattr(self, name) for name in NUTRIENT_FIELDS})
        payload["notes"] = self.notes
        return payload

    def to_log_fields(self) -> Dict[str, Any]:
        fields_ = {"item": self.item, "meal_type": self.meal_type, "quantity": self.quantity,
                   "unit": self.unit, "notes": self.notes}
        fields_.update({name: getattr(self, name) for name in NUTRIENT_FIELDS})
        return fields_

    @property
    def has_nutrition(self) -> bool:
        return any(getattr(self, name) is not None for name in MACRO_FIELDS)

    @property
    def is_complete(self) -> bool:
        return (
            self.quantity is not None
            and bool(self.unit)
            and all(getattr(self, name) is not None for name in MACRO_FIELDS)
        )

    def with_quantity(self, quantity: float, unit: Optional[str] = None) -> "LogItem":
        """Copy with a new quantity; nutrition scales when the old quantity is known."""
        changes: Dict[str, Any] = {"quantity": quantity}
        if unit:
            changes["unit"] = unit
        if self.quantity:
            factor = quantity / self.quantity
            for name in NUTRIENT_FIELDS:
                value = getattr(self, name)
                if value is not None:
                    changes[name] = value * factor
        return replace(self, **changes)


@dataclass
class RemovalItem:
    item: str
    meal_type: Optional[str] = None
    id: Optional[int] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RemovalItem":
        raw_id = data.get("id")
        try:
            log_id = int(raw_id) if raw_id is not None else None
        except (TypeError, ValueError):
            log_id = None
        return cls(
            item=_text(data.get("item")) or "",
            meal_type=_text(data.get("mealType", data.get("meal_type"))),
            id=log_id,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "item": self.item, "mealType": self.meal_type}


@dataclass
class Neutral:
    status = "neutral"


@dataclass
class AwaitingDetails:
    asked_about: List[str] = field(default_factory=list)
    resolved_items: List[LogItem] = field(default_factory=list)
    pending_items: List[LogItem] = field(default_factory=list)

    status = "awaiting_details"


@dataclass
class AwaitingConfirmation:
    kind: ProposalKind = ProposalKind.ADD
    items: List[Union[LogItem, RemovalItem]] = field(default_factory=list)

    status = "awaiting_confirmation"


ConversationState = Union[Neutral, AwaitingDetails, AwaitingConfirmation]


def state_to_dict(state: ConversationState) -> Dict[str, Any]:
    if isinstance(state, AwaitingDetails):
        return {
            "status": state.status,
            "askedAbout": list(state.asked_about),
            "resolvedItems": [i.to_dict() for i in state.resolved_items],
            "pendingItems": [i.to_dict() for i in state.pending_items],
        }
    if isinstance(state, AwaitingConfirmation):
        return {
            "status": state.status,
            "kind": state.kind.value,
            "items": [i.to_dict() for i in state.items],
        }
    return {"status": Neutral.status}


def state_from_dict(data: Optional[Dict[str, Any]]) -> Optional[ConversationState]:
    """Rebuild a state sent back by the client. None when absent or unusable."""
    if not data:
        return None
    status = data.get("status")
    try:
        if status == Neutral.status:
            return Neutral()
        if status == AwaitingDetails.status:
            return AwaitingDetails(
                asked_about=[str(s) for s in data.get("askedAbout") or [] if s],
                resolved_items=[LogItem.from_dict(i) for i in data.get("resolvedItems") or []],
                pending_items=[LogItem.from_dict(i) for i in data.get("pendingItems") or []],
            )
        if status == AwaitingConfirmation.status:
            kind = ProposalKind(data.get("kind", ProposalKind.ADD.value))
            item_cls = RemovalItem if kind == ProposalKind.REMOVE else LogItem
            items = [item_cls.from_dict(i) for i in data.get("items") or []]
            if not items:
                return Neutral()
            return AwaitingConfirmation(kind=kind, items=items)
    except (AttributeError, TypeError, ValueError) as e:
        logger.warning(f"Ignoring malformed conversation state: {e}")
        return None
    logger.warning(f"Ignoring conversation state with unknown status {status!r}")
    return None
