"""
Proposal Service

Renders confirmation proposals for additions and removals, and reads rendered
proposals back into items. Reading back serves clients that only send the
transcript and malformed model replies that contain a plain-text proposal.
"""

import re
from typing import Any, Dict, List, Optional

from app.services.conversation_state import (
    AwaitingConfirmation,
    AwaitingDetails,
    ConversationState,
    LogItem,
    Neutral,
    RemovalItem,
)
from app.services.message_rules import clarification_subjects, looks_like_clarification
from app.services.totals_service import round_half_up, sum_logs
from app.utils.enums import ProposalKind

ADD_HEADER = "Please confirm adding"
REMOVE_HEADER = "Please confirm removing"
CONFIRM_FOOTER = 'Reply with "yes" to confirm or "no" to cancel.'
NO_NUTRITION = "(nutrition data not available)"

_ITEM_LINE_RE = re.compile(
    r"^-\s+(?P<item>[^(:\n]+?)\s*(?:\((?P<qty>[^)]+)\))?:\s*(?P<cal>-?\d+)\s*cal,\s*(?P<protein>-?\d+)g\s*protein,"
    r"\s*(?P<carbs>-?\d+)g\s*carbs,\s*(?P<fat>-?\d+)g\s*fat\s*$"
)
_NO_DATA_LINE_RE = re.compile(
    r"^-\s+(?P<item>[^(\n]+?)\s*(?:\((?P<qty>[^)]+)\)\s*)?\(nutrition data not available\)\s*$"
)
_REMOVAL_LINE_RE = re.compile(
    r"^-\s+(?P<item>.+?)(?:\s+\((?P<meal>[^)]+)\))?(?:\s+\[id (?P<id>\d+)\])?\s*$"
)


def format_quantity(quantity: float) -> str:
    if float(quantity).is_integer():
        return str(int(quantity))
    return f"{quantity:.2f}".rstrip("0").rstrip(".")


def item_line(item: LogItem) -> str:
    quantity_text = f" ({format_quantity(item.quantity)} {item.unit})" if item.quantity and item.unit else ""
    if not item.has_nutrition:
        return f"- {item.item}{quantity_text} {NO_NUTRITION}"
    return (
        f"- {item.item}{quantity_text}: {round_half_up(item.calories)} cal, "
        f"{round_half_up(item.protein)}g protein, {round_half_up(item.carbs)}g carbs, "
        f"{round_half_up(item.fat)}g fat"
    )


def render_proposal(items: List[LogItem]) -> str:
    lines = "\n".join(item_line(i) for i in items)
    if len(items) == 1:
        return f"{ADD_HEADER}:\n{lines}\n\n{CONFIRM_FOOTER}"

    totals = sum_logs(items)
    return (
        f"{ADD_HEADER} the following {len(items)} item(s):\n{lines}\n\n"
        f"Totals: {round_half_up(totals['calories'])} cal, {round_half_up(totals['protein'])}g protein, "
        f"{round_half_up(totals['carbs'])}g carbs, {round_half_up(totals['fat'])}g fat\n\n"
        f"{CONFIRM_FOOTER}"
    )


def removal_line(item: RemovalItem) -> str:
    line = f"- {item.item}"
    if item.meal_type:
        line += f" ({item.meal_type})"
    if item.id is not None:
        line += f" [id {item.id}]"
    return line


def render_removal(items: List[RemovalItem]) -> str:
    lines = "\n".join(removal_line(i) for i in items)
    return f"{REMOVE_HEADER} the following {len(items)} item(s):\n{lines}\n\n{CONFIRM_FOOTER}"


def added_reply(count: int, confirmed: bool = True) -> str:
    prefix = "Confirmed! " if confirmed else ""
    return f"{prefix}Added {count} item(s) to your food log."


def removed_reply(count: int) -> str:
    return f"Confirmed! Removed {count} item(s) from your food log."


def cancelled_reply(kind: ProposalKind) -> str:
    if kind == ProposalKind.REMOVE:
        return "No problem, I won't remove anything. What else can I help you with?"
    return "No problem, I won't log that. What else can I help you with?"


# ---------------------------------------------------------------------------
# Reading rendered proposals back
# ---------------------------------------------------------------------------

def _split_quantity(text: Optional[str]) -> Dict[str, Any]:
    if not text:
        return {}
    parts = text.strip().split(None, 1)
    try:
        quantity = float(parts[0])
    except ValueError:
        return {}
    return {"quantity": quantity, "unit": parts[1] if len(parts) > 1 else None}


def parse_proposal_lines(text: str) -> List[LogItem]:
    items: List[LogItem] = []
    for line in (text or "").splitlines():
        line = line.strip()
        match = _ITEM_LINE_RE.match(line)
        if match:
            items.append(LogItem(
                item=match.group("item").strip(),
                calories=float(match.group("cal")),
                protein=float(match.group("protein")),
                carbs=float(match.group("carbs")),
                fat=float(match.group("fat")),
                **_split_quantity(match.group("qty")),
            ))
            continue
        match = _NO_DATA_LINE_RE.match(line)
        if match:
            items.append(LogItem(item=match.group("item").strip(), **_split_quantity(match.group("qty"))))
    return items


def parse_removal_lines(text: str) -> List[RemovalItem]:
    items: List[RemovalItem] = []
    in_list = False
    for line in (text or "").splitlines():
        line = line.strip()
        if line.startswith(REMOVE_HEADER):
            in_list = True
            continue
        if not in_list or not line.startswith("-"):
            continue
        match = _REMOVAL_LINE_RE.match(line)
        if match:
            items.append(RemovalItem(
                item=match.group("item").strip(),
                meal_type=match.group("meal"),
                id=int(match.group("id")) if match.group("id") else None,
            ))
    return items


def salvage_proposal(text: str) -> List[LogItem]:
    """Items from a plain-text proposal the model wrote instead of JSON."""
    if ADD_HEADER.lower() not in (text or "").lower():
        return []
    return parse_proposal_lines(text)


def recover_state_from_history(history: List[Dict[str, str]]) -> ConversationState:
    """Rebuild the state from the most recent assistant message of a transcript."""
    last = next((m for m in reversed(history or []) if m.get("role") == "assistant"), None)
    if last is None:
        return Neutral()

    content = last.get("content") or ""
    if REMOVE_HEADER in content:
        removals = parse_removal_lines(content)
        if removals:
            return AwaitingConfirmation(kind=ProposalKind.REMOVE, items=removals)
    if ADD_HEADER in content:
        items = parse_proposal_lines(content)
        if items:
            return AwaitingConfirmation(kind=ProposalKind.ADD, items=items)
    if looks_like_clarification(content):
        subjects = clarification_subjects(content)
        if subjects:
            return AwaitingDetails(asked_about=subjects)
    return Neutral()
