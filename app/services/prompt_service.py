"""
Prompt Service

Builds the system prompt for a chat turn: the output contract, logging rules
and the user's current day (goals, totals, items already logged, pending
proposal or question).
"""

from typing import Any, Iterable, List, Optional

from app.services.conversation_state import AwaitingConfirmation, AwaitingDetails, ConversationState
from app.services.totals_service import goal_targets, remaining_budget, round_half_up, sum_logs
from app.utils.enums import MealType, ProposalKind

OUTPUT_CONTRACT = """Output only valid JSON with this shape:
{
  "action": "log" | "set_goals" | "chat" | "remove" | "confirm" | "mixed",
  "day"?: string,
  "logs"?: [
    {"item": string, "mealType"?: MEAL_TYPES, "quantity"?: number, "unit"?: string, "calories"?: number,
     "protein"?: number, "carbs"?: number, "fat"?: number, "fiber"?: number, "sugar"?: number,
     "sodium"?: number, "notes"?: string}
  ],
  "goals"?: {"targetCalories"?: number, "targetProtein"?: number, "targetCarbs"?: number, "targetFat"?: number},
  "itemsToRemove"?: [{"id"?: number, "item": string, "mealType"?: string}],
  "needsConfirmation"?: boolean,
  "clarify"?: [string],
  "reply"?: string
}""".replace("MEAL_TYPES", " | ".join(f'"{m.value}"' for m in MealType))

RULES = """Rules:
- Respond with a single JSON object only. Start with { and end with }.
- If the user mentions food or drink they had, set action to "log" and put every item in "logs" with your best
  nutrition estimate (calories, protein, carbs, fat in grams).
- Always set needsConfirmation to true when logging and leave "reply" empty; the system writes the confirmation.
- Never use generic names such as "food", "item" or "food item". If you cannot tell what the food is, set action
  to "chat" and ask.
- If an amount is missing and the calories depend heavily on it (sauce, rice, salad, soup, pasta, meat...), set
  action to "chat", ask ONE short casual question about ONE item (e.g. "Roughly how much rice?") and name that item
  in "clarify".
- Clear amounts need no question: "2 eggs", "1 apple", "20 oz IPA", "12 oz beer".
- If the user wants to remove something already logged, set action to "remove" and list it in "itemsToRemove"
  (include the id from TODAY'S FOOD when you know it).
- If the user states numeric daily targets, set action to "set_goals" (or "mixed" with logs) and fill "goals".
- Otherwise set action to "chat" and answer briefly in "reply"."""


def _fmt(value: Optional[float]) -> str:
    return str(round_half_up(value)) if value else "Not set"


def describe_goal(goal: Any) -> str:
    if not goal:
        return "No goals set yet"
    targets = goal_targets(goal)
    if not any(targets.values()):
        return "No goals set yet"
    return (
        f"{_fmt(targets['calories'])} kcal, {_fmt(targets['protein'])}g protein, "
        f"{_fmt(targets['carbs'])}g carbs, {_fmt(targets['fat'])}g fat"
    )


def describe_logs(logs: Iterable[Any]) -> str:
    lines = [f"[id {log.id}] {log.item} ({round_half_up(log.calories)} cal"
             f"{', ' + log.meal_type if log.meal_type else ''})" for log in logs]
    return ", ".join(lines) if lines else "None logged yet"


def describe_state(state: ConversationState) -> str:
    if isinstance(state, AwaitingConfirmation):
        names = ", ".join(i.item for i in state.items)
        if state.kind == ProposalKind.REMOVE:
            return f"Waiting for the user to confirm removing: {names}."
        return (
            f"Waiting for the user to confirm adding: {names}. If they mention more food, return only the new "
            f"items; the system keeps the pending ones."
        )
    if isinstance(state, AwaitingDetails):
        held = [i.item for i in state.resolved_items + state.pending_items]
        text = f"You asked the user about: {', '.join(state.asked_about) or 'an amount'}."
        if held:
            text += f" Items already described: {', '.join(held)}."
        return text + " Use their answer to complete that item and return it in \"logs\"."
    return "Nothing pending."


def build_system_prompt(goal: Any, logs: List[Any], state: ConversationState) -> str:
    totals = sum_logs(logs)
    remaining = remaining_budget(totals, goal)
    return "\n\n".join([
        "You are a nutrition logging assistant. You help the user log what they eat and drink accurately.",
        f"USER'S GOALS: {describe_goal(goal)}",
        (
            f"TODAY'S PROGRESS: {round_half_up(totals['calories'])} calories, {round_half_up(totals['protein'])}g "
            f"protein, {round_half_up(totals['carbs'])}g carbs, {round_half_up(totals['fat'])}g fat"
        ),
        (
            f"REMAINING: {round_half_up(remaining['calories'])} calories, {round_half_up(remaining['protein'])}g "
            f"protein, {round_half_up(remaining['carbs'])}g carbs, {round_half_up(remaining['fat'])}g fat"
        ),
        f"TODAY'S FOOD: {describe_logs(logs)}",
        f"CONVERSATION STATE: {describe_state(state)}",
        RULES,
        OUTPUT_CONTRACT,
    ])
