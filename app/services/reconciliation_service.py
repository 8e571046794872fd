"""
Reconciliation Service

Turns one chat message into exactly one outcome: a clarifying question, a
confirmation proposal, a confirmed write or removal, a goal update or a plain
reply. The conversation state arrives with the turn and the next state is
returned with the result.

Order of handling for a turn:
1. yes / no to a pending proposal is applied without asking the model
2. "done logging" utterances get the day's summary, whatever the state
3. quantity corrections to a pending proposal are applied in place
4. everything else goes through the model, the extractor and the intent
   classifier, then the rules below decide what the model output means
"""

import logging
from dataclasses import dataclass, field, replace
from datetime import date
from typing import Any, Dict, List, Optional

from sqlalchemy.exc import SQLAlchemyError

from app.services.conversation_state import (
    AwaitingConfirmation,
    AwaitingDetails,
    ConversationState,
    LogItem,
    Neutral,
    RemovalItem,
    state_to_dict,
)
from app.services.food_constants import (
    DATABASE_ERROR_MESSAGE,
    DEFAULT_CHAT_REPLY,
    GATEWAY_ERROR_MESSAGE,
    GENERIC_HELP_MESSAGE,
    GENERIC_ITEM_MESSAGE,
    LAST_RESORT_REPLY,
    UNIT_ALIASES,
)
from app.services.goal_service import serialize_goal, upsert_goal
from app.services.intent_service import Intent, classify_intent
from app.services.llm_gateway import LLMGatewayError
from app.services.log_service import create_log_entries, delete_removal_items, find_matching_logs
from app.services.message_rules import (
    VAGUE_UNITS,
    ambiguous_keyword,
    clarification_subjects,
    clause_quantity,
    correction_quantity,
    has_quantity,
    is_affirmative,
    is_done_logging,
    is_generic_item,
    is_negative,
    looks_like_clarification,
    mentions,
    mentions_only,
    normalize,
    parse_quantity,
    quantified_in,
    starts_like_correction,
)
from app.services.prompt_service import build_system_prompt, describe_goal
from app.services.proposal_service import (
    added_reply,
    cancelled_reply,
    removed_reply,
    render_proposal,
    render_removal,
    salvage_proposal,
)
from app.services.response_extractor import extract_first_json, strip_json_fragments
from app.services.totals_service import done_logging_summary
from app.utils.enums import ChatAction, ProposalKind

logger = logging.getLogger(__name__)

NOTHING_PENDING_MESSAGE = "There's nothing waiting for confirmation right now. What would you like to log?"


@dataclass
class ChatTurn:
    user_id: int
    day: date
    message: str
    history: List[Dict[str, str]] = field(default_factory=list)
    state: ConversationState = field(default_factory=Neutral)
    logs: List[Any] = field(default_factory=list)
    goal: Any = None


@dataclass
class ChatResult:
    action: ChatAction
    reply: str
    state: ConversationState = field(default_factory=Neutral)
    logs: List[LogItem] = field(default_factory=list)
    goals: Optional[Dict[str, Any]] = None
    items_to_remove: List[RemovalItem] = field(default_factory=list)
    needs_confirmation: bool = False
    error_type: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        payload = {
            "action": self.action.value,
            "reply": self.reply,
            "logs": [i.to_dict() for i in self.logs],
            "goals": self.goals or {},
            "itemsToRemove": [i.to_dict() for i in self.items_to_remove],
            "needsConfirmation": self.needs_confirmation,
            "state": state_to_dict(self.state),
        }
        if self.error_type:
            payload["error"] = True
            payload["errorType"] = self.error_type
        return payload


def ask_about(subject: str) -> str:
    return f"Roughly how much {subject} did you have?"


def _canonical_unit(unit: Optional[str]) -> Optional[str]:
    if not unit:
        return None
    return UNIT_ALIASES.get(unit.strip().lower(), unit.strip().lower())


def _named_in(message: str, name: str) -> bool:
    return mentions(message, name) or any(mentions(message, w) for w in normalize(name).split() if len(w) > 3)


def _same_food(a: str, b: str) -> bool:
    return normalize(a) == normalize(b) or mentions(a, b) or mentions(b, a)


def _is_duplicate(item: LogItem, others: List[LogItem]) -> bool:
    return any(
        normalize(o.item) == normalize(item.item) and o.quantity == item.quantity and o.calories == item.calories
        for o in others
    )


def needs_details(item: LogItem, message: str) -> bool:
    """
    Whether an item cannot be proposed before the user gives an amount.

    Calorie-ambiguous foods need an amount from the user, not an amount the
    model guessed. Items the user did not name in this message (carried over
    from earlier in the conversation) only need the model's own quantity.
    """
    if item.is_complete and not ambiguous_keyword(item.item):
        return False
    if quantified_in(message, item.item):
        return False
    if _named_in(message, item.item):
        return ambiguous_keyword(item.item) is not None or (item.quantity is None and not item.has_nutrition)
    if item.quantity is None or _canonical_unit(item.unit) in VAGUE_UNITS:
        return ambiguous_keyword(item.item) is not None or not item.has_nutrition
    return False


class ReconciliationEngine:
    def __init__(self, gateway, history_limit: int = 10, direct_logging: bool = False):
        self.gateway = gateway
        self.history_limit = history_limit
        self.direct_logging = direct_logging

    def handle_turn(self, turn: ChatTurn) -> ChatResult:
        result = self._dispatch(turn)
        if not (result.reply or "").strip():
            logger.warning(f"Empty reply for action {result.action.value}, using default")
            result.reply = LAST_RESORT_REPLY
        return result

    # ------------------------------------------------------------------
    # Deterministic steps
    # ------------------------------------------------------------------

    def _dispatch(self, turn: ChatTurn) -> ChatResult:
        state = turn.state
        pending = isinstance(state, AwaitingConfirmation)

        if pending:
            if is_affirmative(turn.message, state.kind):
                return self._commit(turn, state)
            if is_negative(turn.message, state.kind):
                logger.info(f"User {turn.user_id} cancelled a {state.kind.value} proposal")
                return ChatResult(action=ChatAction.CHAT, reply=cancelled_reply(state.kind), state=Neutral())

        if is_done_logging(turn.message):
            return ChatResult(
                action=ChatAction.CHAT,
                reply=done_logging_summary(turn.logs, turn.goal),
                state=state,
            )

        if pending and state.kind == ProposalKind.ADD:
            corrected = self._apply_correction(turn, state)
            if corrected is not None:
                return corrected

        return self._ask_model(turn)

    def _commit(self, turn: ChatTurn, state: AwaitingConfirmation) -> ChatResult:
        if state.kind == ProposalKind.REMOVE:
            try:
                count = delete_removal_items(turn.user_id, turn.day, state.items)
            except SQLAlchemyError:
                return self._database_error(state)
            return ChatResult(action=ChatAction.CONFIRM, reply=removed_reply(count), state=Neutral(),
                              items_to_remove=list(state.items))

        try:
            rows = create_log_entries(turn.user_id, turn.day, state.items)
        except ValueError as e:
            logger.warning(f"Refusing to log proposal for user {turn.user_id}: {e}")
            return ChatResult(action=ChatAction.CHAT, reply=GENERIC_ITEM_MESSAGE, state=Neutral())
        except SQLAlchemyError:
            return self._database_error(state)
        return ChatResult(action=ChatAction.CONFIRM, reply=added_reply(len(rows)), state=Neutral(),
                          logs=list(state.items))

    def _apply_correction(self, turn: ChatTurn, state: AwaitingConfirmation) -> Optional[ChatResult]:
        quantity = correction_quantity(turn.message)
        if quantity is None:
            return None

        items: List[LogItem] = list(state.items)
        if not mentions_only(turn.message, [i.item for i in items]):
            return None
        named = [idx for idx, i in enumerate(items) if _named_in(turn.message, i.item)]
        index = named[-1] if named else len(items) - 1

        target = items[index]
        new_unit = _canonical_unit(quantity.unit)
        if new_unit and target.unit and new_unit != _canonical_unit(target.unit):
            # A different unit needs a fresh estimate from the model
            return None

        items[index] = target.with_quantity(quantity.amount, quantity.unit or target.unit)
        logger.info(f"Corrected quantity of {target.item!r} from {target.quantity} to {quantity.amount}")
        return self._propose(items)

    # ------------------------------------------------------------------
    # Model-driven steps
    # ------------------------------------------------------------------

    def _ask_model(self, turn: ChatTurn) -> ChatResult:
        history = turn.history[-self.history_limit:] if self.history_limit > 0 else []
        system_prompt = build_system_prompt(turn.goal, turn.logs, turn.state)
        try:
            raw = self.gateway.complete_chat(system_prompt, history, turn.message)
        except LLMGatewayError as e:
            logger.error(f"Chat turn failed at the model gateway: {e}")
            return self._keep_state(turn.state, GATEWAY_ERROR_MESSAGE, error_type="gateway")

        intent = classify_intent(extract_first_json(raw))
        if intent is None:
            return self._degraded(turn, raw)

        goals = None
        if intent.goals and intent.action in (ChatAction.SET_GOALS, ChatAction.MIXED):
            try:
                goals = serialize_goal(upsert_goal(turn.user_id, intent.goals))
            except SQLAlchemyError:
                return self._database_error(turn.state)

        if intent.action == ChatAction.CONFIRM:
            if isinstance(turn.state, AwaitingConfirmation):
                return self._commit(turn, turn.state)
            if intent.logs:
                return self._handle_items(turn, intent, goals)
            return self._keep_state(turn.state, NOTHING_PENDING_MESSAGE)

        if intent.action == ChatAction.REMOVE:
            return self._propose_removal(turn, intent.items_to_remove)

        if intent.logs:
            return self._handle_items(turn, intent, goals)

        if goals is not None:
            reply = intent.reply or f"Got it! I've updated your goals to {describe_goal(goals)}."
            result = self._keep_state(turn.state, reply)
            result.action = intent.action
            result.goals = goals
            return result

        return self._handle_chat(turn, intent)

    def _handle_items(self, turn: ChatTurn, intent: Intent, goals: Optional[Dict[str, Any]]) -> ChatResult:
        state = turn.state
        message = turn.message

        if any(is_generic_item(i.item) for i in intent.logs):
            logger.info("Model proposed a generic item name, asking for specifics")
            return self._keep_state(state, GENERIC_ITEM_MESSAGE, proposal=False)

        held: List[LogItem] = []
        asked: List[str] = []
        waiting: List[LogItem] = []
        new_items = list(intent.logs)

        if isinstance(state, AwaitingDetails):
            held = list(state.resolved_items)
            asked = list(state.asked_about)
            waiting = list(state.pending_items)
            new_items = self._resolve_answers(message, asked, waiting, held, new_items)
        elif isinstance(state, AwaitingConfirmation) and state.kind == ProposalKind.ADD:
            held = list(state.items)

        ready: List[LogItem] = []
        for item in new_items:
            if not needs_details(item, message):
                ready.append(item)
                continue
            subject = ambiguous_keyword(item.item) or item.item
            if not any(_same_food(subject, s) for s in asked):
                asked.append(item.item if _named_in(message, item.item) else subject)
            waiting.append(item)

        items = self._merge(held, ready, correcting=starts_like_correction(message))

        if asked:
            reply = intent.reply if self._asks_about(intent.reply, asked[0]) else ask_about(asked[0])
            return ChatResult(
                action=ChatAction.CHAT,
                reply=reply,
                state=AwaitingDetails(asked_about=asked, resolved_items=items, pending_items=waiting),
                goals=goals,
            )
        if not items:
            return self._handle_chat(turn, intent)

        if (
            intent.needs_confirmation is False
            and self.direct_logging
            and isinstance(state, Neutral)
            and all(i.is_complete and not ambiguous_keyword(i.item) for i in items)
        ):
            try:
                rows = create_log_entries(turn.user_id, turn.day, items)
            except (ValueError, SQLAlchemyError):
                return self._database_error(state)
            return ChatResult(action=intent.action, reply=added_reply(len(rows), confirmed=False),
                              state=Neutral(), logs=items, goals=goals)

        result = self._propose(items)
        result.action = ChatAction.MIXED if intent.action == ChatAction.MIXED else ChatAction.LOG
        result.goals = goals
        return result

    def _resolve_answers(self, message: str, asked: List[str], waiting: List[LogItem], held: List[LogItem],
                         new_items: List[LogItem]) -> List[LogItem]:
        """
        Match model items against the open questions.

        Only questions the user answered are closed: subjects named in the
        message with an amount, or else the first open question when the
        message carries an amount. Answered items move to ``held`` and their
        subjects leave ``asked``. Items for subjects still open replace their
        waiting copies, whatever amount the model guessed. The remaining model
        items are returned for the usual checks.
        """
        message_quantity = parse_quantity(message)
        named = {s: clause_quantity(message, s) for s in asked if _named_in(message, s)}
        first = asked[0] if asked and not named and message_quantity else None

        unmatched: List[LogItem] = []
        for item in new_items:
            if _is_duplicate(item, held):
                continue
            subject = next((s for s in asked if _same_food(item.item, s)), None)
            if (
                subject is None
                and len(asked) == 1
                and asked[0] == first
                and not _named_in(message, item.item)
                and not any(_same_food(item.item, h.item) for h in held)
            ):
                subject = first
            if subject is None:
                unmatched.append(item)
                continue

            answer = named.get(subject) or (message_quantity if subject == first else None)
            if answer is None:
                waiting[:] = [w for w in waiting if not _same_food(w.item, subject)] + [item]
                continue
            if item.quantity is None or _canonical_unit(item.unit) in VAGUE_UNITS:
                item = replace(item, quantity=answer.amount, unit=answer.unit or item.unit)

            asked.remove(subject)
            waiting[:] = [w for w in waiting if not _same_food(w.item, subject)]
            held.append(item)
        return unmatched

    def _merge(self, base: List[LogItem], additions: List[LogItem], correcting: bool) -> List[LogItem]:
        items = list(base)
        for item in additions:
            if correcting:
                index = next((idx for idx, i in enumerate(items) if _same_food(i.item, item.item)), None)
                if index is not None:
                    items[index] = item
                    continue
            if _is_duplicate(item, items):
                continue
            items.append(item)
        return items

    def _propose(self, items: List[LogItem]) -> ChatResult:
        return ChatResult(
            action=ChatAction.LOG,
            reply=render_proposal(items),
            state=AwaitingConfirmation(kind=ProposalKind.ADD, items=items),
            logs=items,
            needs_confirmation=True,
        )

    def _propose_removal(self, turn: ChatTurn, requested: List[RemovalItem]) -> ChatResult:
        resolved: List[RemovalItem] = []
        for removal in requested:
            matches = find_matching_logs(turn.logs, removal)
            if len(matches) == 1:
                row = matches[0]
                resolved.append(RemovalItem(item=row.item, meal_type=row.meal_type, id=row.id))
            elif matches and len({normalize(m.item) for m in matches}) == 1:
                resolved.append(RemovalItem(item=matches[0].item, meal_type=removal.meal_type))
            else:
                resolved.extend(RemovalItem(item=m.item, meal_type=m.meal_type, id=m.id) for m in matches)

        unique: List[RemovalItem] = []
        for removal in resolved:
            if removal not in unique:
                unique.append(removal)

        if not unique:
            names = ", ".join(r.item for r in requested if r.item) or "that"
            return self._keep_state(turn.state, f"I couldn't find {names} in today's food log.")

        return ChatResult(
            action=ChatAction.REMOVE,
            reply=render_removal(unique),
            state=AwaitingConfirmation(kind=ProposalKind.REMOVE, items=unique),
            items_to_remove=unique,
            needs_confirmation=True,
        )

    def _handle_chat(self, turn: ChatTurn, intent: Intent) -> ChatResult:
        reply = intent.reply or DEFAULT_CHAT_REPLY
        if looks_like_clarification(reply):
            subjects = intent.clarify or clarification_subjects(reply)
            if subjects:
                return ChatResult(action=ChatAction.CHAT, reply=reply,
                                  state=self._details_state(turn.state, subjects))
        return self._keep_state(turn.state, reply)

    # ------------------------------------------------------------------
    # Fallbacks
    # ------------------------------------------------------------------

    def _degraded(self, turn: ChatTurn, raw: str) -> ChatResult:
        state = turn.state

        salvaged = salvage_proposal(raw)
        if salvaged and not any(is_generic_item(i.item) for i in salvaged):
            logger.info(f"Salvaged {len(salvaged)} item(s) from a plain-text proposal")
            base = state.items if isinstance(state, AwaitingConfirmation) and state.kind == ProposalKind.ADD else []
            return self._propose(self._merge(base, salvaged, correcting=False))

        if looks_like_clarification(raw):
            question = strip_json_fragments(raw)
            if question and looks_like_clarification(question):
                subjects = clarification_subjects(question)
                next_state = self._details_state(state, subjects) if subjects else state
                return ChatResult(action=ChatAction.CHAT, reply=question, state=next_state)

        if isinstance(state, AwaitingDetails) and state.asked_about and has_quantity(turn.message):
            return ChatResult(action=ChatAction.CHAT, reply=ask_about(state.asked_about[0]), state=state)

        logger.warning("Falling back to the help message for unusable model output")
        return self._keep_state(state, GENERIC_HELP_MESSAGE, error_type="parsing")

    def _database_error(self, state: ConversationState) -> ChatResult:
        return self._keep_state(state, DATABASE_ERROR_MESSAGE, error_type="database")

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _asks_about(reply: str, subject: str) -> bool:
        return bool(reply) and looks_like_clarification(reply) and _named_in(reply, subject)

    @staticmethod
    def _details_state(state: ConversationState, subjects: List[str]) -> AwaitingDetails:
        if isinstance(state, AwaitingDetails):
            asked = list(subjects) + [s for s in state.asked_about if not any(_same_food(s, n) for n in subjects)]
            return AwaitingDetails(asked_about=asked, resolved_items=state.resolved_items,
                                   pending_items=state.pending_items)
        held = state.items if isinstance(state, AwaitingConfirmation) and state.kind == ProposalKind.ADD else []
        return AwaitingDetails(asked_about=list(subjects), resolved_items=list(held))

    @staticmethod
    def _keep_state(state: ConversationState, reply: str, error_type: Optional[str] = None,
                    proposal: bool = True) -> ChatResult:
        """A reply that leaves the conversation where it was."""
        pending = proposal and isinstance(state, AwaitingConfirmation)
        result = ChatResult(action=ChatAction.CHAT, reply=reply, state=state, needs_confirmation=pending,
                            error_type=error_type)
        if pending and state.kind == ProposalKind.ADD:
            result.logs = list(state.items)
        elif pending:
            result.items_to_remove = list(state.items)
        return result
