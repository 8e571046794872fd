from enum import Enum


class MealType(str, Enum):
    BREAKFAST = "breakfast"
    LUNCH = "lunch"
    DINNER = "dinner"
    SNACK = "snack"


class ChatAction(str, Enum):
    LOG = "log"
    SET_GOALS = "set_goals"
    CHAT = "chat"
    REMOVE = "remove"
    CONFIRM = "confirm"
    MIXED = "mixed"


class ProposalKind(str, Enum):
    ADD = "add"
    REMOVE = "remove"
