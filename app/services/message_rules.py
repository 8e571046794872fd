"""
Message Rules

Deterministic text classification used by the chat engine: yes/no replies,
quantity corrections, "done logging" utterances, quantity expressions and the
food-name policies (generic placeholders, calorie-ambiguous foods).
"""

import re
from typing import List, NamedTuple, Optional

from app.services.food_constants import (
    AFFIRMATIVE_PHRASES,
    AMBIGUOUS_FOODS,
    CLARIFICATION_MARKERS,
    DONE_LOGGING_PHRASES,
    GENERIC_ITEM_NAMES,
    NEGATIVE_PHRASES,
    NUMBER_WORDS,
    REMOVAL_CONFIRM_PHRASES,
    UNIT_ALIASES,
)
from app.utils.enums import ProposalKind


class Quantity(NamedTuple):
    amount: float
    unit: Optional[str]


_NUMBER = r"(?:\d+\s+\d+/\d+|\d+/\d+|\d*\.\d+|\d+)"
_UNIT_WORDS = "|".join(sorted((re.escape(u) for u in UNIT_ALIASES), key=len, reverse=True))
_NUMERIC_QTY_RE = re.compile(rf"(?<![\w.])(?P<num>{_NUMBER})\s*(?P<unit>{_UNIT_WORDS})?\b")
_WORD_QTY_RE = re.compile(
    rf"\b(?P<word>half an?|a couple(?: of)?|a few|an?|one|two|three|four|five|six|seven|eight|nine|ten|half)"
    rf"\s+(?P<unit>{_UNIT_WORDS})\b"
)
_COUNT_WORD_RE = re.compile(r"\b(?P<word>one|two|three|four|five|six|seven|eight|nine|ten|half|a couple|a few)\b")
_CORRECTION_RE = re.compile(
    r"^(?:no|nope|nah|actually|wait|sorry|oops|correction|i meant|make (?:it|that)|change (?:it|that) to)\b"
)
# "also", "another": the message adds food rather than correcting it
_ADDITION_RE = re.compile(r"\b(?:also|another|too|as well|plus|in addition)\b")
_CORRECTION_FILLER = {
    "no", "nope", "nah", "actually", "wait", "sorry", "oops", "correction", "i", "i'm", "meant", "mean",
    "make", "change", "to", "it", "it's", "its", "that", "that's", "those", "them", "these", "this",
    "was", "were", "is", "had", "have", "ate", "just", "only", "really", "about", "around", "roughly",
    "like", "of", "a", "an", "the", "should", "be", "been", "small", "medium", "large", "big", "whole",
}
_CLAUSE_SPLIT_RE = re.compile(r",|;|\band\b|\bwith\b|\bplus\b|\balso\b")
_SUBJECT_RES = [
    re.compile(r"how much (?:of )?(?:the |your |that )?(?P<subject>[a-z][a-z '\-]*?)(?:\s+(?:roughly|did|do|was|were|would|in|on|for)\b|[?.!,]|$)"),
    re.compile(r"how many (?P<subject>[a-z][a-z '\-]*?)(?:\s+(?:did|do|was|were|roughly)\b|[?.!,]|$)"),
    re.compile(r"what (?:kind|type) of (?P<subject>[a-z][a-z '\-]*?)(?:\s+(?:did|do|was|were)\b|[?.!,]|$)"),
]
VAGUE_UNITS = {None, "", "serving", "servings", "portion", "portions", "some"}


def normalize(text: str) -> str:
    text = (text or "").lower().replace("’", "'").replace("‘", "'")
    text = re.sub(r"\s+", " ", text).strip()
    return text.strip(" .!?,;:")


def _strip_courtesy(text: str) -> str:
    return re.sub(r"[,\s]*(?:please|thanks|thank you|thx)$", "", text).strip(" ,")


def _phrase_in(message: str, phrases) -> bool:
    norm = normalize(message)
    return norm in phrases or _strip_courtesy(norm) in phrases


def is_affirmative(message: str, kind: Optional[ProposalKind] = None) -> bool:
    """Whether ``message`` accepts a proposal; "delete it" accepts a removal."""
    if kind == ProposalKind.REMOVE and _phrase_in(message, REMOVAL_CONFIRM_PHRASES):
        return True
    return _phrase_in(message, AFFIRMATIVE_PHRASES)


def is_negative(message: str, kind: Optional[ProposalKind] = None) -> bool:
    if kind == ProposalKind.REMOVE and _phrase_in(message, REMOVAL_CONFIRM_PHRASES):
        return False
    return _phrase_in(message, NEGATIVE_PHRASES)


def is_done_logging(message: str) -> bool:
    norm = normalize(message)
    if norm in {"done", "finished", "that's all", "thats all", "that's it", "thats it", "all set", "no more"}:
        return True
    return any(re.search(rf"\b{re.escape(p)}\b", norm) for p in DONE_LOGGING_PHRASES)


def _to_number(raw: str) -> float:
    raw = raw.strip()
    if " " in raw:
        whole, frac = raw.split(None, 1)
        return float(whole) + _to_number(frac)
    if "/" in raw:
        num, den = raw.split("/", 1)
        return float(num) / float(den) if float(den) else 0.0
    return float(raw)


def _word_amount(word: str) -> float:
    word = word.replace(" of", "").strip()
    if word.startswith("half"):
        return 0.5
    return float(NUMBER_WORDS.get(word, 1))


def parse_quantity(text: str) -> Optional[Quantity]:
    """First quantity expression in ``text``: "1.5 cups", "1/2 cup", "a tbsp", "20 oz"."""
    norm = normalize(text)
    numeric = _NUMERIC_QTY_RE.search(norm)
    worded = _WORD_QTY_RE.search(norm)
    if numeric and (not worded or numeric.start() <= worded.start()):
        unit = numeric.group("unit")
        return Quantity(_to_number(numeric.group("num")), UNIT_ALIASES.get(unit) if unit else None)
    if worded:
        return Quantity(_word_amount(worded.group("word")), UNIT_ALIASES[worded.group("unit")])
    return None


def has_quantity(text: str) -> bool:
    return parse_quantity(text) is not None


def correction_quantity(message: str) -> Optional[Quantity]:
    """Quantity in a correction such as "no I had two of those" or "make it 3"."""
    norm = normalize(message)
    if not _CORRECTION_RE.match(norm) or _ADDITION_RE.search(norm):
        return None
    qty = parse_quantity(norm)
    if qty is not None:
        return qty
    count = _COUNT_WORD_RE.search(norm)
    if count:
        return Quantity(_word_amount(count.group("word")), None)
    return None


def mentions(text: str, name: str) -> bool:
    """Whole-word, case-insensitive, tolerant of a trailing plural "s"."""
    name = normalize(name)
    if not name:
        return False
    stem = name[:-1] if name.endswith("s") and len(name) > 3 else name
    return re.search(rf"\b{re.escape(stem)}s?\b", normalize(text)) is not None


def is_generic_item(name: str) -> bool:
    return normalize(name) in GENERIC_ITEM_NAMES


def ambiguous_keyword(name: str) -> Optional[str]:
    norm = normalize(name)
    for keyword in sorted(AMBIGUOUS_FOODS, key=len, reverse=True):
        if mentions(norm, keyword):
            return keyword
    return None


def clause_quantity(message: str, name: str) -> Optional[Quantity]:
    """Amount given in the clause of ``message`` naming ``name``, as in "1 bowl of soup"."""
    for clause in _CLAUSE_SPLIT_RE.split(normalize(message)):
        if mentions(clause, name) or any(mentions(clause, w) for w in normalize(name).split() if len(w) > 3):
            qty = parse_quantity(clause)
            if qty is not None:
                return qty
            count = _COUNT_WORD_RE.search(clause)
            if count:
                return Quantity(_word_amount(count.group("word")), None)
    return None


def quantified_in(message: str, name: str) -> bool:
    """Whether the clause of ``message`` naming ``name`` carries an amount."""
    return clause_quantity(message, name) is not None


def looks_like_clarification(text: str) -> bool:
    lowered = (text or "").lower()
    return "?" in lowered or any(marker in lowered for marker in CLARIFICATION_MARKERS)


def clarification_subjects(question: str) -> List[str]:
    lowered = normalize(question) + "?"
    for pattern in _SUBJECT_RES:
        match = pattern.search(lowered)
        if match:
            subject = match.group("subject").strip(" '-")
            parts = [p.strip() for p in re.split(r"\band\b|,", subject) if p.strip()]
            return [p for p in parts if p not in {"it", "that", "this", "you", "of it"}]
    return []


def starts_like_correction(message: str) -> bool:
    return _CORRECTION_RE.match(normalize(message)) is not None


def mentions_only(message: str, names: List[str]) -> bool:
    """
    Whether a correction talks about nothing but amounts and ``names``.

    "no, it was 3 eggs" and "actually two of those" qualify for a proposal of
    eggs; "wait, one apple" does not, since the apple is a new food.
    """
    rest = _CORRECTION_RE.sub(" ", normalize(message), count=1)
    for pattern in (_NUMERIC_QTY_RE, _WORD_QTY_RE, _COUNT_WORD_RE):
        rest = pattern.sub(" ", rest)
    for word in re.findall(r"[a-z][a-z']*", rest):
        if word in _CORRECTION_FILLER or word in UNIT_ALIASES:
            continue
        if any(mentions(name, word) for name in names):
            continue
        return False
    return True
