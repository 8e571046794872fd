import pytest

from app.services.message_rules import (
    ambiguous_keyword,
    clause_quantity,
    clarification_subjects,
    correction_quantity,
    is_affirmative,
    is_done_logging,
    is_generic_item,
    is_negative,
    mentions,
    mentions_only,
    parse_quantity,
    quantified_in,
)
from app.utils.enums import ProposalKind


@pytest.mark.parametrize("text", ["yes", "Yes!", "yep", "sounds good", "ok, thanks", "Log it please"])
def test_affirmative(text):
    assert is_affirmative(text)


@pytest.mark.parametrize("text", ["yes but only one", "I had yogurt", "no"])
def test_not_affirmative(text):
    assert not is_affirmative(text)


@pytest.mark.parametrize("text", ["no", "Nope.", "cancel", "never mind", "no thanks"])
def test_negative(text):
    assert is_negative(text)


def test_correction_is_not_a_plain_no():
    assert not is_negative("no, I had 3")


@pytest.mark.parametrize("text", ["done", "I'm done for today", "that's everything", "all done!"])
def test_done_logging(text):
    assert is_done_logging(text)


def test_done_logging_needs_the_phrase():
    assert not is_done_logging("I had a doughnut")


def test_parse_quantity():
    assert parse_quantity("1.5 cups of rice") == (1.5, "cup")
    assert parse_quantity("about 1/2 cup") == (0.5, "cup")
    assert parse_quantity("a tablespoon of butter") == (1.0, "tbsp")
    assert parse_quantity("20 oz IPA") == (20.0, "oz")
    assert parse_quantity("some rice") is None


def test_correction_quantity():
    assert correction_quantity("no, it was 3") == (3.0, None)
    assert correction_quantity("actually two of those") == (2.0, None)
    assert correction_quantity("make it 2 cups") == (2.0, "cup")
    assert correction_quantity("I had 3 eggs") is None


def test_mentions_tolerates_plurals():
    assert mentions("I had two eggs", "egg")
    assert mentions("one egg", "eggs")
    assert not mentions("eggplant parmesan", "egg")


def test_generic_names():
    assert is_generic_item("Food")
    assert is_generic_item(" unknown item ")
    assert not is_generic_item("fried rice")


def test_ambiguous_keyword_prefers_longest():
    assert ambiguous_keyword("peanut butter toast") == "peanut butter"
    assert ambiguous_keyword("teriyaki sauce") == "sauce"
    assert ambiguous_keyword("eggs") is None


def test_quantified_in_checks_the_items_clause():
    assert quantified_in("2 eggs and some rice", "eggs")
    assert not quantified_in("2 eggs and some rice", "rice")
    assert quantified_in("chicken with 2 tbsp sauce", "sauce")


def test_clarification_subjects():
    assert clarification_subjects("Roughly how much rice did you have?") == ["rice"]
    assert clarification_subjects("How many slices of pizza?") == ["slices of pizza"]
    assert clarification_subjects("Sounds tasty!") == []


def test_delete_it_depends_on_the_proposal():
    assert is_negative("delete it")
    assert not is_affirmative("delete it")
    assert is_affirmative("delete it", ProposalKind.REMOVE)
    assert not is_negative("Remove them please", ProposalKind.REMOVE)
    assert is_negative("no", ProposalKind.REMOVE)


def test_additions_are_not_corrections():
    assert correction_quantity("wait, I also had one apple") is None
    assert correction_quantity("actually another 2 eggs") is None


def test_mentions_only_allows_amounts_and_known_names():
    assert mentions_only("no, it was 3 eggs", ["eggs"])
    assert mentions_only("actually two of those", ["eggs"])
    assert mentions_only("make it 2 cups", ["rice"])
    assert mentions_only("no, 3", ["eggs"])
    assert not mentions_only("actually one apple", ["eggs"])
    assert not mentions_only("no, it was 3 apples", ["eggs"])


def test_clause_quantity_reads_the_named_clause():
    assert clause_quantity("1 bowl of salad and 2 cups of soup", "soup") == (2.0, "cup")
    assert clause_quantity("1 bowl of salad and some soup", "soup") is None
    assert clause_quantity("two eggs", "eggs") == (2.0, None)
