from app.services.conversation_state import AwaitingConfirmation, AwaitingDetails, LogItem, Neutral, RemovalItem
from app.services.proposal_service import (
    item_line,
    recover_state_from_history,
    render_proposal,
    render_removal,
    salvage_proposal,
)
from app.utils.enums import ProposalKind

EGGS = LogItem(item="eggs", quantity=2, unit="large", calories=140, protein=12, carbs=1, fat=10)
TOAST = LogItem(item="toast", quantity=1, unit="slice", calories=80.5, protein=3, carbs=14.5, fat=1)


def test_single_item_proposal():
    assert render_proposal([EGGS]) == (
        "Please confirm adding:\n"
        "- eggs (2 large): 140 cal, 12g protein, 1g carbs, 10g fat\n\n"
        'Reply with "yes" to confirm or "no" to cancel.'
    )


def test_multi_item_proposal_has_totals():
    text = render_proposal([EGGS, TOAST])
    assert text.startswith("Please confirm adding the following 2 item(s):\n")
    assert "- toast (1 slice): 81 cal, 3g protein, 15g carbs, 1g fat" in text
    assert "Totals: 221 cal, 15g protein, 16g carbs, 11g fat" in text


def test_item_without_nutrition_or_unit():
    assert item_line(LogItem(item="mystery curry")) == "- mystery curry (nutrition data not available)"
    assert item_line(LogItem(item="apple", quantity=1, calories=95, protein=0, carbs=25, fat=0)) == (
        "- apple: 95 cal, 0g protein, 25g carbs, 0g fat"
    )


def test_removal_proposal():
    text = render_removal([RemovalItem(item="eggs", meal_type="breakfast", id=4), RemovalItem(item="toast")])
    assert text.startswith("Please confirm removing the following 2 item(s):\n")
    assert "- eggs (breakfast) [id 4]\n- toast\n" in text


def test_recover_add_proposal_from_history():
    history = [{"role": "user", "content": "2 eggs and toast"},
               {"role": "assistant", "content": render_proposal([EGGS, TOAST])}]
    state = recover_state_from_history(history)
    assert isinstance(state, AwaitingConfirmation)
    assert state.kind == ProposalKind.ADD
    assert [(i.item, i.quantity, i.unit, i.calories) for i in state.items] == [
        ("eggs", 2.0, "large", 140.0), ("toast", 1.0, "slice", 81.0)
    ]


def test_recover_removal_from_history():
    history = [{"role": "assistant", "content": render_removal([RemovalItem(item="eggs", meal_type="breakfast",
                                                                            id=4)])}]
    state = recover_state_from_history(history)
    assert state.kind == ProposalKind.REMOVE
    assert state.items == [RemovalItem(item="eggs", meal_type="breakfast", id=4)]


def test_recover_uses_only_the_last_assistant_message():
    history = [{"role": "assistant", "content": render_proposal([EGGS])},
               {"role": "user", "content": "yes"},
               {"role": "assistant", "content": "Confirmed! Added 1 item(s) to your food log."}]
    assert recover_state_from_history(history) == Neutral()


def test_recover_question_from_history():
    state = recover_state_from_history([{"role": "assistant", "content": "Roughly how much pasta did you have?"}])
    assert isinstance(state, AwaitingDetails)
    assert state.asked_about == ["pasta"]


def test_salvage_plain_text_proposal():
    raw = "Please confirm adding:\n- banana (1 medium): 105 cal, 1g protein, 27g carbs, 0g fat\n\nReply yes"
    assert [i.item for i in salvage_proposal(raw)] == ["banana"]
    assert salvage_proposal("Nice breakfast!") == []
