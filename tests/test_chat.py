import json

import pytest

from app.models.food_log import FoodLog
from app.services.food_constants import (
    GATEWAY_ERROR_MESSAGE,
    GENERIC_HELP_MESSAGE,
    GENERIC_ITEM_MESSAGE,
)
from app.services.llm_gateway import LLMGatewayError


EGGS = {"item": "eggs", "mealType": "breakfast", "quantity": 2, "unit": "large",
        "calories": 140, "protein": 12, "carbs": 1, "fat": 10}
BANANA = {"item": "banana", "mealType": "snack", "quantity": 1, "unit": "medium",
          "calories": 105, "protein": 1.3, "carbs": 27, "fat": 0.4}
CHICKEN = {"item": "grilled chicken", "mealType": "dinner", "quantity": 6, "unit": "oz",
           "calories": 280, "protein": 52, "carbs": 0, "fat": 6}


def model_reply(**payload):
    return json.dumps(payload)


def chat(client, message, state=None, history=None):
    body = {"message": message}
    if state is not None:
        body["state"] = state
    if history is not None:
        body["conversationHistory"] = history
    r = client.post("/api/chat", json=body)
    assert r.status_code == 200, r.data
    return r.get_json()


def log_count():
    return FoodLog.query.count()


def test_log_proposal_then_yes_writes_one_row(client, gateway):
    gateway.queue(model_reply(action="log", logs=[EGGS], needsConfirmation=True, reply="Logging eggs"))

    proposal = chat(client, "I had 2 eggs for breakfast")
    assert proposal["action"] == "log"
    assert proposal["needsConfirmation"] is True
    assert proposal["reply"] == (
        "Please confirm adding:\n"
        "- eggs (2 large): 140 cal, 12g protein, 1g carbs, 10g fat\n\n"
        'Reply with "yes" to confirm or "no" to cancel.'
    )
    assert proposal["state"]["status"] == "awaiting_confirmation"
    assert log_count() == 0

    confirmed = chat(client, "yes", state=proposal["state"])
    assert confirmed["action"] == "confirm"
    assert confirmed["reply"] == "Confirmed! Added 1 item(s) to your food log."
    assert confirmed["state"] == {"status": "neutral"}
    assert log_count() == 1
    assert FoodLog.query.first().calories == 140
    # yes/no never goes to the model
    assert len(gateway.chat_calls) == 1


def test_no_cancels_proposal(client, gateway):
    gateway.queue(model_reply(action="log", logs=[EGGS]))
    proposal = chat(client, "I had 2 eggs")

    cancelled = chat(client, "no", state=proposal["state"])
    assert cancelled["reply"] == "No problem, I won't log that. What else can I help you with?"
    assert cancelled["state"] == {"status": "neutral"}
    assert log_count() == 0


def test_ambiguous_food_without_amount_asks_first(client, gateway):
    sauce = {"item": "sauce", "quantity": 1, "unit": "serving", "calories": 60, "protein": 0, "carbs": 8, "fat": 3}
    gateway.queue(model_reply(action="log", logs=[CHICKEN, sauce]))

    first = chat(client, "I had 6 oz grilled chicken with sauce")
    assert first["action"] == "chat"
    assert first["needsConfirmation"] is False
    assert "sauce" in first["reply"].lower()
    assert first["reply"].endswith("?")
    assert first["state"]["status"] == "awaiting_details"
    assert first["state"]["askedAbout"] == ["sauce"]
    assert log_count() == 0

    answered_sauce = {"item": "sauce", "quantity": 2, "unit": "tbsp", "calories": 50, "protein": 0,
                      "carbs": 10, "fat": 1}
    gateway.queue(model_reply(action="log", logs=[CHICKEN, answered_sauce]))
    second = chat(client, "about 2 tbsp", state=first["state"])
    assert second["needsConfirmation"] is True
    assert second["reply"].startswith("Please confirm adding the following 2 item(s):")
    assert "- grilled chicken (6 oz): 280 cal" in second["reply"]
    assert "- sauce (2 tbsp): 50 cal" in second["reply"]
    assert "Totals: 330 cal" in second["reply"]
    assert log_count() == 0


def test_items_accumulate_until_confirmed(client, gateway):
    gateway.queue(model_reply(action="log", logs=[EGGS]))
    first = chat(client, "I had 2 eggs")

    gateway.queue(model_reply(action="log", logs=[BANANA]))
    second = chat(client, "also a banana", state=first["state"])
    assert [i["item"] for i in second["logs"]] == ["eggs", "banana"]
    assert "the following 2 item(s)" in second["reply"]
    assert "Totals: 245 cal" in second["reply"]

    done = chat(client, "yes", state=second["state"])
    assert done["reply"] == "Confirmed! Added 2 item(s) to your food log."
    assert log_count() == 2


def test_done_logging_reports_totals_without_writing(client, gateway):
    client.post("/api/goals", json={"goal": {"targetCalories": 2000, "targetProtein": 150,
                                             "targetCarbs": 200, "targetFat": 65}})
    toast = {"item": "toast", "quantity": 1, "unit": "slice", "calories": 100, "protein": 3, "carbs": 18, "fat": 1}
    bagel = {"item": "bagel", "quantity": 1, "unit": "whole", "calories": 200, "protein": 8, "carbs": 38, "fat": 1}
    for entry, text in ((toast, "1 slice of toast"), (bagel, "a whole bagel")):
        gateway.queue(model_reply(action="log", logs=[entry]))
        proposal = chat(client, text)
        chat(client, "yes", state=proposal["state"])
    assert log_count() == 2

    summary = chat(client, "I'm done for today")
    assert summary["action"] == "chat"
    assert "📊 **Daily Totals:**" in summary["reply"]
    assert "• Calories: ~300 / 2000" in summary["reply"]
    assert "• Calories: ~1700" in summary["reply"]
    assert log_count() == 2
    assert len(gateway.chat_calls) == 2


def test_remove_then_no_keeps_rows(client, gateway):
    client.post("/api/logs", json={"logs": [{"item": "eggs", "mealType": "breakfast", "calories": 140}]})
    gateway.queue(model_reply(action="remove", itemsToRemove=[{"item": "eggs"}]))

    proposal = chat(client, "remove the eggs")
    assert proposal["action"] == "remove"
    assert proposal["reply"].startswith("Please confirm removing the following 1 item(s):")
    assert proposal["itemsToRemove"][0]["item"] == "eggs"
    assert proposal["itemsToRemove"][0]["id"] is not None

    cancelled = chat(client, "no", state=proposal["state"])
    assert cancelled["reply"] == "No problem, I won't remove anything. What else can I help you with?"
    assert log_count() == 1


def test_remove_then_yes_deletes_row(client, gateway):
    client.post("/api/logs", json={"logs": [
        {"item": "eggs", "mealType": "breakfast", "calories": 140},
        {"item": "banana", "mealType": "snack", "calories": 105},
    ]})
    gateway.queue(model_reply(action="remove", itemsToRemove=[{"item": "eggs"}]))
    proposal = chat(client, "remove the eggs")

    removed = chat(client, "yes", state=proposal["state"])
    assert removed["reply"] == "Confirmed! Removed 1 item(s) from your food log."
    assert [log.item for log in FoodLog.query.all()] == ["banana"]


def test_remove_unknown_item_changes_nothing(client, gateway):
    gateway.queue(model_reply(action="remove", itemsToRemove=[{"item": "pizza"}]))
    result = chat(client, "delete the pizza")
    assert result["needsConfirmation"] is False
    assert "pizza" in result["reply"]
    assert result["state"] == {"status": "neutral"}


def test_generic_item_is_never_proposed(client, gateway):
    generic = {"item": "food", "quantity": 1, "unit": "serving", "calories": 300, "protein": 10, "carbs": 30,
               "fat": 10}
    gateway.queue(model_reply(action="log", logs=[generic]))
    result = chat(client, "log my food")
    assert result["reply"] == GENERIC_ITEM_MESSAGE
    assert result["needsConfirmation"] is False
    assert result["state"] == {"status": "neutral"}
    assert log_count() == 0


def test_gateway_failure_returns_apology(client, gateway):
    gateway.queue(LLMGatewayError("timeout"))
    result = chat(client, "I had a sandwich")
    assert result["reply"] == GATEWAY_ERROR_MESSAGE
    assert result["error"] is True
    assert result["errorType"] == "gateway"
    assert log_count() == 0


def test_gateway_failure_keeps_pending_proposal(client, gateway):
    gateway.queue(model_reply(action="log", logs=[EGGS]))
    proposal = chat(client, "I had 2 eggs")

    gateway.queue(LLMGatewayError("timeout"))
    result = chat(client, "what about the protein?", state=proposal["state"])
    assert result["errorType"] == "gateway"
    assert result["state"] == proposal["state"]

    confirmed = chat(client, "yes", state=result["state"])
    assert confirmed["action"] == "confirm"
    assert log_count() == 1


def test_legacy_history_confirmation(client, gateway):
    history = [
        {"role": "user", "content": "I had 2 eggs"},
        {"role": "assistant", "content": (
            "Please confirm adding:\n"
            "- eggs (2 large): 140 cal, 12g protein, 1g carbs, 10g fat\n\n"
            'Reply with "yes" to confirm or "no" to cancel.'
        )},
    ]
    result = chat(client, "yes", history=history)
    assert result["reply"] == "Confirmed! Added 1 item(s) to your food log."
    row = FoodLog.query.one()
    assert (row.item, row.quantity, row.unit, row.calories) == ("eggs", 2, "large", 140)
    assert gateway.chat_calls == []


def test_quantity_correction_rescales_proposal(client, gateway):
    gateway.queue(model_reply(action="log", logs=[EGGS]))
    proposal = chat(client, "I had 2 eggs")

    corrected = chat(client, "no, it was 3 eggs", state=proposal["state"])
    assert corrected["needsConfirmation"] is True
    assert "- eggs (3 large): 210 cal, 18g protein, 2g carbs, 15g fat" in corrected["reply"]
    assert len(gateway.chat_calls) == 1
    assert log_count() == 0

    chat(client, "yes", state=corrected["state"])
    assert FoodLog.query.one().calories == 210


def test_unparseable_model_output_returns_help(client, gateway):
    gateway.queue("I'm not sure what to say here.")
    result = chat(client, "blorp")
    assert result["reply"] == GENERIC_HELP_MESSAGE
    assert result["errorType"] == "parsing"
    assert log_count() == 0


def test_plain_text_question_becomes_clarification(client, gateway):
    gateway.queue("How much rice did you have?")
    result = chat(client, "I had rice")
    assert result["reply"] == "How much rice did you have?"
    assert result["state"]["status"] == "awaiting_details"
    assert result["state"]["askedAbout"] == ["rice"]


def test_repeated_confirmation_logs_twice(client, gateway):
    gateway.queue(model_reply(action="log", logs=[EGGS]))
    proposal = chat(client, "I had 2 eggs")

    chat(client, "yes", state=proposal["state"])
    chat(client, "yes", state=proposal["state"])
    assert log_count() == 2


def test_goal_update_through_chat(client, gateway):
    gateway.queue(model_reply(action="set_goals", goals={"targetCalories": 1800, "targetProtein": 140},
                              reply="Updated your goals!"))
    result = chat(client, "set my calories to 1800 and protein to 140g")
    assert result["action"] == "set_goals"
    assert result["goals"]["targetCalories"] == 1800
    assert result["goals"]["targetProtein"] == 140

    goals = client.get("/api/goals").get_json()
    assert goals["goal"]["targetCalories"] == 1800


def test_empty_message_is_rejected(client, gateway):
    r = client.post("/api/chat", json={"message": "   "})
    assert r.status_code == 400
    assert r.get_json()["error"]["code"] == "VALIDATION_ERROR"


def test_remove_by_name_deletes_every_matching_row(client, gateway):
    client.post("/api/logs", json={"logs": [
        {"item": "coffee", "mealType": "breakfast", "calories": 5},
        {"item": "coffee", "mealType": "snack", "calories": 5},
        {"item": "bagel", "mealType": "breakfast", "calories": 250},
    ]})
    gateway.queue(model_reply(action="remove", itemsToRemove=[{"item": "coffee"}]))
    proposal = chat(client, "remove the coffee")
    assert proposal["itemsToRemove"] == [{"id": None, "item": "coffee", "mealType": None}]

    removed = chat(client, "yes", state=proposal["state"])
    assert removed["reply"] == "Confirmed! Removed 2 item(s) from your food log."
    assert [log.item for log in FoodLog.query.all()] == ["bagel"]


def test_answer_closes_only_the_question_asked(client, gateway):
    salad = {"item": "salad", "mealType": "lunch", "calories": 150, "protein": 3, "carbs": 10, "fat": 9}
    soup = {"item": "soup", "mealType": "lunch", "calories": 200, "protein": 8, "carbs": 25, "fat": 6}
    gateway.queue(model_reply(action="log", logs=[salad, soup], reply="Got it"))
    first = chat(client, "I had a salad and soup for lunch")
    assert first["state"]["askedAbout"] == ["salad", "soup"]
    assert first["reply"] == "Roughly how much salad did you have?"

    # the soup amount is the model's guess, not an answer
    gateway.queue(model_reply(action="log", logs=[
        dict(salad, quantity=1, unit="bowl"),
        dict(soup, quantity=1, unit="bowl"),
    ], reply="Got it"))
    second = chat(client, "1 bowl", state=first["state"])
    assert second["needsConfirmation"] is False
    assert second["state"]["status"] == "awaiting_details"
    assert second["state"]["askedAbout"] == ["soup"]
    assert second["reply"] == "Roughly how much soup did you have?"
    assert [i["item"] for i in second["state"]["resolvedItems"]] == ["salad"]
    assert [i["item"] for i in second["state"]["pendingItems"]] == ["soup"]
    assert log_count() == 0

    gateway.queue(model_reply(action="log", logs=[
        dict(salad, quantity=1, unit="bowl"),
        dict(soup, quantity=2, unit="cups", calories=180),
    ]))
    third = chat(client, "2 cups", state=second["state"])
    assert third["needsConfirmation"] is True
    assert "- salad (1 bowl): 150 cal" in third["reply"]
    assert "- soup (2 cups): 180 cal" in third["reply"]
    assert "Totals: 330 cal" in third["reply"]

    chat(client, "yes", state=third["state"])
    assert log_count() == 2


@pytest.mark.parametrize("message", ["wait, I also had one apple", "actually one apple"])
def test_new_food_with_count_word_is_not_a_correction(client, gateway, message):
    apple = {"item": "apple", "mealType": "snack", "quantity": 1, "unit": "medium",
             "calories": 95, "protein": 0.5, "carbs": 25, "fat": 0.3}
    gateway.queue(model_reply(action="log", logs=[EGGS]))
    proposal = chat(client, "I had 2 eggs")

    gateway.queue(model_reply(action="log", logs=[apple]))
    result = chat(client, message, state=proposal["state"])
    assert len(gateway.chat_calls) == 2
    assert [(i["item"], i["quantity"], i["calories"]) for i in result["logs"]] == [
        ("eggs", 2, 140), ("apple", 1, 95),
    ]
    assert "Totals: 235 cal" in result["reply"]


def test_count_word_back_reference_rescales(client, gateway):
    gateway.queue(model_reply(action="log", logs=[EGGS]))
    proposal = chat(client, "I had 2 eggs")

    corrected = chat(client, "actually one of those", state=proposal["state"])
    assert "- eggs (1 large): 70 cal" in corrected["reply"]
    assert len(gateway.chat_calls) == 1


def test_delete_it_confirms_a_removal(client, gateway):
    client.post("/api/logs", json={"logs": [{"item": "eggs", "mealType": "breakfast", "calories": 140}]})
    gateway.queue(model_reply(action="remove", itemsToRemove=[{"item": "eggs"}]))
    proposal = chat(client, "remove the eggs")

    removed = chat(client, "delete it", state=proposal["state"])
    assert removed["action"] == "confirm"
    assert removed["reply"] == "Confirmed! Removed 1 item(s) from your food log."
    assert log_count() == 0


def test_no_more_declines_a_pending_proposal(client, gateway):
    gateway.queue(model_reply(action="log", logs=[EGGS]))
    proposal = chat(client, "I had 2 eggs")

    result = chat(client, "no more", state=proposal["state"])
    assert result["reply"] == "No problem, I won't log that. What else can I help you with?"
    assert result["state"] == {"status": "neutral"}
    assert log_count() == 0
