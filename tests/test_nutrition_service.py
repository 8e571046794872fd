import pytest

from app.services.nutrition_service import apply_pace, calculate_bmr, calculate_goals_from_bio, macro_targets

BIO = {"age": 30, "biological_sex": "male", "height": 70, "weight": 180, "activity_level": "sedentary"}


def test_bmr_by_sex():
    assert calculate_bmr("male", 180, 70, 30) == pytest.approx(66 + 6.23 * 180 + 12.7 * 70 - 6.8 * 30)
    assert calculate_bmr("Female", 140, 64, 30) == pytest.approx(655 + 4.35 * 140 + 4.7 * 64 - 4.7 * 30)
    with pytest.raises(ValueError):
        calculate_bmr("other", 140, 64, 30)


def test_macro_targets_balanced():
    assert macro_targets(2000, "balanced") == {
        "target_calories": 2000,
        "target_protein": 125,
        "target_carbs": 250,
        "target_fat": 56,
        "macro_split": "balanced",
    }


def test_pace_only_applies_to_lose_or_gain():
    assert apply_pace(2000, "lose", "lose-moderate") == 1500
    assert apply_pace(2000, "gain", "gain-slow") == 2375
    assert apply_pace(2000, "maintain", "lose-moderate") == 2000
    assert apply_pace(2000, None, "lose-moderate") == 2000


def test_goals_from_bio():
    goals = calculate_goals_from_bio(BIO)
    bmr = 66 + 6.23 * 180 + 12.7 * 70 - 6.8 * 30
    assert goals["tdee"] == int(bmr * 1.2 + 0.5)
    assert goals["target_calories"] == goals["tdee"]
    assert goals["macro_split"] == "balanced"

    lighter = calculate_goals_from_bio(BIO, "keto", {"goal_type": "lose", "pace": "lose-slow"})
    assert lighter["target_calories"] == goals["tdee"] - 250
    assert lighter["macro_split"] == "keto"


def test_incomplete_bio():
    with pytest.raises(ValueError, match="INCOMPLETE_BIO"):
        calculate_goals_from_bio({"age": 30, "biological_sex": "male"})
