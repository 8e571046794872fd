"""
Nutrition Service

Calorie and macro targets from a user's bio: Harris-Benedict BMR (imperial
units), activity factor, goal pace adjustment and a named macro split.
"""

from typing import Any, Dict, Optional

from app.services.food_constants import (
    ACTIVITY_FACTORS,
    CALORIES_PER_GRAM_CARBS,
    CALORIES_PER_GRAM_FAT,
    CALORIES_PER_GRAM_PROTEIN,
    DEFAULT_MACRO_SPLIT,
    MACRO_SPLITS,
    PACE_ADJUSTMENTS,
)
from app.services.totals_service import round_half_up

REQUIRED_BIO_FIELDS = ("age", "biological_sex", "height", "weight", "activity_level")


def calculate_bmr(biological_sex: str, weight_lb: float, height_in: float, age: float) -> float:
    """
    Basal metabolic rate (kcal/day).

    Raises:
        ValueError: If biological_sex is neither male nor female
    """
    sex = (biological_sex or "").strip().lower()
    if sex == "male":
        return 66 + (6.23 * weight_lb) + (12.7 * height_in) - (6.8 * age)
    if sex == "female":
        return 655 + (4.35 * weight_lb) + (4.7 * height_in) - (4.7 * age)
    raise ValueError("INVALID_BIO: biological_sex must be 'male' or 'female'")


def calculate_tdee(bmr: float, activity_level: str) -> int:
    factor = ACTIVITY_FACTORS.get((activity_level or "").strip().lower())
    if factor is None:
        raise ValueError(f"INVALID_BIO: unknown activity_level {activity_level!r}")
    return round_half_up(bmr * factor)


def apply_pace(tdee: int, goal_type: Optional[str], pace: Optional[str]) -> int:
    """Adjust TDEE for the goal pace; needs a lose/gain goal type and a known pace."""
    if not goal_type or goal_type == "maintain" or not pace:
        return tdee
    adjustment = PACE_ADJUSTMENTS.get(pace)
    if adjustment is None:
        return tdee
    return round_half_up(tdee + adjustment)


def macro_targets(calories: float, split_key: str) -> Dict[str, Any]:
    split = MACRO_SPLITS.get(split_key)
    if split is None:
        return {"target_calories": round_half_up(calories)}
    return {
        "target_calories": round_half_up(calories),
        "target_protein": round_half_up(calories * split["protein"] / 100 / CALORIES_PER_GRAM_PROTEIN),
        "target_carbs": round_half_up(calories * split["carbs"] / 100 / CALORIES_PER_GRAM_CARBS),
        "target_fat": round_half_up(calories * split["fat"] / 100 / CALORIES_PER_GRAM_FAT),
        "macro_split": split_key,
    }


def calculate_goals_from_bio(
    bio: Dict[str, Any],
    macro_split: Optional[str] = None,
    goal_settings: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    """
    Derive daily targets from bio data.

    Args:
        bio: age, biological_sex, height (in), weight (lb), activity_level
        macro_split: Key of MACRO_SPLITS; defaults to the balanced split
        goal_settings: Optional goal_type and pace

    Returns:
        Dictionary with target_* fields, macro_split, bmr and tdee

    Raises:
        ValueError: If the bio is incomplete or has unknown values
    """
    missing = [name for name in REQUIRED_BIO_FIELDS if not bio.get(name)]
    if missing:
        raise ValueError(f"INCOMPLETE_BIO: missing {', '.join(missing)}")

    bmr = calculate_bmr(bio["biological_sex"], float(bio["weight"]), float(bio["height"]), float(bio["age"]))
    tdee = calculate_tdee(bmr, bio["activity_level"])
    settings = goal_settings or {}
    calories = apply_pace(tdee, settings.get("goal_type"), settings.get("pace"))

    targets = macro_targets(calories, macro_split or DEFAULT_MACRO_SPLIT)
    targets.update({"bmr": round(bmr, 1), "tdee": tdee})
    return targets
