from datetime import date, datetime

from app.services.totals_service import daily_series, done_logging_summary, remaining_budget, round_half_up, sum_logs


def test_round_half_up():
    assert round_half_up(2.5) == 3
    assert round_half_up(2.4) == 2
    assert round_half_up(None) == 0


def test_sum_logs_treats_missing_as_zero():
    logs = [{"calories": 100, "protein": 5}, {"calories": None, "carbs": 20}, {"fat": 3.5}]
    assert sum_logs(logs) == {"calories": 100.0, "protein": 5.0, "carbs": 20.0, "fat": 3.5}


def test_remaining_budget_is_not_floored():
    goal = {"targetCalories": 2000, "targetProtein": 100}
    remaining = remaining_budget({"calories": 2300, "protein": 50, "carbs": 0, "fat": 0}, goal)
    assert remaining["calories"] == -300
    assert remaining["protein"] == 50
    assert remaining["carbs"] == 0


def test_remaining_budget_without_goal():
    remaining = remaining_budget({"calories": 500, "protein": 0, "carbs": 0, "fat": 0}, None)
    assert remaining["calories"] == -500


def test_daily_series_zero_fills():
    logs = [
        {"day": date(2026, 3, 2), "calories": 300, "protein": 10, "carbs": 40, "fat": 5},
        {"day": date(2026, 3, 2), "calories": 200, "protein": 5, "carbs": 20, "fat": 5},
        {"day": None, "logged_at": datetime(2026, 3, 3, 12, 0), "calories": 100},
        {"day": date(2026, 2, 20), "calories": 999},
    ]
    series = daily_series(logs, date(2026, 3, 3), 3)
    assert [d["day"] for d in series] == ["2026-03-01", "2026-03-02", "2026-03-03"]
    assert series[0]["calories"] == 0 and series[0]["loggedItems"] == 0
    assert series[1]["calories"] == 500 and series[1]["loggedItems"] == 2
    assert series[2]["calories"] == 100


def test_done_logging_summary_text():
    logs = [{"calories": 450, "protein": 30, "carbs": 50, "fat": 12}]
    goal = {"targetCalories": 2000, "targetProtein": 150, "targetCarbs": 200, "targetFat": 10}
    text = done_logging_summary(logs, goal)
    assert "• Calories: ~450 / 2000" in text
    assert "• Calories: ~1550" in text
    # over target shows zero remaining
    assert "• Fat: 0g\n" in text


def test_done_logging_summary_without_goal():
    text = done_logging_summary([], None)
    assert "• Calories: ~0 / N/A" in text
    assert "• Protein: 0g / N/Ag" in text
