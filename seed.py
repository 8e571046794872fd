from datetime import timedelta

from app import create_app
from app.extensions import db
from app.models.food_log import FoodLog
from app.services.goal_service import ensure_user, get_goal, update_bio, upsert_goal
from app.services.nutrition_service import calculate_goals_from_bio
from app.utils.dates import reference_today, reference_zone

app = create_app()

with app.app_context():
    # ensure tables exist (non-destructive: won't alter existing columns)
    db.create_all()
    user_id = app.config["DEFAULT_USER_ID"]
    ensure_user(user_id)

    bio = {
        "age": 34,
        "biological_sex": "female",
        "height": 66,
        "weight": 150,
        "activity_level": "moderately active",
    }
    if get_goal(user_id) is None:
        update_bio(user_id, bio)
        targets = calculate_goals_from_bio(bio, "balanced", {"goal_type": "lose", "pace": "lose-slow"})
        upsert_goal(user_id, {
            **targets,
            "goal_type": "lose",
            "pace": "lose-slow",
        })

    today = reference_today(reference_zone())

    def add_log(day, item, meal_type, quantity, unit, cal, p, c, f):
        exists = FoodLog.query.filter_by(user_id=user_id, day=day, item=item).first()
        if not exists:
            db.session.add(FoodLog(
                user_id=user_id, day=day, item=item, meal_type=meal_type,
                quantity=quantity, unit=unit, calories=cal,
                protein=p, carbs=c, fat=f,
            ))

    yesterday = today - timedelta(days=1)
    add_log(yesterday, "oatmeal", "breakfast", 1, "cup", 150, 5.0, 27.0, 3.0)
    add_log(yesterday, "grilled chicken breast", "lunch", 6, "oz", 280, 52.0, 0.0, 6.0)
    add_log(yesterday, "brown rice", "dinner", 1, "cup", 215, 5.0, 45.0, 1.8)
    add_log(today, "scrambled eggs", "breakfast", 2, "eggs", 180, 12.0, 2.0, 14.0)
    add_log(today, "banana", "snack", 1, "medium", 105, 1.3, 27.0, 0.4)

    db.session.commit()
    print("Seed completed")
