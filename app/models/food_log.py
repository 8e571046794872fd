from app.extensions import db


class FoodLog(db.Model):
    __tablename__ = "food_logs"
    __table_args__ = (
        db.Index("ix_food_logs_user_day", "user_id", "day"),
    )

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False)
    # The day the entry counts toward; rows without one fall back to logged_at
    day = db.Column(db.Date, nullable=True)
    logged_at = db.Column(db.DateTime, server_default=db.func.now(), nullable=False)
    item = db.Column(db.String(255), nullable=False)
    meal_type = db.Column(db.String(50))
    quantity = db.Column(db.Float)
    unit = db.Column(db.String(50))
    calories = db.Column(db.Integer)
    protein = db.Column(db.Float)
    carbs = db.Column(db.Float)
    fat = db.Column(db.Float)
    fiber = db.Column(db.Float)
    sugar = db.Column(db.Float)
    sodium = db.Column(db.Float)
    notes = db.Column(db.Text)

    user = db.relationship("User", back_populates="food_logs")
