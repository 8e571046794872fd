from app.extensions import db


class Goal(db.Model):
    __tablename__ = "goals"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), unique=True, nullable=False)
    target_calories = db.Column(db.Integer)
    target_protein = db.Column(db.Integer)
    target_carbs = db.Column(db.Integer)
    target_fat = db.Column(db.Integer)
    macro_split = db.Column(db.String(50))
    goal_type = db.Column(db.String(50))
    pace = db.Column(db.String(50))
    updated_at = db.Column(db.DateTime, server_default=db.func.now(), onupdate=db.func.now(), nullable=False)

    user = db.relationship("User", back_populates="goal")
