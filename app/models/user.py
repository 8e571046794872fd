from datetime import datetime
from app.extensions import db


class User(db.Model):
    __tablename__ = "users"

    id = db.Column(db.Integer, primary_key=True)
    age = db.Column(db.Integer)
    biological_sex = db.Column(db.String(20))
    # Imperial units, matching what the goals form collects
    height = db.Column(db.Integer)
    weight = db.Column(db.Integer)
    activity_level = db.Column(db.String(50))
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    goal = db.relationship("Goal", back_populates="user", uselist=False, cascade="all, delete-orphan")
    food_logs = db.relationship("FoodLog", back_populates="user", cascade="all, delete-orphan")
