from flask import Blueprint
from app.controllers.goal_controller import (
    get_goals_handler,
    save_goals_handler,
    calculate_goals_handler,
)

goal_bp = Blueprint("goals", __name__, url_prefix="/api")

@goal_bp.get("/goals")
def get_goals():
    return get_goals_handler()


@goal_bp.post("/goals")
def save_goals():
    return save_goals_handler()


@goal_bp.post("/goals/calculate")
def calculate_goals():
    return calculate_goals_handler()
