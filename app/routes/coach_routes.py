from flask import Blueprint
from app.controllers.coach_controller import progress_review_handler, encouragement_handler

coach_bp = Blueprint("coach", __name__, url_prefix="/api")

@coach_bp.get("/progress-review")
def progress_review():
    return progress_review_handler()


@coach_bp.post("/encouragement")
def encouragement():
    return encouragement_handler()
