from flask import Blueprint
from app.controllers.summary_controller import summary_handler

summary_bp = Blueprint("summary", __name__, url_prefix="/api")

@summary_bp.get("/summary")
def summary():
    return summary_handler()
