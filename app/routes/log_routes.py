from flask import Blueprint
from app.controllers.log_controller import (
    list_logs_handler,
    create_logs_handler,
    delete_log_handler,
)

log_bp = Blueprint("logs", __name__, url_prefix="/api")

@log_bp.get("/logs")
def list_logs():
    return list_logs_handler()


@log_bp.post("/logs")
def create_logs():
    return create_logs_handler()


@log_bp.delete("/logs")
def delete_log():
    return delete_log_handler()
