from flask import Blueprint
from app.controllers.chat_controller import chat_handler

chat_bp = Blueprint("chat", __name__, url_prefix="/api")

@chat_bp.post("/chat")
def chat():
    return chat_handler()
