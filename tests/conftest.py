import os
import sys
from collections import deque

import pytest

ROOT_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
sys.path.insert(0, ROOT_DIR)

from app import create_app
from app.extensions import db
from app.services.llm_gateway import EXTENSION_KEY, LLMGatewayError


class FakeGateway:
    """Stands in for the Gemini gateway; replies are queued per test."""

    def __init__(self):
        self.chat_replies = deque()
        self.text_replies = deque()
        self.chat_calls = []
        self.text_calls = []

    def queue(self, *replies):
        self.chat_replies.extend(replies)

    def queue_text(self, *replies):
        self.text_replies.extend(replies)

    @staticmethod
    def _next(replies):
        if not replies:
            raise LLMGatewayError("no reply queued")
        reply = replies.popleft()
        if isinstance(reply, Exception):
            raise reply
        return reply

    def complete_chat(self, system_prompt, history, message):
        self.chat_calls.append({"system_prompt": system_prompt, "history": history, "message": message})
        return self._next(self.chat_replies)

    def generate_text(self, system_prompt, prompt, max_tokens=None):
        self.text_calls.append({"system_prompt": system_prompt, "prompt": prompt, "max_tokens": max_tokens})
        return self._next(self.text_replies)


@pytest.fixture()
def app():
    app = create_app({
        "TESTING": True,
        "SQLALCHEMY_DATABASE_URI": "sqlite:///:memory:",
        "SQLALCHEMY_ENGINE_OPTIONS": {},
        "SQLALCHEMY_TRACK_MODIFICATIONS": False,
        "SECRET_KEY": "test-secret",
        "GEMINI_API_KEY": "test-key",
        "CHAT_DIRECT_LOGGING": False,
        "CHAT_RECOVER_STATE_FROM_HISTORY": True,
    })
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def gateway(app):
    fake = FakeGateway()
    app.extensions[EXTENSION_KEY] = fake
    return fake


@pytest.fixture()
def client(app, gateway):
    return app.test_client()
