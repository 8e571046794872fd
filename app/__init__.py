import logging

from flask import Flask
from app.extensions import db, migrate, cors
from app.routes import register_routes


def create_app(overrides=None):
    app = Flask(__name__)
    app.config.from_object("config.Config")
    if overrides:
        app.config.update(overrides)

    # Refuse to start without a model key
    if not app.config.get("GEMINI_API_KEY"):
        raise RuntimeError("GEMINI_API_KEY is not set")

    app.logger.setLevel(getattr(logging, str(app.config.get("LOG_LEVEL", "INFO")).upper(), logging.INFO))

    # Initialize database
    db.init_app(app)

    # Initialize Flask-Migrate; models must be imported so autogenerate sees them
    from app.models import user, goal, food_log  # noqa: F401
    migrate.init_app(app, db)

    # CORS Configuration
    cors.init_app(app,
                  origins=app.config["CORS_ORIGINS"],
                  supports_credentials=True,
                  allow_headers=["Content-Type"],
                  methods=["GET", "POST", "DELETE", "OPTIONS"],
                  expose_headers=["Content-Type"])

    register_routes(app)

    return app
