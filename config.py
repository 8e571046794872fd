from dotenv import load_dotenv
import os

load_dotenv()


def _env_bool(name, default=False):
    val = os.getenv(name)
    if val is None:
        return default
    return val.strip().lower() in {"1", "true", "yes", "on"}


class Config:
    SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-change-me")
    SQLALCHEMY_DATABASE_URI = os.getenv("SQLALCHEMY_DATABASE_URI", "sqlite:///nutrition.db")
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Pool settings to survive idle connection drops on hosted Postgres
    SQLALCHEMY_ENGINE_OPTIONS = {
        'pool_pre_ping': True,
        'pool_recycle': 300,
    }
    if SQLALCHEMY_DATABASE_URI.startswith("postgresql"):
        SQLALCHEMY_ENGINE_OPTIONS.update({
            'pool_size': 5,
            'max_overflow': 10,
            'pool_timeout': 30,
            'connect_args': {
                'sslmode': os.getenv("PGSSLMODE", "require"),
                'connect_timeout': 10,
            }
        })

    CORS_ORIGINS = [
        origin.strip()
        for origin in os.getenv("CORS_ORIGINS", "http://localhost:3000").split(",")
        if origin.strip()
    ]
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    # Language model gateway
    GEMINI_API_KEY = os.getenv("GEMINI_API_KEY")
    GEMINI_MODEL = os.getenv("GEMINI_MODEL", "gemini-flash-latest")
    LLM_TEMPERATURE = float(os.getenv("LLM_TEMPERATURE", "0.7"))
    LLM_MAX_OUTPUT_TOKENS = int(os.getenv("LLM_MAX_OUTPUT_TOKENS", "2048"))

    # "Today" is always the calendar day in this zone, wherever the client is
    REFERENCE_TIMEZONE = os.getenv("REFERENCE_TIMEZONE", "America/New_York")
    DEFAULT_USER_ID = int(os.getenv("DEFAULT_USER_ID", "1"))

    # Conversation engine behaviour
    CHAT_HISTORY_LIMIT = int(os.getenv("CHAT_HISTORY_LIMIT", "10"))
    CHAT_DIRECT_LOGGING = _env_bool("CHAT_DIRECT_LOGGING", False)
    CHAT_RECOVER_STATE_FROM_HISTORY = _env_bool("CHAT_RECOVER_STATE_FROM_HISTORY", True)
