import os

basedir = os.path.abspath(os.path.dirname(__file__))


def _env_flag(name, default):
    return os.environ.get(name, default).lower() in ['true', 'on', '1']


class Config:
    SQLALCHEMY_DATABASE_URI = os.environ.get("DATABASE_URL") or "sqlite:///" + os.path.join(basedir, "crm.db")
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SECRET_KEY = os.environ.get("SECRET_KEY") or "a-dev-secret-key-that-is-not-so-secret"
    JWT_SECRET_KEY = os.environ.get("JWT_SECRET_KEY") or SECRET_KEY
    # Tokens stand in for a session; there is no refresh flow.
    JWT_ACCESS_TOKEN_EXPIRES = False

    CORS_ORIGINS = os.environ.get("CORS_ORIGINS", "http://localhost:5173,http://127.0.0.1:5173").split(",")
    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

    # OpenAI configuration
    OPENAI_API_KEY = os.environ.get("OPENAI_API_KEY")
    OPENAI_MODEL = os.environ.get("OPENAI_MODEL", "gpt-4o")

    # Delivery simulator configuration
    DELIVERY_RECEIPT_URL = os.environ.get("DELIVERY_RECEIPT_URL", "http://localhost:5000/api/delivery-receipt")
    DELIVERY_SUCCESS_RATE = float(os.environ.get("DELIVERY_SUCCESS_RATE", 0.9))
    DELIVERY_MIN_DELAY = float(os.environ.get("DELIVERY_MIN_DELAY", 1))
    DELIVERY_MAX_DELAY = float(os.environ.get("DELIVERY_MAX_DELAY", 3))
    SCHEDULER_ENABLED = _env_flag("SCHEDULER_ENABLED", "true")
