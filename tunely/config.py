import os
from pathlib import Path
from dotenv import load_dotenv

# Force-load .env (Windows-safe, reload-safe)
BASE_DIR = Path(__file__).resolve().parent.parent
ENV_PATH = BASE_DIR / ".env"
load_dotenv(dotenv_path=ENV_PATH)

DATABASE_URL = os.getenv("DATABASE_URL")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

JWT_ALGORITHMS = ["HS256"]
DEFAULT_JWT_AUDIENCE = "authenticated"

DEFAULT_CURRENCY = "usd"
STRIPE_CONNECT_COUNTRY = "US"


def stripe_secret_key():
    return os.getenv("STRIPE_SECRET_KEY")


def stripe_webhook_secret():
    return os.getenv("STRIPE_WEBHOOK_SECRET")


def jwt_secret():
    return os.getenv("JWT_SECRET")


def jwt_audience():
    return os.getenv("JWT_AUDIENCE", DEFAULT_JWT_AUDIENCE)
