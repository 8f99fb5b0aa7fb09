import os

from dotenv import load_dotenv

load_dotenv()


def _truthy(val):
    if not val:
        return False
    return val.strip().lower() in {"1", "true", "yes", "on", "y"}


class Config:
    # --------------------------
    # 🔹 App
    # --------------------------
    APP_TITLE = os.environ.get("APP_TITLE", "Coaching Center Admin")
    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()

    # Website / admin panel origins allowed by CORS
    CORS_ORIGINS = [
        o.strip()
        for o in os.environ.get("CORS_ORIGINS", "http://localhost:3000,http://localhost:5173").split(",")
        if o.strip()
    ]

    # --------------------------
    # 🔹 Database (SQLAlchemy)
    # --------------------------
    # SQLite for local dev; point at PostgreSQL in production
    DATABASE_URL = os.environ.get("DATABASE_URL", "sqlite:///./coaching_center.db")
    SQL_ECHO = _truthy(os.environ.get("SQL_ECHO"))
