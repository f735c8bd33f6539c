# backend/bakery/config.py
from __future__ import annotations
import os


class Config:
    # Optional "SECRET_KEY", with default dev key
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key-change-me")

    # SQLite DB stored in backend/instance/bakery.sqlite3
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL", #optional alternative location
        "sqlite:///bakery.sqlite3", #default local location
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Payment gateway (verification only; checkout happens client-side)
    PAYSTACK_SECRET_KEY = os.environ.get("PAYSTACK_SECRET_KEY")
    PAYSTACK_BASE_URL = os.environ.get("PAYSTACK_BASE_URL", "https://api.paystack.co")
    PAYSTACK_TIMEOUT_SECONDS = float(os.environ.get("PAYSTACK_TIMEOUT_SECONDS", "15"))

    STAFF_ID_LENGTH = int(os.environ.get("STAFF_ID_LENGTH", "6"))
    SESSION_TTL_HOURS = int(os.environ.get("SESSION_TTL_HOURS", "12"))

    # Lowered in tests; bcrypt cost dominates test run time otherwise
    BCRYPT_ROUNDS = int(os.environ.get("BCRYPT_ROUNDS", "12"))
