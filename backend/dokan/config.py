# backend/dokan/config.py
from __future__ import annotations
import os


def _env_flag(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


class Config:
    # Optional "SECRET_KEY", with default dev key
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key-change-me")

    # SQLite DB stored in backend/instance/dokan.sqlite3
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL", #optional alternative location
        "sqlite:///dokan.sqlite3", #default local location
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Remote sync endpoint. Unset means the till never leaves offline mode
    # and every mutation waits in the sync queue.
    REMOTE_SYNC_URL = os.environ.get("REMOTE_SYNC_URL") or None
    REMOTE_SYNC_TIMEOUT = float(os.environ.get("REMOTE_SYNC_TIMEOUT", "5"))

    START_ONLINE = _env_flag("START_ONLINE", True)
    SYNC_DRAIN_ON_RECONNECT = _env_flag("SYNC_DRAIN_ON_RECONNECT", True)

    LOW_STOCK_THRESHOLD = int(os.environ.get("LOW_STOCK_THRESHOLD", "10"))

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

    # bcrypt work factor for PIN hashes; tests lower it
    BCRYPT_ROUNDS = int(os.environ.get("BCRYPT_ROUNDS", "12"))
