# backend/heladeria/config.py
from __future__ import annotations
import os


def _env_flag(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


def _env_list(name: str, default: str) -> list[str]:
    raw = os.environ.get(name, default)
    return [item.strip() for item in raw.split(",") if item.strip()]


class Config:
    # Optional "SECRET_KEY", with default dev key
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key-change-me")

    # SQLite DB stored next to the instance by default
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL", #optional alternative location
        "sqlite:///heladeria.sqlite3", #default local location
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Create tables and reseed the default catalog when the app starts
    AUTO_CREATE_SCHEMA = _env_flag("AUTO_CREATE_SCHEMA", True)
    SEED_DEFAULT_FLAVORS = _env_flag("SEED_DEFAULT_FLAVORS", True)
    DEFAULT_FLAVOR_PRICE = os.environ.get("DEFAULT_FLAVOR_PRICE", "12.00")

    # Derived stores copy the base store's flavor assignments on first read
    BASE_STORE = os.environ.get("BASE_STORE", "puesto")
    DERIVED_STORES = _env_list("DERIVED_STORES", "puesto2")

    ORDERS_DEFAULT_LIMIT = 20
    ALL_ORDERS_DEFAULT_LIMIT = 100

    CORS_ALLOWED_ORIGINS = _env_list(
        "CORS_ALLOWED_ORIGINS",
        "http://localhost:5173,http://127.0.0.1:5173,http://localhost:4173,http://127.0.0.1:4173",
    )

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")
