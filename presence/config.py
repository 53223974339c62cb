"""Application configuration for the presence service."""

from __future__ import annotations

import os
from typing import Dict, Type

from dotenv import load_dotenv

from presence.core.presence.constants import (
    DEFAULT_SWEEP_INTERVAL_SECONDS,
    DEFAULT_TTL_SECONDS,
    SESSION_ID_STRATEGY_TIMESTAMP,
)

load_dotenv()


def _env_flag(name: str, default: str) -> bool:
    return os.environ.get(name, default).lower() in ("1", "true", "yes")


class BaseConfig:
    """Base configuration loaded for all environments."""

    SECRET_KEY = os.environ.get("SECRET_KEY", "change-me")
    MAX_CONTENT_LENGTH = int(os.environ.get("MAX_CONTENT_LENGTH", str(64 * 1024)))

    PRESENCE_TTL_SECONDS = float(os.environ.get("PRESENCE_TTL_SECONDS", str(DEFAULT_TTL_SECONDS)))
    PRESENCE_SWEEP_INTERVAL_SECONDS = float(
        os.environ.get("PRESENCE_SWEEP_INTERVAL_SECONDS", str(DEFAULT_SWEEP_INTERVAL_SECONDS))
    )
    PRESENCE_SESSION_ID_STRATEGY = os.environ.get(
        "PRESENCE_SESSION_ID_STRATEGY", SESSION_ID_STRATEGY_TIMESTAMP
    )
    PRESENCE_SWEEPER_ENABLED = _env_flag("PRESENCE_SWEEPER_ENABLED", "true")

    CORS_ALLOW_ORIGIN = os.environ.get("CORS_ALLOW_ORIGIN", "*")
    CORS_ALLOW_METHODS = "GET, POST, OPTIONS"
    CORS_ALLOW_HEADERS = "Content-Type"


class DevelopmentConfig(BaseConfig):
    DEBUG = True
    ENV = "development"


class TestingConfig(BaseConfig):
    TESTING = True
    # Tests drive sweeps explicitly against an injected clock.
    PRESENCE_SWEEPER_ENABLED = False


class ProductionConfig(BaseConfig):
    ENV = "production"


config_by_name: Dict[str, Type[BaseConfig]] = {
    "development": DevelopmentConfig,
    "testing": TestingConfig,
    "production": ProductionConfig,
    # CI pipelines set APP_ENV=ci; map to testing defaults.
    "ci": TestingConfig,
}
