"""Service configuration resolved from the environment.

APP_ENV picks a profile (dev, staging, production, test) that supplies
defaults; individual environment variables override the profile. Coaching
constants are not configuration: they live beside the code that uses
them.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache

DEFAULT_DATABASE_URL = "postgresql+psycopg2://localhost:5432/runplan"


@dataclass(frozen=True)
class Settings:
    """Immutable application settings resolved from environment."""

    database_url: str
    app_env: str = "dev"
    log_level: str = "INFO"
    sql_echo: bool = False
    request_id_header_name: str = "X-Request-ID"

    # Plan ids addressing the per-week document layout instead of a single plan document
    current_plan_ids: tuple[str, ...] = ("current-plan", "default")
    default_actor: str = "api"

    @property
    def is_production(self) -> bool:
        return self.app_env == "production"

    @property
    def is_dev(self) -> bool:
        return self.app_env == "dev"


_ENV_PROFILES: dict[str, dict] = {
    "dev": {"log_level": "DEBUG"},
    "staging": {"log_level": "INFO"},
    "production": {"log_level": "WARNING"},
    "test": {"log_level": "WARNING"},
}


def get_database_url() -> str:
    """DATABASE_URL when set, else a local PostgreSQL database."""
    return os.getenv("DATABASE_URL") or DEFAULT_DATABASE_URL


def _env_flag(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


def _split_ids(raw: str | None) -> tuple[str, ...]:
    ids = tuple(part.strip() for part in (raw or "").split(",") if part.strip())
    return ids or Settings.current_plan_ids


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Build Settings by merging environment profile with env-var overrides.

    Cached; call ``get_settings.cache_clear()`` after changing the environment.
    """
    app_env = os.getenv("APP_ENV", "dev")
    profile = _ENV_PROFILES.get(app_env, _ENV_PROFILES["dev"])

    return Settings(
        database_url=get_database_url(),
        app_env=app_env,
        log_level=os.getenv("LOG_LEVEL", profile["log_level"]),
        sql_echo=_env_flag("SQL_ECHO", False),
        request_id_header_name=os.getenv("REQUEST_ID_HEADER", "X-Request-ID"),
        current_plan_ids=_split_ids(os.getenv("CURRENT_PLAN_IDS")),
        default_actor=os.getenv("AUDIT_ACTOR", "api"),
    )
