"""
Application settings.

Typed, frozen settings resolved from the environment (and .env) once per
process: database URL, API bind, decision policy source, explainer credentials
and timeouts, CORS origins.
"""

from __future__ import annotations

import functools
from dataclasses import dataclass

from backend_paypilot.config.env import env_float, env_int, env_str, load_paypilot_env

POLICY_MODE_WEBHOOK = "webhook"
POLICY_MODE_RULES = "rules"

DEFAULT_DB_PATH = "paypilot.db"
DEFAULT_POLICY_WEBHOOK_URL = "http://localhost:5678/webhook/paypilot-policy"
DEFAULT_GEMINI_MODEL = "gemini-3-flash-preview"


@dataclass(frozen=True)
class Settings:
    database_url: str
    api_host: str = "0.0.0.0"
    api_port: int = 3000
    log_level: str = "INFO"
    policy_mode: str = POLICY_MODE_WEBHOOK
    policy_webhook_url: str = DEFAULT_POLICY_WEBHOOK_URL
    policy_timeout_sec: float = 5.0
    gemini_api_key: str | None = None
    gemini_model: str = DEFAULT_GEMINI_MODEL
    explainer_timeout_sec: float = 10.0
    cors_origins: tuple[str, ...] = ("*",)


def _database_url() -> str:
    """PAYPILOT_DB_URL or DATABASE_URL when set; else SQLite at DB_PATH."""
    url = env_str("PAYPILOT_DB_URL") or env_str("DATABASE_URL")
    if url:
        return url
    return f"sqlite:///{env_str('DB_PATH', DEFAULT_DB_PATH)}"


@functools.lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return the current application settings (cached)."""
    load_paypilot_env()
    policy_mode = env_str("POLICY_MODE", POLICY_MODE_WEBHOOK).lower()
    if policy_mode not in (POLICY_MODE_WEBHOOK, POLICY_MODE_RULES):
        policy_mode = POLICY_MODE_WEBHOOK
    origins = tuple(o.strip() for o in env_str("CORS_ORIGINS", "*").split(",") if o.strip())
    return Settings(
        database_url=_database_url(),
        api_host=env_str("API_HOST", "0.0.0.0"),
        api_port=env_int("API_PORT", 3000),
        log_level=env_str("LOG_LEVEL", "INFO").upper(),
        policy_mode=policy_mode,
        policy_webhook_url=env_str("POLICY_WEBHOOK_URL", DEFAULT_POLICY_WEBHOOK_URL),
        policy_timeout_sec=env_float("POLICY_TIMEOUT_SEC", 5.0),
        gemini_api_key=env_str("GEMINI_API_KEY") or None,
        gemini_model=env_str("GEMINI_MODEL", DEFAULT_GEMINI_MODEL),
        explainer_timeout_sec=env_float("EXPLAINER_TIMEOUT_SEC", 10.0),
        cors_origins=origins or ("*",),
    )


def reset_settings_cache() -> None:
    """Forget cached settings. For tests that change the environment."""
    get_settings.cache_clear()
