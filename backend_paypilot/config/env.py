"""
Environment variable loading for PayPilot.

- Loads .env from project root when available.
- Small typed readers that fall back to the default on bad values.
"""

from __future__ import annotations

import os
from pathlib import Path

from dotenv import load_dotenv

from backend_paypilot.paypilot_logging import get_logger

logger = get_logger(__name__)

# Project root: config is backend_paypilot/config/, root is 2 levels up
_CONFIG_DIR = Path(__file__).resolve().parent
_BACKEND_DIR = _CONFIG_DIR.parent
_ROOT = _BACKEND_DIR.parent
_ENV_PATH = _ROOT / ".env"


def load_paypilot_env() -> None:
    """Load .env from project root. Existing environment variables win. Safe to call multiple times."""
    if _ENV_PATH.is_file():
        load_dotenv(_ENV_PATH, override=False)


def env_str(name: str, default: str = "") -> str:
    return (os.getenv(name) or "").strip() or default


def env_float(name: str, default: float) -> float:
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return default
    try:
        value = float(raw)
    except ValueError:
        logger.warning("config_invalid_value", variable=name, value=raw, default=default)
        return default
    if value <= 0:
        logger.warning("config_invalid_value", variable=name, value=raw, default=default)
        return default
    return value


def env_int(name: str, default: int) -> int:
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning("config_invalid_value", variable=name, value=raw, default=default)
        return default
