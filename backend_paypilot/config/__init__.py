"""
Configuration management for Backend PayPilot.

Loads settings from environment variables and an optional .env file.
Exposes a single source of truth for service configuration.
"""

from backend_paypilot.config.settings import Settings, get_settings, reset_settings_cache  # noqa: F401

__all__ = ["Settings", "get_settings", "reset_settings_cache"]
