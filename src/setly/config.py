"""
Configuration management for setly.

Uses environment variables with sensible defaults.
"""
import os


class AppConfig:
    """Configuration for the setly core and its command line."""

    # Storage
    DB_PATH = os.getenv("SETLY_DB_PATH", "setly.db")

    # Key-value storage keys
    STORAGE_KEY = os.getenv("SETLY_STORAGE_KEY", "setly-app")
    LEGACY_STORAGE_KEY = "volleyball-team-app"  # Single-team schema, read once at startup
    CREDENTIALS_KEY = "setly-credentials"
    DIRECTOR_KEY = "setly-director"
    AUTH_KEY = "setly-auth"

    # Onboarding defaults (public, not secrets)
    DIRECTOR_EMAIL = os.getenv("SETLY_DIRECTOR_EMAIL", "director@setly.app")
    DEFAULT_PASSWORD = os.getenv("SETLY_DEFAULT_PASSWORD", "volleyball")
    DEFAULT_DIRECTOR_PASSWORD = os.getenv("SETLY_DEFAULT_DIRECTOR_PASSWORD", "director")

    # Logging
    LOG_LEVEL = os.getenv("SETLY_LOG_LEVEL", "INFO")


def get_app_config():
    """Get configuration for setly."""
    return AppConfig


def config_items(config_class):
    """
    Yield (name, display value) for every setting, sorted by name.

    Settings whose name contains PASSWORD are masked.
    """
    for attr in sorted(vars(config_class)):
        if not attr.isupper():
            continue
        value = str(getattr(config_class, attr))
        if "PASSWORD" in attr:
            value = "*" * len(value)
        yield attr, value
