"""Process configuration read from the environment (and a local .env file)."""

import logging
import os

from dotenv import load_dotenv

DEFAULT_PORT = 3001
DEFAULT_NOTES_FILE = os.path.join(
    os.path.dirname(os.path.dirname(os.path.abspath(__file__))),
    "notes.json"
)


class ConfigError(RuntimeError):
    """Raised when a mandatory setting is missing or invalid."""


def _int_env(name: str, default: int) -> int:
    value = os.environ.get(name)
    if not value:
        return default
    try:
        return int(value)
    except ValueError:
        raise ConfigError(f"{name} must be an integer, got {value!r}")


def load_config() -> dict:
    """Build the Flask config mapping from environment variables.

    JIRA_BASE_URL and JIRA_TOKEN are required.
    """
    load_dotenv()

    base_url = (os.environ.get("JIRA_BASE_URL") or "").strip()
    token = (os.environ.get("JIRA_TOKEN") or "").strip()
    if not base_url or not token:
        raise ConfigError("Missing JIRA_BASE_URL or JIRA_TOKEN in .env / environment")

    log_level = os.environ.get("LOG_LEVEL", "INFO").strip().upper()
    if not isinstance(logging.getLevelName(log_level), int):
        raise ConfigError(f"LOG_LEVEL must be a logging level name, got {log_level!r}")

    origins = os.environ.get("CORS_ORIGINS", "*")

    return {
        "JIRA_BASE_URL": base_url.rstrip("/"),
        "JIRA_TOKEN": token,
        "JIRA_TIMEOUT": _int_env("JIRA_TIMEOUT", 30),
        "JIRA_SPRINT_FIELD": os.environ.get("JIRA_SPRINT_FIELD") or "customfield_10020",
        "NOTES_FILE": os.environ.get("NOTES_FILE") or DEFAULT_NOTES_FILE,
        "CORS_ORIGINS": [o.strip() for o in origins.split(",") if o.strip()] or ["*"],
        "PORT": _int_env("PORT", DEFAULT_PORT),
        "LOG_LEVEL": log_level,
    }
