"""Environment variable loading from .env files with precedence support."""

from __future__ import annotations

import logging
import os
from pathlib import Path

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

CAPACITIES_API_TOKEN = "CAPACITIES_API_TOKEN"
CAPACITIES_SPACE_ID = "CAPACITIES_SPACE_ID"
ZOTERO_LIBRARY_ID = "ZOTERO_LIBRARY_ID"
ZOTERO_LIBRARY_TYPE = "ZOTERO_LIBRARY_TYPE"
ZOTERO_API_KEY = "ZOTERO_API_KEY"
ZOTCAP_CONFIG = "ZOTCAP_CONFIG"

KNOWN_VARIABLES = {
    CAPACITIES_API_TOKEN: "Capacities API token (overrides the stored apiToken preference)",
    CAPACITIES_SPACE_ID: "Capacities space ID (overrides the stored spaceId preference)",
    ZOTERO_LIBRARY_ID: "Zotero library ID (required for web mode)",
    ZOTERO_LIBRARY_TYPE: "Zotero library type: 'user' or 'group' (defaults to 'user')",
    ZOTERO_API_KEY: "Zotero API key (required for web mode)",
    ZOTCAP_CONFIG: "Configuration file path (defaults to zotero-capacities.toml)",
}

DEFAULT_CONFIG_FILE = "zotero-capacities.toml"

_DOTENV_SEARCH_DEPTH = 3


def load_environment_variables(dotenv_path: Path | str | None = None) -> None:
    """
    Load a .env file without overriding variables already set in the process.

    System environment values take precedence over .env values (override=False).

    Args:
        dotenv_path: Explicit .env path. If None, the working directory and up
            to three parent directories are searched; the first hit wins.
    """
    if dotenv_path is None:
        current = Path.cwd()
        candidates = [current, *list(current.parents)[:_DOTENV_SEARCH_DEPTH]]
        for directory in candidates:
            path = directory / ".env"
            if path.exists():
                dotenv_path = path
                break
        else:
            logger.debug("No .env file found near working directory")
            return

    dotenv_path = Path(dotenv_path)
    if dotenv_path.exists():
        load_dotenv(dotenv_path, override=False)
        logger.debug(f"Loaded .env file from: {dotenv_path}")
    else:
        logger.debug(f".env file not found at: {dotenv_path}")


def get_env(key: str, default: str | None = None) -> str | None:
    """Get an environment variable (system env > .env > default)."""
    return os.getenv(key, default)


def parse_bool(value: str | None, default: bool = False) -> bool:
    """
    Parse a boolean from text.

    Accepts 'true', '1', 'yes', 'on' → True and 'false', '0', 'no', 'off' → False
    (case-insensitive). Anything else returns `default`.
    """
    if value is None:
        return default
    normalized = value.lower().strip()
    if normalized in ("true", "1", "yes", "on"):
        return True
    if normalized in ("false", "0", "no", "off"):
        return False
    return default


def get_env_bool(key: str, default: bool = False) -> bool:
    """Get a boolean environment variable, see `parse_bool` for accepted values."""
    return parse_bool(os.getenv(key), default)


def get_capacities_credentials_override() -> dict[str, str]:
    """
    Capacities credentials supplied through the environment.

    Returns:
        Dict with `apiToken` and/or `spaceId` for the variables that are set and non-empty
    """
    overrides: dict[str, str] = {}
    token = get_env(CAPACITIES_API_TOKEN)
    if token:
        overrides["apiToken"] = token
    space_id = get_env(CAPACITIES_SPACE_ID)
    if space_id:
        overrides["spaceId"] = space_id
    return overrides


def get_config_path() -> Path:
    """Configuration file path, honoring ZOTCAP_CONFIG."""
    return Path(get_env(ZOTCAP_CONFIG) or DEFAULT_CONFIG_FILE)


def require_env(key: str, context: str | None = None) -> str:
    """
    Require an environment variable, raising with guidance when missing.

    Raises:
        ValueError: If the variable is missing or empty
    """
    value = get_env(key)
    if value:
        return value

    description = KNOWN_VARIABLES.get(key, "required setting")
    context_msg = f" ({context})" if context else ""
    error_msg = (
        f"Required variable '{key}' is missing{context_msg}.\n"
        f"  Description: {description}\n"
        f"  How to fix: Set {key} in your environment or add it to a .env file in the project root.\n"
        f"  Example: {key}=your-value-here"
    )
    logger.error(error_msg)
    raise ValueError(error_msg)
