"""Pydantic settings for zotero-capacities.toml configuration."""

import tomllib
from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator

from .environment import (
    ZOTERO_API_KEY,
    ZOTERO_LIBRARY_ID,
    ZOTERO_LIBRARY_TYPE,
    get_config_path,
    get_env,
    load_environment_variables,
)


class ZoteroWebSettings(BaseModel):
    """Zotero Web API credentials."""

    api_key: str = ""

    def __init__(self, **data: Any) -> None:
        """Initialize with environment variable precedence."""
        env_api_key = get_env(ZOTERO_API_KEY)
        if env_api_key is not None:
            data["api_key"] = env_api_key
        super().__init__(**data)


class ZoteroSettings(BaseModel):
    """Zotero library access settings."""

    mode: Literal["local", "web"] = "local"
    db_path: str | None = None  # Optional override for the zotero.sqlite path
    library_id: str = ""
    library_type: Literal["user", "group"] = "user"
    web: ZoteroWebSettings = Field(default_factory=ZoteroWebSettings)

    def __init__(self, **data: Any) -> None:
        """Initialize with environment variable precedence."""
        env_library_id = get_env(ZOTERO_LIBRARY_ID)
        if env_library_id is not None:
            data["library_id"] = env_library_id
        env_library_type = get_env(ZOTERO_LIBRARY_TYPE)
        if env_library_type:
            data["library_type"] = env_library_type
        super().__init__(**data)


class CapacitiesSettings(BaseModel):
    """Capacities API endpoint settings (credentials live in preferences)."""

    base_url: str = "https://api.capacities.io"
    timeout_seconds: float = 30.0

    @field_validator("timeout_seconds")
    @classmethod
    def validate_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError(f"timeout_seconds must be positive, got {v}")
        return v

    @field_validator("base_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")


class SyncSettings(BaseModel):
    """Batch pacing and auto-sync timing."""

    pacing_delay_seconds: float = Field(default=1.0, ge=0)
    debounce_seconds: float = Field(default=2.0, ge=0)
    poll_interval_seconds: float = Field(default=5.0, gt=0)


class PathsSettings(BaseModel):
    """Path configuration settings."""

    preferences_file: Path = Path("var/preferences.json")

    @field_validator("preferences_file", mode="before")
    @classmethod
    def validate_path(cls, v: Any) -> Path:
        """Convert string to Path."""
        if isinstance(v, str):
            return Path(v)
        return v


class Settings(BaseModel):
    """Main settings loaded from zotero-capacities.toml."""

    zotero: ZoteroSettings = Field(default_factory=ZoteroSettings)
    capacities: CapacitiesSettings = Field(default_factory=CapacitiesSettings)
    sync: SyncSettings = Field(default_factory=SyncSettings)
    paths: PathsSettings = Field(default_factory=PathsSettings)

    @classmethod
    def from_toml(cls, toml_path: Path | str | None = None) -> "Settings":
        """
        Load settings with environment variable precedence.

        Environment variables (system env > .env file) override TOML values.

        Args:
            toml_path: Path to the TOML file. Defaults to $ZOTCAP_CONFIG or
                zotero-capacities.toml in the working directory.

        Returns:
            Settings instance; defaults when the file does not exist
        """
        load_environment_variables()

        toml_path = Path(toml_path) if toml_path is not None else get_config_path()
        if not toml_path.exists():
            return cls()

        with toml_path.open("rb") as f:
            data = tomllib.load(f)

        zotero_data = dict(data.get("zotero", {}))
        zotero_web_data = zotero_data.pop("web", {})
        zotero = ZoteroSettings(**zotero_data, web=ZoteroWebSettings(**zotero_web_data))

        return cls(
            zotero=zotero,
            capacities=CapacitiesSettings(**data.get("capacities", {})),
            sync=SyncSettings(**data.get("sync", {})),
            paths=PathsSettings(**data.get("paths", {})),
        )
