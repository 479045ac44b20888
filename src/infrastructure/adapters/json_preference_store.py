"""Preference store adapter persisting preferences as a JSON file with atomic writes."""

from __future__ import annotations

import json
import logging
import os
import shutil
import tempfile
import threading
from pathlib import Path
from typing import Any, Callable

from ...application.ports.preference_store import DEFAULT_PREFERENCES, PreferenceStorePort
from ...domain.errors import PreferenceWriteError
from ...domain.types import CapacitiesCredentials
from ..config.environment import get_capacities_credentials_override

logger = logging.getLogger(__name__)


class JsonPreferenceStore(PreferenceStorePort):
    """
    Preferences kept in a single JSON object file.

    A missing or unreadable file reads as the defaults. Environment overrides
    (CAPACITIES_API_TOKEN / CAPACITIES_SPACE_ID) shadow the stored credentials
    on read but are never written back.
    """

    def __init__(
        self,
        path: Path | str = Path("var/preferences.json"),
        overrides: Callable[[], dict[str, Any]] = get_capacities_credentials_override,
    ) -> None:
        """
        Initialize preference store.

        Args:
            path: JSON file location (parent directories are created on first write)
            overrides: Callable returning values that take precedence over stored ones
        """
        self.path = Path(path)
        self._overrides = overrides
        self._lock = threading.Lock()

    def _load(self) -> dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            with self.path.open("r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logger.warning(f"Ignoring unreadable preferences file {self.path}: {e}", extra={"path": str(self.path)})
            return {}
        if not isinstance(data, dict):
            logger.warning(f"Preferences file {self.path} is not a JSON object, using defaults")
            return {}
        return data

    def _save(self, data: dict[str, Any]) -> None:
        """
        Write to a temp file in the same directory, fsync, then rename over the target.

        Raises:
            PreferenceWriteError: If the file cannot be written
        """
        temp_path: Path | None = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                mode="w",
                encoding="utf-8",
                dir=self.path.parent,
                prefix=f".{self.path.name}.tmp.",
                delete=False,
            ) as temp_file:
                temp_path = Path(temp_file.name)
                json.dump(data, temp_file, indent=2, ensure_ascii=False)
                temp_file.flush()
                os.fsync(temp_file.fileno())
            shutil.move(str(temp_path), str(self.path))
        except OSError as e:
            if temp_path is not None and temp_path.exists():
                temp_path.unlink()
            logger.error(f"Failed to save preferences to {self.path}: {e}", exc_info=True)
            raise PreferenceWriteError(str(self.path), str(e)) from e

        logger.debug(f"Preferences saved: {self.path}", extra={"path": str(self.path)})

    def get(self, key: str, default: Any = None) -> Any:
        overrides = self._overrides()
        if key in overrides:
            return overrides[key]
        stored = self._load()
        if key in stored:
            return stored[key]
        return DEFAULT_PREFERENCES.get(key, default)

    def set(self, key: str, value: Any) -> None:
        with self._lock:
            data = self._load()
            data[key] = value
            self._save(data)

    def as_dict(self) -> dict[str, Any]:
        merged = {**DEFAULT_PREFERENCES, **self._load()}
        merged.update(self._overrides())
        return merged

    def credentials(self) -> CapacitiesCredentials:
        """Current Capacities credentials (used as the client's credentials provider)."""
        return CapacitiesCredentials(
            api_token=str(self.get("apiToken", "") or ""),
            space_id=str(self.get("spaceId", "") or ""),
        )
