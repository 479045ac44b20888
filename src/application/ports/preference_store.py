"""Port interface for the persistent key-value preference store."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

# Defaults shipped with the add-on
DEFAULT_PREFERENCES: dict[str, Any] = {
    "apiToken": "",
    "spaceId": "",
    "autoSync": False,
    "syncOnItemChange": False,
    "includePageNumbers": True,
    "includeTags": True,
    "useColorEmoji": True,
    "processedItems": "[]",
}


class PreferenceStorePort(ABC):
    """Port for reading and writing persisted preferences."""

    @abstractmethod
    def get(self, key: str, default: Any = None) -> Any:
        """
        Get a preference value.

        Falls back to the shipped default, then to `default`.
        """
        pass

    @abstractmethod
    def set(self, key: str, value: Any) -> None:
        """
        Persist a preference value.

        Raises:
            PreferenceWriteError: If the value cannot be persisted
        """
        pass

    @abstractmethod
    def as_dict(self) -> dict[str, Any]:
        """Return all preferences merged over the defaults."""
        pass

    def get_bool(self, key: str, default: bool = False) -> bool:
        value = self.get(key, default)
        if isinstance(value, bool):
            return value
        if isinstance(value, str):
            return value.strip().lower() in ("true", "1", "yes", "on")
        return bool(value)
