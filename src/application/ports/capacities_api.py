"""Port interface for the Capacities note-taking API."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any

from ...domain.errors import CapacitiesError


@dataclass(frozen=True)
class SaveWeblinkRequest:
    """Weblink submission; empty optional fields are not sent."""

    url: str
    title_overwrite: str | None = None
    description_overwrite: str | None = None
    tags: list[str] = field(default_factory=list)
    md_text: str | None = None


@dataclass(frozen=True)
class SaveWeblinkResponse:
    space_id: str
    id: str
    structure_id: str
    title: str = ""
    description: str = ""
    tags: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class SpaceInfo:
    id: str
    title: str
    icon: dict[str, Any] | None = None


class CapacitiesApiPort(ABC):
    """Port for the Capacities API (weblinks, daily notes, spaces)."""

    @abstractmethod
    def is_configured(self) -> bool:
        """Return True when both an API token and a space ID are available."""
        pass

    @abstractmethod
    def get_spaces(self) -> list[SpaceInfo]:
        """
        List the spaces visible to the API token.

        Raises:
            CapacitiesNotConfiguredError: If no API token is configured
            CapacitiesAPIError: If the request fails
        """
        pass

    @abstractmethod
    def save_weblink(self, request: SaveWeblinkRequest) -> SaveWeblinkResponse:
        """
        Save a weblink (with optional markdown body) into the configured space.

        Raises:
            CapacitiesNotConfiguredError: If token or space ID is missing
            CapacitiesAPIError: If the request fails
        """
        pass

    @abstractmethod
    def save_to_daily_note(self, md_text: str, no_timestamp: bool | None = None) -> None:
        """
        Append markdown to today's daily note in the configured space.

        Raises:
            CapacitiesNotConfiguredError: If token or space ID is missing
            CapacitiesAPIError: If the request fails
        """
        pass

    def test_connection(self) -> bool:
        """Return True if listing spaces succeeds."""
        try:
            self.get_spaces()
            return True
        except CapacitiesError:
            return False
