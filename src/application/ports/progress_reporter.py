"""Port interface for reporting progress during batch sync."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from ...domain.models.sync_result import SyncResult
    from ..dto.sync import BatchSummary, SyncProgress


class ProgressContext(Protocol):
    """Context for one batch."""

    def update(self, progress: SyncProgress) -> None:
        """Report that the item `progress.current` of `progress.total` is starting."""
        ...

    def finish(self, succeeded: int, failed: int) -> None:
        """Mark batch as complete."""
        ...


class ProgressReporterPort(ABC):
    """Port for reporting progress during batch sync."""

    @abstractmethod
    def start_batch(
        self,
        total_items: int,
        description: str = "Syncing to Capacities",
    ) -> ProgressContext:
        """
        Start progress reporting for a batch.

        Args:
            total_items: Total number of items to sync
            description: Description for progress bar

        Returns:
            ProgressContext whose `update` is used as the batch progress callback
        """
        pass

    @abstractmethod
    def display_summary(self, results: list[SyncResult]) -> BatchSummary:
        """
        Display the per-item outcome of a finished batch.

        Returns:
            Success/failure counts
        """
        pass
