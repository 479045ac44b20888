from pydantic import BaseModel

from ...domain.models.sync_result import SyncResult


class SyncProgress(BaseModel):
    """Progress event emitted before each item of a batch."""

    current: int
    total: int
    current_item: str | None = None

    @property
    def percent(self) -> int:
        if self.total <= 0:
            return 100
        return round(self.current / self.total * 100)


class SyncStats(BaseModel):
    """Dedup store statistics."""

    processed_count: int


class BatchSummary(BaseModel):
    """Success/failure counts of a batch."""

    succeeded: int
    failed: int

    @classmethod
    def from_results(cls, results: list[SyncResult]) -> "BatchSummary":
        succeeded = sum(1 for r in results if r.success)
        return cls(succeeded=succeeded, failed=len(results) - succeeded)
