from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class SyncResult:
    """
    Outcome of one sync attempt for one Zotero item.

    Fields:
        item_key: Zotero item key
        item_title: Item title ('Unknown' when the item has none)
        success: True when the item was submitted to Capacities
        capacities_id: Remote object ID (success only)
        structure_id: Remote structure ID (success only)
        error: Failure reason (failure only)
    """

    item_key: str
    item_title: str
    success: bool
    capacities_id: str | None = None
    structure_id: str | None = None
    error: str | None = None

    def __post_init__(self) -> None:
        """Validate result consistency."""
        if not self.success and not self.error:
            raise ValueError("error must be non-empty for a failed sync result")

    @classmethod
    def failed(cls, item_key: str, item_title: str, error: str) -> SyncResult:
        return cls(item_key=item_key, item_title=item_title, success=False, error=error)
