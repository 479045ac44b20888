from dataclasses import dataclass


@dataclass(frozen=True)
class SyncPolicy:
    """Limits and pacing for submissions to the Capacities API (10 requests / 60 s)."""

    pacing_delay_seconds: float = 1.0
    max_title_length: int = 500
    max_description_length: int = 1000
    max_tags: int = 30
    max_markdown_length: int = 200_000
    request_timeout_seconds: float = 30.0

    def __post_init__(self) -> None:
        """Validate sync policy."""
        if self.pacing_delay_seconds < 0:
            raise ValueError(f"pacing_delay_seconds must be >= 0, got {self.pacing_delay_seconds}")
        if self.request_timeout_seconds <= 0:
            raise ValueError(
                f"request_timeout_seconds must be > 0, got {self.request_timeout_seconds}"
            )
        for name in ("max_title_length", "max_description_length", "max_tags", "max_markdown_length"):
            if getattr(self, name) <= 0:
                raise ValueError(f"{name} must be > 0")


DEFAULT_SYNC_POLICY = SyncPolicy()
