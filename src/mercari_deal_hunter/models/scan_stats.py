"""Per-cycle pipeline counters."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime


@dataclass(slots=True)
class ScanCycleStats:
    """Counters accumulated over one scan cycle; never persisted.

    Each stage only narrows the previous one, so
    found >= fresh >= unseen >= kept >= sent.
    """

    found: int = 0
    """Listings returned by search."""
    fresh: int = 0
    """Listings within the max age window."""
    unseen: int = 0
    """Fresh listings not yet in the dedup store."""
    kept: int = 0
    """Listings kept by the image classifier."""
    sent: int = 0
    """Notifications delivered successfully."""
    started_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    duration_seconds: float = 0.0

    def merge(self, other: ScanCycleStats) -> None:
        """Add another set of counters into this one."""
        self.found += other.found
        self.fresh += other.fresh
        self.unseen += other.unseen
        self.kept += other.kept
        self.sent += other.sent
