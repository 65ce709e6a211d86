"""Approximate memory growth monitoring for a fetch."""

from __future__ import annotations

from ...config import ESTIMATED_BYTES_PER_RECORD
from .telemetry import log_memory_threshold_exceeded


def estimate_mb(record_count: int) -> float:
    """Estimated footprint of ``record_count`` records in MB.

    Uses a fixed per-record size; this is a heuristic, not a measurement.
    """
    return record_count * ESTIMATED_BYTES_PER_RECORD / (1024 * 1024)


class MemoryGuard:
    """One-shot warning when the estimated footprint crosses a threshold.

    The guard is armed while ``threshold_mb`` is positive. The first check
    that exceeds it fires, logs a warning and disarms the guard for the rest
    of the fetch. A threshold of 0 disables it from the start.

    Runners call ``check`` with the cumulative count: per page when running
    sequentially, per merged batch at each concurrent round barrier.
    """

    def __init__(self, threshold_mb: float) -> None:
        if threshold_mb < 0:
            raise ValueError("threshold_mb cannot be negative")
        self.threshold_mb = threshold_mb
        self.fired = False

    @property
    def armed(self) -> bool:
        return self.threshold_mb > 0

    def check(self, record_count: int) -> bool:
        """Evaluate the cumulative record count.

        Returns:
            True if the warning fired on this call
        """
        if not self.armed:
            return False
        estimated = estimate_mb(record_count)
        if estimated <= self.threshold_mb:
            return False

        log_memory_threshold_exceeded(
            record_count=record_count,
            estimated_mb=estimated,
            threshold_mb=self.threshold_mb,
        )
        self.threshold_mb = 0
        self.fired = True
        return True
