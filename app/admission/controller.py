"""CPU-based admission control for the worker loop."""

from __future__ import annotations

from app.domain import AdmissionStats

from .interfaces import ResourceStatsSourcePort


class AdmissionController:
    """Decide whether the worker loop may start the next job.

    The decision is advisory: it only gates dequeueing, never running work.
    Every call samples the stat source again since load changes continuously.
    """

    def __init__(self, stats_source: ResourceStatsSourcePort, core_count: int, cpu_threshold: float):
        """Initialize admission controller.

        Args:
            stats_source: Black-box process usage source.
            core_count: Number of cores the CPU budget is normalized by.
            cpu_threshold: Normalized CPU fraction below which work may start.

        Returns:
            None: Initializer does not return a value.

        Raises:
            ValueError: Raised when configuration values are out of range.
        """

        if stats_source is None:
            raise ValueError("stats_source must not be None")
        if core_count < 1:
            raise ValueError("core_count must be >= 1")
        if not 0 < cpu_threshold <= 1:
            raise ValueError("cpu_threshold must be in (0, 1]")

        self._stats_source = stats_source
        self._core_count = core_count
        self._cpu_threshold = cpu_threshold

    @property
    def cpu_threshold(self) -> float:
        """Return the configured CPU fraction threshold."""

        return self._cpu_threshold

    def admission_sample(self) -> AdmissionStats:
        """Sample current usage normalized by the configured core count.

        Returns:
            AdmissionStats: Current usage sample with `cpu_fraction` clamped to 0..1.

        Raises:
            RuntimeError: Raised when the stat source cannot be sampled.
        """

        usage = self._stats_source.stats_sample()
        cpu_fraction = usage.cpu_percent / (100.0 * self._core_count)
        return AdmissionStats(
            cpu_fraction=min(1.0, max(0.0, cpu_fraction)),
            cpu_percent=usage.cpu_percent,
            memory_bytes=usage.memory_bytes,
        )

    def admission_may_proceed(self) -> bool:
        """Return whether current CPU usage is below the threshold.

        Returns:
            bool: True when the worker loop may dequeue the next job.

        Raises:
            RuntimeError: Raised when the stat source cannot be sampled.
        """

        return self.admission_sample().cpu_fraction < self._cpu_threshold
