"""Typed interfaces for resource sampling used by admission control."""

from dataclasses import dataclass
from typing import Protocol


@dataclass(frozen=True)
class ProcessUsageSample:
    """Raw process resource usage as reported by a stat source.

    Attributes:
        cpu_percent: CPU usage in percent of one core; may exceed 100 on multi-core hosts.
        memory_bytes: Resident set size in bytes.
    """

    cpu_percent: float
    memory_bytes: int


class ResourceStatsSourcePort(Protocol):
    """Port definition for black-box process resource sampling."""

    def stats_sample(self) -> ProcessUsageSample:
        """Return current CPU and memory usage of the observed process.

        Returns:
            ProcessUsageSample: Current raw usage sample.

        Raises:
            RuntimeError: Raised when the process cannot be sampled.
        """
