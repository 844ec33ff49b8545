"""psutil-backed stat source observing the current process."""

from __future__ import annotations

import logging
import os

import psutil

from .interfaces import ProcessUsageSample, ResourceStatsSourcePort

logger = logging.getLogger(__name__)


class PsutilProcessStatsSource(ResourceStatsSourcePort):
    """Sample CPU and resident memory of one process through psutil."""

    def __init__(self, pid: int | None = None):
        """Initialize stat source and prime the CPU counter.

        Args:
            pid: Observed process id; defaults to the current process.

        Returns:
            None: Initializer does not return a value.

        Raises:
            RuntimeError: Raised when the process does not exist.
        """

        try:
            self._process = psutil.Process(pid or os.getpid())
        except psutil.NoSuchProcess as error:
            raise RuntimeError(f"process {pid} does not exist") from error
        # First non-blocking call always reports 0.0; it only sets the baseline.
        self._process.cpu_percent(interval=None)

    def stats_sample(self) -> ProcessUsageSample:
        """Return CPU usage since the previous sample and current RSS.

        Returns:
            ProcessUsageSample: Current raw usage sample.

        Raises:
            RuntimeError: Raised when the observed process disappeared or is inaccessible.
        """

        try:
            with self._process.oneshot():
                cpu_percent = float(self._process.cpu_percent(interval=None))
                memory_bytes = int(self._process.memory_info().rss)
        except (psutil.NoSuchProcess, psutil.AccessDenied) as error:
            raise RuntimeError(f"cannot sample process {self._process.pid}") from error

        logger.debug("Process %s usage: cpu=%.1f%% rss=%d", self._process.pid, cpu_percent, memory_bytes)
        return ProcessUsageSample(cpu_percent=cpu_percent, memory_bytes=memory_bytes)
