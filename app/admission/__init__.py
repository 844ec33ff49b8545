"""Admission layer package for resource-aware execution gating."""

from .controller import AdmissionController
from .interfaces import ProcessUsageSample, ResourceStatsSourcePort
from .psutil_source import PsutilProcessStatsSource

__all__ = ["AdmissionController", "ProcessUsageSample", "PsutilProcessStatsSource", "ResourceStatsSourcePort"]
