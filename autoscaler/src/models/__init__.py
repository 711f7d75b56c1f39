"""
Models package for autoscaler data structures
"""

from .stats import (
    MemoryStats,
    IOStats,
    ContainerStat,
)
from .service import (
    ServiceDescriptor,
    Policy,
)
from .signal import (
    CurrentStats,
    BasedStats,
    ScalingSignal,
    CycleResult,
)

__all__ = [
    "MemoryStats",
    "IOStats",
    "ContainerStat",
    "ServiceDescriptor",
    "Policy",
    "CurrentStats",
    "BasedStats",
    "ScalingSignal",
    "CycleResult",
]
