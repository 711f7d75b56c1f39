"""
Core autoscaler modules
"""

from .dispatch import StatsDispatcher, send_stats
from .pipeline import StatsPipeline
from .policy import PolicyExtractor
from .services import ServiceEnumerator, connect_docker
from .stats import StatsCollector, parse_stats_output

__all__ = [
    "StatsDispatcher",
    "send_stats",
    "StatsPipeline",
    "PolicyExtractor",
    "ServiceEnumerator",
    "connect_docker",
    "StatsCollector",
    "parse_stats_output",
]
