"""
Configuration module for autoscaler settings
"""

from .settings import (
    Settings,
    SchedulerSettings,
    DockerSettings,
    DispatchSettings,
    MetricsSettings,
    LoggingSettings,
    env_int,
)

__all__ = [
    "Settings",
    "SchedulerSettings",
    "DockerSettings",
    "DispatchSettings",
    "MetricsSettings",
    "LoggingSettings",
    "env_int",
]
