"""
Configuration module for health monitor and autoscaler settings
"""

from .settings import (
    Settings,
    KubernetesSettings,
    MonitorSettings,
    AutoscalerSettings,
    ApiSettings,
    MetricsSettings,
    LoggingSettings,
)

__all__ = [
    "Settings",
    "KubernetesSettings",
    "MonitorSettings",
    "AutoscalerSettings",
    "ApiSettings",
    "MetricsSettings",
    "LoggingSettings",
]
