"""
Services running the health monitor and scaling simulator loops
"""

from .health_monitor import HealthMonitor
from .scaling_simulator import ScalingSimulator

__all__ = ["HealthMonitor", "ScalingSimulator"]
