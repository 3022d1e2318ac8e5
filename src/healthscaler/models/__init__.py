"""
Models package for cluster status and scaling data structures
"""

from .health import (
    NodeCondition,
    NodeStatus,
    PodStatus,
    ClusterHealthSnapshot,
    ScalingAction,
    DecisionResult,
    HealthStatus,
)

__all__ = [
    "NodeCondition",
    "NodeStatus",
    "PodStatus",
    "ClusterHealthSnapshot",
    "ScalingAction",
    "DecisionResult",
    "HealthStatus",
]
