"""
Core health aggregation and scaling decision modules
"""

from .aggregator import ClusterStateAggregator
from .autoscaler import AutoscaleDecisionEngine, AutoscalerState, ScalingPolicy, decide
from .errors import HealthScalerError, QueryError, CircuitOpenError, ConfigurationError
from .metrics import MetricsSink, NullMetricsSink, InMemoryMetricsSink, PrometheusMetricsSink
from .sampler import LoadSampler, RandomLoadSampler, SequenceLoadSampler
from .sources import ClusterStatusSource, KubernetesStatusSource

__all__ = [
    "ClusterStateAggregator",
    "AutoscaleDecisionEngine",
    "AutoscalerState",
    "ScalingPolicy",
    "decide",
    "HealthScalerError",
    "QueryError",
    "CircuitOpenError",
    "ConfigurationError",
    "MetricsSink",
    "NullMetricsSink",
    "InMemoryMetricsSink",
    "PrometheusMetricsSink",
    "LoadSampler",
    "RandomLoadSampler",
    "SequenceLoadSampler",
    "ClusterStatusSource",
    "KubernetesStatusSource",
]
