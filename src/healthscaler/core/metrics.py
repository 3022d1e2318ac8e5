#!/usr/bin/env python3
"""
Metrics sinks that receive gauge values and events from the monitor and simulator
"""

import logging
import threading
from abc import ABC, abstractmethod
from collections import defaultdict, deque
from typing import Deque, Dict, Optional, Tuple

from prometheus_client import CollectorRegistry, Counter, Gauge, start_http_server

logger = logging.getLogger(__name__)

# Gauge names
NODE_COUNT = "k8s_node_count"
NODE_READY = "k8s_node_ready_total"
POD_TOTAL = "k8s_pod_total"
POD_RUNNING = "k8s_pod_running_total"
POD_FAILED = "k8s_pod_failed_total"
CPU_UTILIZATION = "k8s_cpu_utilization_percent"
DESIRED_REPLICAS = "k8s_desired_replicas_total"

# Event (counter) names
SCALING_DECISIONS = "healthscaler_scaling_decisions_total"
ERRORS = "healthscaler_errors_total"
LOOP_ERRORS = "healthscaler_loop_errors_total"

GAUGE_HELP = {
    NODE_COUNT: "Number of Kubernetes nodes",
    NODE_READY: "Number of ready Kubernetes nodes",
    POD_TOTAL: "Number of pods across all namespaces",
    POD_RUNNING: "Number of running pods across all namespaces",
    POD_FAILED: "Number of failed pods across all namespaces",
    CPU_UTILIZATION: "Simulated cluster CPU utilization percentage (0-100%)",
    DESIRED_REPLICAS: "Desired number of replicas simulated by autoscaler",
}

EVENT_HELP = {
    SCALING_DECISIONS: ("Total simulated scaling decisions", "decision"),
    ERRORS: ("Total errors", "type"),
    LOOP_ERRORS: ("Unexpected exceptions raised by a periodic loop body", "loop"),
}


class MetricsSink(ABC):
    """Receives values produced by the core; never read back by it"""

    @abstractmethod
    def set_gauge(self, name: str, value: float) -> None:
        """Set (not increment) a named gauge"""

    @abstractmethod
    def record_event(self, name: str, label: str) -> None:
        """Count one occurrence of a labelled event"""


class NullMetricsSink(MetricsSink):
    """Discards everything"""

    def set_gauge(self, name: str, value: float) -> None:
        pass

    def record_event(self, name: str, label: str) -> None:
        pass


class InMemoryMetricsSink(MetricsSink):
    """Keeps the latest gauge values and event counts in memory"""

    def __init__(self, max_history: int = 1000):
        self._lock = threading.Lock()
        self.gauges: Dict[str, float] = {}
        # Most recent gauge writes, oldest first
        self.history: Deque[Tuple[str, float]] = deque(maxlen=max_history)
        self.events: Dict[Tuple[str, str], int] = defaultdict(int)

    def set_gauge(self, name: str, value: float) -> None:
        with self._lock:
            self.gauges[name] = float(value)
            self.history.append((name, float(value)))

    def record_event(self, name: str, label: str) -> None:
        with self._lock:
            self.events[(name, label)] += 1

    def get(self, name: str) -> Optional[float]:
        with self._lock:
            return self.gauges.get(name)


class PrometheusMetricsSink(MetricsSink):
    """Exposes gauges and counters through prometheus_client"""

    def __init__(self, registry: Optional[CollectorRegistry] = None):
        """
        Initialize Prometheus sink

        Args:
            registry: Registry to register collectors in. A private registry is
                created when omitted so several sinks can coexist in one process.
        """
        self.registry = registry if registry is not None else CollectorRegistry()
        self._gauges: Dict[str, Gauge] = {
            name: Gauge(name, help_text, registry=self.registry)
            for name, help_text in GAUGE_HELP.items()
        }
        self._counters: Dict[str, Counter] = {
            name: Counter(name, help_text, [label], registry=self.registry)
            for name, (help_text, label) in EVENT_HELP.items()
        }

    def set_gauge(self, name: str, value: float) -> None:
        gauge = self._gauges.get(name)
        if gauge is None:
            raise KeyError(f"Unknown gauge: {name}")
        gauge.set(value)

    def record_event(self, name: str, label: str) -> None:
        counter = self._counters.get(name)
        if counter is None:
            raise KeyError(f"Unknown counter: {name}")
        counter.labels(label).inc()

    def start_server(self, port: int, addr: str = "0.0.0.0"):
        """Serve /metrics for this sink's registry on a background thread"""
        logger.info(f"Starting metrics server on :{port}/metrics ...")
        return start_http_server(port, addr=addr, registry=self.registry)
