#!/usr/bin/env python3
"""
Health monitor service: runs the aggregator each cycle and keeps the last good snapshot
"""

import logging
import threading
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from healthscaler.config.settings import MonitorSettings
from healthscaler.core import metrics as gauges
from healthscaler.core.aggregator import ClusterStateAggregator
from healthscaler.core.circuit_breaker import CircuitBreaker, CircuitState
from healthscaler.core.errors import CircuitOpenError, QueryError
from healthscaler.core.metrics import MetricsSink, NullMetricsSink
from healthscaler.core.sources import ClusterStatusSource
from healthscaler.models.health import ClusterHealthSnapshot

logger = logging.getLogger(__name__)


class HealthMonitor:
    """Periodic cluster health check with stale-but-valid fallback"""

    def __init__(
        self,
        source: ClusterStatusSource,
        aggregator: ClusterStateAggregator,
        interval: float = 30.0,
        breaker: Optional[CircuitBreaker] = None,
        sink: MetricsSink = None
    ):
        """
        Args:
            source: Cluster status source to query
            aggregator: Reduces source output to a snapshot
            interval: Seconds between cycles, used to judge staleness
            breaker: Guards the source; cycles fail fast while it is open
            sink: Receives error events
        """
        self.source = source
        self.aggregator = aggregator
        self.interval = interval
        self.breaker = breaker
        self.sink = sink or NullMetricsSink()

        self._lock = threading.Lock()
        self.last_snapshot: Optional[ClusterHealthSnapshot] = None
        self.last_error: Optional[str] = None
        self.last_attempt: Optional[datetime] = None
        self.consecutive_failures = 0
        self.cycles = 0

    @classmethod
    def from_settings(cls, settings: MonitorSettings, source: ClusterStatusSource,
                      sink: MetricsSink = None) -> "HealthMonitor":
        breaker = CircuitBreaker(
            failure_threshold=settings.failure_threshold,
            recovery_timeout=settings.recovery_timeout,
            expected_exception=QueryError,
            name="cluster-status"
        )
        return cls(
            source=source,
            aggregator=ClusterStateAggregator(sink),
            interval=settings.interval,
            breaker=breaker,
            sink=sink
        )

    def run_cycle(self) -> Optional[ClusterHealthSnapshot]:
        """
        Run one aggregation

        Returns:
            The new snapshot, or None if the cycle failed (the previous snapshot
            is kept and still served)
        """
        now = datetime.now(timezone.utc)
        try:
            if self.breaker is not None:
                snapshot = self.breaker.call(self.aggregator.aggregate, self.source)
            else:
                snapshot = self.aggregator.aggregate(self.source)
        except CircuitOpenError as e:
            self._record_failure(now, str(e), "circuit_open")
            logger.warning(f"Skipping cluster health check: {e}")
            return None
        except QueryError as e:
            self._record_failure(now, str(e), "query")
            logger.warning(f"Error checking cluster: {e}")
            return None

        with self._lock:
            self.last_snapshot = snapshot
            self.last_error = None
            self.last_attempt = now
            self.consecutive_failures = 0
            self.cycles += 1

        logger.info(f"[Cluster Health] {snapshot.summary()}")
        return snapshot

    def _record_failure(self, now: datetime, message: str, kind: str):
        with self._lock:
            self.last_error = message
            self.last_attempt = now
            self.consecutive_failures += 1
            self.cycles += 1
        try:
            self.sink.record_event(gauges.ERRORS, kind)
        except Exception as e:
            logger.warning(f"Failed to record error event: {e}")

    def snapshot_age(self) -> Optional[float]:
        """Seconds since the last good snapshot was taken"""
        snapshot = self.last_snapshot
        if snapshot is None:
            return None
        return (datetime.now(timezone.utc) - snapshot.timestamp).total_seconds()

    def is_healthy(self) -> bool:
        """Last cycle succeeded and its snapshot is fresh"""
        return self.unhealthy_reason() is None

    def unhealthy_reason(self) -> Optional[str]:
        with self._lock:
            snapshot = self.last_snapshot
            last_error = self.last_error
        if self.breaker is not None and self.breaker.state == CircuitState.OPEN:
            return "cluster status circuit is open"
        if snapshot is None:
            return last_error or "no cluster snapshot yet"
        if last_error is not None:
            return f"last cycle failed: {last_error}"
        age = self.snapshot_age()
        if age is not None and age > 3 * self.interval:
            return f"snapshot is stale ({age:.0f}s old)"
        return None

    def get_status(self) -> Dict[str, Any]:
        with self._lock:
            snapshot = self.last_snapshot
            status = {
                "cycles": self.cycles,
                "consecutive_failures": self.consecutive_failures,
                "last_error": self.last_error,
                "last_attempt": self.last_attempt.isoformat() if self.last_attempt else None,
            }
        status["snapshot"] = snapshot.model_dump(mode="json") if snapshot else None
        status["snapshot_age"] = self.snapshot_age()
        status["circuit_breaker"] = self.breaker.get_state() if self.breaker else None
        return status
