#!/usr/bin/env python3
"""
Cluster state aggregator: reduces node and pod status to a health snapshot
"""

import logging
from typing import Iterable

from healthscaler.models.health import (
    ClusterHealthSnapshot,
    NodeStatus,
    PodStatus,
    POD_FAILED,
    POD_RUNNING,
)
from . import metrics as gauges
from .errors import QueryError
from .metrics import MetricsSink, NullMetricsSink
from .sources import ClusterStatusSource

logger = logging.getLogger(__name__)


def count_ready_nodes(nodes: Iterable[NodeStatus]) -> int:
    """Number of nodes carrying a Ready=True condition"""
    return sum(1 for node in nodes if node.ready)


def summarize(nodes: Iterable[NodeStatus], pods: Iterable[PodStatus]) -> ClusterHealthSnapshot:
    """Build a snapshot from already-fetched node and pod lists"""
    nodes = list(nodes)
    pods = list(pods)

    running = failed = 0
    for pod in pods:
        if pod.phase == POD_RUNNING:
            running += 1
        elif pod.phase == POD_FAILED:
            failed += 1

    return ClusterHealthSnapshot(
        node_count=len(nodes),
        ready_node_count=count_ready_nodes(nodes),
        total_pods=len(pods),
        running_pods=running,
        failed_pods=failed
    )


class ClusterStateAggregator:
    """Collects node and pod status into a ClusterHealthSnapshot"""

    def __init__(self, sink: MetricsSink = None):
        """
        Args:
            sink: Receives the five node/pod gauges after each successful cycle
        """
        self.sink = sink or NullMetricsSink()

    def aggregate(self, source: ClusterStatusSource) -> ClusterHealthSnapshot:
        """
        Query the source and reduce the result to counts

        Args:
            source: Cluster status source to query

        Returns:
            A fresh ClusterHealthSnapshot

        Raises:
            QueryError: If either listing fails; no partial snapshot is produced
        """
        try:
            nodes = source.list_nodes()
            pods = source.list_pods()
        except QueryError:
            raise
        except Exception as e:
            raise QueryError(f"Cluster status query failed: {e}", cause=e) from e

        snapshot = summarize(nodes, pods)
        logger.debug(f"Aggregated {snapshot.node_count} nodes and {snapshot.total_pods} pods")

        self._publish(snapshot)
        return snapshot

    def _publish(self, snapshot: ClusterHealthSnapshot):
        """Push the snapshot gauges; failures are logged, never raised"""
        values = {
            gauges.NODE_COUNT: snapshot.node_count,
            gauges.NODE_READY: snapshot.ready_node_count,
            gauges.POD_TOTAL: snapshot.total_pods,
            gauges.POD_RUNNING: snapshot.running_pods,
            gauges.POD_FAILED: snapshot.failed_pods,
        }
        for name, value in values.items():
            try:
                self.sink.set_gauge(name, value)
            except Exception as e:
                logger.warning(f"Failed to publish gauge {name}: {e}")
