#!/usr/bin/env python3
"""
Shared fixtures and mocks for the healthscaler test suite
"""

from typing import List, Optional
from unittest.mock import Mock

import pytest

from healthscaler.core.errors import QueryError
from healthscaler.core.metrics import InMemoryMetricsSink
from healthscaler.core.sources import ClusterStatusSource
from healthscaler.models.health import NodeCondition, NodeStatus, PodStatus


class MockKubernetesClient:
    """Mock CoreV1Api for testing"""

    def __init__(self):
        self.nodes = []
        self.pods = []
        self.node_error: Optional[Exception] = None
        self.pod_error: Optional[Exception] = None
        self.calls = []

    def list_node(self, **kwargs):
        self.calls.append(("list_node", kwargs))
        if self.node_error:
            raise self.node_error
        return Mock(items=self.nodes)

    def list_pod_for_all_namespaces(self, **kwargs):
        self.calls.append(("list_pod_for_all_namespaces", kwargs))
        if self.pod_error:
            raise self.pod_error
        return Mock(items=self.pods)

    def add_node(self, name: str, status: str = "Ready", conditions=None):
        """Helper to add mock node"""
        node = Mock()
        node.metadata = Mock()
        node.metadata.name = name
        node.metadata.labels = {}
        node.status = Mock()
        if conditions is None:
            conditions = [("Ready", "True" if status == "Ready" else "False")]
        node.status.conditions = [Mock(type=kind, status=value) for kind, value in conditions]
        self.nodes.append(node)
        return node

    def add_pod(self, name: str, phase: Optional[str] = "Running", namespace: str = "default"):
        """Helper to add mock pod"""
        pod = Mock()
        pod.metadata = Mock()
        pod.metadata.name = name
        pod.metadata.namespace = namespace
        pod.status = Mock()
        pod.status.phase = phase
        self.pods.append(pod)
        return pod


class FakeStatusSource(ClusterStatusSource):
    """In-memory status source with switchable failures"""

    def __init__(self, nodes: List[NodeStatus] = None, pods: List[PodStatus] = None):
        self.nodes = nodes or []
        self.pods = pods or []
        self.fail_nodes = False
        self.fail_pods = False
        self.node_calls = 0
        self.pod_calls = 0

    def list_nodes(self) -> List[NodeStatus]:
        self.node_calls += 1
        if self.fail_nodes:
            raise QueryError("nodes unavailable", cause=ConnectionError("refused"))
        return list(self.nodes)

    def list_pods(self) -> List[PodStatus]:
        self.pod_calls += 1
        if self.fail_pods:
            raise QueryError("pods unavailable", cause=TimeoutError("timed out"))
        return list(self.pods)


def make_node(name: str, ready: bool = True) -> NodeStatus:
    return NodeStatus(
        name=name,
        conditions=[NodeCondition(type="Ready", status="True" if ready else "False")]
    )


def make_pods(**phases: int) -> List[PodStatus]:
    """make_pods(Running=2, Failed=1) -> three pods with those phases"""
    pods = []
    for phase, count in phases.items():
        for i in range(count):
            pods.append(PodStatus(name=f"{phase.lower()}-{i}", namespace="default", phase=phase))
    return pods


@pytest.fixture
def k8s_client():
    return MockKubernetesClient()


@pytest.fixture
def sink():
    return InMemoryMetricsSink()


@pytest.fixture
def healthy_source():
    """Three ready nodes, one not ready; 6 Running, 2 Failed, 2 Pending pods"""
    nodes = [make_node("node-1"), make_node("node-2"), make_node("node-3"), make_node("node-4", ready=False)]
    pods = make_pods(Running=6, Failed=2, Pending=2)
    return FakeStatusSource(nodes, pods)
