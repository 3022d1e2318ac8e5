#!/usr/bin/env python3
"""
Cluster status sources: read-only views of node and pod status
"""

import logging
import os
from abc import ABC, abstractmethod
from typing import List, Optional

import yaml
from kubernetes import client
from kubernetes import config as k8s_config
from kubernetes.client.rest import ApiException
from kubernetes.config.config_exception import ConfigException
from pydantic import ValidationError
from urllib3.exceptions import HTTPError

from healthscaler.config.settings import KubernetesSettings
from healthscaler.models.health import NodeCondition, NodeStatus, PodStatus
from .errors import ConfigurationError, QueryError

logger = logging.getLogger(__name__)

# Raised by the client when the API server is unreachable, refuses the
# credentials, or times out
TRANSPORT_ERRORS = (ApiException, HTTPError, OSError)

# Raised while converting an unexpected response shape
MALFORMED_ERRORS = (AttributeError, TypeError, ValueError, ValidationError)

# Raised while reading credentials: missing fields, unreadable or unparsable files
KUBECONFIG_ERRORS = (ConfigException, OSError, yaml.YAMLError, KeyError, TypeError, ValueError)


class ClusterStatusSource(ABC):
    """Read-only access to the cluster's node and pod status"""

    @abstractmethod
    def list_nodes(self) -> List[NodeStatus]:
        """Return every node in the cluster; raise QueryError on failure"""

    @abstractmethod
    def list_pods(self) -> List[PodStatus]:
        """Return every pod in every namespace; raise QueryError on failure"""


class KubernetesStatusSource(ClusterStatusSource):
    """Reads node and pod status through the Kubernetes CoreV1 API"""

    def __init__(self, api: client.CoreV1Api, request_timeout: Optional[float] = 10.0):
        """
        Args:
            api: CoreV1Api client (or anything exposing list_node and
                list_pod_for_all_namespaces)
            request_timeout: Per-request timeout in seconds handed to the client
        """
        self.api = api
        self.request_timeout = request_timeout

    @classmethod
    def from_settings(cls, settings: KubernetesSettings) -> "KubernetesStatusSource":
        """Load cluster credentials and build a source"""
        try:
            if settings.in_cluster:
                logger.info("Loading in-cluster config")
                k8s_config.load_incluster_config()
            else:
                kubeconfig_path = settings.kubeconfig_path
                logger.info(f"Loading kubeconfig from: {kubeconfig_path}")
                if not os.path.exists(kubeconfig_path):
                    raise ConfigurationError(f"Kubeconfig file not found: {kubeconfig_path}")
                k8s_config.load_kube_config(config_file=kubeconfig_path)
        except KUBECONFIG_ERRORS as e:
            raise ConfigurationError(f"Error building kube config: {e}") from e

        logger.info("Kubernetes client initialized successfully")
        return cls(client.CoreV1Api(), request_timeout=settings.request_timeout)

    def list_nodes(self) -> List[NodeStatus]:
        try:
            response = self.api.list_node(_request_timeout=self.request_timeout)
        except TRANSPORT_ERRORS as e:
            raise QueryError(f"Failed to list nodes: {e}", cause=e) from e

        try:
            return [self._to_node_status(node) for node in response.items]
        except MALFORMED_ERRORS as e:
            raise QueryError(f"Malformed node list: {e}", cause=e) from e

    def list_pods(self) -> List[PodStatus]:
        try:
            response = self.api.list_pod_for_all_namespaces(_request_timeout=self.request_timeout)
        except TRANSPORT_ERRORS as e:
            raise QueryError(f"Failed to list pods: {e}", cause=e) from e

        try:
            return [self._to_pod_status(pod) for pod in response.items]
        except MALFORMED_ERRORS as e:
            raise QueryError(f"Malformed pod list: {e}", cause=e) from e

    @staticmethod
    def _to_node_status(node) -> NodeStatus:
        conditions = []
        # status.conditions is None for a node that has not reported yet
        if node.status is not None and node.status.conditions:
            conditions = [
                NodeCondition(type=condition.type, status=condition.status)
                for condition in node.status.conditions
            ]
        return NodeStatus(name=node.metadata.name, conditions=conditions)

    @staticmethod
    def _to_pod_status(pod) -> PodStatus:
        phase = pod.status.phase if pod.status is not None else None
        return PodStatus(
            name=pod.metadata.name,
            namespace=pod.metadata.namespace or "default",
            phase=phase
        )
