#!/usr/bin/env python3
"""
Pydantic models for cluster status, health snapshots and scaling decisions
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

READY_CONDITION = "Ready"
CONDITION_TRUE = "True"

POD_RUNNING = "Running"
POD_FAILED = "Failed"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class NodeCondition(BaseModel):
    """A single node condition as reported by the API server"""
    type: str = Field(..., description="Condition type, e.g. 'Ready'")
    status: str = Field(..., description="Condition status: 'True', 'False' or 'Unknown'")


class NodeStatus(BaseModel):
    """Status of one cluster node"""
    name: str = Field(..., description="Name of the node")
    conditions: List[NodeCondition] = Field(default_factory=list, description="Reported node conditions")

    @property
    def ready(self) -> bool:
        """True iff the node carries a Ready condition whose status is exactly 'True'"""
        return any(
            condition.type == READY_CONDITION and condition.status == CONDITION_TRUE
            for condition in self.conditions
        )


class PodStatus(BaseModel):
    """Status of one pod"""
    name: str = Field(..., description="Name of the pod")
    namespace: str = Field("default", description="Namespace of the pod")
    phase: Optional[str] = Field(None, description="Pod phase: Running, Failed, Pending, ...")


class ClusterHealthSnapshot(BaseModel):
    """Node and pod counts produced by one aggregation cycle"""
    model_config = ConfigDict(frozen=True)

    node_count: int = Field(..., ge=0, description="Total number of nodes")
    ready_node_count: int = Field(..., ge=0, description="Nodes with a Ready=True condition")
    total_pods: int = Field(..., ge=0, description="Pods across all namespaces")
    running_pods: int = Field(..., ge=0, description="Pods in phase Running")
    failed_pods: int = Field(..., ge=0, description="Pods in phase Failed")

    timestamp: datetime = Field(default_factory=_utcnow, description="When the snapshot was taken")

    @model_validator(mode="after")
    def _check_counts(self) -> "ClusterHealthSnapshot":
        if self.ready_node_count > self.node_count:
            raise ValueError("ready_node_count cannot exceed node_count")
        if self.running_pods + self.failed_pods > self.total_pods:
            raise ValueError("running_pods + failed_pods cannot exceed total_pods")
        return self

    def summary(self) -> str:
        """One-line human readable summary"""
        return (f"Nodes Ready: {self.ready_node_count}/{self.node_count} | "
                f"Pods Running: {self.running_pods}/{self.total_pods} | "
                f"Failed: {self.failed_pods}")


class ScalingAction(str, Enum):
    """Transitions of the replica counter"""
    SCALE_UP = "scale_up"
    SCALE_DOWN = "scale_down"
    NO_OP = "no_op"


class DecisionResult(BaseModel):
    """Outcome of a single autoscaler tick"""
    model_config = ConfigDict(frozen=True)

    action: ScalingAction
    load: Optional[float] = Field(None, description="Sampled load, None if sampling failed")
    previous_replicas: int = Field(..., ge=0)
    current_replicas: int = Field(..., ge=0)
    reason: str = Field(..., description="Why this transition was taken")
    timestamp: datetime = Field(default_factory=_utcnow)

    @property
    def changed(self) -> bool:
        return self.previous_replicas != self.current_replicas


class HealthStatus(BaseModel):
    """Health check response model"""
    status: str = Field(..., description="Health status: 'healthy' or 'unhealthy'")
    timestamp: datetime = Field(default_factory=_utcnow, description="Health check timestamp")
    reason: Optional[str] = Field(None, description="Why the service is unhealthy")
    details: Optional[Dict[str, Any]] = Field(None, description="Additional health details")
