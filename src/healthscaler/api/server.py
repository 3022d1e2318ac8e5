#!/usr/bin/env python3
"""
FastAPI server exposing cluster health and simulated scaling state
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

import uvicorn
from fastapi import FastAPI, HTTPException
from fastapi.responses import JSONResponse

from healthscaler import __version__
from healthscaler.models.health import HealthStatus
from healthscaler.services.health_monitor import HealthMonitor
from healthscaler.services.scaling_simulator import ScalingSimulator

logger = logging.getLogger(__name__)


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class APIServer:
    """Read-only status API over the monitor and simulator"""

    def __init__(self, monitor: HealthMonitor, simulator: ScalingSimulator,
                 config: Optional[Dict[str, Any]] = None):
        """
        Args:
            monitor: Health monitor whose last snapshot is served
            simulator: Scaling simulator whose counter is served
            config: Sanitized configuration returned by /config
        """
        self.monitor = monitor
        self.simulator = simulator
        self.config = config or {}
        self.app = FastAPI(
            title="Cluster Health Autoscaler API",
            description="Cluster health snapshot and simulated autoscaling decisions",
            version=__version__
        )
        self._setup_routes()

    def _setup_routes(self):
        """Setup API routes"""

        @self.app.get("/")
        async def root():
            return {
                "service": "healthscaler",
                "version": __version__,
                "timestamp": _now()
            }

        @self.app.get("/health")
        async def health_check():
            """200 when the last aggregation succeeded recently, 503 otherwise"""
            reason = self.monitor.unhealthy_reason()
            health = HealthStatus(
                status="healthy" if reason is None else "unhealthy",
                reason=reason,
                details={"consecutive_failures": self.monitor.consecutive_failures}
            )
            return JSONResponse(
                content=health.model_dump(mode="json"),
                status_code=200 if reason is None else 503
            )

        @self.app.get("/snapshot")
        async def get_snapshot():
            """Last good cluster health snapshot"""
            snapshot = self.monitor.last_snapshot
            if snapshot is None:
                raise HTTPException(status_code=404, detail="No cluster snapshot collected yet")
            return {
                "snapshot": snapshot.model_dump(mode="json"),
                "age_seconds": self.monitor.snapshot_age(),
                "stale": self.monitor.unhealthy_reason() is not None,
                "last_error": self.monitor.last_error
            }

        @self.app.get("/replicas")
        async def get_replicas():
            """Simulated replica counter"""
            return self.simulator.get_status()

        @self.app.get("/status")
        async def get_status():
            return {
                "monitor": self.monitor.get_status(),
                "autoscaler": self.simulator.get_status(),
                "timestamp": _now()
            }

        @self.app.get("/config")
        async def get_config():
            """Current configuration (sanitized)"""
            return self.config

    def run(self, host: str = "0.0.0.0", port: int = 8080):
        """Run the API server (blocking)"""
        logger.info(f"Starting API server on {host}:{port}")
        uvicorn.run(self.app, host=host, port=port, log_level="warning")
