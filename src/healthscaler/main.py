#!/usr/bin/env python3
"""
Cluster Health Autoscaler - Main Entry Point
Monitors Kubernetes node/pod health and simulates HPA-style replica decisions
"""

import argparse
import logging
import os
import signal
import sys
import threading
from typing import List, Optional

import yaml
from pydantic import ValidationError

from healthscaler.api.server import APIServer
from healthscaler.config import Settings
from healthscaler.core.errors import ConfigurationError
from healthscaler.core.logging_config import setup_logging
from healthscaler.core.metrics import MetricsSink, NullMetricsSink, PrometheusMetricsSink
from healthscaler.core.scheduler import PeriodicLoop
from healthscaler.core.sources import ClusterStatusSource, KubernetesStatusSource
from healthscaler.services.health_monitor import HealthMonitor
from healthscaler.services.scaling_simulator import ScalingSimulator

logger = logging.getLogger(__name__)


class HealthScalerService:
    """Main service that wires the monitor and simulator loops together"""

    def __init__(self, settings: Settings, source: Optional[ClusterStatusSource] = None,
                 sink: Optional[MetricsSink] = None):
        """
        Initialize the service

        Args:
            settings: Effective configuration
            source: Cluster status source; built from the kubeconfig when omitted
            sink: Metrics sink; a Prometheus sink when metrics are enabled
        """
        self.settings = settings
        self.stop_event = threading.Event()

        if sink is None:
            sink = PrometheusMetricsSink() if settings.metrics.enabled else NullMetricsSink()
        self.sink = sink

        if source is None:
            source = KubernetesStatusSource.from_settings(settings.kubernetes)
        logger.info("Connected to Kubernetes cluster configuration")

        self.monitor = HealthMonitor.from_settings(settings.monitor, source, sink=self.sink)
        self.simulator = ScalingSimulator.from_settings(settings.autoscaler, sink=self.sink)

        self.loops: List[PeriodicLoop] = [
            PeriodicLoop("health-monitor", self.monitor.run_cycle, self.monitor.interval,
                         stop_event=self.stop_event, sink=self.sink),
            PeriodicLoop("scaling-simulator", self.simulator.run_cycle, self.simulator.interval,
                         stop_event=self.stop_event, sink=self.sink, run_immediately=False),
        ]

        self.api_server = APIServer(self.monitor, self.simulator, config=settings.get_safe_config())

    def install_signal_handlers(self):
        signal.signal(signal.SIGINT, self._signal_handler)
        signal.signal(signal.SIGTERM, self._signal_handler)

    def _signal_handler(self, signum, frame):
        logger.info(f"Received signal {signum}, shutting down...")
        self.stop()

    def start(self):
        """Start the metrics server, API server and both loops"""
        if self.settings.metrics.enabled and isinstance(self.sink, PrometheusMetricsSink):
            self.sink.start_server(self.settings.metrics.port)
            logger.info(f"Prometheus metrics server started on :{self.settings.metrics.port}")

        if self.settings.api.enabled:
            api_thread = threading.Thread(
                target=self.api_server.run,
                kwargs={'host': self.settings.api.host, 'port': self.settings.api.port},
                name="api-server",
                daemon=True
            )
            api_thread.start()
            logger.info(f"API server started on :{self.settings.api.port}")

        for loop in self.loops:
            loop.start()

    def run(self):
        """Run until stopped by a signal or stop()"""
        self.start()
        self.stop_event.wait()
        self.join()
        logger.info("Health autoscaler service stopped")

    def run_once(self) -> bool:
        """Run one health check and one scaling tick; True if the health check succeeded"""
        snapshot = self.monitor.run_cycle()
        decision = self.simulator.run_cycle()
        logger.info(f"[Autoscaler] {decision.action.value}: {decision.reason} "
                    f"→ {decision.current_replicas} replicas")
        return snapshot is not None

    def stop(self):
        self.stop_event.set()

    def join(self, timeout: float = 5.0):
        for loop in self.loops:
            if not loop.stop(timeout):
                logger.warning(f"Loop '{loop.name}' did not stop within {timeout}s")


def load_settings(config_path: Optional[str]) -> Settings:
    """Build settings from the YAML file (if any) and the environment

    Raises:
        ConfigurationError: The file is not valid YAML or a value is out of range
    """
    try:
        if config_path and os.path.exists(config_path):
            return Settings.load_from_yaml_with_env_override(config_path)
        return Settings()
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in {config_path}: {e}") from e
    except ValidationError as e:
        raise ConfigurationError(f"Invalid settings: {e}") from e


def main(argv: Optional[List[str]] = None) -> int:
    """Entry point"""
    parser = argparse.ArgumentParser(description='Kubernetes cluster health monitor and simulated autoscaler')
    parser.add_argument(
        '--config',
        default=os.getenv('CONFIG_PATH'),
        help='Path to a YAML configuration file'
    )
    parser.add_argument(
        '--once',
        action='store_true',
        help='Run a single health check and scaling tick, then exit'
    )
    parser.add_argument(
        '--no-api',
        action='store_true',
        help='Do not start the status API server'
    )
    args = parser.parse_args(argv)

    # Console logging with defaults until the configured level is known
    setup_logging()
    try:
        settings = load_settings(args.config)
    except ConfigurationError as e:
        logger.error(f"Failed to load configuration: {e}")
        return 1

    if args.no_api or args.once:
        settings.api.enabled = False
    if args.once:
        settings.metrics.enabled = False

    setup_logging(
        level=settings.logging.level,
        log_file=settings.logging.file,
        enable_colors=settings.logging.colors
    )
    if settings.debug:
        logger.info(f"Debug mode enabled. Settings: {settings.get_safe_config()}")

    try:
        service = HealthScalerService(settings)
    except ConfigurationError as e:
        logger.error(f"Failed to initialize: {e}")
        return 1

    if args.once:
        return 0 if service.run_once() else 1

    service.install_signal_handlers()
    try:
        service.run()
    except KeyboardInterrupt:
        logger.info("Received keyboard interrupt")
        service.stop()
        service.join()
    return 0


if __name__ == "__main__":
    sys.exit(main())
