#!/usr/bin/env python3
"""
Configuration settings using Pydantic for environment variable loading
"""

import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from dotenv import load_dotenv
from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Load environment variables from .env file if it exists
load_dotenv()


def _default_kubeconfig() -> str:
    kubeconfig = os.getenv("KUBECONFIG")
    if kubeconfig:
        return kubeconfig
    return str(Path.home() / ".kube" / "config")


class KubernetesSettings(BaseSettings):
    """Kubernetes connection settings"""
    model_config = SettingsConfigDict(env_prefix="KUBERNETES_", extra="ignore")

    in_cluster: bool = False
    kubeconfig_path: str = Field(default_factory=_default_kubeconfig)
    request_timeout: float = Field(10.0, gt=0)


class MonitorSettings(BaseSettings):
    """Cluster health monitor loop settings"""
    model_config = SettingsConfigDict(env_prefix="MONITOR_", extra="ignore")

    interval: float = Field(30.0, gt=0)

    # Circuit breaker around the status source
    failure_threshold: int = Field(5, ge=1)
    recovery_timeout: float = Field(60.0, ge=0)


class AutoscalerSettings(BaseSettings):
    """Simulated autoscaler settings"""
    model_config = SettingsConfigDict(env_prefix="AUTOSCALER_", extra="ignore")

    interval: float = Field(20.0, gt=0)

    # Limit settings
    min_replicas: int = Field(2, ge=0)
    max_replicas: int = Field(10, ge=0)
    initial_replicas: int = Field(3, ge=0)

    # Threshold settings
    scale_up_threshold: float = Field(75.0, ge=0, le=100)
    scale_down_threshold: float = Field(35.0, ge=0, le=100)

    # Synthetic load range
    load_min: float = Field(20.0, ge=0, le=100)
    load_max: float = Field(100.0, ge=0, le=100)
    seed: Optional[int] = None

    @model_validator(mode="after")
    def _check_ranges(self) -> "AutoscalerSettings":
        if self.min_replicas > self.max_replicas:
            raise ValueError("min_replicas must be <= max_replicas")
        if not self.min_replicas <= self.initial_replicas <= self.max_replicas:
            raise ValueError("initial_replicas must lie within [min_replicas, max_replicas]")
        if self.scale_down_threshold >= self.scale_up_threshold:
            raise ValueError("scale_down_threshold must be less than scale_up_threshold")
        if self.load_min >= self.load_max:
            raise ValueError("load_min must be less than load_max")
        return self


class ApiSettings(BaseSettings):
    """Status API settings"""
    model_config = SettingsConfigDict(env_prefix="API_", extra="ignore")

    enabled: bool = True
    host: str = "0.0.0.0"
    port: int = Field(8080, ge=1, le=65535)


class MetricsSettings(BaseSettings):
    """Prometheus exposition settings"""
    model_config = SettingsConfigDict(env_prefix="METRICS_", extra="ignore")

    enabled: bool = True
    port: int = Field(9091, ge=1, le=65535)


class LoggingSettings(BaseSettings):
    """Logging configuration settings"""
    model_config = SettingsConfigDict(env_prefix="LOG_", extra="ignore")

    level: str = "INFO"
    file: Optional[str] = None
    colors: bool = True


class Settings(BaseSettings):
    """Main settings class that includes all sub-settings"""
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    environment: str = "development"
    debug: bool = False

    kubernetes: KubernetesSettings = Field(default_factory=KubernetesSettings)
    monitor: MonitorSettings = Field(default_factory=MonitorSettings)
    autoscaler: AutoscalerSettings = Field(default_factory=AutoscalerSettings)
    api: ApiSettings = Field(default_factory=ApiSettings)
    metrics: MetricsSettings = Field(default_factory=MetricsSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    def get_safe_config(self) -> Dict[str, Any]:
        """Configuration without connection details, for the status API"""
        return {
            "environment": self.environment,
            "monitor": self.monitor.model_dump(),
            "autoscaler": self.autoscaler.model_dump(),
            "metrics": self.metrics.model_dump(),
        }

    @classmethod
    def load_from_yaml_with_env_override(cls, yaml_path: str) -> "Settings":
        """Load settings from YAML file and override with environment variables"""
        yaml_config: Dict[str, Any] = {}
        if os.path.exists(yaml_path):
            with open(yaml_path, 'r') as f:
                yaml_content = f.read()
                for key, value in os.environ.items():
                    yaml_content = yaml_content.replace(f"${{{key}}}", value)
                yaml_config = yaml.safe_load(yaml_content) or {}

        # Init kwargs beat the environment in pydantic-settings, so only keep YAML
        # values that no environment variable overrides
        env_keys = {key.upper() for key in os.environ}

        def section(name: str, settings_cls) -> Dict[str, Any]:
            prefix = settings_cls.model_config.get("env_prefix", "")
            values = yaml_config.get(name) or {}
            return {
                key: value for key, value in values.items()
                if f"{prefix}{key}".upper() not in env_keys
            }

        return cls(
            environment=os.getenv("ENVIRONMENT", yaml_config.get("environment", "development")),
            debug=os.getenv("DEBUG", str(yaml_config.get("debug", False))).lower() == "true",
            kubernetes=KubernetesSettings(**section("kubernetes", KubernetesSettings)),
            monitor=MonitorSettings(**section("monitor", MonitorSettings)),
            autoscaler=AutoscalerSettings(**section("autoscaler", AutoscalerSettings)),
            api=ApiSettings(**section("api", ApiSettings)),
            metrics=MetricsSettings(**section("metrics", MetricsSettings)),
            logging=LoggingSettings(**section("logging", LoggingSettings)),
        )
