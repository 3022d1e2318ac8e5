#!/usr/bin/env python3
"""
Tests for configuration loading and validation
"""

import pytest
from pydantic import ValidationError

from healthscaler.config.settings import AutoscalerSettings, KubernetesSettings, Settings


class TestAutoscalerSettings:

    def test_reference_defaults(self, monkeypatch):
        for key in ("AUTOSCALER_MIN_REPLICAS", "AUTOSCALER_MAX_REPLICAS", "AUTOSCALER_INTERVAL"):
            monkeypatch.delenv(key, raising=False)

        settings = AutoscalerSettings()

        assert (settings.min_replicas, settings.max_replicas, settings.initial_replicas) == (2, 10, 3)
        assert (settings.scale_down_threshold, settings.scale_up_threshold) == (35.0, 75.0)
        assert settings.interval == 20

    def test_environment_override(self, monkeypatch):
        monkeypatch.setenv("AUTOSCALER_MAX_REPLICAS", "20")
        monkeypatch.setenv("AUTOSCALER_INTERVAL", "5")

        settings = AutoscalerSettings()

        assert settings.max_replicas == 20
        assert settings.interval == 5

    @pytest.mark.parametrize("kwargs", [
        {"min_replicas": 5, "max_replicas": 4, "initial_replicas": 4},
        {"initial_replicas": 11},
        {"initial_replicas": 1},
        {"scale_up_threshold": 30, "scale_down_threshold": 40},
        {"load_min": 90, "load_max": 50},
        {"scale_up_threshold": 120},
        {"interval": 0},
    ])
    def test_invalid_values_rejected(self, kwargs):
        with pytest.raises(ValidationError):
            AutoscalerSettings(**kwargs)


class TestKubernetesSettings:

    def test_kubeconfig_from_environment(self, monkeypatch):
        monkeypatch.delenv("KUBERNETES_KUBECONFIG_PATH", raising=False)
        monkeypatch.setenv("KUBECONFIG", "/tmp/kube.yaml")

        assert KubernetesSettings().kubeconfig_path == "/tmp/kube.yaml"

    def test_kubeconfig_home_default(self, monkeypatch):
        monkeypatch.delenv("KUBERNETES_KUBECONFIG_PATH", raising=False)
        monkeypatch.delenv("KUBECONFIG", raising=False)

        assert KubernetesSettings().kubeconfig_path.endswith(".kube/config")


class TestYamlLoading:

    def test_yaml_values_and_substitution(self, tmp_path, monkeypatch):
        monkeypatch.setenv("TEST_KUBECONFIG", "/etc/kube/config")
        monkeypatch.delenv("AUTOSCALER_MAX_REPLICAS", raising=False)
        config = tmp_path / "config.yaml"
        config.write_text(
            "environment: staging\n"
            "kubernetes:\n"
            "  kubeconfig_path: ${TEST_KUBECONFIG}\n"
            "autoscaler:\n"
            "  max_replicas: 6\n"
            "  interval: 15\n"
            "monitor:\n"
            "  failure_threshold: 2\n"
        )

        settings = Settings.load_from_yaml_with_env_override(str(config))

        assert settings.environment == "staging"
        assert settings.kubernetes.kubeconfig_path == "/etc/kube/config"
        assert settings.autoscaler.max_replicas == 6
        assert settings.autoscaler.interval == 15
        assert settings.monitor.failure_threshold == 2

    def test_environment_beats_yaml(self, tmp_path, monkeypatch):
        monkeypatch.setenv("AUTOSCALER_MAX_REPLICAS", "8")
        config = tmp_path / "config.yaml"
        config.write_text("autoscaler:\n  max_replicas: 6\n")

        settings = Settings.load_from_yaml_with_env_override(str(config))

        assert settings.autoscaler.max_replicas == 8

    def test_missing_file_gives_defaults(self, tmp_path):
        settings = Settings.load_from_yaml_with_env_override(str(tmp_path / "nope.yaml"))
        assert settings.api.port == 8080

    def test_invalid_yaml_values_rejected(self, tmp_path):
        config = tmp_path / "config.yaml"
        config.write_text("autoscaler:\n  min_replicas: 9\n  max_replicas: 3\n  initial_replicas: 3\n")

        with pytest.raises(ValidationError):
            Settings.load_from_yaml_with_env_override(str(config))

    def test_safe_config_omits_connection_details(self):
        safe = Settings().get_safe_config()

        assert "kubernetes" not in safe
        assert safe["autoscaler"]["max_replicas"] >= safe["autoscaler"]["min_replicas"]
