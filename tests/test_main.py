#!/usr/bin/env python3
"""
Tests for service wiring and the command line entry point
"""

import logging
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from healthscaler.config.settings import Settings
from healthscaler.core.errors import ConfigurationError
from healthscaler.core.metrics import InMemoryMetricsSink, NullMetricsSink
from healthscaler.main import HealthScalerService, load_settings, main

from conftest import FakeStatusSource, make_node, make_pods


@pytest.fixture
def settings():
    settings = Settings()
    settings.api.enabled = False
    settings.metrics.enabled = False
    settings.monitor.interval = 0.01
    settings.autoscaler.interval = 0.01
    return settings


class TestHealthScalerService:

    def test_run_once(self, settings, healthy_source):
        service = HealthScalerService(settings, source=healthy_source, sink=InMemoryMetricsSink())

        assert service.run_once() is True
        assert service.monitor.last_snapshot.ready_node_count == 3
        assert service.simulator.engine.tick_count == 1

    def test_run_once_reports_failed_health_check(self, settings):
        source = FakeStatusSource([make_node("a")], make_pods(Running=1))
        source.fail_nodes = True
        service = HealthScalerService(settings, source=source)

        assert service.run_once() is False
        assert service.simulator.engine.tick_count == 1

    def test_metrics_disabled_uses_null_sink(self, settings, healthy_source):
        service = HealthScalerService(settings, source=healthy_source)
        assert isinstance(service.sink, NullMetricsSink)

    @pytest.mark.integration
    def test_loops_run_and_stop(self, settings, healthy_source):
        sink = InMemoryMetricsSink()
        service = HealthScalerService(settings, source=healthy_source, sink=sink)

        service.start()
        for _ in range(200):
            if service.monitor.cycles >= 2 and service.simulator.engine.tick_count >= 2:
                break
            service.stop_event.wait(0.01)
        service.stop()
        service.join(timeout=2)

        assert service.monitor.cycles >= 2
        assert service.simulator.engine.tick_count >= 2
        assert not any(loop.running for loop in service.loops)


class TestMain:

    @patch("healthscaler.main.setup_logging")
    @patch("healthscaler.main.KubernetesStatusSource.from_settings")
    def test_once_exit_codes(self, mock_from_settings, mock_logging, healthy_source):
        mock_from_settings.return_value = healthy_source
        assert main(["--once"]) == 0

        healthy_source.fail_pods = True
        assert main(["--once"]) == 1

    @patch("healthscaler.main.setup_logging")
    @patch("healthscaler.main.KubernetesStatusSource.from_settings",
           side_effect=ConfigurationError("Kubeconfig file not found: /nowhere"))
    def test_configuration_error_exits_1(self, mock_from_settings, mock_logging):
        assert main(["--once"]) == 1

    @patch("healthscaler.main.setup_logging")
    @patch("healthscaler.main.KubernetesStatusSource.from_settings")
    def test_invalid_environment_settings_exit_1(self, mock_from_settings, mock_logging,
                                                 monkeypatch, caplog):
        monkeypatch.delenv("CONFIG_PATH", raising=False)
        monkeypatch.setenv("AUTOSCALER_MIN_REPLICAS", "9")
        monkeypatch.setenv("AUTOSCALER_MAX_REPLICAS", "3")

        with caplog.at_level(logging.ERROR):
            assert main(["--once"]) == 1

        assert mock_logging.called
        mock_from_settings.assert_not_called()
        assert "Failed to load configuration: Invalid settings" in caplog.text

    @patch("healthscaler.main.setup_logging")
    @patch("healthscaler.main.KubernetesStatusSource.from_settings")
    def test_malformed_yaml_exits_1(self, mock_from_settings, mock_logging, tmp_path, caplog):
        config = tmp_path / "config.yaml"
        config.write_text("autoscaler: [unclosed\n")

        with caplog.at_level(logging.ERROR):
            assert main(["--once", "--config", str(config)]) == 1

        mock_from_settings.assert_not_called()
        assert "Invalid YAML" in caplog.text


class TestLoadSettings:

    def test_missing_file_falls_back_to_environment(self, tmp_path):
        assert isinstance(load_settings(str(tmp_path / "nope.yaml")), Settings)

    def test_out_of_range_yaml_is_configuration_error(self, tmp_path):
        config = tmp_path / "config.yaml"
        config.write_text("autoscaler:\n  min_replicas: 9\n  max_replicas: 3\n")

        with pytest.raises(ConfigurationError, match="Invalid settings") as exc_info:
            load_settings(str(config))

        assert isinstance(exc_info.value.__cause__, ValidationError)
