"""
Tests for environment and YAML configuration
"""

import pytest

from config import Settings, env_int

ENV_VARS = (
    "SCHEDULE_AT", "DISPATCH_URL", "DISPATCH_TIMEOUT", "DISPATCH_WORKERS",
    "DISPATCH_MAX_PENDING", "METRICS_PORT", "LOG_LEVEL", "LOG_JSON", "DOCKER_BINARY",
    "STATS_TIMEOUT",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


class TestScheduleAt:
    """Test the polling interval setting"""

    def test_default(self):
        assert Settings().scheduler.schedule_at == 15

    def test_from_environment(self, monkeypatch):
        monkeypatch.setenv("SCHEDULE_AT", "30")

        assert Settings().scheduler.schedule_at == 30

    @pytest.mark.parametrize("value", ["abc", "1.5", "-3"])
    def test_invalid_value_falls_back_to_default(self, monkeypatch, caplog, value):
        """Test that an invalid interval is logged and ignored"""
        monkeypatch.setenv("SCHEDULE_AT", value)

        assert Settings().scheduler.schedule_at == 15
        assert "SCHEDULE_AT" in caplog.text


class TestEnvInt:
    def test_blank_is_default(self, monkeypatch):
        monkeypatch.setenv("DISPATCH_WORKERS", "  ")

        assert env_int("DISPATCH_WORKERS", 4) == 4

    def test_zero_is_allowed(self, monkeypatch):
        monkeypatch.setenv("METRICS_PORT", "0")

        assert env_int("METRICS_PORT", 9091) == 0

    def test_below_minimum_is_default(self, monkeypatch, caplog):
        monkeypatch.setenv("DISPATCH_WORKERS", "0")

        assert env_int("DISPATCH_WORKERS", 4, minimum=1) == 4
        assert "DISPATCH_WORKERS" in caplog.text


class TestDispatchSettings:
    """Test the dispatch pool and timeout settings"""

    @pytest.mark.parametrize("name, default, attr", [
        ("DISPATCH_WORKERS", 4, "workers"),
        ("DISPATCH_MAX_PENDING", 100, "max_pending"),
    ])
    def test_zero_falls_back_to_default(self, monkeypatch, caplog, name, default, attr):
        """Test that a zero pool size is logged and ignored instead of failing validation"""
        monkeypatch.setenv(name, "0")

        settings = Settings()

        assert getattr(settings.dispatch, attr) == default
        assert name in caplog.text

    def test_timeout_unset_by_default(self):
        assert Settings().dispatch.timeout is None

    def test_timeout_from_environment(self, monkeypatch):
        monkeypatch.setenv("DISPATCH_TIMEOUT", "10")

        assert Settings().dispatch.timeout == 10

    def test_invalid_timeout_stays_unset(self, monkeypatch, caplog):
        monkeypatch.setenv("DISPATCH_TIMEOUT", "0")

        assert Settings().dispatch.timeout is None
        assert "DISPATCH_TIMEOUT" in caplog.text


class TestSettings:
    """Test defaults and YAML overlay"""

    def test_defaults(self):
        settings = Settings()

        assert settings.dispatch.url == "http://0.0.0.0:2441/api/stats"
        assert settings.docker.binary == "/usr/bin/docker"
        assert settings.docker.api_version == "1.44"
        assert settings.dispatch.workers == 4
        assert settings.dispatch.max_pending == 100
        assert settings.metrics.port == 9091
        assert settings.logging.json_output is True

    def test_config_dict(self):
        config = Settings().get_config_dict()

        assert config["schedule_at"] == 15
        assert config["dispatch"]["url"] == "http://0.0.0.0:2441/api/stats"

    def test_yaml_values(self, tmp_path):
        config_file = tmp_path / "config.yaml"
        config_file.write_text(
            "scheduler:\n"
            "  schedule_at: 5\n"
            "dispatch:\n"
            "  url: http://decider:8000/api/stats\n"
            "  workers: 2\n"
        )

        settings = Settings.load_from_yaml_with_env_override(str(config_file))

        assert settings.scheduler.schedule_at == 5
        assert settings.dispatch.url == "http://decider:8000/api/stats"
        assert settings.dispatch.workers == 2
        assert settings.dispatch.max_pending == 100

    def test_environment_overrides_yaml(self, tmp_path, monkeypatch):
        config_file = tmp_path / "config.yaml"
        config_file.write_text("scheduler:\n  schedule_at: 5\n")
        monkeypatch.setenv("SCHEDULE_AT", "42")

        settings = Settings.load_from_yaml_with_env_override(str(config_file))

        assert settings.scheduler.schedule_at == 42

    def test_invalid_environment_keeps_yaml(self, tmp_path, monkeypatch, caplog):
        """Test that an unparseable env value does not override a valid YAML value"""
        config_file = tmp_path / "config.yaml"
        config_file.write_text(
            "scheduler:\n"
            "  schedule_at: 5\n"
            "dispatch:\n"
            "  workers: 2\n"
        )
        monkeypatch.setenv("SCHEDULE_AT", "abc")
        monkeypatch.setenv("DISPATCH_WORKERS", "0")

        settings = Settings.load_from_yaml_with_env_override(str(config_file))

        assert settings.scheduler.schedule_at == 5
        assert settings.dispatch.workers == 2
        assert "SCHEDULE_AT" in caplog.text

    def test_yaml_placeholders_expanded(self, tmp_path, monkeypatch):
        config_file = tmp_path / "config.yaml"
        config_file.write_text("dispatch:\n  url: ${DECIDER_URL}\n")
        monkeypatch.setenv("DECIDER_URL", "http://decider:9000/api/stats")

        settings = Settings.load_from_yaml_with_env_override(str(config_file))

        assert settings.dispatch.url == "http://decider:9000/api/stats"

    def test_missing_yaml_file(self, tmp_path):
        settings = Settings.load_from_yaml_with_env_override(str(tmp_path / "missing.yaml"))

        assert settings.scheduler.schedule_at == 15
