"""Tests for the configuration manager."""

import pytest

from ..manager import ConfigurationModule, ConfigValidationError
from ..models.schemas import ConfigSource


class TestConfigurationModule:
    @pytest.fixture()
    def config_file(self, tmp_path):
        path = tmp_path / "snooker.yaml"
        path.write_text(
            "table:\n  ball_radius: 12.0\nrules:\n  max_reds: 10\napi:\n  port: 9100\n"
        )
        return path

    def test_defaults_only(self):
        config = ConfigurationModule(load_environment=False)

        assert config.get("table.ball_radius") == 10.0
        assert config.get("rules.foul_minimum") == 4
        assert config.get("missing.key", "fallback") == "fallback"
        assert config.get_source("table.ball_radius") is ConfigSource.DEFAULT

    def test_precedence(self, config_file):
        config = ConfigurationModule(
            config_file=config_file,
            environ={"SNOOKER_API__PORT": "9200", "SNOOKER_RULES__MAX_REDS": "6"},
        )
        config.set("rules.max_reds", 8)

        assert config.settings.table.ball_radius == 12.0
        assert config.settings.api.port == 9200
        assert config.settings.rules.max_reds == 8
        assert config.get_source("table.ball_radius") is ConfigSource.FILE
        assert config.get_source("api.port") is ConfigSource.ENVIRONMENT
        assert config.get_source("rules.max_reds") is ConfigSource.RUNTIME

        config.reset_to_defaults()
        assert config.settings.rules.max_reds == 6

    def test_invalid_override_keeps_previous(self):
        config = ConfigurationModule(load_environment=False)

        with pytest.raises(ConfigValidationError):
            config.set("rules.max_reds", 20)
        assert config.get("rules.max_reds") == 15

    def test_invalid_file(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("rules:\n  players: 3\n")

        with pytest.raises(ConfigValidationError):
            ConfigurationModule(config_file=path, load_environment=False)

    def test_update_merges_nested(self):
        config = ConfigurationModule(load_environment=False)
        config.update({"table": {"width": 1200.0}})
        config.update({"table": {"height": 600.0}})

        assert config.settings.table.width == 1200.0
        assert config.settings.table.height == 600.0

    def test_get_all(self):
        flat = ConfigurationModule(load_environment=False).get_all()
        assert flat["api.host"] == "127.0.0.1"
        assert flat["logging.level"] == "INFO"
