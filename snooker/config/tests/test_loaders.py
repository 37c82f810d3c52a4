"""Tests for the file and environment configuration loaders."""

import json

import pytest

from ..loader.env import EnvironmentLoader
from ..loader.file import FileLoader, FileLoadError, FormatError


class TestFileLoader:
    @pytest.fixture()
    def loader(self):
        return FileLoader()

    def test_load_yaml(self, loader, tmp_path):
        path = tmp_path / "snooker.yaml"
        path.write_text("table:\n  ball_radius: 12.5\nrules:\n  max_reds: 6\n")

        config = loader.load_file(path)

        assert config == {"table": {"ball_radius": 12.5}, "rules": {"max_reds": 6}}

    def test_load_json(self, loader, tmp_path):
        path = tmp_path / "snooker.json"
        path.write_text(json.dumps({"api": {"port": 9001}}))

        assert loader.load_file(path) == {"api": {"port": 9001}}

    def test_missing_file_is_empty(self, loader, tmp_path):
        assert loader.load_file(tmp_path / "missing.yaml") == {}

    def test_empty_file(self, loader, tmp_path):
        path = tmp_path / "empty.yml"
        path.write_text("")
        assert loader.load_file(path) == {}

    def test_invalid_yaml(self, loader, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("table: [unclosed\n")
        with pytest.raises(FileLoadError):
            loader.load_file(path)

    def test_non_mapping(self, loader, tmp_path):
        path = tmp_path / "list.yaml"
        path.write_text("- 1\n- 2\n")
        with pytest.raises(FileLoadError, match="mapping"):
            loader.load_file(path)

    def test_unsupported_format(self, loader, tmp_path):
        path = tmp_path / "snooker.toml"
        path.write_text("[table]\n")
        with pytest.raises(FormatError):
            loader.load_file(path)

    def test_directory_is_rejected(self, loader, tmp_path):
        with pytest.raises(FileLoadError):
            loader.load_file(tmp_path)


class TestEnvironmentLoader:
    @pytest.fixture()
    def loader(self):
        return EnvironmentLoader()

    def test_nested_keys_and_types(self, loader):
        environ = {
            "SNOOKER_TABLE__BALL_RADIUS": "12.5",
            "SNOOKER_API__PORT": "9000",
            "SNOOKER_API__CORS_ORIGINS": '["http://a", "http://b"]',
            "SNOOKER_LOGGING__FILE": "none",
            "SNOOKER_LOGGING__LEVEL": "DEBUG",
            "HOME": "/root",
        }

        config = loader.load_environment(environ)

        assert config == {
            "table": {"ball_radius": 12.5},
            "api": {"port": 9000, "cors_origins": ["http://a", "http://b"]},
            "logging": {"file": None, "level": "DEBUG"},
        }

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("true", True),
            ("off", False),
            ("-3", -3),
            ("0.25", 0.25),
            ("a, b", ["a", "b"]),
            ("plain", "plain"),
        ],
    )
    def test_value_conversion(self, loader, raw, expected):
        assert loader.load_environment({"SNOOKER_X": raw}) == {"x": expected}

    def test_reads_os_environ(self, loader, monkeypatch):
        monkeypatch.setenv("SNOOKER_RULES__MAX_REDS", "10")
        assert loader.load_environment()["rules"] == {"max_reds": 10}

    def test_config_key_to_env_key(self, loader):
        assert loader.config_key_to_env_key("table.ball_radius") == (
            "SNOOKER_TABLE__BALL_RADIUS"
        )
