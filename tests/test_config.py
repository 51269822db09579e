# ABOUTME: Tests for ServerConfiguration loading from pyproject.toml and the environment

from pathlib import Path

import pytest
from pydantic import ValidationError

from zmachine_api.config import ServerConfiguration


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / "pyproject.toml"
    path.write_text(
        """
[tool.zmachine_api]
port = 8080
interpreter_backend = "frotz"
frotz_command = "/opt/frotz/dfrotz"
frotz_args = ["-p"]
max_sessions = 5
"""
    )
    return path


class TestDefaults:
    def test_defaults(self):
        config = ServerConfiguration()
        assert config.host == "0.0.0.0"
        assert config.port == 3000
        assert config.default_game == "games/zork1.zip"
        assert config.interpreter_backend == "jericho"
        assert config.frotz_args == ["-p", "-m", "-x"]
        assert config.startup_markers == [">", "ZORK"]
        assert config.max_sessions == 100
        assert config.session_idle_timeout == 1800.0

    def test_games_path_is_absolute(self):
        config = ServerConfiguration(games_dir="games")
        assert config.games_path.is_absolute()
        assert config.games_path == Path("games").resolve()


class TestToml:
    def test_reads_tool_section(self, config_file):
        config = ServerConfiguration.from_toml(config_file)
        assert config.port == 8080
        assert config.interpreter_backend == "frotz"
        assert config.frotz_command == "/opt/frotz/dfrotz"
        assert config.frotz_args == ["-p"]
        assert config.max_sessions == 5
        # Untouched fields keep their defaults
        assert config.command_timeout == 5.0

    def test_missing_file_uses_defaults(self, tmp_path):
        config = ServerConfiguration.from_toml(tmp_path / "absent.toml")
        assert config.port == 3000

    def test_unknown_key_is_rejected(self, tmp_path):
        path = tmp_path / "pyproject.toml"
        path.write_text("[tool.zmachine_api]\nmax_sesions = 3\n")
        with pytest.raises(ValidationError):
            ServerConfiguration.from_toml(path)


class TestEnvironment:
    def test_plain_port_and_default_game(self, monkeypatch):
        monkeypatch.setenv("PORT", "4000")
        monkeypatch.setenv("DEFAULT_GAME", "/srv/games/zork2.z5")

        config = ServerConfiguration()
        assert config.port == 4000
        assert config.default_game == "/srv/games/zork2.z5"

    def test_prefixed_variables(self, monkeypatch):
        monkeypatch.setenv("ZMACHINE_INTERPRETER_BACKEND", "scripted")
        monkeypatch.setenv("ZMACHINE_MAX_SESSIONS", "7")

        config = ServerConfiguration()
        assert config.interpreter_backend == "scripted"
        assert config.max_sessions == 7

    def test_environment_overrides_toml(self, monkeypatch, config_file):
        monkeypatch.setenv("ZMACHINE_PORT", "5000")
        monkeypatch.setenv("ZMACHINE_INTERPRETER_BACKEND", "scripted")

        config = ServerConfiguration.from_toml(config_file)
        assert config.port == 5000
        assert config.interpreter_backend == "scripted"
        assert config.max_sessions == 5


class TestValidation:
    def test_unknown_backend(self):
        with pytest.raises(ValidationError):
            ServerConfiguration(interpreter_backend="glulx")

    def test_idle_timeout_must_fit_inside_command_timeout(self):
        with pytest.raises(ValidationError, match="idle_timeout"):
            ServerConfiguration(idle_timeout=5.0, command_timeout=5.0)

    def test_port_range(self):
        with pytest.raises(ValidationError):
            ServerConfiguration(port=70000)
