# ABOUTME: Global pytest configuration for all tests
# ABOUTME: Isolates tests from deployment env vars and provides story files and configs

import os

import pytest

from tests.fixtures import STORY_BYTES
from zmachine_api.config import ServerConfiguration


@pytest.fixture(autouse=True)
def isolate_environment(monkeypatch):
    """
    Strip server settings from the environment for every test.

    Environment variables override pyproject.toml, so a PORT or
    ZMACHINE_INTERPRETER_BACKEND left over in the shell would otherwise leak
    into every ServerConfiguration the tests build.
    """
    for name in list(os.environ):
        if name.upper().startswith("ZMACHINE_"):
            monkeypatch.delenv(name, raising=False)
    monkeypatch.delenv("PORT", raising=False)
    monkeypatch.delenv("DEFAULT_GAME", raising=False)


@pytest.fixture
def games_dir(tmp_path):
    directory = tmp_path / "games"
    directory.mkdir()
    return directory


@pytest.fixture
def story_file(games_dir):
    """A readable story file inside the games directory."""
    path = games_dir / "zork1.z5"
    path.write_bytes(STORY_BYTES)
    return path


@pytest.fixture
def scripted_config(games_dir, story_file):
    """Configuration for the scripted backend with story_file as the default game."""
    return ServerConfiguration(
        interpreter_backend="scripted",
        games_dir=str(games_dir),
        default_game=str(story_file),
    )
