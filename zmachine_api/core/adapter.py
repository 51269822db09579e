# ABOUTME: The interpreter adapter contract every backend implements
# ABOUTME: Plus story-file validation shared by the backends' start() methods

import os
from pathlib import Path
from typing import Protocol, Union, runtime_checkable

from .errors import GameLoadError


@runtime_checkable
class InterpreterAdapter(Protocol):
    """Uniform start/submit/dispose capability set.

    Backends differ entirely in how they suspend and resume execution
    (library continuation, OS pipes, or none at all). Callers only ever see
    this interface.
    """

    kind: str

    def start(self, game_path: Union[str, Path]) -> str:
        """Load the story and run until it first waits for input."""
        ...

    def submit(self, command: str) -> str:
        """Deliver one line of input and return only the new output."""
        ...

    def dispose(self) -> None:
        """Release underlying resources. Safe to call more than once."""
        ...

    @property
    def last_transcript(self) -> str:
        """Output of the most recent start()/submit()."""
        ...


def check_story_file(game_path: Union[str, Path]) -> Path:
    """Return the absolute story path, or raise GameLoadError if it can't be read."""
    path = Path(game_path).expanduser().resolve()
    if not path.exists():
        raise GameLoadError(f"Game file not found: {path}")
    if not path.is_file():
        raise GameLoadError(f"Game path is not a file: {path}")
    if not os.access(path, os.R_OK):
        raise GameLoadError(f"Game file is not readable: {path}")
    return path


def read_story_file(game_path: Union[str, Path]) -> bytes:
    path = check_story_file(game_path)
    try:
        return path.read_bytes()
    except OSError as e:
        raise GameLoadError(f"Failed to read game file {path}: {e}") from e
