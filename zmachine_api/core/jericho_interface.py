# ABOUTME: In-process interpreter adapter backed by the Jericho Z-machine library
# ABOUTME: Models "waiting for input" as an explicit continuation token instead of an exception

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

from jericho import FrotzEnv
from jericho.util import clean

from .adapter import check_story_file
from .errors import GameLoadError, InterpreterStateError
from .transcript import TranscriptBuffer

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class InputRequest:
    """Continuation token for a suspended interpreter.

    Issued every time the story stops to read a line. Resuming hands the token
    back together with the input; a halted token means the story has ended and
    there is nothing left to resume.
    """

    turn: int
    halted: bool = False


class JerichoInterpreter:
    """
    Runs a story file inside this process using Jericho's FrotzEnv.

    Jericho already executes until the story needs a new line of input, so each
    start()/submit() is a single reset()/step() call. Faults raised while
    stepping are logged and swallowed: the turn reports whatever output it
    accumulated and the session stays usable.
    """

    kind = "jericho"

    def __init__(self, seed: Optional[int] = None):
        self.seed = seed
        self.game_path: Optional[Path] = None
        self.env: Optional[FrotzEnv] = None
        self._pending: Optional[InputRequest] = None
        self._transcript = TranscriptBuffer()
        self._disposed = False

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.dispose()
        return False

    @property
    def last_transcript(self) -> str:
        return self._transcript.last

    @property
    def pending_input(self) -> Optional[InputRequest]:
        return self._pending

    def start(self, game_path: Union[str, Path]) -> str:
        """
        Load the story file and run it up to its first input request.

        Raises:
            GameLoadError: If the file is missing, unreadable or not a story Jericho accepts
            InterpreterStateError: If the adapter was already started or disposed
        """
        if self._disposed:
            raise InterpreterStateError("Interpreter has been disposed")
        if self.env is not None:
            raise InterpreterStateError("Interpreter already started")

        path = check_story_file(game_path)
        try:
            if self.seed is None:
                env = FrotzEnv(str(path))
            else:
                env = FrotzEnv(str(path), seed=self.seed)
            intro, _ = env.reset()
        except Exception as e:
            logger.error(f"Failed to start Jericho environment for {path}: {e}")
            raise GameLoadError(f"Failed to load game {path}: {e}") from e

        self.env = env
        self.game_path = path
        self._transcript.reset()
        self._transcript.write(clean(intro))
        self._pending = InputRequest(turn=0)

        logger.info(
            f"Jericho environment started - intro length: {len(self._transcript)}",
            extra={"event_type": "interpreter_started", "backend": self.kind},
        )
        return self._transcript.commit()

    def submit(self, command: str) -> str:
        if self._disposed:
            raise InterpreterStateError("Interpreter has been disposed")
        if self.env is None or self._pending is None:
            raise InterpreterStateError("Interpreter not started. Call start() first.")

        self._transcript.reset()
        request = self._pending

        if request.halted:
            logger.info(
                f"Ignoring input after story ended: {command!r}",
                extra={"event_type": "input_after_halt", "backend": self.kind},
            )
            return self._transcript.commit()

        try:
            self._pending = self._resume(request, command)
        except Exception as e:
            logger.error(
                f"Interpreter fault on {command!r}: {e}",
                exc_info=True,
                extra={"event_type": "interpreter_fault", "backend": self.kind},
            )

        return self._transcript.commit()

    def _resume(self, request: InputRequest, line: str) -> InputRequest:
        """Feed ``line`` to the suspended story and return the next continuation."""
        observation, _reward, done, _info = self.env.step(line)
        self._transcript.write(clean(observation))
        return InputRequest(turn=request.turn + 1, halted=bool(done))

    def dispose(self) -> None:
        """Close the Frotz environment. Safe to call repeatedly."""
        self._disposed = True
        self._pending = None
        if self.env is not None:
            try:
                self.env.close()
            except Exception as e:
                logger.warning(f"Error closing Jericho environment: {e}")
            finally:
                self.env = None
                logger.debug("Jericho environment closed")

    def __repr__(self) -> str:
        status = "running" if self.env is not None else "not started"
        return f"JerichoInterpreter(game_file='{self.game_path}', status='{status}')"
