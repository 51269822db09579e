"""
ABOUTME: Subprocess interpreter adapter driving an external dfrotz process over pipes
ABOUTME: One reader thread per session; turns end at the prompt, on idle, or at the watchdog
"""

import codecs
import logging
import os
import queue
import subprocess
import threading
import time
from pathlib import Path
from typing import Optional, Sequence, Union

from .adapter import check_story_file
from .errors import (
    GameLoadError,
    InterpreterRuntimeError,
    InterpreterStateError,
    InterpreterTimeoutError,
)
from .transcript import TranscriptBuffer, ends_with_prompt, strip_echo

logger = logging.getLogger(__name__)

_EOF = None


class FrotzProcessInterpreter:
    """A Python interface for playing a story through a dumb-terminal frotz process."""

    kind = "frotz"

    def __init__(
        self,
        command: str = "dfrotz",
        args: Sequence[str] = ("-p", "-m", "-x"),
        startup_timeout: float = 10.0,
        command_timeout: float = 5.0,
        idle_timeout: float = 0.1,
        startup_markers: Sequence[str] = (">", "ZORK"),
        prompt: str = ">",
        working_directory: Optional[str] = None,
    ):
        """Initialize the interface.

        Args:
            command: Interpreter executable to spawn
            args: Arguments placed before the story path
            startup_timeout: Longest wait for the story banner (in seconds)
            command_timeout: Watchdog bounding every submit() (in seconds)
            idle_timeout: Quiet period that ends a turn once output has started
            startup_markers: Text that shows the story has finished booting
            prompt: The interpreter's input prompt
            working_directory: Optional cwd for the process (for save files)
        """
        self.command = command
        self.args = list(args)
        self.startup_timeout = startup_timeout
        self.command_timeout = command_timeout
        self.idle_timeout = idle_timeout
        self.startup_markers = tuple(startup_markers)
        self.prompt = prompt
        self.working_directory = working_directory
        self.game_path: Optional[Path] = None
        self.process: Optional[subprocess.Popen] = None
        self.response_queue: "queue.Queue[Optional[str]]" = queue.Queue()
        self.reader_thread: Optional[threading.Thread] = None
        self.stderr_thread: Optional[threading.Thread] = None
        self.running = False
        self.command_lock = threading.Lock()
        self._transcript = TranscriptBuffer()
        self._disposed = False

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.dispose()

    @property
    def last_transcript(self) -> str:
        return self._transcript.last

    def start(self, game_path: Union[str, Path]) -> str:
        """Spawn the interpreter and return its output up to the first prompt."""
        if self._disposed:
            raise InterpreterStateError("Interpreter has been disposed")
        if self.process is not None:
            raise InterpreterStateError("Interpreter process is already running")

        path = check_story_file(game_path)
        argv = [self.command, *self.args, str(path)]
        try:
            self.process = subprocess.Popen(
                argv,
                stdin=subprocess.PIPE,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                bufsize=0,
                cwd=self.working_directory,
            )
        except OSError as e:
            raise GameLoadError(f"Failed to start {self.command}: {e}") from e

        self.game_path = path
        self.running = True
        self.reader_thread = threading.Thread(
            target=self._reader_thread, args=(self.process,), daemon=True
        )
        self.reader_thread.start()
        self.stderr_thread = threading.Thread(
            target=self._stderr_thread, args=(self.process,), daemon=True
        )
        self.stderr_thread.start()

        intro_text = self._read_turn(self.startup_timeout, self.startup_markers)
        if not intro_text and not self.is_running():
            self.dispose()
            raise GameLoadError(
                f"{self.command} exited before producing output for {path}"
            )

        if not any(marker in intro_text for marker in self.startup_markers):
            logger.warning(
                f"No startup marker seen within {self.startup_timeout}s; using partial output",
                extra={"event_type": "startup_timeout", "backend": self.kind},
            )

        self._transcript.reset()
        self._transcript.write(intro_text)
        logger.info(
            f"{self.command} started (pid {self.process.pid}) for {path}",
            extra={"event_type": "interpreter_started", "backend": self.kind},
        )
        return self._transcript.commit()

    def _reader_thread(self, process: subprocess.Popen):
        """Background thread moving raw stdout chunks onto the response queue."""
        decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        fd = process.stdout.fileno()
        while True:
            try:
                data = os.read(fd, 4096)
            except OSError:
                break
            if not data:
                break
            text = decoder.decode(data).replace("\r\n", "\n")
            if text:
                self.response_queue.put(text)
        self.running = False
        self.response_queue.put(_EOF)

    def _stderr_thread(self, process: subprocess.Popen):
        stderr = process.stderr
        while True:
            try:
                line = stderr.readline()
            except (OSError, ValueError):
                break
            if not line:
                break
            logger.warning(
                f"{self.command} stderr: {line.decode('utf-8', errors='replace').rstrip()}",
                extra={"event_type": "interpreter_stderr", "backend": self.kind},
            )

    def _read_turn(self, wait_timeout: float, markers: Sequence[str] = ()) -> str:
        """Collect one turn of output.

        Waits up to ``wait_timeout`` in total. Reading stops early when the text
        ends at the input prompt, or when the stream goes quiet for
        ``idle_timeout`` after output has started (and, if ``markers`` are
        given, after one of them has appeared).
        """
        deadline = time.monotonic() + wait_timeout
        output = ""
        while True:
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                break
            if output and ends_with_prompt(output, self.prompt):
                break

            idle_allowed = bool(output) and (
                not markers or any(marker in output for marker in markers)
            )
            timeout = min(self.idle_timeout, remaining) if idle_allowed else remaining
            try:
                chunk = self.response_queue.get(timeout=timeout)
            except queue.Empty:
                if idle_allowed:
                    break
                continue

            if chunk is _EOF:
                # Leave the marker for later readers
                self.response_queue.put(_EOF)
                break
            output += chunk
        return output

    def clear_response_queue(self) -> str:
        """Discard output that arrived after the previous turn was returned."""
        stale = ""
        while True:
            try:
                chunk = self.response_queue.get_nowait()
            except queue.Empty:
                break
            if chunk is _EOF:
                self.response_queue.put(_EOF)
                break
            stale += chunk
        if stale:
            logger.debug(
                f"Discarded {len(stale)} characters of late output",
                extra={"event_type": "late_output_discarded", "backend": self.kind},
            )
        return stale

    def is_running(self) -> bool:
        """Check if the interpreter process is still running."""
        if self.process is None:
            return False
        return self.process.poll() is None and self.running

    def submit(self, command: str) -> str:
        """Send one line to the interpreter and return the response, minus the echo."""
        if self._disposed:
            raise InterpreterStateError("Interpreter has been disposed")
        if self.process is None:
            raise InterpreterStateError("Interpreter not started. Call start() first.")
        if not self.is_running():
            raise InterpreterRuntimeError("Interpreter process is not running")

        with self.command_lock:
            self.clear_response_queue()
            try:
                self.process.stdin.write((command + "\n").encode("utf-8"))
                self.process.stdin.flush()
            except OSError as e:
                raise InterpreterRuntimeError(
                    f"Failed to write to interpreter: {e}"
                ) from e

            response = self._read_turn(self.command_timeout)

        if not response:
            if not self.is_running():
                raise InterpreterRuntimeError("Interpreter process exited")
            raise InterpreterTimeoutError(
                f"No output from interpreter within {self.command_timeout}s"
            )

        self._transcript.reset()
        self._transcript.write(strip_echo(response, command))

        logger.debug(
            "Game command and response",
            extra={
                "event_type": "game_command_response_debug",
                "backend": self.kind,
                "command": command,
                "response_length": len(self._transcript),
            },
        )
        return self._transcript.commit()

    def dispose(self):
        """Terminate the interpreter process. Safe to call repeatedly."""
        self._disposed = True
        if self.process is None:
            return

        process = self.process
        self.process = None
        self.running = False
        try:
            process.stdin.close()
        except OSError as e:
            logger.debug(f"Error closing interpreter stdin: {e}")

        process.terminate()
        try:
            process.wait(timeout=5)
        except subprocess.TimeoutExpired:
            logger.warning(f"{self.command} did not exit after terminate; killing")
            process.kill()
            process.wait()

        for stream in (process.stdout, process.stderr):
            try:
                stream.close()
            except OSError as e:
                logger.debug(f"Error closing interpreter pipe: {e}")
        logger.debug(f"{self.command} process closed (exit code {process.returncode})")
