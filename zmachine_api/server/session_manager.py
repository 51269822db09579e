# ABOUTME: GameSession and SessionRegistry: live game sessions keyed by opaque ids
# ABOUTME: Handles interpreter selection, session lifecycle, idle eviction and the capacity bound

import logging
import threading
import time
import uuid
from collections import OrderedDict
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, Dict, List, Optional

from ..config import ServerConfiguration
from ..core.adapter import InterpreterAdapter
from ..core.errors import (
    InterpreterStateError,
    SessionBusyError,
    SessionNotFoundError,
)
from ..core.frotz_interface import FrotzProcessInterpreter
from ..core.scripted_interface import ScriptedInterpreter
from .catalog import resolve_game_path
from .models import SessionInfo

logger = logging.getLogger(__name__)

InterpreterFactory = Callable[[], InterpreterAdapter]


def _jericho_backend(config: ServerConfiguration) -> InterpreterAdapter:
    # Imported here so the other backends work without the compiled Frotz core
    from ..core.jericho_interface import JerichoInterpreter

    return JerichoInterpreter(seed=config.jericho_seed)


def _frotz_backend(config: ServerConfiguration) -> InterpreterAdapter:
    return FrotzProcessInterpreter(
        command=config.frotz_command,
        args=config.frotz_args,
        startup_timeout=config.startup_timeout,
        command_timeout=config.command_timeout,
        idle_timeout=config.idle_timeout,
        startup_markers=config.startup_markers,
        working_directory=config.frotz_working_directory,
    )


def _scripted_backend(config: ServerConfiguration) -> InterpreterAdapter:
    return ScriptedInterpreter()


BACKENDS: Dict[str, Callable[[ServerConfiguration], InterpreterAdapter]] = {
    "jericho": _jericho_backend,
    "frotz": _frotz_backend,
    "scripted": _scripted_backend,
}


class GameSession:
    """A live game bound to exactly one interpreter adapter."""

    def __init__(
        self,
        session_id: str,
        game_path: Path,
        interpreter: InterpreterAdapter,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.session_id = session_id
        self.game_path = game_path
        self.interpreter = interpreter
        self.created_at = datetime.now(timezone.utc)
        self.turn_number = 0
        self.active = False
        self._clock = clock
        self.last_used = clock()
        self._command_lock = threading.Lock()

    @property
    def backend(self) -> str:
        return self.interpreter.kind

    @property
    def busy(self) -> bool:
        return self._command_lock.locked()

    @property
    def last_output(self) -> str:
        """The transcript of the most recent turn (or the intro)."""
        return self.interpreter.last_transcript

    def start(self) -> str:
        """Start the interpreter and return the intro text."""
        intro_text = self.interpreter.start(self.game_path)
        self.active = True
        self.last_used = self._clock()
        return intro_text

    def execute_command(self, command: str) -> str:
        """Run one command and return its transcript.

        Commands on one session are never interleaved: a second caller gets
        SessionBusyError instead of waiting. A session closed by delete or
        eviction after it was looked up reports SessionNotFoundError.
        """
        if not self._command_lock.acquire(blocking=False):
            raise SessionBusyError(self.session_id)
        try:
            if not self.active:
                raise SessionNotFoundError(self.session_id)
            try:
                output = self.interpreter.submit(command)
            except InterpreterStateError as e:
                if not self.active:
                    raise SessionNotFoundError(self.session_id) from e
                raise
            self.turn_number += 1
            self.last_used = self._clock()
        finally:
            self._command_lock.release()

        logger.info(
            f"Command executed for session {self.session_id}",
            extra={
                "event_type": "command_executed",
                "session_id": self.session_id,
                "command": command,
                "turn": self.turn_number,
                "output_length": len(output),
            },
        )
        return output

    def idle_seconds(self, now: Optional[float] = None) -> float:
        return (self._clock() if now is None else now) - self.last_used

    def get_info(self) -> SessionInfo:
        return SessionInfo(
            session_id=self.session_id,
            game_path=str(self.game_path),
            created_at=self.created_at.isoformat(),
        )

    def close(self):
        """Close the session and release its interpreter."""
        self.active = False
        self.interpreter.dispose()


class SessionRegistry:
    """
    Maps session ids to live GameSessions and owns their lifecycle.

    Built once at application startup and drained with close_all() at shutdown.
    Nothing is persisted. Sessions idle for longer than
    ``session_idle_timeout`` are evicted, and when ``max_sessions`` is reached
    the least recently used session makes room for the new one.
    """

    def __init__(
        self,
        config: ServerConfiguration,
        interpreter_factory: Optional[InterpreterFactory] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.config = config
        self.backend = config.interpreter_backend
        if interpreter_factory is None:
            build = BACKENDS[config.interpreter_backend]

            def interpreter_factory() -> InterpreterAdapter:
                return build(config)

        self._interpreter_factory = interpreter_factory
        self._clock = clock
        self._sessions: "OrderedDict[str, GameSession]" = OrderedDict()
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, session_id: str) -> bool:
        return session_id in self._sessions

    def create_session(self, game_path: Optional[str] = None) -> GameSession:
        """
        Start a new game and register it under a fresh random id.

        Raises:
            GameLoadError: If the story can't be loaded; nothing is registered
        """
        self.evict_idle()

        resolved_path = resolve_game_path(game_path, self.config)
        session = GameSession(
            session_id=str(uuid.uuid4()),
            game_path=resolved_path,
            interpreter=self._interpreter_factory(),
            clock=self._clock,
        )
        try:
            session.start()
        except Exception:
            session.close()
            raise

        with self._lock:
            displaced = self._make_room()
            self._sessions[session.session_id] = session

        for old in displaced:
            self._close(old, reason="capacity")

        logger.info(
            f"Created session {session.session_id}",
            extra={
                "event_type": "session_created",
                "session_id": session.session_id,
                "backend": session.backend,
                "game_path": str(resolved_path),
            },
        )
        return session

    def _make_room(self) -> List[GameSession]:
        """Pop least recently used sessions until one more fits. Caller holds the lock."""
        displaced = []
        for session_id in list(self._sessions):
            if len(self._sessions) < self.config.max_sessions:
                break
            if not self._sessions[session_id].busy:
                displaced.append(self._sessions.pop(session_id))
        return displaced

    def get_session(self, session_id: str) -> Optional[GameSession]:
        with self._lock:
            return self._sessions.get(session_id)

    def send_command(self, session_id: str, command: str) -> str:
        """Deliver a command to a session's interpreter and return the new output."""
        with self._lock:
            session = self._sessions.get(session_id)
            if session is None:
                raise SessionNotFoundError(session_id)
            self._sessions.move_to_end(session_id)

        return session.execute_command(command)

    def delete_session(self, session_id: str) -> bool:
        """Dispose and forget a session. Returns whether it existed."""
        with self._lock:
            session = self._sessions.pop(session_id, None)

        if session is None:
            return False
        self._close(session, reason="deleted")
        return True

    def evict_idle(self, now: Optional[float] = None) -> int:
        """Close sessions idle longer than the configured timeout."""
        now = self._clock() if now is None else now
        limit = self.config.session_idle_timeout

        with self._lock:
            expired = [
                session
                for session in self._sessions.values()
                if not session.busy and session.idle_seconds(now) > limit
            ]
            for session in expired:
                del self._sessions[session.session_id]

        for session in expired:
            self._close(session, reason="idle")
        return len(expired)

    def close_all(self):
        """Dispose every session. Called at shutdown."""
        with self._lock:
            sessions = list(self._sessions.values())
            self._sessions.clear()

        for session in sessions:
            self._close(session, reason="shutdown")
        if sessions:
            logger.info(f"Closed {len(sessions)} sessions at shutdown")

    def _close(self, session: GameSession, reason: str):
        try:
            session.close()
        except Exception as e:
            logger.error(f"Error closing session {session.session_id}: {e}")
        logger.info(
            f"Closed session {session.session_id} ({reason})",
            extra={
                "event_type": (
                    "session_deleted" if reason == "deleted" else "session_evicted"
                ),
                "session_id": session.session_id,
                "reason": reason,
            },
        )
