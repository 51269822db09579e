# ABOUTME: Exception hierarchy shared by interpreter adapters, the session registry and the API
# ABOUTME: Each exception maps to one HTTP status in the game server's exception handlers


class ZMachineAPIError(Exception):
    """Base class for all zmachine-api errors."""


class GameLoadError(ZMachineAPIError):
    """The story file is missing, unreadable, or rejected by the interpreter."""


class SessionNotFoundError(ZMachineAPIError):
    """No live session exists for the requested id."""

    def __init__(self, session_id: str):
        super().__init__("Session not found")
        self.session_id = session_id


class SessionBusyError(ZMachineAPIError):
    """A command is already executing for this session."""

    def __init__(self, session_id: str):
        super().__init__("Session is busy processing another command")
        self.session_id = session_id


class InterpreterStateError(ZMachineAPIError):
    """Adapter used before start() or after dispose()."""


class InterpreterRuntimeError(ZMachineAPIError):
    """The interpreter failed while executing a turn."""


class InterpreterTimeoutError(InterpreterRuntimeError):
    """The interpreter produced no output before the watchdog fired."""
