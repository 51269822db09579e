"""
Core Interpreter Package

Contains the interpreter adapters behind the start/submit/dispose contract:
- JerichoInterpreter: in-process Z-machine via the Jericho library
  (import from .jericho_interface; it pulls in the compiled Frotz core)
- FrotzProcessInterpreter: external dfrotz subprocess over pipes
- ScriptedInterpreter: hard-coded stand-in for API testing
"""

from .adapter import InterpreterAdapter, check_story_file, read_story_file
from .errors import (
    GameLoadError,
    InterpreterRuntimeError,
    InterpreterStateError,
    InterpreterTimeoutError,
    SessionBusyError,
    SessionNotFoundError,
    ZMachineAPIError,
)
from .frotz_interface import FrotzProcessInterpreter
from .scripted_interface import ScriptedInterpreter
from .transcript import TranscriptBuffer, strip_echo, strip_prompt

__all__ = [
    "InterpreterAdapter",
    "check_story_file",
    "read_story_file",
    "GameLoadError",
    "InterpreterRuntimeError",
    "InterpreterStateError",
    "InterpreterTimeoutError",
    "SessionBusyError",
    "SessionNotFoundError",
    "ZMachineAPIError",
    "FrotzProcessInterpreter",
    "ScriptedInterpreter",
    "TranscriptBuffer",
    "strip_echo",
    "strip_prompt",
]
