"""
Game Server Package

Contains the FastAPI-based game server components including:
- SessionRegistry / GameSession: live sessions and their interpreters
- Catalog: story file listing and game path resolution
- Models: Pydantic models for API requests/responses
- Game Server: FastAPI application factory
"""

from .game_server import create_app
from .models import (
    CommandRequest,
    CommandResponse,
    CreateSessionRequest,
    SessionCreated,
    SessionInfo,
    SessionOutput,
)
from .session_manager import BACKENDS, GameSession, SessionRegistry

__all__ = [
    "create_app",
    "CommandRequest",
    "CommandResponse",
    "CreateSessionRequest",
    "SessionCreated",
    "SessionInfo",
    "SessionOutput",
    "BACKENDS",
    "GameSession",
    "SessionRegistry",
]
