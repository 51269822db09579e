# ABOUTME: Pydantic models for the zmachine-api REST requests and responses
# ABOUTME: Python attributes are snake_case; JSON keys are camelCase to match existing clients

from typing import List, Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class APIModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# Request models
class CreateSessionRequest(APIModel):
    game_path: Optional[str] = None


class CommandRequest(APIModel):
    command: str


# Response models
class GameEntry(APIModel):
    name: str
    path: str


class GameList(APIModel):
    games: List[GameEntry]


class SessionCreated(APIModel):
    session_id: str
    output: str
    game_path: str


class CommandResponse(APIModel):
    session_id: str
    command: str
    output: str


class SessionInfo(APIModel):
    session_id: str
    game_path: str
    created_at: str


class SessionOutput(APIModel):
    session_id: str
    output: str


class DeleteResponse(APIModel):
    success: bool
    message: str


class HealthResponse(APIModel):
    status: str
    timestamp: str
    active_sessions: int
    backend: str


class ErrorResponse(APIModel):
    error: str
