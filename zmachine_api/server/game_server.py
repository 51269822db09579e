# ABOUTME: FastAPI application exposing the zmachine-api REST endpoints
# ABOUTME: Builds the session registry at startup, sweeps idle sessions, drains everything at shutdown

import asyncio
import contextlib
import logging
from datetime import datetime, timezone
from typing import Optional

import uvicorn
from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from ..config import ServerConfiguration, get_config
from ..core.errors import (
    GameLoadError,
    InterpreterRuntimeError,
    InterpreterStateError,
    SessionBusyError,
    SessionNotFoundError,
    ZMachineAPIError,
)
from ..logger import setup_logging
from .catalog import list_games
from .models import (
    CommandRequest,
    CommandResponse,
    CreateSessionRequest,
    DeleteResponse,
    ErrorResponse,
    GameList,
    HealthResponse,
    SessionCreated,
    SessionInfo,
    SessionOutput,
)
from .session_manager import SessionRegistry

logger = logging.getLogger(__name__)

STATUS_CODES = (
    (SessionNotFoundError, 404),
    (SessionBusyError, 409),
    (GameLoadError, 400),
    (InterpreterRuntimeError, 400),
    (InterpreterStateError, 400),
)


def _error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code, content=ErrorResponse(error=message).model_dump()
    )


def _describe_validation_error(exc: RequestValidationError) -> str:
    """Flatten pydantic's error list into one readable line."""
    problems = []
    for error in exc.errors():
        location = [str(part) for part in error.get("loc", ()) if part != "body"]
        field = ".".join(location) or "body"
        problems.append(f"{field}: {error.get('msg', 'invalid')}")
    return "Invalid request - " + "; ".join(problems)


async def _evict_idle_sessions(registry: SessionRegistry, interval: float):
    """Periodically drop sessions nobody has used for a while."""
    while True:
        await asyncio.sleep(interval)
        evicted = await asyncio.to_thread(registry.evict_idle)
        if evicted:
            logger.info(f"Evicted {evicted} idle sessions")


def get_registry(request: Request) -> SessionRegistry:
    return request.app.state.registry


def create_app(
    config: Optional[ServerConfiguration] = None,
    registry: Optional[SessionRegistry] = None,
) -> FastAPI:
    """Create the FastAPI app with its own session registry."""
    if config is None:
        config = get_config()
    # An empty registry is falsy, so compare against None
    if registry is None:
        registry = SessionRegistry(config)

    @contextlib.asynccontextmanager
    async def lifespan(app: FastAPI):
        sweeper = asyncio.create_task(
            _evict_idle_sessions(registry, config.eviction_interval)
        )
        logger.info(
            f"Z-Machine API server ready - backend: {config.interpreter_backend}, "
            f"games: {config.games_path}, default: {config.default_game}"
        )
        try:
            yield
        finally:
            sweeper.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await sweeper
            await asyncio.to_thread(registry.close_all)

    app = FastAPI(title="Z-Machine API Server", lifespan=lifespan)
    app.state.config = config
    app.state.registry = registry

    @app.exception_handler(ZMachineAPIError)
    async def handle_api_error(request: Request, exc: ZMachineAPIError):
        status_code = next(
            (code for exc_type, code in STATUS_CODES if isinstance(exc, exc_type)),
            500,
        )
        return _error_response(status_code, str(exc))

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(
        request: Request, exc: RequestValidationError
    ):
        # An unknown session outranks a malformed body
        session_id = request.path_params.get("session_id")
        if session_id is not None and session_id not in request.app.state.registry:
            return _error_response(404, str(SessionNotFoundError(session_id)))
        return _error_response(400, _describe_validation_error(exc))

    @app.get("/api/games")
    async def get_games() -> GameList:
        """List story files in the games directory."""
        return GameList(games=list_games(config.games_path))

    @app.post("/api/sessions")
    async def create_session(
        body: Optional[CreateSessionRequest] = None,
        registry: SessionRegistry = Depends(get_registry),
    ) -> SessionCreated:
        """Start a new game session."""
        game_path = body.game_path if body else None
        session = await asyncio.to_thread(registry.create_session, game_path)
        return SessionCreated(
            session_id=session.session_id,
            output=session.last_output,
            game_path=str(session.game_path),
        )

    @app.post("/api/sessions/{session_id}/input")
    async def send_input(
        session_id: str,
        body: CommandRequest,
        registry: SessionRegistry = Depends(get_registry),
    ) -> CommandResponse:
        """Send one line of input to a game."""
        output = await asyncio.to_thread(
            registry.send_command, session_id, body.command
        )
        return CommandResponse(
            session_id=session_id, command=body.command, output=output
        )

    @app.get("/api/sessions/{session_id}")
    async def get_session_info(
        session_id: str, registry: SessionRegistry = Depends(get_registry)
    ) -> SessionInfo:
        """Get session metadata."""
        session = registry.get_session(session_id)
        if session is None:
            raise SessionNotFoundError(session_id)
        return session.get_info()

    @app.get("/api/sessions/{session_id}/output")
    async def get_session_output(
        session_id: str, registry: SessionRegistry = Depends(get_registry)
    ) -> SessionOutput:
        """Re-read the transcript of the most recent turn."""
        session = registry.get_session(session_id)
        if session is None:
            raise SessionNotFoundError(session_id)
        return SessionOutput(session_id=session_id, output=session.last_output)

    @app.delete("/api/sessions/{session_id}")
    async def delete_session(
        session_id: str, registry: SessionRegistry = Depends(get_registry)
    ) -> DeleteResponse:
        """Close a session and release its interpreter."""
        deleted = await asyncio.to_thread(registry.delete_session, session_id)
        if not deleted:
            raise SessionNotFoundError(session_id)
        return DeleteResponse(success=True, message="Session deleted")

    @app.get("/health")
    async def health_check(
        registry: SessionRegistry = Depends(get_registry),
    ) -> HealthResponse:
        """Health check endpoint."""
        return HealthResponse(
            status="ok",
            timestamp=datetime.now(timezone.utc).isoformat(),
            active_sessions=len(registry),
            backend=registry.backend,
        )

    return app


def main():
    config = get_config()
    setup_logging(config.log_level, config.json_log_file)
    uvicorn.run(create_app(config), host=config.host, port=config.port)


if __name__ == "__main__":
    main()
