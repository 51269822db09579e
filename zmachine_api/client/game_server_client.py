"""
REST API client for the Z-Machine API server.
Manages one game session and recreates it if the server forgets it.
"""

import logging
from typing import Any, Dict, List, Optional

import requests

logger = logging.getLogger(__name__)


class GameServerError(Exception):
    """The server could not be reached or answered with an error."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class GameServerClient:
    """Client for interacting with the Z-Machine API REST endpoints."""

    def __init__(
        self,
        base_url: str = "http://localhost:3000",
        game_path: Optional[str] = None,
        timeout: float = 30.0,
    ):
        """Initialize the game server client.

        Args:
            base_url: Base URL of the game server
            game_path: Story file to request (server default if None)
            timeout: Request timeout in seconds
        """
        self.base_url = base_url.rstrip("/")
        self.game_path = game_path
        self.timeout = timeout
        self.session_id: Optional[str] = None
        self.intro = ""
        self.http = requests.Session()

    def __enter__(self):
        """Support for context manager protocol."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Clean up when exiting the context manager."""
        self.close()

    def _request(self, method: str, path: str, **kwargs) -> Dict[str, Any]:
        """Send a request and return the decoded JSON body.

        Raises:
            GameServerError: On connection failures, non-2xx responses, or
                bodies that aren't JSON
        """
        try:
            response = self.http.request(
                method, f"{self.base_url}{path}", timeout=self.timeout, **kwargs
            )
        except requests.RequestException as e:
            raise GameServerError(f"Connection error: {e}") from e

        try:
            data = response.json()
        except ValueError as e:
            raise GameServerError(
                f"Invalid JSON response: {response.text}", response.status_code
            ) from e

        if not response.ok:
            message = data.get("error") if isinstance(data, dict) else None
            raise GameServerError(
                message or f"HTTP {response.status_code}: {response.reason}",
                response.status_code,
            )
        return data

    def list_games(self) -> List[Dict[str, str]]:
        """List story files the server offers."""
        return self._request("GET", "/api/games").get("games", [])

    def start(self, game_path: Optional[str] = None) -> str:
        """Start a new game session.

        Args:
            game_path: Story file to load; falls back to the client's game_path

        Returns:
            Initial game text
        """
        if game_path is not None:
            self.game_path = game_path

        data = self._request(
            "POST", "/api/sessions", json={"gamePath": self.game_path}
        )
        self.session_id = data["sessionId"]
        logger.info(f"Started session: {self.session_id}")
        self.intro = data.get("output", "")
        return self.intro

    def send_command(self, command: str) -> str:
        """Send a command to the game.

        Starts a session first if there is none, and starts a fresh one (then
        retries once) if the server no longer knows the current session. The
        replacement session's opening text is kept in ``intro``.

        Returns:
            Raw game response
        """
        if not self.session_id:
            self.start()

        try:
            data = self._input(command)
        except GameServerError as e:
            if e.status_code != 404:
                raise
            logger.warning(f"Session {self.session_id} not found; starting a new one")
            self.session_id = None
            self.start()
            data = self._input(command)

        return data.get("output", "")

    def _input(self, command: str) -> Dict[str, Any]:
        return self._request(
            "POST",
            f"/api/sessions/{self.session_id}/input",
            json={"command": command},
        )

    def get_info(self) -> Dict[str, Any]:
        """Get the current session's metadata."""
        if not self.session_id:
            raise GameServerError("No active session")
        return self._request("GET", f"/api/sessions/{self.session_id}")

    def get_output(self) -> str:
        """Re-read the last transcript of the current session."""
        if not self.session_id:
            raise GameServerError("No active session")
        data = self._request("GET", f"/api/sessions/{self.session_id}/output")
        return data.get("output", "")

    def health(self) -> Dict[str, Any]:
        return self._request("GET", "/health")

    def close(self):
        """Delete the session on the server."""
        if self.session_id:
            try:
                self._request("DELETE", f"/api/sessions/{self.session_id}")
                logger.info(f"Closed session: {self.session_id}")
            except GameServerError as e:
                logger.warning(f"Failed to close session: {e}")

            self.session_id = None
        self.http.close()
