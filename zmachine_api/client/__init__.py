"""
Game Client Package

Contains the REST API client and the interactive CLI for the Z-Machine API server.
"""

from .game_server_client import GameServerClient, GameServerError

__all__ = ["GameServerClient", "GameServerError"]
