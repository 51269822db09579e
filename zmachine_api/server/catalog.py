# ABOUTME: Game catalog: lists story files in the configured games directory
# ABOUTME: and resolves the game path a session request asks for

import logging
from pathlib import Path
from typing import List, Optional, Union

from ..config import STORY_EXTENSIONS, ServerConfiguration
from .models import GameEntry

logger = logging.getLogger(__name__)

CATALOG_PREFIX = "/games/"


def is_story_file(path: Path) -> bool:
    return path.is_file() and path.suffix.lower() in STORY_EXTENSIONS


def list_games(games_dir: Union[str, Path]) -> List[GameEntry]:
    """List playable story files, sorted by name. A missing directory is empty."""
    directory = Path(games_dir)
    if not directory.is_dir():
        logger.debug(f"Games directory does not exist: {directory}")
        return []

    return [
        GameEntry(name=path.name, path=f"{CATALOG_PREFIX}{path.name}")
        for path in sorted(directory.iterdir(), key=lambda p: p.name)
        if is_story_file(path)
    ]


def resolve_game_path(
    game_path: Optional[str], config: ServerConfiguration
) -> Path:
    """
    Work out which story file a session should load.

    An explicit path wins over the configured default. Catalog paths such as
    ``/games/zork1.z5`` (as returned by list_games) are looked up inside the
    games directory when they don't exist on disk as given. Existence is not
    checked here; the interpreter's start() reports a missing file.
    """
    requested = game_path or config.default_game
    candidate = Path(requested).expanduser()

    if not candidate.exists() and requested.startswith(CATALOG_PREFIX):
        games_root = config.games_path
        in_catalog = (games_root / requested[len(CATALOG_PREFIX):]).resolve()
        if in_catalog.parent == games_root and in_catalog.exists():
            return in_catalog

    return candidate.resolve()
