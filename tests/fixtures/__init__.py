# ABOUTME: Shared test fixtures: the fake dfrotz script and a throwaway story file

from pathlib import Path

FIXTURES_DIR = Path(__file__).parent
FAKE_FROTZ = FIXTURES_DIR / "fake_frotz.py"

# Enough of a Z-machine header for anything that only reads the bytes
STORY_BYTES = bytes([5]) + bytes(63)

__all__ = ["FIXTURES_DIR", "FAKE_FROTZ", "STORY_BYTES"]
