# ABOUTME: Turn-scoped output buffering for interpreter adapters
# ABOUTME: Also holds the echo/prompt clean-up helpers used by the subprocess adapter and CLI

from typing import List


class TranscriptBuffer:
    """Accumulates interpreter output for a single turn.

    The buffer is reset at the start of every turn, so ``getvalue()`` only ever
    returns what the current ``start``/``submit`` produced. ``commit()`` freezes
    that value as ``last`` so it can be re-read later (the ``/output`` endpoint)
    without re-running the interpreter.
    """

    def __init__(self):
        self._chunks: List[str] = []
        self._last = ""

    def reset(self) -> None:
        self._chunks = []

    def write(self, text: str) -> None:
        if text:
            self._chunks.append(text)

    def getvalue(self) -> str:
        return "".join(self._chunks)

    def commit(self) -> str:
        """Freeze the current turn's output as the last known transcript."""
        self._last = self.getvalue()
        return self._last

    @property
    def last(self) -> str:
        return self._last

    def __len__(self) -> int:
        return sum(len(chunk) for chunk in self._chunks)


def strip_echo(text: str, command: str) -> str:
    """Drop the interpreter's echo of ``command`` from the start of ``text``.

    Only the first line is considered, and only when it is blank or repeats the
    command (optionally behind a ``>`` prompt).
    """
    if not text:
        return text

    first_line, sep, rest = text.partition("\n")
    echoed = first_line.strip().lstrip(">").strip()
    if not echoed or echoed.lower() == command.strip().lower():
        return rest if sep else ""
    return text


def strip_prompt(text: str, prompt: str = ">") -> str:
    """Remove a trailing input prompt and surrounding whitespace."""
    text = text.rstrip()
    if text.endswith(prompt):
        text = text[: -len(prompt)].rstrip()
    return text


def ends_with_prompt(text: str, prompt: str = ">") -> bool:
    return text.rstrip(" ").endswith(prompt)
