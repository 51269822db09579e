# ABOUTME: Logging setup for the zmachine-api server: console output plus optional JSON lines
# ABOUTME: Session and command events carry structured fields via extra={"event_type": ...}

import json
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

LOGGER_NAME = "zmachine_api"

# Attributes every LogRecord carries; anything else arrived via extra={}
STANDARD_ATTRS = {
    "name",
    "msg",
    "args",
    "levelname",
    "levelno",
    "pathname",
    "filename",
    "module",
    "lineno",
    "funcName",
    "created",
    "msecs",
    "relativeCreated",
    "thread",
    "threadName",
    "processName",
    "process",
    "message",
    "exc_info",
    "exc_text",
    "stack_info",
    "getMessage",
    "taskName",
}


class JSONFormatter(logging.Formatter):
    """Custom formatter that outputs log records as JSON objects."""

    def format(self, record):
        log_data = {
            "timestamp": datetime.fromtimestamp(record.created).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        for attr_name, attr_value in record.__dict__.items():
            if attr_name not in STANDARD_ATTRS and not attr_name.startswith("_"):
                log_data[attr_name] = attr_value

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data, default=str)


class HumanReadableFormatter(logging.Formatter):
    """Console formatter that renders session lifecycle events compactly."""

    def __init__(self):
        super().__init__("%(asctime)s - %(name)s - %(levelname)s - %(message)s")

    def format(self, record):
        event_type = getattr(record, "event_type", None)
        session_id = getattr(record, "session_id", None)

        if event_type == "session_created":
            backend = getattr(record, "backend", "?")
            game_path = getattr(record, "game_path", "?")
            return f"🎮 Session {session_id} started ({backend}): {game_path}"

        elif event_type in ("session_deleted", "session_evicted"):
            reason = getattr(record, "reason", "deleted")
            return f"🏁 Session {session_id} closed ({reason})"

        elif event_type == "command_executed":
            command = getattr(record, "command", "")
            return f"  [{session_id}] > {command}"

        return super().format(record)


def setup_logging(
    log_level: int = logging.INFO, json_log_file: Optional[str] = None
) -> logging.Logger:
    """
    Set up logging with a console handler and an optional JSON-lines file.

    Args:
        log_level: Logging level (default: INFO)
        json_log_file: Path to the JSON log file, or None to skip it

    Returns:
        The package logger
    """
    if isinstance(log_level, str):
        log_level = logging.getLevelName(log_level.upper())

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(log_level)
    logger.handlers = []  # Clear any existing handlers
    logger.propagate = False

    console_handler = logging.StreamHandler()
    console_handler.setLevel(log_level)
    console_handler.setFormatter(HumanReadableFormatter())
    logger.addHandler(console_handler)

    if json_log_file:
        json_handler = logging.FileHandler(json_log_file, mode="a", encoding="utf-8")
        json_handler.setLevel(log_level)
        json_handler.setFormatter(JSONFormatter())
        logger.addHandler(json_handler)

    return logger


def parse_json_logs(
    json_log_file: str, event_type: Optional[str] = None
) -> List[Dict[str, Any]]:
    """Read a JSON-lines log, optionally keeping only one event type.

    Lines that aren't valid JSON (a crash mid-write, say) are skipped.
    """
    entries = []
    with open(json_log_file, encoding="utf-8") as log_file:
        for raw in log_file:
            raw = raw.strip()
            if not raw:
                continue
            try:
                entry = json.loads(raw)
            except json.JSONDecodeError:
                continue
            if event_type is None or entry.get("event_type") == event_type:
                entries.append(entry)
    return entries
