# ABOUTME: Tests for the console and JSON-lines log formatters and setup_logging

import json
import logging
import sys

import pytest

from zmachine_api.logger import (
    LOGGER_NAME,
    HumanReadableFormatter,
    JSONFormatter,
    parse_json_logs,
    setup_logging,
)


def make_record(message="hello", **extra):
    record = logging.LogRecord(
        name="zmachine_api.server",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg=message,
        args=(),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


@pytest.fixture
def package_logger():
    logger = logging.getLogger(LOGGER_NAME)
    yield logger
    for handler in logger.handlers:
        handler.close()
    logger.handlers = []
    logger.propagate = True
    logger.setLevel(logging.NOTSET)


class TestJSONFormatter:
    def test_includes_extra_fields(self):
        line = JSONFormatter().format(
            make_record("Created session", event_type="session_created", session_id="abc")
        )
        data = json.loads(line)

        assert data["message"] == "Created session"
        assert data["level"] == "INFO"
        assert data["logger"] == "zmachine_api.server"
        assert data["event_type"] == "session_created"
        assert data["session_id"] == "abc"
        assert "lineno" not in data

    def test_includes_exception(self):
        try:
            raise ValueError("boom")
        except ValueError:
            record = make_record("failed")
            record.exc_info = sys.exc_info()

        data = json.loads(JSONFormatter().format(record))
        assert "ValueError: boom" in data["exception"]


class TestHumanReadableFormatter:
    def test_session_created(self):
        text = HumanReadableFormatter().format(
            make_record(
                event_type="session_created",
                session_id="abc",
                backend="scripted",
                game_path="/games/zork1.z5",
            )
        )
        assert "abc" in text
        assert "scripted" in text
        assert "/games/zork1.z5" in text

    def test_session_evicted(self):
        text = HumanReadableFormatter().format(
            make_record(event_type="session_evicted", session_id="abc", reason="idle")
        )
        assert "abc" in text
        assert "(idle)" in text

    def test_command_executed(self):
        text = HumanReadableFormatter().format(
            make_record(event_type="command_executed", session_id="abc", command="look")
        )
        assert text.endswith("> look")

    def test_plain_records_use_standard_format(self):
        text = HumanReadableFormatter().format(make_record("plain message"))
        assert "INFO" in text
        assert text.endswith("plain message")


class TestSetupLogging:
    def test_console_only(self, package_logger):
        logger = setup_logging("debug")

        assert logger is package_logger
        assert logger.level == logging.DEBUG
        assert len(logger.handlers) == 1
        assert logger.propagate is False

    def test_json_log_file(self, package_logger, tmp_path):
        log_file = tmp_path / "server.jsonl"
        setup_logging(logging.INFO, str(log_file))

        logging.getLogger("zmachine_api.server.session_manager").info(
            "Closed session abc (deleted)",
            extra={"event_type": "session_deleted", "session_id": "abc"},
        )
        for handler in package_logger.handlers:
            handler.flush()

        logs = parse_json_logs(str(log_file))
        assert len(logs) == 1
        assert logs[0]["event_type"] == "session_deleted"
        assert logs[0]["session_id"] == "abc"

    def test_parse_skips_bad_lines(self, tmp_path):
        log_file = tmp_path / "mixed.jsonl"
        log_file.write_text('{"message": "ok"}\nnot json\n')
        assert parse_json_logs(str(log_file)) == [{"message": "ok"}]

    def test_parse_filters_by_event_type(self, tmp_path):
        log_file = tmp_path / "events.jsonl"
        log_file.write_text(
            '{"event_type": "session_created", "session_id": "a"}\n'
            "\n"
            '{"event_type": "command_executed", "session_id": "a"}\n'
            '{"event_type": "session_created", "session_id": "b"}\n'
        )
        created = parse_json_logs(str(log_file), event_type="session_created")
        assert [entry["session_id"] for entry in created] == ["a", "b"]
