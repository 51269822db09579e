# ABOUTME: Tests for turn-scoped transcript buffering and the echo/prompt helpers

from zmachine_api.core.transcript import (
    TranscriptBuffer,
    ends_with_prompt,
    strip_echo,
    strip_prompt,
)


class TestTranscriptBuffer:
    def test_accumulates_within_a_turn(self):
        buffer = TranscriptBuffer()
        buffer.write("West of House\n")
        buffer.write("There is a small mailbox here.")
        assert buffer.getvalue() == "West of House\nThere is a small mailbox here."
        assert len(buffer) == len(buffer.getvalue())

    def test_reset_discards_previous_turn(self):
        buffer = TranscriptBuffer()
        buffer.write("first turn")
        buffer.commit()
        buffer.reset()
        buffer.write("second turn")
        assert buffer.getvalue() == "second turn"

    def test_last_survives_reset_until_next_commit(self):
        buffer = TranscriptBuffer()
        buffer.write("Taken.")
        assert buffer.commit() == "Taken."

        buffer.reset()
        assert buffer.last == "Taken."

        buffer.write("Dropped.")
        buffer.commit()
        assert buffer.last == "Dropped."

    def test_empty_writes_are_ignored(self):
        buffer = TranscriptBuffer()
        buffer.write("")
        assert buffer.getvalue() == ""
        assert buffer.commit() == ""


class TestStripEcho:
    def test_strips_repeated_command(self):
        assert strip_echo("look\nWest of House", "look") == "West of House"

    def test_strips_echo_behind_prompt(self):
        assert strip_echo("> Open Mailbox\nOpened.", "open mailbox") == "Opened."

    def test_strips_blank_first_line(self):
        assert strip_echo("\nTaken.\n>", "take leaflet") == "Taken.\n>"

    def test_keeps_first_line_that_is_real_output(self):
        text = "West of House\nYou are standing in an open field."
        assert strip_echo(text, "look") == text

    def test_single_line_echo_leaves_nothing(self):
        assert strip_echo("wait", "wait") == ""

    def test_empty_text(self):
        assert strip_echo("", "look") == ""


class TestPrompt:
    def test_strip_trailing_prompt(self):
        assert strip_prompt("Taken.\n\n>") == "Taken."
        assert strip_prompt("Taken.\n> ") == "Taken."

    def test_strip_prompt_without_prompt(self):
        assert strip_prompt("Taken.\n") == "Taken."

    def test_strip_prompt_only_removes_trailing_prompt(self):
        assert strip_prompt("> look\nWest of House") == "> look\nWest of House"

    def test_ends_with_prompt(self):
        assert ends_with_prompt("There is a small mailbox here.\n\n>")
        assert ends_with_prompt("Taken.\n> ")
        assert not ends_with_prompt("There is a small mailbox here.\n")
