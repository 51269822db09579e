# ABOUTME: Tests for the scripted stand-in interpreter
# ABOUTME: Covers the mailbox/brochure scenario, movement, state errors and turn scoping

import pytest

from zmachine_api.core.errors import GameLoadError, InterpreterStateError
from zmachine_api.core.scripted_interface import Location, ScriptedInterpreter


@pytest.fixture
def game(story_file):
    interpreter = ScriptedInterpreter()
    interpreter.start(story_file)
    yield interpreter
    interpreter.dispose()


class TestMailboxScenario:
    def test_intro_is_west_of_house(self, story_file):
        interpreter = ScriptedInterpreter()
        intro = interpreter.start(story_file)
        assert "West of House" in intro
        assert "ZORK I" in intro
        assert interpreter.last_transcript == intro

    def test_open_take_inventory(self, game):
        assert "you see a brochure" in game.submit("open mailbox")
        assert game.submit("take brochure") == "Taken."

        inventory = game.submit("inventory")
        assert "brochure" in inventory
        assert inventory.startswith("You are carrying:")

    def test_brochure_needs_open_mailbox(self, game):
        assert "open the mailbox first" in game.submit("take brochure")
        assert game.submit("inventory") == "You are not carrying anything."

    def test_cannot_take_twice(self, game):
        game.submit("open mailbox")
        game.submit("take brochure")
        assert game.submit("take brochure") == "You already have that."

    def test_read_brochure(self, game):
        assert game.submit("read brochure") == "You don't have anything to read."
        game.submit("open mailbox")
        game.submit("take brochure")
        assert "GREAT UNDERGROUND EMPIRE" in game.submit("read brochure")

    def test_mailbox_is_fixed(self, game):
        assert game.submit("take mailbox") == "That's fixed in place."

    def test_knife_take_and_drop(self, game):
        assert game.submit("get rusty knife") == "Taken."
        assert game.submit("score") == "Your score is 10."
        assert game.submit("drop knife") == "Dropped."
        assert game.submit("drop knife") == "You don't have that."


class TestMovement:
    def test_east_to_porch_and_back(self, game):
        assert "climb the porch" in game.submit("e")
        assert game.location is Location.PORCH
        assert game.submit("look").startswith("Front Porch")

        assert game.submit("east") == "The door is locked. You need to find another way in."
        assert game.submit("go west") == "You go back to the open field."
        assert game.location is Location.FIELD

    def test_other_directions_from_field(self, game):
        assert game.submit("north") == "You would only find more fields that way."
        assert game.submit("up") == "You can't go that way."

    def test_nothing_to_take_on_porch(self, game):
        game.submit("east")
        assert game.submit("take knife") == "You don't see that here."


class TestCommands:
    def test_look_lists_inventory_in_field(self, game):
        game.submit("take knife")
        look = game.submit("look")
        assert look.startswith("West of House")
        assert "rusty knife" in look

    def test_look_at_examines(self, game):
        assert game.submit("look at mailbox").startswith("It's a small US mailbox")
        game.submit("open mailbox")
        assert game.submit("x mailbox").endswith("It's open.")

    def test_unknown_command(self, game):
        assert game.submit("xyzzy").startswith("I don't understand that command.")

    def test_blank_command_produces_nothing(self, game):
        assert game.submit("   ") == ""

    def test_restart_resets_world(self, game):
        game.submit("open mailbox")
        game.submit("take brochure")
        game.submit("east")

        assert "West of House" in game.submit("restart")
        assert game.location is Location.FIELD
        assert game.inventory == []
        assert game.mailbox_open is False

    def test_quit_marks_game_ended(self, game):
        assert game.submit("q").startswith("Would you like to quit?")
        assert game.ended is True

    def test_input_after_quit_is_ignored_until_restart(self, game):
        game.submit("open mailbox")
        game.submit("quit")

        assert game.submit("take brochure") == ""
        assert game.inventory == []

        assert "West of House" in game.submit("restart")
        assert game.ended is False
        assert game.submit("wait") == "Time passes..."

    def test_help_and_wait(self, game):
        assert game.submit("help").startswith("Available commands:")
        assert game.submit("wait") == "Time passes..."


class TestLifecycle:
    def test_missing_story_file(self, tmp_path):
        with pytest.raises(GameLoadError, match="Game file not found"):
            ScriptedInterpreter().start(tmp_path / "missing.z5")

    def test_submit_before_start(self):
        with pytest.raises(InterpreterStateError):
            ScriptedInterpreter().submit("look")

    def test_start_twice(self, game, story_file):
        with pytest.raises(InterpreterStateError):
            game.start(story_file)

    def test_submit_after_dispose(self, game):
        game.dispose()
        with pytest.raises(InterpreterStateError):
            game.submit("look")

    def test_dispose_is_idempotent(self, game):
        game.dispose()
        game.dispose()

    def test_transcripts_are_turn_scoped(self, game):
        first = game.submit("open mailbox")
        second = game.submit("take brochure")
        assert first not in second
        assert second not in first
        assert game.last_transcript == second
