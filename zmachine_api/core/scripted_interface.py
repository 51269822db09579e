# ABOUTME: Scripted stand-in interpreter simulating the opening of Zork I without a Z-machine
# ABOUTME: Flat verb dispatch over a tiny world state; used to exercise the API end to end

import logging
from enum import Enum
from pathlib import Path
from typing import Callable, Dict, List, Optional, Union

from .adapter import read_story_file
from .errors import InterpreterStateError
from .transcript import TranscriptBuffer

logger = logging.getLogger(__name__)


WELCOME_TEXT = """ZORK I: The Great Underground Empire
Infocom interactive fiction - a fantasy story
Copyright (c) 1981, 1982, 1983, 1984, 1985, 1986 Infocom, Inc. All Rights Reserved.
ZORK is a registered trademark of Infocom, Inc.

Release 119 / Serial number 880429

West of House
You are standing in an open field west of a white house, with a boarded front door.
There is a small mailbox here."""

FIELD_DESCRIPTION = """West of House
You are standing in an open field west of a white house, with a boarded front door.
There is a small mailbox here."""

PORCH_DESCRIPTION = """Front Porch
You are on the porch of the white house. The front door is to the east.
The windows are boarded up. A path leads west back to the field."""

BROCHURE_TEXT = """"WELCOME TO THE GREAT UNDERGROUND EMPIRE!
A world of excitement, adventure, and danger awaits you.
Discover the treasures of Zork!

Note: The Front Door is locked. Try the West of House..."""

HELP_TEXT = """Available commands:
  look / l              - Look around
  go [direction]        - Move (north/south/east/west/up/down)
  open [thing]          - Open something
  take [thing]          - Pick something up
  drop [thing]          - Drop something
  inventory / i         - Check what you're carrying
  examine / x [thing]   - Look at something closely
  read [thing]          - Read something
  score                 - Check your score
  wait                  - Wait for a while
  restart               - Start the game over
  help                  - Show this message
  quit / q              - Quit the game"""

UNKNOWN_COMMAND = "I don't understand that command. Type 'help' for a list of commands."

DIRECTIONS = {
    "n": "north",
    "s": "south",
    "e": "east",
    "w": "west",
    "u": "up",
    "d": "down",
    "north": "north",
    "south": "south",
    "east": "east",
    "west": "west",
    "up": "up",
    "down": "down",
}

KNIFE_NAMES = {"knife", "rusty knife", "rusty"}
BROCHURE_NAMES = {"brochure", "paper", "mail"}
MAILBOX_NAMES = {"mailbox", "box"}


class Location(Enum):
    FIELD = "field"
    PORCH = "porch"


class ScriptedInterpreter:
    """
    Hard-coded text adventure covering West of House and the front porch.

    There is nothing to suspend: every submit() is a synchronous lookup of the
    verb in a dispatch table, which returns a canned reply and may update the
    location, the inventory or the mailbox flag.
    """

    kind = "scripted"

    def __init__(self):
        self.location = Location.FIELD
        self.inventory: List[str] = []
        self.mailbox_open = False
        self.ended = False
        self.game_path: Optional[Path] = None
        self._started = False
        self._disposed = False
        self._transcript = TranscriptBuffer()
        self._verbs: Dict[str, Callable[[str], str]] = {}
        for handler, aliases in (
            (self.do_look, ("look", "l")),
            (self.do_go, ("go", "walk", "move")),
            (self.do_open, ("open", "unlock")),
            (self.do_take, ("take", "get", "grab", "pick")),
            (self.do_drop, ("drop",)),
            (self.do_inventory, ("inventory", "i", "inv")),
            (self.do_examine, ("examine", "x")),
            (self.do_read, ("read",)),
            (self.do_help, ("help",)),
            (self.do_quit, ("quit", "q")),
            (self.do_score, ("score",)),
            (self.do_wait, ("wait",)),
            (self.do_restart, ("restart",)),
        ):
            for alias in aliases:
                self._verbs[alias] = handler

    @property
    def last_transcript(self) -> str:
        return self._transcript.last

    def start(self, game_path: Union[str, Path]) -> str:
        if self._disposed:
            raise InterpreterStateError("Interpreter has been disposed")
        if self._started:
            raise InterpreterStateError("Interpreter already started")

        # The story bytes are only validated; the world below is hard-coded.
        read_story_file(game_path)
        self.game_path = Path(game_path).expanduser().resolve()
        self._started = True

        self._transcript.reset()
        self._transcript.write(WELCOME_TEXT)
        return self._transcript.commit()

    def submit(self, command: str) -> str:
        if self._disposed:
            raise InterpreterStateError("Interpreter has been disposed")
        if not self._started:
            raise InterpreterStateError("Interpreter not started. Call start() first.")

        self._transcript.reset()
        # After quitting only a restart brings the game back
        if self.ended and command.strip().lower() != "restart":
            logger.info(
                f"Ignoring input after game ended: {command!r}",
                extra={"event_type": "input_after_halt", "backend": self.kind},
            )
            return self._transcript.commit()

        self._transcript.write(self.process_command(command))
        return self._transcript.commit()

    def dispose(self) -> None:
        self._disposed = True

    def process_command(self, command: str) -> str:
        words = command.lower().split()
        if not words:
            return ""

        verb, noun = words[0], " ".join(words[1:])

        if verb in DIRECTIONS:
            return self.do_go(verb)
        # "look at mailbox" / "look mailbox" examine rather than describe the room
        if verb == "look" and noun:
            return self.do_examine(noun[3:] if noun.startswith("at ") else noun)

        handler = self._verbs.get(verb)
        if handler is None:
            return UNKNOWN_COMMAND
        return handler(noun)

    def do_look(self, noun: str = "") -> str:
        if self.location is Location.FIELD:
            text = FIELD_DESCRIPTION
            if self.inventory:
                text += "\n\nYou are carrying:\n  " + "\n  ".join(self.inventory)
            return text
        return PORCH_DESCRIPTION

    def do_go(self, noun: str) -> str:
        direction = DIRECTIONS.get(noun, noun)

        if self.location is Location.FIELD:
            if direction == "east":
                self.location = Location.PORCH
                return "You go around to the front of the house and climb the porch."
            if direction in ("north", "south", "west"):
                return "You would only find more fields that way."
        elif self.location is Location.PORCH:
            if direction in ("west", "back"):
                self.location = Location.FIELD
                return "You go back to the open field."
            if direction in ("east", "enter", "in"):
                return "The door is locked. You need to find another way in."

        return "You can't go that way."

    def do_open(self, noun: str) -> str:
        if noun in MAILBOX_NAMES:
            self.mailbox_open = True
            return "You open the mailbox. Inside, you see a brochure."
        if noun == "door":
            return "It's locked. You need a key or another way in."
        if noun == "window":
            return "The windows are boarded up. You can't open them."
        return "You can't open that."

    def do_take(self, noun: str) -> str:
        if self.location is not Location.FIELD:
            return "You don't see that here."

        if noun in KNIFE_NAMES:
            return self._pick_up("rusty knife")

        if noun in BROCHURE_NAMES:
            if not self.mailbox_open:
                return (
                    "You don't see that here. "
                    "Maybe you should open the mailbox first?"
                )
            return self._pick_up("brochure")

        if noun == "mailbox":
            return "That's fixed in place."
        return "You don't see that here."

    def _pick_up(self, item: str) -> str:
        if item in self.inventory:
            return "You already have that."
        self.inventory.append(item)
        return "Taken."

    def do_drop(self, noun: str) -> str:
        if noun in KNIFE_NAMES and "rusty knife" in self.inventory:
            self.inventory.remove("rusty knife")
            return "Dropped."
        return "You don't have that."

    def do_inventory(self, noun: str = "") -> str:
        if not self.inventory:
            return "You are not carrying anything."
        return "You are carrying:\n  " + "\n  ".join(self.inventory)

    def do_examine(self, noun: str) -> str:
        if noun in MAILBOX_NAMES:
            text = "It's a small US mailbox, painted blue. There's a small slot in it."
            if self.mailbox_open:
                text += " It's open."
            return text
        if noun in KNIFE_NAMES:
            if "rusty knife" in self.inventory:
                return (
                    "It's a rusty knife. The blade is pitted from years of exposure. "
                    "You could take it if you want."
                )
            return (
                "A rusty knife is stuck in the ground here. "
                "The blade is pitted from years of exposure."
            )
        if noun == "door" and self.location is Location.PORCH:
            return (
                "The front door is locked. "
                "It's a heavy wooden door with iron reinforcements."
            )
        if noun in ("brochure", "paper"):
            return (
                'A brochure for the "Great Underground Empire". '
                "It mentions something about a thief and treasures..."
            )
        if noun == "house" and self.location is Location.FIELD:
            return (
                "The house is a three-story Georgian-style house, painted white. "
                "The front door is boarded up."
            )
        return "You see nothing special about that."

    def do_read(self, noun: str) -> str:
        if noun in ("brochure", "paper"):
            if "brochure" in self.inventory:
                return BROCHURE_TEXT
            return "You don't have anything to read."
        if noun == "mailbox":
            return "The mailbox is too dirty to read."
        return "You can't read that."

    def do_score(self, noun: str = "") -> str:
        return f"Your score is {len(self.inventory) * 10}."

    def do_wait(self, noun: str = "") -> str:
        return "Time passes..."

    def do_restart(self, noun: str = "") -> str:
        self.location = Location.FIELD
        self.inventory = []
        self.mailbox_open = False
        self.ended = False
        logger.debug("Scripted game restarted")
        return WELCOME_TEXT

    def do_help(self, noun: str = "") -> str:
        return HELP_TEXT

    def do_quit(self, noun: str = "") -> str:
        self.ended = True
        return "Would you like to quit? (Y)es or (N)o:"
