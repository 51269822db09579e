# ABOUTME: Interactive command-line client for playing games through the Z-Machine API
# ABOUTME: Keeps one session per run and hides the interpreter's trailing prompt

import argparse
import os
import sys
from typing import Callable, List, Optional

from ..core.transcript import strip_prompt
from .game_server_client import GameServerClient, GameServerError

DEFAULT_SERVER = "http://localhost:3000"

HELP_TEXT = """
Z-Machine CLI Commands:
  Any text          - Send command to the game
  look              - Look around current location
  inventory, inv    - Show inventory
  help, ?           - Show this help
  quit, exit        - Exit the CLI

Navigation:
  go north, n       - Move north
  go south, s       - Move south
  go east, e        - Move east
  go west, w        - Move west

Object interaction:
  take [item]       - Pick up an item
  drop [item]       - Drop an item
  open [object]     - Open something
  examine [object]  - Look at something closely
  read [item]       - Read something

Controls:
  Ctrl+C / Ctrl+D   - Exit and clean up
"""


class ZMachineCLI:
    """Read-eval-print loop over a GameServerClient."""

    def __init__(
        self,
        client: GameServerClient,
        read_line: Callable[[str], str] = input,
        write: Callable[[str], None] = print,
    ):
        self.client = client
        self.read_line = read_line
        self.write = write
        self.command_history: List[str] = []

    def start_session(self) -> bool:
        try:
            output = self.client.start()
        except GameServerError as e:
            self.write(f"Failed to start session: {e}")
            return False
        self.write(strip_prompt(output))
        return True

    def send_command(self, command: str) -> bool:
        session_id = self.client.session_id
        try:
            output = self.client.send_command(command)
        except GameServerError as e:
            self.write(f"Error sending command: {e}")
            return False
        if self.client.session_id != session_id:
            # The server forgot our session; show the new game's opening
            self.write(strip_prompt(self.client.intro))
        self.write(strip_prompt(output))
        return True

    def handle_line(self, line: str) -> bool:
        """Process one line of user input. Returns False when the user quits."""
        command = line.strip()
        if not command:
            return True

        self.command_history.append(command)
        lowered = command.lower()
        if lowered in ("quit", "exit"):
            return False
        if lowered in ("help", "?"):
            self.write(HELP_TEXT)
            return True

        self.send_command(command)
        return True

    def run(self) -> int:
        if not self.start_session():
            self.write(f"Failed to connect to server at {self.client.base_url}")
            self.write("Make sure the Z-Machine API server is running.")
            return 1

        self.write('\nType "help" for commands or "quit" to exit.')
        try:
            while True:
                try:
                    line = self.read_line("> ")
                except EOFError:
                    break
                if not self.handle_line(line):
                    break
        except KeyboardInterrupt:
            self.write("")
        finally:
            self.cleanup()
        return 0

    def cleanup(self):
        had_session = self.client.session_id is not None
        self.client.close()
        if had_session:
            self.write("\nSession cleaned up.")


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Interactive client for the Z-Machine API server",
        epilog="Environment variables ZMACHINE_SERVER and ZMACHINE_GAME "
        "override --server and --game.",
    )
    parser.add_argument(
        "--server",
        default=DEFAULT_SERVER,
        help=f"Server URL (default: {DEFAULT_SERVER})",
    )
    parser.add_argument("--game", default=None, help="Game file path (optional)")
    parser.add_argument(
        "--list-games", action="store_true", help="List games on the server and exit"
    )
    args = parser.parse_args(argv)

    # Environment variables take precedence, matching the server-side config
    args.server = os.environ.get("ZMACHINE_SERVER", args.server)
    args.game = os.environ.get("ZMACHINE_GAME", args.game)
    return args


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    client = GameServerClient(args.server, game_path=args.game)

    if args.list_games:
        try:
            games = client.list_games()
        except GameServerError as e:
            print(f"Failed to list games: {e}", file=sys.stderr)
            return 1
        for game in games:
            print(f"{game['name']}\t{game['path']}")
        return 0

    print("Z-Machine CLI Client")
    print(f"Server: {args.server}")
    if args.game:
        print(f"Game: {args.game}")
    print()

    return ZMachineCLI(client).run()


if __name__ == "__main__":
    sys.exit(main())
