"""Console transport for TaskPilot."""

import select
import sys
from typing import TextIO

from rich.console import Console
from rich.markup import escape

from taskpilot.config import Config, get_config
from taskpilot.logging import get_logger

log = get_logger(__name__)


HELP_TEXT = """
Commands:
  /help           - Show this help message
  /reset          - Forget the remote conversation history
  /config         - Show configuration
  /exit, /quit    - Exit the application

  Include the word "complex" to run a message through task handling.
"""


class ConsoleAdapter:
    """Line-oriented console adapter.

    Lines that are already buffered when a line is read (a paste) are merged
    into the same message.
    """

    def __init__(
        self,
        config: Config | None = None,
        stdin: TextIO | None = None,
        console: Console | None = None,
    ):
        self.config = config or get_config()
        self.stdin = stdin or sys.stdin
        self.console = console or Console(highlight=False)
        self._special_commands = ["/help", "/reset", "/config", "/exit", "/quit"]

    def _has_pending_input(self) -> bool:
        """Whether more stdin data is ready within the paste window."""
        try:
            if not self.stdin.isatty():
                return False
            fd = self.stdin.fileno()
        except (AttributeError, OSError, ValueError):
            return False
        timeout = max(self.config.ui.paste_window_ms, 0) / 1000
        try:
            ready, _, _ = select.select([fd], [], [], timeout)
        except (OSError, ValueError):
            return False
        return bool(ready)

    def _read_line(self) -> str:
        line = self.stdin.readline()
        if line == "":
            raise EOFError
        return line.rstrip("\r\n")

    def receive_message(self, prompt_text: str = "> ") -> str:
        """Read one message from the console."""
        if prompt_text:
            self.console.print(prompt_text, end="")
        lines = [self._read_line()]
        while self._has_pending_input():
            try:
                lines.append(self._read_line())
            except EOFError:
                break
        if len(lines) > 1:
            log.debug("Merged pasted input", lines=len(lines))
        return "\n".join(lines)

    def send_message(self, message: str) -> None:
        """Print a reply."""
        self.console.print(escape(f"{self.config.ui.reply_prefix}{message}"))

    def print_error(self, error: str) -> None:
        self.console.print(f"[red]Error:[/red] {escape(error)}")

    def print_welcome(self) -> None:
        self.console.print("[bold cyan]=== TaskPilot ===[/bold cyan]")
        self.console.print(
            f"Type your message or '{escape(self.config.ui.exit_command)}' to quit. Type '/help' for commands.\n"
        )

    def print_help(self) -> None:
        self.console.print(HELP_TEXT)

    def print_config(self, config: Config) -> None:
        self.console.print("\n=== Current Configuration ===")
        self.console.print(f"Provider: {config.model.provider}")
        self.console.print(f"Model: {config.model.model}")
        self.console.print(f"Max tokens: {config.model.max_tokens}")
        self.console.print(f"Reevaluations: {config.tasks.max_reevaluations}")
        self.console.print(f"Stop on sentinel: {config.tasks.stop_on_sentinel}")
        self.console.print(f"User: {config.user.id}")
        self.console.print()

    def handle_special_command(self, cmd: str) -> str | None:
        """Translate console commands.

        Returns the plain message for non-commands and unrecognised slash
        input, a command token for known commands, and None when the input
        was consumed here.
        """
        stripped = cmd.strip()
        if stripped == self.config.ui.exit_command:
            return "EXIT"
        if not stripped.startswith("/"):
            return cmd

        command = stripped.split(None, 1)[0].lower()
        if command in ("/help", "/h", "/?"):
            self.print_help()
            return None
        elif command == "/reset":
            return "RESET"
        elif command == "/config":
            return "CONFIG"
        elif command in ("/exit", "/quit", "/q"):
            return "EXIT"

        # Anything else, like a path, is an ordinary message.
        return cmd
