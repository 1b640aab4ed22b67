"""Confirmation strategies for warn-tier commands."""

import sys
from abc import ABC, abstractmethod

from rich.console import Console
from rich.markup import escape

from warden.command_policy.models import CommandVerdict


class ConfirmationStrategy(ABC):
    """Abstract base class for command confirmation strategies.

    A strategy answers one question: should this warn-tier command run once?
    The answer is turned into the ``confirmed`` flag of a second
    ``CommandGate.authorize`` call; strategies never execute anything.
    """

    @abstractmethod
    async def confirm(self, command: str, verdict: CommandVerdict) -> bool:
        """Request confirmation for a command.

        Args:
            command: The command awaiting confirmation
            verdict: The warn verdict that paused it

        Returns:
            True if allowed, False if denied
        """
        pass


class AutoDenyConfirmationStrategy(ConfirmationStrategy):
    """Always denies (``warden exec --no-prompt``)."""

    async def confirm(self, command: str, verdict: CommandVerdict) -> bool:
        return False


class AutoAllowConfirmationStrategy(ConfirmationStrategy):
    """Always allows (``warden exec --yes``)."""

    async def confirm(self, command: str, verdict: CommandVerdict) -> bool:
        return True


class CLIConfirmationStrategy(ConfirmationStrategy):
    """Interactive confirmation on the terminal.

    When stdin is not a TTY the request is denied without prompting.
    """

    def __init__(self, console: Console | None = None) -> None:
        self._console = console or Console()

    async def confirm(self, command: str, verdict: CommandVerdict) -> bool:
        self._console.print("\n[yellow]Command Confirmation Required[/yellow]")
        self._console.print(f"Command: [cyan]{escape(command)}[/cyan]")
        self._console.print(f"Reason: {verdict.reason} [dim]({verdict.matched_rule})[/dim]")
        for suggestion in verdict.suggestions:
            self._console.print(f"[dim]- {suggestion}[/dim]")

        if not sys.stdin.isatty():
            self._console.print("[dim]Non-interactive mode, command denied.[/dim]")
            return False

        while True:
            response = (
                self._console.input("[yellow]Run this command once?[/yellow] [y/N] ")
                .strip()
                .lower()
            )
            if response in ("y", "yes"):
                return True
            if response in ("", "n", "no"):
                return False
