"""Shared Rich console for the CLI."""

import questionary
from rich.console import Console

console = Console()

QUESTIONARY_STYLE = questionary.Style(
    [
        ("qmark", "fg:#5f819d"),
        ("question", "fg:#e0e0e0 bold"),
        ("answer", "fg:#FF9D00 bold"),
        ("instruction", "fg:#e0e0e0"),
    ]
)


def report_step(message: str) -> None:
    """Report provisioning progress to the user.

    Args:
        message: Progress message to display.
    """
    console.print(f"[bold cyan]•[/bold cyan] {message}", highlight=False)
