"""Status table rendering for the CLI."""

from rich.table import Table

from cicd_provisioner.cli.ui import console
from cicd_provisioner.config.models import ProvisionerConfig
from cicd_provisioner.core.provisioning import status_targets


def print_status_table(config: ProvisionerConfig, results: dict[str, str]) -> None:
    """Print a provisioning status table.

    Args:
        config: Provisioner configuration.
        results: Status values keyed by resource name.
    """
    targets = status_targets(config)
    table = Table(title="Provisioned resources", show_header=True, header_style="bold cyan")
    table.add_column("Resource", style="white", no_wrap=True)
    table.add_column("Name/ID", style="bright_white")
    table.add_column("Status", style="white", no_wrap=True)

    for name, status in results.items():
        table.add_row(name, targets.get(name, "-"), style_status(status))

    console.print(table)


def style_status(status: str) -> str:
    """Return a Rich-markup status string.

    Args:
        status: Resource status string.

    Returns:
        Colourised status text.
    """
    if status.startswith("present"):
        return f"[green]{status}[/green]"
    if status.startswith("missing") or status == "not set":
        return f"[yellow]{status}[/yellow]"
    return f"[red]{status}[/red]"


def all_present(results: dict[str, str]) -> bool:
    """Return true when every resource is present.

    Args:
        results: Status values keyed by resource name.

    Returns:
        True when nothing is missing or failing.
    """
    return all(status.startswith("present") for status in results.values())
