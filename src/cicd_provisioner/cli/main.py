"""CLI entrypoint for the CI/CD provisioner."""

import logging
import sys
from pathlib import Path

import click
import questionary
from botocore.exceptions import BotoCoreError, ClientError

from cicd_provisioner.cli.errors import report_error
from cicd_provisioner.cli.status import all_present, print_status_table
from cicd_provisioner.cli.ui import QUESTIONARY_STYLE, console, report_step
from cicd_provisioner.config import ConfigError, ProvisionerConfig, load_config
from cicd_provisioner.core.provisioning import (
    ProvisioningError,
    check_deployment,
    create_session,
    provision,
)


def configure_logging(verbosity: int) -> None:
    """Configure root logging for the given -v count.

    Args:
        verbosity: Number of times -v was passed.
    """
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    # botocore is very chatty at DEBUG; only show it when asked for explicitly.
    logging.getLogger("botocore").setLevel(logging.DEBUG if verbosity >= 3 else logging.WARNING)


@click.group()
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="JSON configuration file.",
)
@click.option("--region", default=None, help="AWS region, overrides configuration.")
@click.option("--profile", default=None, help="AWS profile, overrides configuration.")
@click.option("-v", "--verbose", count=True, help="Increase log verbosity.")
@click.pass_context
def cli(
    ctx: click.Context,
    config_path: Path | None,
    region: str | None,
    profile: str | None,
    verbose: int,
) -> None:
    """Provision AWS resources for the web application CI/CD pipeline.

    Args:
        ctx: Click context for the command invocation.
        config_path: Optional JSON configuration file.
        region: AWS region override.
        profile: AWS profile override.
        verbose: Log verbosity.
    """
    configure_logging(verbose)
    try:
        config = load_config(config_path)
    except ConfigError as exc:
        raise click.UsageError(str(exc)) from exc

    if region:
        config.aws.region = region
    if profile:
        config.aws.profile = profile
    ctx.obj = config


@cli.command("provision")
@click.option("--yes", "-y", is_flag=True, help="Do not ask for confirmation.")
@click.pass_context
def provision_command(ctx: click.Context, yes: bool) -> None:
    """Create any missing resources and print the CI secrets."""
    config: ProvisionerConfig = ctx.obj

    if not yes and sys.stdin.isatty():
        confirmed = questionary.confirm(
            f"Provision resources in {config.aws.region}?",
            default=True,
            style=QUESTIONARY_STYLE,
        ).ask()
        if not confirmed:
            console.print("[yellow]Cancelled.[/yellow]")
            ctx.exit(1)

    console.print("[cyan]Setting up AWS infrastructure for CI/CD...[/cyan]")
    try:
        outputs = provision(config, report_step)
    except (ProvisioningError, ClientError, BotoCoreError) as exc:
        report_error(exc)
        ctx.exit(1)

    if outputs.created:
        console.print(f"[dim]Created: {', '.join(outputs.created)}[/dim]")
    console.print("[green]Done! Use the values below for your GitHub Secrets.[/green]")
    for key, value in outputs.secrets().items():
        click.echo(f"{key}: {value}")


@cli.command("status")
@click.pass_context
def status_command(ctx: click.Context) -> None:
    """Show which resources exist. Exits 1 if any are missing."""
    config: ProvisionerConfig = ctx.obj
    try:
        session = create_session(config)
        results = check_deployment(session, config)
    except (ClientError, BotoCoreError) as exc:
        report_error(exc)
        ctx.exit(1)

    print_status_table(config, results)
    if not all_present(results):
        ctx.exit(1)


@cli.command("show-config")
@click.pass_context
def show_config_command(ctx: click.Context) -> None:
    """Print the effective configuration as JSON."""
    config: ProvisionerConfig = ctx.obj
    click.echo(config.model_dump_json(indent=2))


def main() -> None:
    """Run the CLI."""
    cli()
