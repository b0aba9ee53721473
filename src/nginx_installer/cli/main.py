"""Main CLI implementation using Typer."""

import asyncio
import logging
import sys
from pathlib import Path
from typing import List, Optional

import click
import typer
from pydantic import ValidationError
from rich.console import Console
from rich.table import Table

from nginx_installer.errors import ErrorKind, PreconditionError
from nginx_installer.models.config import InstallerSettings
from nginx_installer.models.install import InstallConfig
from nginx_installer.provisioner.config import load_settings
from nginx_installer.provisioner.engine import Provisioner, ProvisionResult
from nginx_installer.providers import ProviderRegistry
from nginx_installer.utils.logging import setup_logging


PROG_NAME = "install-nginx"

# Options that consume the following token as their value
VALUE_OPTIONS = {"--signing-key", "--path", "--user", "--pid-folder"}

logger = logging.getLogger(__name__)

# Create Typer app
app = typer.Typer(
    name=PROG_NAME,
    help="Install the vendor nginx binary to run as an unprivileged service.",
    add_completion=False,
)

# Console for rich output
console = Console()
err_console = Console(stderr=True)


async def _provision(settings: InstallerSettings, config: InstallConfig) -> ProvisionResult:
    """Build the providers and run the pipeline."""
    registry = ProviderRegistry()
    await registry.initialize(settings)
    provisioner = Provisioner(provider_registry=registry)
    return await provisioner.provision(config)


def _print_failure(result: ProvisionResult):
    error = result.error
    if error.kind == ErrorKind.PRECONDITION:
        err_console.print(f"[red]Error:[/red] host not ready, nothing was changed: {error}")
    else:
        err_console.print(f"[red]Error:[/red] {error}")
        if result.ran_steps:
            err_console.print(f"Completed steps left in place: {', '.join(result.ran_steps)}")


def _print_summary(settings: InstallerSettings, config: InstallConfig):
    table = Table(title="nginx installed")
    table.add_column("Item", style="cyan")
    table.add_column("Value")
    table.add_row("Binary", str(config.bin_dir / settings.repository.binary_name))
    table.add_row("Service user", config.service_user)
    table.add_row("PID folder", config.pid_folder)
    console.print(table)


@app.command()
def install(
    signing_key: Path = typer.Option(
        ..., "--signing-key", help="Vendor package signing key",
        exists=True, dir_okay=False,
    ),
    path: str = typer.Option("/opt/nginx", "--path", help="Install directory"),
    user: str = typer.Option("nginx", "--user", help="Service user"),
    pid_folder: str = typer.Option("/var/run/nginx", "--pid-folder", help="PID directory"),
):
    """Provision the host and install the nginx binary."""
    setup_logging()
    try:
        config = InstallConfig(
            signing_key_path=str(signing_key),
            install_path=path,
            service_user=user,
            pid_folder=pid_folder,
        )
    except ValidationError as e:
        messages = "; ".join(
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()
        )
        raise click.UsageError(messages, ctx=click.get_current_context())

    try:
        settings = load_settings()
    except PreconditionError as e:
        logger.error(str(e))
        raise typer.Exit(1)
    setup_logging(settings.installer.log_level)

    result = asyncio.run(_provision(settings, config))
    if not result.ok:
        _print_failure(result)
        raise typer.Exit(1)

    _print_summary(settings, config)


def _truncate_at_help(args: List[str]) -> List[str]:
    """Drop everything after the first --help seen in option position."""
    i = 0
    while i < len(args):
        token = args[i]
        if token == "--help":
            return args[:i + 1]
        i += 2 if token in VALUE_OPTIONS else 1
    return args


def run(args: Optional[List[str]] = None) -> int:
    """Run the CLI and return the process exit code."""
    if args is None:
        args = sys.argv[1:]

    try:
        rv = app(args=_truncate_at_help(list(args)), prog_name=PROG_NAME, standalone_mode=False)
    except click.ClickException as e:
        e.show()
        return 1
    except click.exceptions.Abort:
        return 1

    return rv if isinstance(rv, int) else 0


def main():
    """Main entry point for CLI."""
    sys.exit(run())
