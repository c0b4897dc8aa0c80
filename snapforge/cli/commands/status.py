"""``snapforge status BUILD_ID``: show the processing status of a build."""

from __future__ import annotations

import asyncio

import typer

from snapforge.bridge.gateway import GatewayError
from snapforge.bridge.http_gateway import PercyHttpGateway
from snapforge.cli.console import configure_logging, console
from snapforge.config import ClientConfig
from snapforge.core.guard import MissingCredentialsError, enforce_credentials
from snapforge.models.build import BuildStatus


async def fetch_status(gateway: PercyHttpGateway, build_id: str) -> BuildStatus:
    try:
        return await gateway.get_build_status(build_id)
    finally:
        await gateway.aclose()


def status_cmd(
    build_id: str = typer.Argument(..., help="The remote build ID."),
) -> None:
    """Print the remote state and diff count of a build."""
    config = ClientConfig()
    configure_logging(config.log_level)
    try:
        enforce_credentials(config)
        status = asyncio.run(fetch_status(PercyHttpGateway(config), build_id))
    except (MissingCredentialsError, GatewayError) as e:
        console.print(f"[bold red]Status check failed:[/bold red] {e}")
        raise typer.Exit(code=1)

    colour = {"finished": "green", "failed": "red"}.get(status.state, "yellow")
    console.print(f"[bold]Build {build_id}:[/bold] [{colour}]{status.state}[/{colour}]")
    if status.total_diffs is not None:
        console.print(f"[bold]Diffs:[/bold] {status.total_diffs}")
    if status.failure_reason:
        console.print(f"[bold]Failure reason:[/bold] {status.failure_reason}")
    if status.web_url:
        console.print(f"[dim]{status.web_url}[/dim]")
