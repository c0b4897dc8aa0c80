"""``snapforge manifest``: show the local resource manifest.

Runs the manifest builder only; nothing is sent to the service. Useful to
check asset globs and URL prefixes before a real build.
"""

from __future__ import annotations

import typer
from rich.table import Table

from snapforge.cli.console import configure_logging, console
from snapforge.config import ClientConfig
from snapforge.core.manifest import gather_build_resources


def manifest_cmd(
    assets: list[str] = typer.Option(..., "--assets", "-a", help="Glob of static assets. Repeatable."),
    strip: list[str] = typer.Option([], "--strip", "-s", help="Path prefix to strip. Repeatable."),
) -> None:
    """List the resources a build would declare."""
    config = ClientConfig()
    configure_logging(config.log_level)

    manifest = gather_build_resources(assets, strip, max_file_size=config.max_file_size_bytes)
    if not manifest:
        console.print("[dim]No resources matched.[/dim]")
        return

    table = Table(title=f"Resource manifest ({len(manifest)} resources)")
    table.add_column("URL", style="cyan")
    table.add_column("SHA-256", style="green")
    table.add_column("Local path", style="dim")
    for resource in manifest.resources():
        table.add_row(resource.url, resource.sha[:16], str(resource.local_path))
    console.print(table)
