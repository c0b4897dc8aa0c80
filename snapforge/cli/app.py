"""Main Typer application: imports and registers all CLI commands.

Entry point: ``snapforge`` (configured via pyproject.toml console_scripts).
"""

from __future__ import annotations

import typer

from snapforge.cli.commands.manifest_cmd import manifest_cmd
from snapforge.cli.commands.run import run_cmd
from snapforge.cli.commands.status import status_cmd

app = typer.Typer(
    name="snapforge",
    help="snapforge: visual-regression builds against the Percy API.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    add_completion=False,
)

# Register subcommands
app.command(name="run", help="Create a build, upload assets and snapshots, finalize.")(run_cmd)
app.command(name="manifest", help="Show the local resource manifest.")(manifest_cmd)
app.command(name="status", help="Show the processing status of a build.")(status_cmd)


def main() -> None:
    """CLI entry point."""
    app()


if __name__ == "__main__":
    main()
