"""``snapforge run``: execute a complete build.

Creates the build from the asset globs, uploads missing resources,
snapshots each HTML file given with ``--snapshot``, finalizes the build
and, with ``--report-results``, waits for the diff result. Exits with
status 2 when the build fails or visual differences are found.
"""

from __future__ import annotations

import asyncio
from pathlib import Path

import typer
from rich.panel import Panel

from snapforge.cli.console import configure_logging, console
from snapforge.config import ClientConfig
from snapforge.core.failure import FATAL_EXIT_CODE
from snapforge.core.guard import MissingCredentialsError
from snapforge.core.session import BuildSession
from snapforge.models.build import PollResult


def parse_pair(value: str, option: str) -> tuple[str, str]:
    """Split a ``name=value`` option into its two halves."""
    name, sep, rest = value.partition("=")
    if not sep or not name or not rest:
        raise typer.BadParameter(f"expected name=value, got {value!r}", param_hint=option)
    return name.strip(), rest.strip()


def parse_breakpoints(values: list[str]) -> dict[str, int]:
    breakpoints: dict[str, int] = {}
    for value in values:
        name, width = parse_pair(value, "--breakpoint")
        try:
            breakpoints[name] = int(width)
        except ValueError:
            raise typer.BadParameter(
                f"width for {name!r} must be an integer, got {width!r}",
                param_hint="--breakpoint",
            ) from None
    return breakpoints


async def run_build(
    session: BuildSession,
    assets: list[str],
    strip: list[str],
    breakpoints: dict[str, int],
    snapshots: list[tuple[str, str]],
    *,
    enable_js: bool = False,
    report_results: bool = False,
    debug: bool = False,
) -> PollResult | None:
    """Drive one session from setup to finalize."""
    try:
        session.setup(assets, strip, breakpoints, debug=debug)
        for name, html in snapshots:
            session.snapshot(name, html, enable_javascript=enable_js)
        return await session.finalize_build(report_results=report_results)
    finally:
        await session.aclose()


def run_cmd(
    assets: list[str] = typer.Option(
        ...,
        "--assets",
        "-a",
        help="Glob of static assets to upload, e.g. 'dist/assets/**'. Repeatable.",
    ),
    strip: list[str] = typer.Option(
        [],
        "--strip",
        "-s",
        help="Path prefix removed from asset paths to form their URL. Repeatable.",
    ),
    breakpoint: list[str] = typer.Option(
        [],
        "--breakpoint",
        "-b",
        help="Breakpoint as name=width, e.g. small=320. Repeatable.",
    ),
    snapshot: list[str] = typer.Option(
        [],
        "--snapshot",
        help="Snapshot as name=path/to/page.html. Repeatable.",
    ),
    enable_js: bool = typer.Option(False, "--enable-js", help="Render snapshots with JavaScript."),
    report_results: bool = typer.Option(
        False, "--report-results", "-r", help="Wait for processing and report diffs."
    ),
    debug: bool = typer.Option(False, "--debug", help="Log manifest and response details."),
) -> None:
    """Run a full visual-regression build."""
    config = ClientConfig()
    configure_logging(config.log_level, debug=debug or config.debug)

    breakpoints = parse_breakpoints(breakpoint)
    pages: list[tuple[str, str]] = []
    for value in snapshot:
        name, path = parse_pair(value, "--snapshot")
        try:
            pages.append((name, Path(path).read_text(encoding="utf-8")))
        except (OSError, UnicodeDecodeError) as e:
            console.print(f"[bold red]Cannot read snapshot {name!r}:[/bold red] {e}")
            raise typer.Exit(code=1)

    session = BuildSession(config)
    try:
        result = asyncio.run(
            run_build(
                session,
                assets,
                strip,
                breakpoints,
                pages,
                enable_js=enable_js,
                report_results=report_results,
                debug=debug,
            )
        )
    except (MissingCredentialsError, OSError) as e:
        console.print(f"[bold red]Build not started:[/bold red] {e}")
        raise typer.Exit(code=1)

    build = session.build
    lines = [
        f"[bold]Build:[/bold]      {build.id if build else '-'}",
        f"[bold]Report:[/bold]     {build.web_url if build else '-'}",
        f"[bold]Resources:[/bold]  {len(session.manifest)} in manifest, "
        f"{len(session.build_uploads)} uploaded",
        f"[bold]Snapshots:[/bold]  {len(session.snapshots)}",
    ]
    if result is not None:
        lines.append(f"[bold]Result:[/bold]     {result.outcome.value} after {result.polls} polls")
    style = "green" if result is None or result.passed else "red"
    console.print(Panel("\n".join(lines), title="[bold]snapforge[/bold]", border_style=style))

    if result is not None and not result.passed:
        raise typer.Exit(code=FATAL_EXIT_CODE)
