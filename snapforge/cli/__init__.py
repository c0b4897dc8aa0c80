"""snapforge CLI: Typer-based command-line interface.

Provides the ``snapforge`` command with subcommands for running a full
build, inspecting the local resource manifest, and checking the status of
a remote build.

All output uses Rich for formatted terminal display.
"""
