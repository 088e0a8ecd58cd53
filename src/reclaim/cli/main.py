"""reclaim CLI entry point."""

from __future__ import annotations

import importlib.metadata
from typing import Annotated

import typer

from reclaim.cli.init import init_cmd
from reclaim.cli.remove import remove_cmd
from reclaim.cli.scrub import scrub_cmd
from reclaim.cli.status import status_cmd
from reclaim.cli.wipe import wipe_cmd


def _installed_version() -> str:
    try:
        return importlib.metadata.version("reclaim")
    except importlib.metadata.PackageNotFoundError:
        return "dev"


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"reclaim {_installed_version()}")
        raise typer.Exit()


app = typer.Typer(
    name="reclaim",
    help=(
        "reclaim — delete knowledge assets and keep every store consistent.\n\n"
        "  reclaim remove  Delete assets from the vector index, chats and metadata.\n"
        "  reclaim wipe    Delete everything a user owns."
    ),
    add_completion=False,
)


@app.callback()
def main_callback(
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            callback=_version_callback,
            is_eager=True,
            help="Show version and exit.",
        ),
    ] = False,
) -> None:
    """reclaim — knowledge asset deletion CLI."""


app.command("init")(init_cmd)
app.command("status")(status_cmd)
app.command("remove")(remove_cmd)
app.command("wipe")(wipe_cmd)
app.command("scrub")(scrub_cmd)


@app.command("version")
def version_cmd() -> None:
    """Show the installed reclaim version."""
    typer.echo(f"reclaim {_installed_version()}")


if __name__ == "__main__":
    app()
