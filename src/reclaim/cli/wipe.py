"""reclaim wipe — delete every knowledge asset an owner holds.

Covers the owner's uploaded documents and analyzed images; shared library
documents are left alone. Exit codes follow reclaim remove.
"""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console

from reclaim.cli.errors import warn_partial_failure
from reclaim.cli.remove import EXIT_PARTIAL
from reclaim.cli.wiring import build_deleter, load_cli_config, open_existing_db, resolve_db
from reclaim.db.repository import Repository
from reclaim.purge.results import BatchStatus

console = Console()


def wipe_cmd(
    owner: Annotated[
        str,
        typer.Option("--owner", "-o", help="User ID whose assets are deleted."),
    ],
    db: Annotated[
        Path | None,
        typer.Option("--db", help="Path to the reclaim database."),
    ] = None,
    yes: Annotated[
        bool,
        typer.Option("--yes", "-y", help="Skip confirmation prompt."),
    ] = False,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Log every pipeline step."),
    ] = False,
) -> None:
    """Delete all documents and images owned by a user."""
    cfg = load_cli_config(console, verbose)
    conn = open_existing_db(resolve_db(db, cfg), console)

    try:
        assets = Repository(conn).list_assets_by_owner(owner)
        if not assets:
            console.print(f"[dim]No assets owned by '{owner}'.[/]")
            raise typer.Exit(0)

        console.print(f"\nWipe [bold]{len(assets)}[/] asset(s) owned by [bold]{owner}[/]")
        if not yes:
            if not typer.confirm("Confirm removal?", default=False):
                console.print("[dim]Cancelled.[/]")
                raise typer.Exit(0)

        deleter, indexes = build_deleter(conn, cfg)
        try:
            result = deleter.delete_all_assets_for_owner(owner)
        finally:
            indexes.close()
    finally:
        conn.close()

    if result.status is BatchStatus.COMPLETE:
        console.print(f"\n[green]✓[/] Deleted {result.deleted} item(s).")
        return
    if result.status is BatchStatus.PARTIAL:
        console.print(warn_partial_failure(result.deleted, result.failed_file_names))
        raise typer.Exit(EXIT_PARTIAL)
    console.print(
        f"[red]Error:[/] Failed to delete {result.failed} item(s): "
        + ", ".join(result.failed_file_names)
    )
    raise typer.Exit(1)
