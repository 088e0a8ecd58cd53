"""reclaim remove — delete one or more knowledge assets.

Removes each asset and everything derived from it:
  - vector index entries (batched)
  - file parts referencing it in its chat's messages
  - chunk rows
  - the asset metadata row

Usage:
  reclaim remove 3f2a…                   (single asset, asks for confirmation)
  reclaim remove 3f2a… 9c41… --yes       (batch)
  reclaim remove 3f2a… --owner user-42   (only if user-42 owns it)

Exit codes: 0 all deleted, 2 partial ("multi-status"), 1 nothing deleted.
"""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console

from reclaim.cli.errors import (
    err_asset_not_found,
    err_forbidden,
    err_index_delete_failed,
    err_metadata_delete_failed,
    warn_partial_failure,
    warn_scrub_incomplete,
)
from reclaim.cli.wiring import build_deleter, load_cli_config, open_existing_db, resolve_db
from reclaim.db.repository import Repository
from reclaim.errors import Forbidden, IndexDeleteFailed, MetadataDeleteFailed, NotFound
from reclaim.purge.results import BatchResult, BatchStatus, DeleteOutcome

console = Console()

EXIT_PARTIAL = 2


def remove_cmd(
    asset_ids: Annotated[
        list[str],
        typer.Argument(help="ID(s) of the asset(s) to delete."),
    ],
    owner: Annotated[
        str | None,
        typer.Option("--owner", "-o", help="Only delete assets owned by this user ID."),
    ] = None,
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
    """Delete knowledge assets from the vector index, chats and metadata."""
    cfg = load_cli_config(console, verbose)
    conn = open_existing_db(resolve_db(db, cfg), console)

    try:
        repo = Repository(conn)
        single = len(asset_ids) == 1

        if single:
            asset = repo.get_asset(asset_ids[0])
            if asset is None:
                console.print(err_asset_not_found(asset_ids[0]))
                raise typer.Exit(0)
            console.print(f"\nRemove {asset.kind.value}: [bold]{asset.file_name}[/]")
            console.print(
                f"  Chunks: {repo.count_chunks(asset)}  |  "
                f"Chat: {asset.chat_id or '(none)'}"
            )
        else:
            console.print(f"\nRemove [bold]{len(asset_ids)}[/] assets.")

        if not yes:
            if not typer.confirm("Confirm removal?", default=False):
                console.print("[dim]Cancelled.[/]")
                raise typer.Exit(0)

        deleter, indexes = build_deleter(conn, cfg)
        try:
            if single:
                outcome = deleter.delete_asset(asset_ids[0], owner_id=owner)
            else:
                result = deleter.delete_assets(asset_ids, owner_id=owner)
        finally:
            indexes.close()

    finally:
        conn.close()

    if single:
        _report_single(outcome, owner)
    else:
        _report_batch(result)


def _report_single(outcome: DeleteOutcome, owner: str | None) -> None:
    for warning in outcome.warnings:
        console.print(warn_scrub_incomplete(warning))

    if outcome.success:
        console.print(f"\n[green]✓[/] Removed: {outcome.display_name}")
        console.print(
            f"  {outcome.vectors_deleted} vector(s) deleted, "
            f"{outcome.messages_scrubbed} message(s) updated"
        )
        return

    if outcome.error_code == NotFound.code:
        console.print(err_asset_not_found(outcome.asset_id))
        raise typer.Exit(0)
    if outcome.error_code == Forbidden.code:
        console.print(err_forbidden(outcome.asset_id, owner or ""))
    elif outcome.error_code == IndexDeleteFailed.code:
        console.print(err_index_delete_failed(outcome.display_name, outcome.error or ""))
    elif outcome.error_code == MetadataDeleteFailed.code:
        console.print(err_metadata_delete_failed(outcome.display_name, outcome.error or ""))
    else:
        console.print(f"[red]Error:[/] {outcome.error}")
    raise typer.Exit(1)


def _report_batch(result: BatchResult) -> None:
    for outcome in result.outcomes:
        for warning in outcome.warnings:
            console.print(warn_scrub_incomplete(warning))

    if result.status is BatchStatus.COMPLETE:
        console.print(f"\n[green]✓[/] Deleted {result.deleted_count} item(s).")
        return

    if result.status is BatchStatus.PARTIAL:
        console.print(warn_partial_failure(result.deleted_count, result.failed_file_names))
        raise typer.Exit(EXIT_PARTIAL)

    console.print(
        f"[red]Error:[/] Failed to delete all {result.failed_count} item(s): "
        + ", ".join(result.failed_file_names)
    )
    raise typer.Exit(1)
