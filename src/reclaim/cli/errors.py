"""reclaim rich error messages — actionable feedback.

Every error shown to the user must contain:
  1. What went wrong (clear cause)
  2. The exact action the user should take to fix it

Usage:
    from reclaim.cli.errors import err_no_db
    console.print(err_no_db(".reclaim.db"))
    raise typer.Exit(1)
"""

from __future__ import annotations


def err_no_db(db_path: str = ".reclaim.db") -> str:
    """No database found at *db_path*."""
    return (
        f"[red]Error:[/] No database found at '{db_path}'.\n"
        "  Run:  reclaim init"
    )


def err_config(detail: str) -> str:
    """Config file could not be loaded."""
    return (
        f"[red]Error:[/] Invalid configuration.\n"
        f"  {detail}\n"
        "  Fix reclaim.yaml (or ~/.reclaim/config.yaml) and run the command again."
    )


def err_asset_not_found(asset_id: str) -> str:
    """Asset ID is not in the database (possibly already deleted)."""
    return (
        f"[yellow]Asset not found:[/] '{asset_id}' is not in the knowledge base.\n"
        "  It may already be deleted. Run:  reclaim status  to see what remains."
    )


def err_forbidden(asset_id: str, owner: str) -> str:
    """Requesting owner does not own the asset."""
    return (
        f"[red]Error:[/] Asset '{asset_id}' is not owned by '{owner}'.\n"
        "  Use the owning account's ID with --owner, or omit --owner for an admin removal."
    )


def err_index_delete_failed(file_name: str, detail: str) -> str:
    """Vector deletion failed; nothing else was touched for this asset."""
    return (
        f"[red]Error:[/] Could not delete vectors for '{file_name}': {detail}\n"
        "  The asset was left in place. Check the vector index, then run:  reclaim remove <asset-id>"
    )


def err_metadata_delete_failed(file_name: str, detail: str) -> str:
    """Metadata deletion failed after vectors were removed."""
    return (
        f"[red]Error:[/] '{file_name}' is still listed: metadata deletion failed ({detail}).\n"
        "  Its vectors are already gone. Re-run:  reclaim remove <asset-id>  to finish."
    )


def err_empty_matcher() -> str:
    """scrub called without any matcher field."""
    return (
        "[red]Error:[/] Nothing to match.\n"
        "  Use:  reclaim scrub --chat <chat-id> --url <url> | --key <key> | --name <file-name>"
    )


def warn_scrub_incomplete(detail: str) -> str:
    """Some messages kept their attachment reference."""
    return (
        f"[yellow]⚠[/] {detail}\n"
        "  Re-run:  reclaim scrub --chat <chat-id> ...  to retry the remaining messages."
    )


def warn_partial_failure(deleted: int, failed_names: list[str]) -> str:
    """Batch finished with some failures ("multi-status")."""
    listing = "\n".join(f"    ✗ {name}" for name in failed_names)
    return (
        f"[yellow]Partial:[/] Deleted {deleted} item(s), failed to delete {len(failed_names)}:\n"
        f"{listing}\n"
        "  Re-run:  reclaim remove <asset-id> ...  for the failed items (deletion is safe to repeat)."
    )
