"""reclaim scrub — remove attachment references from one chat.

Repairs chats left with stale file parts, e.g. after a deletion reported a
scrub warning. Safe to repeat: messages without matching parts are not
written.
"""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console

from reclaim.cli.errors import err_empty_matcher, warn_scrub_incomplete
from reclaim.cli.wiring import load_cli_config, open_existing_db, resolve_db
from reclaim.db.repository import Repository
from reclaim.errors import ScrubFailed
from reclaim.purge.matcher import AssetMatcher
from reclaim.purge.scrubber import ReferenceScrubber

console = Console()


def scrub_cmd(
    chat: Annotated[
        str,
        typer.Option("--chat", "-c", help="Chat whose messages are scrubbed."),
    ],
    url: Annotated[
        str | None,
        typer.Option("--url", help="Remove file parts with exactly this URL."),
    ] = None,
    key: Annotated[
        str | None,
        typer.Option("--key", help="Remove file parts whose URL contains this storage key."),
    ] = None,
    name: Annotated[
        str | None,
        typer.Option("--name", help="Remove file parts with exactly this file name."),
    ] = None,
    db: Annotated[
        Path | None,
        typer.Option("--db", help="Path to the reclaim database."),
    ] = None,
) -> None:
    """Remove file parts matching a URL, key or name from a chat's messages."""
    matcher = AssetMatcher(file_url=url, file_key=key, file_name=name)
    if matcher.is_empty:
        console.print(err_empty_matcher())
        raise typer.Exit(1)

    cfg = load_cli_config(console)
    conn = open_existing_db(resolve_db(db, cfg), console)
    try:
        modified = ReferenceScrubber(Repository(conn)).scrub(chat, matcher)
    except ScrubFailed as exc:
        console.print(warn_scrub_incomplete(str(exc)))
        console.print(f"  {exc.modified} message(s) updated before the failure.")
        raise typer.Exit(1) from None
    finally:
        conn.close()

    console.print(f"[green]✓[/] {modified} message(s) updated in chat {chat}.")
