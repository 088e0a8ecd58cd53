"""reclaim status — knowledge base overview and consistency check.

Shows assets per kind, chunk rows, local vectors, and orphaned vector
entries (vectors whose chunk row no longer exists).
"""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from reclaim.cli.wiring import load_cli_config, resolve_db
from reclaim.config import ReclaimConfig
from reclaim.db.connection import open_database
from reclaim.db.repository import Repository
from reclaim.index.sqlite_vec import SqliteVecIndex, vec_table_name

console = Console()


def status_cmd(
    db: Annotated[
        Path | None,
        typer.Option("--db", help="Path to the reclaim database."),
    ] = None,
) -> None:
    """Show knowledge base counts and orphaned vector entries."""
    cfg = load_cli_config(console)
    db_path = resolve_db(db, cfg)

    if not db_path.exists():
        console.print(
            Panel(
                "[yellow]No database found.[/]\n"
                "  Run:  reclaim init",
                title="[bold]Knowledge Base[/]",
                expand=False,
            )
        )
        return

    conn = open_database(db_path)
    try:
        local_index = SqliteVecIndex(conn, vec_table_name(cfg.vector.model))
        _show_knowledge_panel(db_path, Repository(conn), local_index, cfg)
    finally:
        conn.close()


def _show_knowledge_panel(
    db_path: Path, repo: Repository, local_index: SqliteVecIndex, cfg: ReclaimConfig
) -> None:
    counts = repo.count_assets_by_kind()

    table = Table(show_header=False, box=None, padding=(0, 1))
    table.add_column("Kind", style="bold")
    table.add_column("Count", justify="right")
    for kind, count in counts.items():
        table.add_row(kind.value, f"{count:,}")
    table.add_row("chunks", f"{repo.count_all_chunks():,}")

    if cfg.vector.backend == "sqlite-vec":
        table.add_row("vectors", f"{local_index.count():,}")
        orphaned = repo.count_orphaned_vectors()
        style = "[yellow]" if orphaned else "[green]"
        table.add_row("orphaned vectors", f"{style}{orphaned:,}[/]")
    else:
        table.add_row("vectors", f"[dim]remote ({cfg.vector.backend})[/]")

    size_mb = db_path.stat().st_size / (1024 * 1024)
    console.print(
        Panel(
            table,
            title=f"[bold]Knowledge Base[/] [dim]{db_path} ({size_mb:.1f} MB)[/]",
            expand=False,
        )
    )
