"""reclaim init — create the database and a project config.

Creates:
  .reclaim.db     — empty stores with schema
  reclaim.yaml    — project config template (left untouched if present)
"""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console

from reclaim.config import default_project_config
from reclaim.db.connection import open_database

console = Console()

_DEFAULT_PROJECT_DIR = Path(".")


def init_cmd(
    project_dir: Annotated[
        Path,
        typer.Argument(help="Directory to initialize. Defaults to current directory."),
    ] = _DEFAULT_PROJECT_DIR,
) -> None:
    """Create an empty reclaim database and reclaim.yaml."""
    project_dir = project_dir.resolve()
    project_dir.mkdir(parents=True, exist_ok=True)

    db_path = project_dir / ".reclaim.db"
    existed = db_path.exists()
    conn = open_database(db_path)
    conn.close()
    if existed:
        console.print(f"  [green]✓[/] {db_path} (schema up to date, data preserved)")
    else:
        console.print(f"  [green]✓[/] {db_path}")

    cfg_path = project_dir / "reclaim.yaml"
    if cfg_path.exists():
        console.print(f"  [dim]{cfg_path} already exists — left unchanged.[/]")
    else:
        cfg_path.write_text(default_project_config(), encoding="utf-8")
        console.print(f"  [green]✓[/] {cfg_path}")

    console.print("\nNext steps:")
    console.print("  1. reclaim status                 (inspect the knowledge base)")
    console.print("  2. reclaim remove <asset-id>      (delete an asset everywhere)")
