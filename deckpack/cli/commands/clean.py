"""Clean command - remove build outputs."""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console

from deckpack.cli.context import build_context
from deckpack.core.errors import ErrorCode
from deckpack.platform.files import remove_tree

_console = Console()


def clean(
    all_: bool = typer.Option(False, "--all", help="Also remove the staging directory and archive"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Execute (default is dry-run)"),
) -> None:
    """Remove build outputs. Dry-run by default, use -y to execute."""
    ctx = build_context()
    project = ctx.project

    dirs: list[Path] = [project.target_dir]
    if all_:
        dirs.append(project.build_dir)

    existing = [d for d in dirs if d.exists()]
    if not existing:
        _console.print("[dim]Nothing to clean[/dim]")
        return

    if yes:
        _console.print("\n[bold red]EXECUTE[/bold red]\n")
    else:
        _console.print("\n[yellow]DRY-RUN[/yellow]\n")

    for d in existing:
        _console.print(f"  {d}", style="dim", markup=False)

    if not yes:
        _console.print("\n[dim]Use -y to execute[/dim]")
        return

    for d in existing:
        try:
            remove_tree(d)
        except PermissionError as e:
            # Container builds run as root and can leave root-owned files.
            _console.print(f"[red bold]error:[/red bold] {e}")
            _console.print(f"[dim]hint: sudo rm -rf {d}[/dim]")
            raise typer.Exit(code=int(ErrorCode.IO_ERROR))

    _console.print(f"\n[green]Removed {len(existing)} directories[/green]")
