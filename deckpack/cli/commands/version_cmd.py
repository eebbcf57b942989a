"""bump / tag commands - the operator-gated release steps."""

from __future__ import annotations

import typer

from deckpack.cli.commands._helpers import prompt, unwrap_or_exit
from deckpack.cli.context import build_context
from deckpack.services.tagging import TagService
from deckpack.services.versioning import VersionSynchronizer


def bump(
    next_version: str | None = typer.Argument(
        None,
        metavar="[NEXT]",
        help="Version to write (default: git cliff --bumped-version)",
        show_default=False,
    ),
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not prompt for confirmation"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Show the new version without writing"),
) -> None:
    """Write the next version into manifest.json and Cargo.toml."""
    ctx = build_context()
    svc = VersionSynchronizer(project=ctx.project, console=ctx.console, confirm=prompt)
    version = unwrap_or_exit(svc.bump(next_version, dry_run=dry_run, assume_yes=yes), ctx)
    if not dry_run:
        ctx.console.success(f"version {version}")


def tag(
    next_version: str | None = typer.Argument(
        None,
        metavar="[NEXT]",
        help="Version to tag (default: git cliff --bumped-version)",
        show_default=False,
    ),
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not prompt for confirmation"),
    dry_run: bool = typer.Option(
        False, "--dry-run", help="Preview the changelog; do not write, commit or tag"
    ),
) -> None:
    """Regenerate the changelog, commit and create the release tag."""
    ctx = build_context()
    svc = TagService(project=ctx.project, console=ctx.console, confirm=prompt)
    created = unwrap_or_exit(svc.tag(next_version, dry_run=dry_run, assume_yes=yes), ctx)
    if not dry_run:
        ctx.console.success(f"tagged {created}")
