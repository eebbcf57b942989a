"""collect / zip / package / release commands."""

from __future__ import annotations

import typer

from deckpack.cli.commands._helpers import prompt, unwrap_or_exit
from deckpack.cli.context import build_context
from deckpack.services.archive import Archiver
from deckpack.services.collect import Collector
from deckpack.services.pipeline import ReleasePipeline


def collect(
    dry_run: bool = typer.Option(False, "--dry-run", help="Show what would be staged"),
) -> None:
    """Recreate the staging bundle from assets, manifest and built binaries."""
    ctx = build_context()
    bundle = unwrap_or_exit(
        Collector(project=ctx.project, console=ctx.console).collect(dry_run=dry_run), ctx
    )
    if not dry_run:
        ctx.console.success(str(bundle.root))


def zip_(
    dry_run: bool = typer.Option(False, "--dry-run", help="Show the archive that would be written"),
) -> None:
    """Compress the staging bundle into the release archive."""
    ctx = build_context()
    out = unwrap_or_exit(Archiver(project=ctx.project, console=ctx.console).archive(dry_run=dry_run), ctx)
    if not dry_run:
        ctx.console.success(str(out))


def package(
    jobs: int | None = typer.Option(None, "--jobs", "-j", min=1, help="Concurrent builds"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Print the steps without running them"),
) -> None:
    """Build every target, collect, and zip."""
    ctx = build_context()
    pipeline = ReleasePipeline(project=ctx.project, console=ctx.console)
    out = unwrap_or_exit(pipeline.package(jobs=jobs, dry_run=dry_run), ctx)
    if not dry_run:
        ctx.console.success(str(out))


def release(
    next_version: str | None = typer.Argument(
        None,
        metavar="[NEXT]",
        help="Version to release (default: git cliff --bumped-version)",
        show_default=False,
    ),
    jobs: int | None = typer.Option(None, "--jobs", "-j", min=1, help="Concurrent builds"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not prompt for confirmation"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Print the steps without running them"),
) -> None:
    """Bump, package, then commit and tag."""
    ctx = build_context()
    pipeline = ReleasePipeline(project=ctx.project, console=ctx.console, confirm=prompt)
    outcome = unwrap_or_exit(
        pipeline.release(next_version, jobs=jobs, dry_run=dry_run, assume_yes=yes), ctx
    )
    if not dry_run:
        ctx.console.success(f"released {outcome.tag}: {outcome.archive}")
