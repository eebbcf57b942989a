"""Build commands - one container build per target."""

from __future__ import annotations

from collections.abc import Callable

import typer

from deckpack.cli.commands._helpers import unwrap_or_exit
from deckpack.cli.context import build_context
from deckpack.core.config import BuildTarget
from deckpack.core.errors import ErrorCode
from deckpack.services.cross_build import CrossBuildRunner


def build_target_command(name: str) -> Callable[..., None]:
    """Create the ``build-<name>`` command for a fixed target."""

    def command(
        dry_run: bool = typer.Option(False, "--dry-run", help="Print the command without running it"),
    ) -> None:
        ctx = build_context()
        target = ctx.project.config.build.target(name)
        if target is None:
            ctx.console.error(f"build target '{name}' is not configured")
            raise typer.Exit(code=int(ErrorCode.USER_ERROR))

        runner = CrossBuildRunner(project=ctx.project, console=ctx.console)
        path = unwrap_or_exit(runner.build(target, dry_run=dry_run), ctx)
        if not dry_run:
            ctx.console.success(str(path))

    command.__doc__ = f"Cross-compile the plugin for the '{name}' target."
    return command


def build(
    targets: list[str] | None = typer.Argument(
        None, help="Targets to build (default: all configured targets)", show_default=False
    ),
    jobs: int | None = typer.Option(
        None, "--jobs", "-j", min=1, help="Concurrent builds (default: one per target)"
    ),
    dry_run: bool = typer.Option(False, "--dry-run", help="Print the commands without running them"),
) -> None:
    """Cross-compile several targets concurrently and wait for all of them."""
    ctx = build_context()
    config = ctx.project.config.build

    selected: list[BuildTarget] = []
    for name in targets or config.target_names:
        target = config.target(name)
        if target is None:
            ctx.console.error(f"unknown build target: {name}")
            ctx.console.info(f"available: {', '.join(config.target_names)}")
            raise typer.Exit(code=int(ErrorCode.USER_ERROR))
        selected.append(target)

    runner = CrossBuildRunner(project=ctx.project, console=ctx.console)
    paths = unwrap_or_exit(runner.build_all(tuple(selected), jobs=jobs, dry_run=dry_run), ctx)
    if not dry_run:
        for p in paths:
            ctx.console.success(str(p))
