"""verify command - read-only pre-flight report."""

from __future__ import annotations

import typer

from deckpack.cli.context import build_context
from deckpack.core.errors import ErrorCode
from deckpack.output.console import Style
from deckpack.services.pipeline import ReleasePipeline


def verify() -> None:
    """Check version agreement and build outputs without changing anything."""
    ctx = build_context()
    console = ctx.console
    report = ReleasePipeline(project=ctx.project, console=console).preflight()

    console.header("Versions")
    for name, version in report.versions:
        if version is None:
            console.error(f"{name}: version field not found")
        else:
            console.print(f"  {name}: {version}")
    if report.versions_agree:
        console.success("declaration files agree")
    else:
        console.warning("declaration files disagree")

    console.header("Artifacts")
    for a in report.artifacts:
        if a.present:
            console.success(f"{a.target.name}: {a.path}")
        else:
            console.warning(f"{a.target.name}: missing ({a.path})")

    console.header("Outputs")
    console.print(
        f"  bundle: {'present' if report.bundle_present else 'absent'} ({ctx.project.staging_dir})",
        Style.DIM,
    )
    console.print(
        f"  archive: {'present' if report.archive_present else 'absent'} ({ctx.project.archive_path})",
        Style.DIM,
    )

    if not report.ok:
        raise typer.Exit(code=int(ErrorCode.USER_ERROR))
