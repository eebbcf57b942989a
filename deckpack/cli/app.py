from __future__ import annotations

import os
from pathlib import Path

import typer

from deckpack import __version__
from deckpack.cli.commands.build_cmd import build, build_target_command
from deckpack.cli.commands.clean import clean
from deckpack.cli.commands.package_cmd import collect, package, release, zip_
from deckpack.cli.commands.verify_cmd import verify
from deckpack.cli.commands.version_cmd import bump, tag
from deckpack.core.errors import ErrorCode
from deckpack.core.project import ROOT_ENV_VAR, is_project_root


app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    rich_markup_mode="rich",
)


# Release steps
app.command()(bump)
app.command()(tag)
app.command("build-linux")(build_target_command("linux"))
app.command("build-mac")(build_target_command("mac"))
app.command("build-win")(build_target_command("win"))
app.command()(build)
app.command()(collect)
app.command("zip")(zip_)

# Composites
app.command()(package)
app.command()(release)

# Maintenance
app.command()(verify)
app.command()(clean)


@app.callback(invoke_without_command=True)
def _main(  # pyright: ignore[reportUnusedFunction]
    ctx: typer.Context,
    version: bool = typer.Option(False, "--version", help="Show version and exit."),
    root: Path | None = typer.Option(
        None,
        "--root",
        help="Plugin project root (overrides auto detection)",
    ),
) -> None:
    if version:
        typer.echo(__version__)
        raise typer.Exit(code=0)

    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        raise typer.Exit(code=0)

    if root is not None:
        try:
            resolved = root.expanduser().resolve()
        except OSError as e:
            typer.echo(f"error: invalid --root: {e}", err=True)
            raise typer.Exit(code=int(ErrorCode.USER_ERROR))

        if not resolved.is_dir() or not is_project_root(resolved):
            typer.echo(
                f"error: --root '{resolved}' is not a plugin project "
                "(missing deckpack.toml or manifest.json + Cargo.toml)",
                err=True,
            )
            raise typer.Exit(code=int(ErrorCode.ENV_ERROR))

        os.environ[ROOT_ENV_VAR] = str(resolved)


def main() -> None:
    app()
