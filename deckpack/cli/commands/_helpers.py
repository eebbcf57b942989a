"""Shared helpers for CLI commands."""

from __future__ import annotations

from typing import TYPE_CHECKING

import typer

from deckpack.core.result import Err, Result
from deckpack.output.errors import print_release_error, release_error_exit_code
from deckpack.services.errors import ReleaseError

if TYPE_CHECKING:
    from deckpack.cli.context import CLIContext


def unwrap_or_exit[T](result: Result[T, ReleaseError], ctx: CLIContext) -> T:
    """Return the Ok value, or print the error and exit with its code."""
    if isinstance(result, Err):
        print_release_error(result.error, ctx.console)
        raise typer.Exit(code=release_error_exit_code(result.error))
    return result.value


def prompt(message: str) -> bool:
    """Operator confirmation; anything but an explicit yes declines."""
    return typer.confirm(message, default=False)
