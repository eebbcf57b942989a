from __future__ import annotations

from dataclasses import dataclass

import typer

from deckpack.core.config import CONFIG_FILENAME, load_config_or_default
from deckpack.core.errors import ErrorCode
from deckpack.core.project import Project, detect_root
from deckpack.core.result import Err
from deckpack.output.console import ConsoleProtocol, RichConsole


@dataclass(frozen=True, slots=True)
class CLIContext:
    project: Project
    console: ConsoleProtocol


def build_context() -> CLIContext:
    root_result = detect_root()
    if isinstance(root_result, Err):
        typer.echo(f"error: {root_result.error.message}", err=True)
        raise typer.Exit(code=int(ErrorCode.ENV_ERROR))

    root = root_result.value
    config_result = load_config_or_default(root / CONFIG_FILENAME)
    if isinstance(config_result, Err):
        typer.echo(f"error: {config_result.error.message}", err=True)
        raise typer.Exit(code=int(ErrorCode.ENV_ERROR))

    return CLIContext(
        project=Project(root=root, config=config_result.value),
        console=RichConsole(),
    )
