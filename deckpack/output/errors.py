"""Error presentation utilities.

Centralized error formatting and exit code mapping for consistent UX.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from deckpack.core.errors import ErrorCode
from deckpack.output.console import Style
from deckpack.services.errors import (
    Aborted,
    ArchiveFailure,
    BuildFailure,
    ChangelogFailed,
    DirtyState,
    GitFailed,
    InvalidVersion,
    MissingArtifact,
    MissingInput,
    PatternNotFound,
    ReleaseError,
    TagExists,
    ToolMissing,
    VersionMismatch,
)

if TYPE_CHECKING:
    from deckpack.output.console import ConsoleProtocol

__all__ = ["print_release_error", "release_error_exit_code"]


def print_release_error(error: ReleaseError, console: ConsoleProtocol) -> None:
    """Print a pipeline error with its hint lines."""
    match error:
        case DirtyState(staged=staged):
            console.error("staged changes found; commit or unstage them before bumping")
            for path in staged:
                console.print(f"  {path}", Style.DIM)
        case InvalidVersion(value=value):
            console.error(f"invalid version: {value!r}")
            console.print("hint: expected MAJOR.MINOR.PATCH[-PRERELEASE]", Style.DIM)
        case Aborted(step=step):
            console.error(f"{step}: aborted, nothing was changed by this step")
        case PatternNotFound(path=path, pattern=pattern):
            console.error(f"version field not found in {path}")
            console.print(f"pattern: {pattern}", Style.DIM)
        case VersionMismatch(versions=versions, expected=expected):
            console.error("declaration files do not agree on the version")
            for name, version in versions:
                console.print(f"  {name}: {version}", Style.DIM)
            if expected is not None:
                console.print(f"  expected: {expected}", Style.DIM)
        case TagExists(tag=tag):
            console.error(f"tag {tag} already exists")
        case ToolMissing(tool=tool, hint=hint):
            console.error(f"{tool}: missing")
            console.print(f"hint: {hint}", Style.DIM)
        case ChangelogFailed(returncode=rc, detail=detail):
            console.error(f"git cliff failed (exit {rc})")
            if detail:
                console.print(detail, Style.DIM)
        case GitFailed(command=command, returncode=rc, detail=detail):
            console.error(f"git {command} failed (exit {rc})")
            if detail:
                console.print(detail, Style.DIM)
        case BuildFailure(target=target, returncode=rc):
            console.error(f"build {target} failed (exit {rc})")
        case MissingArtifact(target=target, path=path):
            console.error(f"missing artifact for target {target}: {path}")
            console.print(f"hint: run build-{target} first", Style.DIM)
        case MissingInput(path=path):
            console.error(f"missing bundle input: {path}")
        case ArchiveFailure(path=path, reason=reason):
            console.error(f"cannot write {path}: {reason}")


def release_error_exit_code(error: ReleaseError) -> int:
    match error:
        case DirtyState() | InvalidVersion() | Aborted() | VersionMismatch() | TagExists():
            return int(ErrorCode.USER_ERROR)
        case ToolMissing():
            return int(ErrorCode.ENV_ERROR)
        case BuildFailure():
            return int(ErrorCode.BUILD_ERROR)
        case PatternNotFound() | MissingArtifact() | MissingInput() | ArchiveFailure():
            return int(ErrorCode.IO_ERROR)
        case ChangelogFailed() | GitFailed():
            return int(ErrorCode.RELEASE_ERROR)
    # Fallback for exhaustiveness
    return int(ErrorCode.USER_ERROR)
