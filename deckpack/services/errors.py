from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True, slots=True)
class DirtyState:
    """Staged changes would be folded into the release commit."""

    staged: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class InvalidVersion:
    value: str


@dataclass(frozen=True, slots=True)
class Aborted:
    """The operator declined a confirmation prompt."""

    step: str


@dataclass(frozen=True, slots=True)
class PatternNotFound:
    path: Path
    pattern: str


@dataclass(frozen=True, slots=True)
class VersionMismatch:
    versions: tuple[tuple[str, str | None], ...]  # (file name, version)
    expected: str | None = None


@dataclass(frozen=True, slots=True)
class TagExists:
    tag: str


@dataclass(frozen=True, slots=True)
class ToolMissing:
    tool: str
    hint: str


@dataclass(frozen=True, slots=True)
class ChangelogFailed:
    returncode: int
    detail: str


@dataclass(frozen=True, slots=True)
class GitFailed:
    command: str
    returncode: int
    detail: str


@dataclass(frozen=True, slots=True)
class BuildFailure:
    target: str
    returncode: int


@dataclass(frozen=True, slots=True)
class MissingArtifact:
    target: str
    path: Path


@dataclass(frozen=True, slots=True)
class MissingInput:
    """A static input of the bundle (assets, manifest) is absent."""

    path: Path


@dataclass(frozen=True, slots=True)
class ArchiveFailure:
    path: Path
    reason: str


ReleaseError = (
    DirtyState
    | InvalidVersion
    | Aborted
    | PatternNotFound
    | VersionMismatch
    | TagExists
    | ToolMissing
    | ChangelogFailed
    | GitFailed
    | BuildFailure
    | MissingArtifact
    | MissingInput
    | ArchiveFailure
)
