"""Version synchronization across declaration files.

Each declaration file embeds one version field that is located with a fixed
pattern and rewritten in place. Files are treated as text, never parsed:
a JSON or TOML round-trip would reformat unrelated content.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path

from deckpack.core.project import Project
from deckpack.core.result import Err, Ok, Result
from deckpack.git.repository import Repository
from deckpack.output.console import ConsoleProtocol, Style
from deckpack.platform.files import atomic_write_bytes
from deckpack.services.base import BaseService, Confirm
from deckpack.services.changelog import GitCliff
from deckpack.services.errors import (
    DirtyState,
    GitFailed,
    InvalidVersion,
    PatternNotFound,
    ReleaseError,
    VersionMismatch,
)
from deckpack.services.semver import parse_version, strip_tag_prefix

# "Version": "1.2.0" anywhere in the manifest.
MANIFEST_VERSION_RE = re.compile(r'"Version": "(?P<version>[^"\r\n]*)"')
# version = "1.2.0" on a line of its own; the first one is [package].
DESCRIPTOR_VERSION_RE = re.compile(r'^version = "(?P<version>[^"\r\n]*)"(?=\r?$)', re.MULTILINE)


@dataclass(frozen=True, slots=True)
class DeclarationFile:
    """A file holding one embedded version field.

    Attributes:
        path: Absolute path of the file.
        pattern: Regex with a ``version`` group locating the field.
        template: Replacement text, formatted with ``version``.
        replace_all: Rewrite every match instead of the first one.
    """

    path: Path
    pattern: re.Pattern[str]
    template: str
    replace_all: bool = False

    @property
    def name(self) -> str:
        return self.path.name

    def read_text(self) -> str:
        # Bytes in, bytes out: CRLF and trailing whitespace must survive.
        return self.path.read_bytes().decode("utf-8")

    def find_version(self, text: str) -> str | None:
        m = self.pattern.search(text)
        return m.group("version") if m else None

    def rewrite(self, text: str, version: str) -> str | None:
        """Return text with the field set to version, or None if absent."""
        replacement = self.template.format(version=version)
        new_text, count = self.pattern.subn(
            lambda _m: replacement,
            text,
            count=0 if self.replace_all else 1,
        )
        if count == 0:
            return None
        return new_text


def declaration_files(project: Project) -> list[DeclarationFile]:
    return [
        DeclarationFile(
            path=project.manifest_path,
            pattern=MANIFEST_VERSION_RE,
            template='"Version": "{version}"',
            replace_all=True,
        ),
        DeclarationFile(
            path=project.descriptor_path,
            pattern=DESCRIPTOR_VERSION_RE,
            template='version = "{version}"',
        ),
    ]


class VersionSynchronizer(BaseService):
    """Computes the next version and writes it into every declaration file."""

    def __init__(
        self,
        *,
        project: Project,
        console: ConsoleProtocol,
        confirm: Confirm | None = None,
        repo: Repository | None = None,
        cliff: GitCliff | None = None,
    ) -> None:
        super().__init__(project=project, console=console, confirm=confirm)
        self._repo = repo or Repository(project.root)
        self._cliff = cliff or GitCliff(project=project, console=console)
        self._files = declaration_files(project)

    @property
    def files(self) -> list[DeclarationFile]:
        return list(self._files)

    def read_versions(self) -> Result[list[tuple[DeclarationFile, str]], ReleaseError]:
        out: list[tuple[DeclarationFile, str]] = []
        for decl in self._files:
            try:
                text = decl.read_text()
            except (OSError, UnicodeDecodeError):
                return Err(PatternNotFound(path=decl.path, pattern=decl.pattern.pattern))
            version = decl.find_version(text)
            if version is None:
                return Err(PatternNotFound(path=decl.path, pattern=decl.pattern.pattern))
            out.append((decl, version))
        return Ok(out)

    def check_agreement(self, expected: str | None = None) -> Result[str, ReleaseError]:
        """Return the version all declaration files agree on.

        Comparison is plain string equality. With ``expected``, the agreed
        version must also equal it.
        """
        found = self.read_versions()
        if isinstance(found, Err):
            return found

        versions = tuple((decl.name, v) for decl, v in found.value)
        values = {v for _, v in versions}
        if len(values) != 1 or (expected is not None and expected not in values):
            return Err(VersionMismatch(versions=versions, expected=expected))
        return Ok(values.pop())

    def next_version(self, explicit: str | None = None) -> Result[str, ReleaseError]:
        """Explicit version, or the changelog tool's bumped version, without ``v``."""
        if explicit is None:
            bumped = self._cliff.bumped_version()
            if isinstance(bumped, Err):
                return bumped
            raw = bumped.value
        else:
            raw = explicit

        version = strip_tag_prefix(raw)
        if parse_version(version) is None:
            return Err(InvalidVersion(value=raw))
        return Ok(version)

    def bump(
        self,
        explicit_next: str | None = None,
        *,
        dry_run: bool = False,
        assume_yes: bool = False,
    ) -> Result[str, ReleaseError]:
        """Rewrite the version field of every declaration file.

        Fails with DirtyState when the index holds staged changes, so the bump
        never ends up in an unrelated commit. All files are checked for their
        field before the first one is written; an I/O error while writing can
        still leave the files out of sync.
        """
        staged = self._repo.has_staged_changes()
        if isinstance(staged, Err):
            e = staged.error
            return Err(GitFailed(command=e.command, returncode=e.returncode, detail=e.message))
        if staged.value:
            paths = self._repo.staged_paths()
            return Err(DirtyState(staged=tuple(paths.value) if isinstance(paths, Ok) else ()))

        next_v = self.next_version(explicit_next)
        if isinstance(next_v, Err):
            return next_v
        version = next_v.value

        planned: list[tuple[DeclarationFile, str]] = []
        for decl in self._files:
            try:
                text = decl.read_text()
            except (OSError, UnicodeDecodeError):
                return Err(PatternNotFound(path=decl.path, pattern=decl.pattern.pattern))
            new_text = decl.rewrite(text, version)
            if new_text is None:
                return Err(PatternNotFound(path=decl.path, pattern=decl.pattern.pattern))
            planned.append((decl, new_text))

        for decl, _ in planned:
            self._console.print(f"{decl.name}: {decl.template.format(version=version)}", Style.DIM)

        if dry_run:
            self._console.print(f"dry-run: would bump version to {version}", Style.DIM)
            return Ok(version)

        gate = self._gate("bump", f"Bump version to {version}?", assume_yes=assume_yes)
        if isinstance(gate, Err):
            return gate

        for decl, new_text in planned:
            atomic_write_bytes(decl.path, new_text.encode("utf-8"))

        return self.check_agreement(expected=version)
