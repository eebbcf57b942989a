"""git-cliff wrapper (next version from history, changelog rendering)."""

from __future__ import annotations

from pathlib import Path

from deckpack.core.project import Project
from deckpack.core.result import Err, Ok, Result
from deckpack.output.console import ConsoleProtocol, Style
from deckpack.platform.process import ProcessError, run, which
from deckpack.services.errors import ChangelogFailed, ReleaseError, ToolMissing

_CLIFF_TIMEOUT_SECONDS = 60.0


class GitCliff:
    def __init__(self, *, project: Project, console: ConsoleProtocol) -> None:
        self._project = project
        self._console = console

    def bumped_version(self) -> Result[str, ReleaseError]:
        """Next version from conventional commits (``git cliff --bumped-version``)."""
        out = self._run(["--bumped-version"])
        if isinstance(out, Err):
            return out
        value = out.value.strip().splitlines()
        if not value:
            return Err(ChangelogFailed(returncode=0, detail="git cliff printed no version"))
        return Ok(value[-1].strip())

    def write(self, *, tag: str, output: Path) -> Result[Path, ReleaseError]:
        """Regenerate the whole changelog up to ``tag``."""
        out = self._run(["-o", str(output), "--tag", tag])
        if isinstance(out, Err):
            return out
        return Ok(output)

    def preview(self, *, tag: str) -> Result[str, ReleaseError]:
        """Render only the unreleased section, without writing anything."""
        return self._run(["--unreleased", "--tag", tag])

    def _run(self, args: list[str]) -> Result[str, ReleaseError]:
        if which("git-cliff") is None:
            return Err(
                ToolMissing(
                    tool="git-cliff",
                    hint="Install it: cargo install git-cliff (https://git-cliff.org)",
                )
            )

        cmd = ["git", "cliff", *args]
        self._console.print(" ".join(cmd), Style.DIM)
        result = run(cmd, cwd=self._project.root, timeout=_CLIFF_TIMEOUT_SECONDS)
        if isinstance(result, Err):
            return Err(_changelog_error(result.error))
        return Ok(result.value)


def _changelog_error(e: ProcessError) -> ChangelogFailed:
    return ChangelogFailed(returncode=e.returncode, detail=e.stderr.strip() or str(e))
