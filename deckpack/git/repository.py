"""Git operations used by the release steps.

All operations return Result types.

    repo = Repository(project.root)
    match repo.has_staged_changes():
        case Ok(True):
            print("index is dirty")
        case Ok(False):
            print("clean index")
        case Err(e):
            print(e.message)
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from deckpack.core.result import Err, Ok, Result
from deckpack.platform.process import ProcessError
from deckpack.platform.process import run as run_process

_GIT_TIMEOUT_SECONDS = 30.0

__all__ = ["GitError", "Repository"]


@dataclass(frozen=True, slots=True)
class GitError:
    """Error from a git operation.

    Attributes:
        command: The git subcommand that failed
        message: Error message (git's own stderr when available)
        returncode: Process return code
    """

    command: str
    message: str
    returncode: int = 1


class Repository:
    """Git repository abstraction.

    Attributes:
        path: Path to the repository root
    """

    def __init__(self, path: Path) -> None:
        self.path = path

    def has_staged_changes(self) -> Result[bool, GitError]:
        """True if the index differs from HEAD (``git diff --cached``)."""
        result = self._run(["diff", "--cached", "--quiet", "--exit-code"])
        match result:
            case Ok(_):
                return Ok(False)
            case Err(e) if e.returncode == 1:
                return Ok(True)
            case Err(e):
                return Err(self._error("diff --cached", e))

    def staged_paths(self) -> Result[list[str], GitError]:
        result = self._run(["diff", "--cached", "--name-only"])
        match result:
            case Err(e):
                return Err(self._error("diff --cached", e))
            case Ok(stdout):
                return Ok([ln for ln in stdout.splitlines() if ln.strip()])

    def tag_exists(self, tag: str) -> Result[bool, GitError]:
        result = self._run(["rev-parse", "-q", "--verify", f"refs/tags/{tag}"])
        match result:
            case Ok(_):
                return Ok(True)
            case Err(e) if e.returncode == 1:
                return Ok(False)
            case Err(e):
                return Err(self._error("rev-parse", e))

    def add_all(self) -> Result[None, GitError]:
        result = self._run(["add", "."])
        if isinstance(result, Err):
            return Err(self._error("add", result.error))
        return Ok(None)

    def commit(self, message: str) -> Result[str, GitError]:
        """Commit the index. Nothing to commit is an error."""
        result = self._run(["commit", "-m", message])
        match result:
            case Err(e):
                return Err(self._error("commit", e))
            case Ok(stdout):
                return Ok(stdout.strip())

    def create_tag(self, tag: str) -> Result[None, GitError]:
        """Create a lightweight tag at HEAD. Fails if the tag exists."""
        result = self._run(["tag", tag])
        if isinstance(result, Err):
            return Err(self._error("tag", result.error))
        return Ok(None)

    def _run(self, args: list[str]) -> Result[str, ProcessError]:
        return run_process(
            ["git", "-C", str(self.path), *args],
            cwd=self.path,
            timeout=_GIT_TIMEOUT_SECONDS,
        )

    def _error(self, command: str, e: ProcessError) -> GitError:
        return GitError(
            command=command,
            message=e.stderr.strip() or e.stdout.strip() or f"git {command} failed",
            returncode=e.returncode,
        )
