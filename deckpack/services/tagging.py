"""Changelog commit and release tag.

The tag is created last, on the commit holding the synchronized declaration
files and the regenerated changelog. A tag is never moved or recreated.
"""

from __future__ import annotations

from deckpack.core.project import Project
from deckpack.core.result import Err, Ok, Result
from deckpack.git.repository import GitError, Repository
from deckpack.output.console import ConsoleProtocol, Style
from deckpack.services.base import BaseService, Confirm
from deckpack.services.changelog import GitCliff
from deckpack.services.errors import GitFailed, ReleaseError, TagExists
from deckpack.services.semver import strip_tag_prefix
from deckpack.services.versioning import VersionSynchronizer

COMMIT_MESSAGE = "chore(release): {tag}"


def commit_message(tag: str) -> str:
    return COMMIT_MESSAGE.format(tag=tag)


def _git_failed(e: GitError) -> GitFailed:
    return GitFailed(command=e.command, returncode=e.returncode, detail=e.message)


class TagService(BaseService):
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
        self._versions = VersionSynchronizer(
            project=project,
            console=console,
            repo=self._repo,
            cliff=self._cliff,
        )

    def tag(
        self,
        version: str | None = None,
        *,
        dry_run: bool = False,
        assume_yes: bool = False,
    ) -> Result[str, ReleaseError]:
        """Regenerate the changelog, commit everything and tag the commit.

        Returns the created tag. The declaration files must already agree on
        ``version``; the release is refused otherwise.
        """
        next_v = self._versions.next_version(version)
        if isinstance(next_v, Err):
            return next_v
        tag = self._project.config.package.tag_for(next_v.value)

        agreed = self._versions.check_agreement(expected=strip_tag_prefix(next_v.value))
        if isinstance(agreed, Err):
            return agreed

        exists = self._repo.tag_exists(tag)
        if isinstance(exists, Err):
            return Err(_git_failed(exists.error))
        if exists.value:
            return Err(TagExists(tag=tag))

        if dry_run:
            preview = self._cliff.preview(tag=tag)
            if isinstance(preview, Err):
                return preview
            self._console.print(preview.value.rstrip())
            self._console.print(f"dry-run: would commit '{commit_message(tag)}' and tag {tag}", Style.DIM)
            return Ok(tag)

        self._console.info("Generating changelog")
        written = self._cliff.write(tag=tag, output=self._project.changelog_path)
        if isinstance(written, Err):
            return written

        self._console.info(f"Review {written.value.name} and the working tree before committing")
        gate = self._gate("tag", f"Commit and tag {tag}?", assume_yes=assume_yes)
        if isinstance(gate, Err):
            return gate

        added = self._repo.add_all()
        if isinstance(added, Err):
            return Err(_git_failed(added.error))

        committed = self._repo.commit(commit_message(tag))
        if isinstance(committed, Err):
            return Err(_git_failed(committed.error))

        created = self._repo.create_tag(tag)
        if isinstance(created, Err):
            return Err(_git_failed(created.error))

        return Ok(tag)
