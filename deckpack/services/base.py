"""Shared plumbing for pipeline services."""

from __future__ import annotations

from collections.abc import Callable

from deckpack.core.project import Project
from deckpack.core.result import Err, Ok, Result
from deckpack.output.console import ConsoleProtocol
from deckpack.services.errors import Aborted, ReleaseError

Confirm = Callable[[str], bool]


class BaseService:
    """Base class holding the project, console and confirmation hook.

    ``confirm`` is the operator gate. Without one, steps that need
    confirmation only run with ``assume_yes``.
    """

    def __init__(
        self,
        *,
        project: Project,
        console: ConsoleProtocol,
        confirm: Confirm | None = None,
    ) -> None:
        self._project = project
        self._console = console
        self._confirm = confirm

    @property
    def project(self) -> Project:
        return self._project

    def _gate(self, step: str, message: str, *, assume_yes: bool) -> Result[None, ReleaseError]:
        if assume_yes:
            return Ok(None)
        if self._confirm is None or not self._confirm(message):
            return Err(Aborted(step=step))
        return Ok(None)
