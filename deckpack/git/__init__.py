"""Git access for the release steps."""

from .repository import GitError, Repository

__all__ = ["GitError", "Repository"]
