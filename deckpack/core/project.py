"""Project root detection and the pipeline's filesystem layout.

A project root is the plugin checkout the pipeline operates on. It is
identified by a ``deckpack.toml`` file, or by a ``manifest.json`` next to a
``Cargo.toml``.

At most one release process may operate on a checkout at a time. Nothing
enforces this; the staging directory and the working tree are assumed to be
owned by the running pipeline.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

from .config import CONFIG_FILENAME, BuildTarget, Config
from .result import Err, Ok, Result

__all__ = [
    "Project",
    "ProjectError",
    "detect_root",
    "is_project_root",
]

ROOT_ENV_VAR = "DECKPACK_ROOT"


@dataclass(frozen=True)
class ProjectError:
    """Error when the project root cannot be detected."""

    message: str
    searched_from: Path | None = None


@dataclass(frozen=True, slots=True)
class Project:
    """A plugin checkout plus its resolved configuration.

    Layout (defaults):
    - assets/                          static resources (read-only)
    - manifest.json, Cargo.toml        declaration files
    - target/plugin-{name}/...         build outputs
    - build/{package-id}/              staging bundle (recreated on collect)
    - build/{binary}.plugin.zip        release archive
    """

    root: Path
    config: Config = field(default_factory=Config)

    @property
    def package_id(self) -> str:
        return self.config.package.id

    @property
    def binary(self) -> str:
        return self.config.package.binary

    @property
    def assets_dir(self) -> Path:
        return self.root / self.config.paths.assets

    @property
    def manifest_path(self) -> Path:
        return self.root / self.config.paths.manifest

    @property
    def descriptor_path(self) -> Path:
        return self.root / self.config.paths.descriptor

    @property
    def changelog_path(self) -> Path:
        return self.root / self.config.paths.changelog

    @property
    def target_dir(self) -> Path:
        return self.root / self.config.paths.target

    @property
    def build_dir(self) -> Path:
        """Staging parent; destroyed and recreated by collect."""
        return self.root / self.config.paths.build

    @property
    def staging_dir(self) -> Path:
        return self.build_dir / self.package_id

    @property
    def archive_path(self) -> Path:
        return self.build_dir / self.config.package.archive_name

    @property
    def targets(self) -> tuple[BuildTarget, ...]:
        return self.config.build.targets

    def artifact_path(self, target: BuildTarget) -> Path:
        return target.artifact_path(self.target_dir, self.binary)

    def __str__(self) -> str:
        return str(self.root)


def is_project_root(path: Path) -> bool:
    if (path / CONFIG_FILENAME).is_file():
        return True
    return (path / "manifest.json").is_file() and (path / "Cargo.toml").is_file()


def detect_root(
    start: Path | None = None,
    *,
    env: dict[str, str] | None = None,
) -> Result[Path, ProjectError]:
    """Find the project root.

    Order: ``DECKPACK_ROOT`` environment variable, then the first directory
    walking up from ``start`` (default: cwd) that looks like a project root.
    """
    environ = os.environ if env is None else env
    override = environ.get(ROOT_ENV_VAR)
    if override:
        p = Path(override).expanduser().resolve()
        if not p.is_dir():
            return Err(ProjectError(f"{ROOT_ENV_VAR} is not a directory: {p}", searched_from=p))
        if not is_project_root(p):
            return Err(
                ProjectError(
                    f"{ROOT_ENV_VAR} does not contain {CONFIG_FILENAME} or manifest.json + Cargo.toml",
                    searched_from=p,
                )
            )
        return Ok(p)

    cwd = (start or Path.cwd()).resolve()
    for candidate in (cwd, *cwd.parents):
        if is_project_root(candidate):
            return Ok(candidate)

    return Err(
        ProjectError(
            f"No plugin project found (looked for {CONFIG_FILENAME} or manifest.json + Cargo.toml)",
            searched_from=cwd,
        )
    )
