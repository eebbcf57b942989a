"""Cross compilation inside a pinned cargo-zigbuild container.

One container run per build target. Runs share only the read-only source
tree, so they can execute concurrently; ``build_all`` joins every run before
returning and fails if any of them failed. Stale output from an aborted run is
not cleaned.
"""

from __future__ import annotations

import shlex
import sys
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

from deckpack.core.config import BuildTarget
from deckpack.core.result import Err, Ok, Result
from deckpack.output.console import Style
from deckpack.platform.process import run_silent, which
from deckpack.services.base import BaseService
from deckpack.services.errors import BuildFailure, MissingArtifact, ReleaseError, ToolMissing

# Container mount point of the project root.
_WORKDIR = "/io"


def cargo_command(project_target_dir: str, target: BuildTarget) -> list[str]:
    return [
        "cargo",
        "zigbuild",
        "--release",
        "--target",
        target.triple,
        "--target-dir",
        f"{project_target_dir}/{target.output_subdir}",
    ]


def docker_command(
    *,
    root: Path,
    image: str,
    target_dir: str,
    target: BuildTarget,
    tty: bool = False,
) -> list[str]:
    """Full ``docker run`` invocation for one target."""
    cmd = ["docker", "run", "--rm"]
    if tty:
        cmd.append("-it")
    cmd += ["-v", f"{root}:{_WORKDIR}", "-w", _WORKDIR, image]

    cargo = cargo_command(target_dir, target)
    if target.setup:
        cmd += ["sh", "-c", f"{target.setup} && {shlex.join(cargo)}"]
    else:
        cmd += cargo
    return cmd


class CrossBuildRunner(BaseService):
    """Runs the build container for each build target."""

    def build(
        self,
        target: BuildTarget,
        *,
        dry_run: bool = False,
        tty: bool | None = None,
    ) -> Result[Path, ReleaseError]:
        """Build one target and return the path of its binary."""
        if tty is None:
            tty = sys.stdin.isatty() and sys.stdout.isatty()

        cmd = docker_command(
            root=self._project.root,
            image=self._project.config.build.image,
            target_dir=self._project.config.paths.target,
            target=target,
            tty=tty,
        )
        artifact = self._project.artifact_path(target)

        self._console.print(shlex.join(cmd), Style.DIM)
        if dry_run:
            return Ok(artifact)

        if which("docker") is None:
            return Err(ToolMissing(tool="docker", hint="Install Docker and make sure the daemon is running"))

        # No timeout: a hung build blocks the release until the operator kills it.
        result = run_silent(cmd, cwd=self._project.root)
        if isinstance(result, Err):
            return Err(BuildFailure(target=target.name, returncode=result.error.returncode))

        if not artifact.is_file():
            return Err(MissingArtifact(target=target.name, path=artifact))

        return Ok(artifact)

    def build_all(
        self,
        targets: tuple[BuildTarget, ...] | None = None,
        *,
        jobs: int | None = None,
        dry_run: bool = False,
    ) -> Result[list[Path], ReleaseError]:
        """Build every target, concurrently, and wait for all of them.

        Every build runs to completion even when another one fails. The
        first failure in target order is returned; the others are printed.
        """
        selected = targets if targets is not None else self._project.targets
        if not selected:
            return Ok([])

        workers = jobs or self._project.config.build.jobs or len(selected)
        workers = max(1, min(workers, len(selected)))

        if workers == 1:
            results = [self.build(t, dry_run=dry_run) for t in selected]
        else:
            # Several containers cannot share one interactive terminal.
            with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="build") as pool:
                futures = [pool.submit(self.build, t, dry_run=dry_run, tty=False) for t in selected]
                results = [f.result() for f in futures]

        failures = [r.error for r in results if isinstance(r, Err)]
        if failures:
            for error in failures[1:]:
                self._console.warning(f"also failed: {_describe(error)}")
            return Err(failures[0])

        return Ok([r.value for r in results if isinstance(r, Ok)])


def _describe(error: ReleaseError) -> str:
    match error:
        case BuildFailure(target=name, returncode=rc):
            return f"build {name} (exit {rc})"
        case MissingArtifact(target=name, path=path):
            return f"build {name}: output not found: {path}"
        case _:
            return str(error)
