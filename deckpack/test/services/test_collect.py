"""Tests for deckpack.services.collect."""

from __future__ import annotations

import os
import stat
import sys
from collections.abc import Callable
from pathlib import Path

import pytest

from deckpack.core.config import DEFAULT_TARGETS
from deckpack.core.project import Project
from deckpack.core.result import Err, Ok
from deckpack.output.console import MockConsole
from deckpack.services.collect import Collector
from deckpack.services.errors import MissingArtifact, MissingInput

MakeArtifacts = Callable[..., list[Path]]


def _tree(root: Path) -> dict[str, bytes]:
    return {
        p.relative_to(root).as_posix(): p.read_bytes() for p in sorted(root.rglob("*")) if p.is_file()
    }


def test_bundle_layout(plugin_project: Project, make_artifacts: MakeArtifacts) -> None:
    make_artifacts(plugin_project)

    result = Collector(project=plugin_project, console=MockConsole()).collect()

    assert isinstance(result, Ok)
    bundle = result.value
    assert bundle.root == plugin_project.root / "build" / "st.lynx.plugins.opendeck-ampgd6.sdPlugin"
    assert bundle.binaries == ("opendeck-ampgd6-linux", "opendeck-ampgd6-mac", "opendeck-ampgd6-win.exe")
    assert bundle.files() == [
        "assets/icon.png",
        "assets/icons/knob.svg",
        "manifest.json",
        "opendeck-ampgd6-linux",
        "opendeck-ampgd6-mac",
        "opendeck-ampgd6-win.exe",
    ]
    assert sorted(p.name for p in bundle.root.iterdir()) == [
        "assets",
        "manifest.json",
        "opendeck-ampgd6-linux",
        "opendeck-ampgd6-mac",
        "opendeck-ampgd6-win.exe",
    ]
    assert (bundle.root / "opendeck-ampgd6-win.exe").read_bytes() == b"binary for x86_64-pc-windows-gnu"


def test_collect_is_idempotent(plugin_project: Project, make_artifacts: MakeArtifacts) -> None:
    make_artifacts(plugin_project)
    collector = Collector(project=plugin_project, console=MockConsole())

    first = collector.collect()
    assert isinstance(first, Ok)
    snapshot = _tree(first.value.root)

    second = collector.collect()
    assert isinstance(second, Ok)
    assert _tree(second.value.root) == snapshot


def test_residue_from_previous_runs_is_removed(plugin_project: Project, make_artifacts: MakeArtifacts) -> None:
    make_artifacts(plugin_project)
    staging = plugin_project.staging_dir
    (staging / "assets").mkdir(parents=True)
    (staging / "stale.txt").write_text("old", encoding="utf-8")
    (staging / "assets" / "removed.png").write_bytes(b"old")
    plugin_project.archive_path.write_bytes(b"old zip")

    result = Collector(project=plugin_project, console=MockConsole()).collect()

    assert isinstance(result, Ok)
    files = result.value.files()
    assert "stale.txt" not in files
    assert "assets/removed.png" not in files
    assert not plugin_project.archive_path.exists()


@pytest.mark.skipif(sys.platform == "win32", reason="POSIX modes")
def test_binaries_stay_executable(plugin_project: Project, make_artifacts: MakeArtifacts) -> None:
    make_artifacts(plugin_project)

    result = Collector(project=plugin_project, console=MockConsole()).collect()

    assert isinstance(result, Ok)
    mode = (result.value.root / "opendeck-ampgd6-linux").stat().st_mode
    assert mode & stat.S_IXUSR


@pytest.mark.parametrize("missing", [t.name for t in DEFAULT_TARGETS])
def test_missing_binary_fails_naming_the_target(
    plugin_project: Project, make_artifacts: MakeArtifacts, missing: str
) -> None:
    make_artifacts(plugin_project)
    target = next(t for t in DEFAULT_TARGETS if t.name == missing)
    os.remove(plugin_project.artifact_path(target))

    result = Collector(project=plugin_project, console=MockConsole()).collect()

    assert result == Err(MissingArtifact(target=missing, path=plugin_project.artifact_path(target)))
    assert not plugin_project.staging_dir.exists()
    assert not plugin_project.archive_path.exists()


def test_first_missing_target_is_reported(plugin_project: Project) -> None:
    result = Collector(project=plugin_project, console=MockConsole()).collect()

    assert isinstance(result, Err)
    assert result.error == MissingArtifact(target="linux", path=plugin_project.artifact_path(DEFAULT_TARGETS[0]))


def test_missing_artifacts_listing(plugin_project: Project, make_artifacts: MakeArtifacts) -> None:
    collector = Collector(project=plugin_project, console=MockConsole())
    assert [t.name for t in collector.missing_artifacts()] == ["linux", "mac", "win"]
    make_artifacts(plugin_project, DEFAULT_TARGETS[1:])
    assert [t.name for t in collector.missing_artifacts()] == ["linux"]
    make_artifacts(plugin_project)
    assert collector.missing_artifacts() == []


def test_missing_assets(plugin_project: Project, make_artifacts: MakeArtifacts) -> None:
    make_artifacts(plugin_project)
    (plugin_project.assets_dir / "icons" / "knob.svg").unlink()
    (plugin_project.assets_dir / "icons").rmdir()
    (plugin_project.assets_dir / "icon.png").unlink()
    plugin_project.assets_dir.rmdir()

    result = Collector(project=plugin_project, console=MockConsole()).collect()

    assert result == Err(MissingInput(path=plugin_project.assets_dir))


def test_dry_run_touches_nothing(plugin_project: Project, make_artifacts: MakeArtifacts) -> None:
    make_artifacts(plugin_project)
    plugin_project.build_dir.mkdir()
    marker = plugin_project.build_dir / "keep"
    marker.write_text("x", encoding="utf-8")

    result = Collector(project=plugin_project, console=MockConsole()).collect(dry_run=True)

    assert isinstance(result, Ok)
    assert marker.exists()
    assert not plugin_project.staging_dir.exists()
