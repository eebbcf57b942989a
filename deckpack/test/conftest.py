"""Shared fixtures: a minimal plugin checkout on disk."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import pytest

from deckpack.core.config import BuildTarget, Config
from deckpack.core.project import Project

MANIFEST = """{
  "Name": "AMP GD6",
  "Version": "1.1.9",
  "Author": "lynx",
  "CodePath": "opendeck-ampgd6",
  "Icon": "assets/icon"
}
"""

CARGO_TOML = """[package]
name = "opendeck-ampgd6"
version = "1.1.9"
edition = "2021"

[dependencies.serde]
version = "1.0"
features = ["derive"]
"""


@pytest.fixture
def plugin_project(tmp_path: Path) -> Project:
    root = tmp_path / "plugin"
    root.mkdir()
    (root / "manifest.json").write_bytes(MANIFEST.encode("utf-8"))
    (root / "Cargo.toml").write_bytes(CARGO_TOML.encode("utf-8"))
    assets = root / "assets"
    (assets / "icons").mkdir(parents=True)
    (assets / "icon.png").write_bytes(b"\x89PNG icon")
    (assets / "icons" / "knob.svg").write_text("<svg/>", encoding="utf-8")
    return Project(root=root, config=Config())


@pytest.fixture
def make_artifacts() -> Callable[..., list[Path]]:
    """Create fake binaries at the build output path of each target."""

    def _make(project: Project, targets: tuple[BuildTarget, ...] | None = None) -> list[Path]:
        created: list[Path] = []
        for t in targets if targets is not None else project.targets:
            path = project.artifact_path(t)
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(f"binary for {t.triple}".encode("ascii"))
            path.chmod(0o755)
            created.append(path)
        return created

    return _make
