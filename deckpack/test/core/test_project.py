"""Tests for deckpack.core.project."""

from __future__ import annotations

from pathlib import Path

from deckpack.core.config import Config, PackageConfig
from deckpack.core.project import Project, detect_root, is_project_root
from deckpack.core.result import Err, Ok


def _make_root(path: Path) -> Path:
    path.mkdir(parents=True, exist_ok=True)
    (path / "manifest.json").write_text("{}", encoding="utf-8")
    (path / "Cargo.toml").write_text("", encoding="utf-8")
    return path


class TestIsProjectRoot:
    def test_manifest_and_descriptor(self, tmp_path: Path) -> None:
        assert is_project_root(_make_root(tmp_path / "p")) is True

    def test_config_file_alone(self, tmp_path: Path) -> None:
        (tmp_path / "deckpack.toml").write_text("", encoding="utf-8")
        assert is_project_root(tmp_path) is True

    def test_manifest_alone_is_not_enough(self, tmp_path: Path) -> None:
        (tmp_path / "manifest.json").write_text("{}", encoding="utf-8")
        assert is_project_root(tmp_path) is False


class TestDetectRoot:
    def test_walks_up_from_subdirectory(self, tmp_path: Path) -> None:
        root = _make_root(tmp_path / "plugin")
        nested = root / "src" / "bin"
        nested.mkdir(parents=True)

        result = detect_root(nested, env={})

        assert result == Ok(root.resolve())

    def test_env_override(self, tmp_path: Path) -> None:
        root = _make_root(tmp_path / "plugin")
        elsewhere = tmp_path / "elsewhere"
        elsewhere.mkdir()

        result = detect_root(elsewhere, env={"DECKPACK_ROOT": str(root)})

        assert result == Ok(root.resolve())

    def test_env_override_not_a_project(self, tmp_path: Path) -> None:
        result = detect_root(tmp_path, env={"DECKPACK_ROOT": str(tmp_path)})
        assert isinstance(result, Err)
        assert "DECKPACK_ROOT" in result.error.message

    def test_not_found(self, tmp_path: Path) -> None:
        result = detect_root(tmp_path, env={})
        assert isinstance(result, Err)
        assert result.error.searched_from == tmp_path.resolve()


class TestProjectLayout:
    def test_default_layout(self, tmp_path: Path) -> None:
        project = Project(root=tmp_path)
        sdplugin = "st.lynx.plugins.opendeck-ampgd6.sdPlugin"

        assert project.staging_dir == tmp_path / "build" / sdplugin
        assert project.archive_path == tmp_path / "build" / "opendeck-ampgd6.plugin.zip"
        assert project.manifest_path == tmp_path / "manifest.json"
        assert project.descriptor_path == tmp_path / "Cargo.toml"
        assert project.artifact_path(project.targets[0]) == (
            tmp_path / "target/plugin-linux/x86_64-unknown-linux-gnu/release/opendeck-ampgd6"
        )

    def test_package_id_drives_staging_name(self, tmp_path: Path) -> None:
        project = Project(root=tmp_path, config=Config(package=PackageConfig(id="x.sdPlugin")))
        assert project.staging_dir.name == "x.sdPlugin"
        assert project.staging_dir.parent == project.build_dir
