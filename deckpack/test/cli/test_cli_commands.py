from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from unittest.mock import patch

import pytest
import typer

from deckpack.cli.context import CLIContext
from deckpack.core.errors import ErrorCode
from deckpack.core.project import Project
from deckpack.core.result import Ok
from deckpack.git.repository import Repository
from deckpack.output.console import MockConsole

MakeArtifacts = Callable[..., list[Path]]


def _ctx(project: Project) -> CLIContext:
    return CLIContext(project=project, console=MockConsole())


def _console(ctx: CLIContext) -> MockConsole:
    assert isinstance(ctx.console, MockConsole)
    return ctx.console


class TestBump:
    def test_writes_version(self, plugin_project: Project, monkeypatch: pytest.MonkeyPatch) -> None:
        import deckpack.cli.commands.version_cmd as version_cmd

        ctx = _ctx(plugin_project)
        monkeypatch.setattr(version_cmd, "build_context", lambda: ctx)

        with patch.object(Repository, "has_staged_changes", return_value=Ok(False)):
            version_cmd.bump(next_version="1.2.0", yes=True, dry_run=False)

        assert '"Version": "1.2.0"' in plugin_project.manifest_path.read_text(encoding="utf-8")
        assert _console(ctx).find("OK version 1.2.0")

    def test_declined(self, plugin_project: Project, monkeypatch: pytest.MonkeyPatch) -> None:
        import deckpack.cli.commands.version_cmd as version_cmd

        ctx = _ctx(plugin_project)
        monkeypatch.setattr(version_cmd, "build_context", lambda: ctx)
        monkeypatch.setattr(version_cmd, "prompt", lambda _m: False)
        before = plugin_project.manifest_path.read_bytes()

        with patch.object(Repository, "has_staged_changes", return_value=Ok(False)):
            with pytest.raises(typer.Exit) as exc:
                version_cmd.bump(next_version="1.2.0", yes=False, dry_run=False)

        assert exc.value.exit_code == int(ErrorCode.USER_ERROR)
        assert plugin_project.manifest_path.read_bytes() == before
        assert _console(ctx).find("bump: aborted")

    def test_invalid_version(self, plugin_project: Project, monkeypatch: pytest.MonkeyPatch) -> None:
        import deckpack.cli.commands.version_cmd as version_cmd

        ctx = _ctx(plugin_project)
        monkeypatch.setattr(version_cmd, "build_context", lambda: ctx)

        with patch.object(Repository, "has_staged_changes", return_value=Ok(False)):
            with pytest.raises(typer.Exit) as exc:
                version_cmd.bump(next_version="1.2", yes=True, dry_run=False)

        assert exc.value.exit_code == int(ErrorCode.USER_ERROR)


class TestBuild:
    def test_unknown_target(self, plugin_project: Project, monkeypatch: pytest.MonkeyPatch) -> None:
        import deckpack.cli.commands.build_cmd as build_cmd

        ctx = _ctx(plugin_project)
        monkeypatch.setattr(build_cmd, "build_context", lambda: ctx)

        with pytest.raises(typer.Exit) as exc:
            build_cmd.build(targets=["arm"], jobs=None, dry_run=True)

        assert exc.value.exit_code == int(ErrorCode.USER_ERROR)
        assert _console(ctx).find("info: available: linux, mac, win")

    def test_dry_run_prints_every_command(self, plugin_project: Project, monkeypatch: pytest.MonkeyPatch) -> None:
        import deckpack.cli.commands.build_cmd as build_cmd

        ctx = _ctx(plugin_project)
        monkeypatch.setattr(build_cmd, "build_context", lambda: ctx)

        with patch("deckpack.services.cross_build.run_silent") as run:
            build_cmd.build(targets=None, jobs=None, dry_run=True)

        run.assert_not_called()
        console = _console(ctx)
        assert console.find("x86_64-unknown-linux-gnu")
        assert console.find("universal2-apple-darwin")
        assert console.find("x86_64-pc-windows-gnu")

    def test_single_target_command(self, plugin_project: Project, monkeypatch: pytest.MonkeyPatch) -> None:
        import deckpack.cli.commands.build_cmd as build_cmd

        ctx = _ctx(plugin_project)
        monkeypatch.setattr(build_cmd, "build_context", lambda: ctx)

        build_cmd.build_target_command("mac")(dry_run=True)

        messages = _console(ctx).text
        assert "--target-dir target/plugin-mac" in messages
        assert "linux" not in messages

    def test_unconfigured_target_command(self, plugin_project: Project, monkeypatch: pytest.MonkeyPatch) -> None:
        import deckpack.cli.commands.build_cmd as build_cmd

        ctx = _ctx(plugin_project)
        monkeypatch.setattr(build_cmd, "build_context", lambda: ctx)

        with pytest.raises(typer.Exit) as exc:
            build_cmd.build_target_command("arm")(dry_run=True)

        assert exc.value.exit_code == int(ErrorCode.USER_ERROR)


class TestCollectZip:
    def test_collect_missing_artifact(self, plugin_project: Project, monkeypatch: pytest.MonkeyPatch) -> None:
        import deckpack.cli.commands.package_cmd as package_cmd

        ctx = _ctx(plugin_project)
        monkeypatch.setattr(package_cmd, "build_context", lambda: ctx)

        with pytest.raises(typer.Exit) as exc:
            package_cmd.collect(dry_run=False)

        assert exc.value.exit_code == int(ErrorCode.IO_ERROR)
        assert _console(ctx).find("missing artifact for target linux")
        assert not plugin_project.archive_path.exists()

    def test_zip_without_bundle(self, plugin_project: Project, monkeypatch: pytest.MonkeyPatch) -> None:
        import deckpack.cli.commands.package_cmd as package_cmd

        ctx = _ctx(plugin_project)
        monkeypatch.setattr(package_cmd, "build_context", lambda: ctx)

        with pytest.raises(typer.Exit) as exc:
            package_cmd.zip_(dry_run=False)

        assert exc.value.exit_code == int(ErrorCode.IO_ERROR)

    def test_collect_then_zip(
        self, plugin_project: Project, make_artifacts: MakeArtifacts, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        import deckpack.cli.commands.package_cmd as package_cmd

        make_artifacts(plugin_project)
        ctx = _ctx(plugin_project)
        monkeypatch.setattr(package_cmd, "build_context", lambda: ctx)

        package_cmd.collect(dry_run=False)
        package_cmd.zip_(dry_run=False)

        assert plugin_project.staging_dir.is_dir()
        assert plugin_project.archive_path.is_file()
        assert _console(ctx).find(f"OK {plugin_project.archive_path}")


class TestVerify:
    def test_missing_artifacts_fail(self, plugin_project: Project, monkeypatch: pytest.MonkeyPatch) -> None:
        import deckpack.cli.commands.verify_cmd as verify_cmd

        ctx = _ctx(plugin_project)
        monkeypatch.setattr(verify_cmd, "build_context", lambda: ctx)

        with pytest.raises(typer.Exit) as exc:
            verify_cmd.verify()

        assert exc.value.exit_code == int(ErrorCode.USER_ERROR)
        console = _console(ctx)
        assert console.find("declaration files agree")
        assert console.find("warning: linux: missing")

    def test_ready(
        self, plugin_project: Project, make_artifacts: MakeArtifacts, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        import deckpack.cli.commands.verify_cmd as verify_cmd

        make_artifacts(plugin_project)
        ctx = _ctx(plugin_project)
        monkeypatch.setattr(verify_cmd, "build_context", lambda: ctx)

        verify_cmd.verify()

        assert not _console(ctx).has_error()


class TestClean:
    def test_dry_run_keeps_outputs(
        self, plugin_project: Project, make_artifacts: MakeArtifacts, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        import deckpack.cli.commands.clean as clean_cmd

        make_artifacts(plugin_project)
        monkeypatch.setattr(clean_cmd, "build_context", lambda: _ctx(plugin_project))

        clean_cmd.clean(all_=True, yes=False)

        assert plugin_project.target_dir.exists()

    def test_execute(
        self, plugin_project: Project, make_artifacts: MakeArtifacts, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        import deckpack.cli.commands.clean as clean_cmd

        make_artifacts(plugin_project)
        plugin_project.staging_dir.mkdir(parents=True)
        monkeypatch.setattr(clean_cmd, "build_context", lambda: _ctx(plugin_project))

        clean_cmd.clean(all_=False, yes=True)
        assert not plugin_project.target_dir.exists()
        assert plugin_project.build_dir.exists()

        clean_cmd.clean(all_=True, yes=True)
        assert not plugin_project.build_dir.exists()
        assert plugin_project.manifest_path.exists()
        assert plugin_project.assets_dir.exists()
