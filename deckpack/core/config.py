"""Typed configuration for the release pipeline.

The optional ``deckpack.toml`` at the project root overrides the defaults
below. Without it, the defaults reproduce the layout of the OpenDeck AMP
GD6 plugin: a Rust crate cross-compiled for three targets and bundled as
``st.lynx.plugins.opendeck-ampgd6.sdPlugin``.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from .result import Err, Ok, Result
from .structured import (
    StrDict,
    as_str_dict,
    get_bool,
    get_int,
    get_str,
    get_table,
    get_table_list,
)

__all__ = [
    "BuildConfig",
    "BuildTarget",
    "Config",
    "ConfigError",
    "DEFAULT_TARGETS",
    "PackageConfig",
    "PathsConfig",
    "load_config",
    "load_config_or_default",
    "CONFIG_FILENAME",
    "BUILD_IMAGE",
    "PACKAGE_ID",
    "BINARY_NAME",
]

CONFIG_FILENAME = "deckpack.toml"

PACKAGE_ID = "st.lynx.plugins.opendeck-ampgd6.sdPlugin"
BINARY_NAME = "opendeck-ampgd6"

# Pinned so builds do not depend on the host toolchain.
BUILD_IMAGE = "ghcr.io/rust-cross/cargo-zigbuild:sha-eba2d7e"

_MINGW_SETUP = "apt-get update -qq && apt-get install -y -qq mingw-w64 > /dev/null 2>&1"


@dataclass(frozen=True, slots=True)
class ConfigError:
    """Error when config cannot be loaded or parsed."""

    message: str
    path: Path | None = None


@dataclass(frozen=True, slots=True)
class BuildTarget:
    """One platform the plugin binary is compiled for.

    Attributes:
        name: Short name used on the CLI (``linux``, ``mac``, ``win``).
        triple: Rust target triple passed to ``cargo zigbuild --target``.
        output_subdir: Directory under ``target/`` used as ``--target-dir``.
        suffix: Platform suffix of the renamed binary in the bundle.
        windows: Whether the binary carries an ``.exe`` extension.
        setup: Shell prefix run inside the container before building.
    """

    name: str
    triple: str
    output_subdir: str
    suffix: str
    windows: bool = False
    setup: str | None = None

    def binary_filename(self, binary: str) -> str:
        return f"{binary}.exe" if self.windows else binary

    def bundle_filename(self, binary: str) -> str:
        """Name of the binary inside the staging bundle."""
        name = f"{binary}-{self.suffix}"
        return f"{name}.exe" if self.windows else name

    def artifact_path(self, target_dir: Path, binary: str) -> Path:
        return target_dir / self.output_subdir / self.triple / "release" / self.binary_filename(binary)


DEFAULT_TARGETS: tuple[BuildTarget, ...] = (
    BuildTarget(
        name="linux",
        triple="x86_64-unknown-linux-gnu",
        output_subdir="plugin-linux",
        suffix="linux",
    ),
    BuildTarget(
        name="mac",
        triple="universal2-apple-darwin",
        output_subdir="plugin-mac",
        suffix="mac",
    ),
    BuildTarget(
        name="win",
        triple="x86_64-pc-windows-gnu",
        output_subdir="plugin-win",
        suffix="win",
        windows=True,
        setup=_MINGW_SETUP,
    ),
)


@dataclass(frozen=True, slots=True)
class PackageConfig:
    """Identity of the plugin package."""

    id: str = PACKAGE_ID
    binary: str = BINARY_NAME
    archive: str | None = None
    # Prepended to the version to form the git tag.
    tag_prefix: str = ""

    def __post_init__(self) -> None:
        _plain_name(self.id, "package.id")
        _plain_name(self.binary, "package.binary")
        if self.archive is not None:
            _plain_name(self.archive, "package.archive")

    def tag_for(self, version: str) -> str:
        return f"{self.tag_prefix}{version}"

    @property
    def archive_name(self) -> str:
        return self.archive or f"{self.binary}.plugin.zip"


@dataclass(frozen=True, slots=True)
class PathsConfig:
    """Paths relative to the project root."""

    assets: str = "assets"
    manifest: str = "manifest.json"
    descriptor: str = "Cargo.toml"
    changelog: str = "CHANGELOG.md"
    target: str = "target"
    build: str = "build"

    def __post_init__(self) -> None:
        _check_build_is_disjoint(self)


@dataclass(frozen=True, slots=True)
class BuildConfig:
    image: str = BUILD_IMAGE
    # None: one worker per target.
    jobs: int | None = None
    targets: tuple[BuildTarget, ...] = DEFAULT_TARGETS

    def target(self, name: str) -> BuildTarget | None:
        for t in self.targets:
            if t.name == name:
                return t
        return None

    @property
    def target_names(self) -> tuple[str, ...]:
        return tuple(t.name for t in self.targets)


@dataclass(frozen=True, slots=True)
class Config:
    """Main configuration container."""

    package: PackageConfig = field(default_factory=PackageConfig)
    paths: PathsConfig = field(default_factory=PathsConfig)
    build: BuildConfig = field(default_factory=BuildConfig)

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> Config:
        """Create Config from a mapping (parsed TOML).

        Raises:
            ValueError: If a build target table is incomplete, a name is not
                a plain file name, or paths.build overlaps an input.
        """
        package: StrDict = get_table(data, "package") or {}
        paths: StrDict = get_table(data, "paths") or {}
        build: StrDict = get_table(data, "build") or {}

        defaults = PathsConfig()
        targets = DEFAULT_TARGETS
        if "targets" in build:
            tables = get_table_list(build, "targets")
            if not tables:
                raise ValueError("build.targets must be a non-empty array of tables")
            targets = tuple(_target_from_dict(t) for t in tables)

        names = [t.name for t in targets]
        if len(set(names)) != len(names):
            raise ValueError(f"duplicate build target names: {', '.join(names)}")

        jobs = get_int(build, "jobs")
        if jobs is not None and jobs < 1:
            raise ValueError("build.jobs must be >= 1")

        paths_config = PathsConfig(
            assets=get_str(paths, "assets") or defaults.assets,
            manifest=get_str(paths, "manifest") or defaults.manifest,
            descriptor=get_str(paths, "descriptor") or defaults.descriptor,
            changelog=get_str(paths, "changelog") or defaults.changelog,
            target=_subdir(get_str(paths, "target") or defaults.target, "paths.target"),
            build=_subdir(get_str(paths, "build") or defaults.build, "paths.build"),
        )

        return cls(
            package=PackageConfig(
                id=get_str(package, "id") or PACKAGE_ID,
                binary=get_str(package, "binary") or BINARY_NAME,
                archive=get_str(package, "archive"),
                tag_prefix=_get_raw_str(package, "tag_prefix"),
            ),
            paths=paths_config,
            build=BuildConfig(
                image=get_str(build, "image") or BUILD_IMAGE,
                jobs=jobs,
                targets=targets,
            ),
        )


def _subdir(value: str, key: str) -> str:
    """Validate a directory the pipeline deletes: it must stay inside the root."""
    p = Path(value)
    if p.is_absolute() or not p.parts or ".." in p.parts:
        raise ValueError(f"{key} must be a subdirectory of the project root: {value!r}")
    return p.as_posix()


def _overlaps(a: str, b: str) -> bool:
    pa, pb = Path(a).parts, Path(b).parts
    n = min(len(pa), len(pb))
    return pa[:n] == pb[:n]


def _check_build_is_disjoint(paths: PathsConfig) -> None:
    """collect wipes the build directory, so it must not hold any input."""
    inputs = (
        ("assets", paths.assets),
        ("manifest", paths.manifest),
        ("descriptor", paths.descriptor),
        ("changelog", paths.changelog),
        ("target", paths.target),
    )
    for key, other in inputs:
        if _overlaps(paths.build, other):
            raise ValueError(f"paths.build must not overlap paths.{key}: {paths.build!r} vs {other!r}")


def _plain_name(value: str, key: str) -> str:
    """A single file or directory name: no separators, no dot segments."""
    if "/" in value or "\\" in value or value in (".", "..") or Path(value).is_absolute():
        raise ValueError(f"{key} must be a plain name: {value!r}")
    return value


def _get_raw_str(table: Mapping[str, object], key: str) -> str:
    value = table.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValueError(f"{key} must be a string")
    return value


def _target_from_dict(table: Mapping[str, object]) -> BuildTarget:
    name = get_str(table, "name")
    triple = get_str(table, "triple")
    if name is None or triple is None:
        raise ValueError("each build target needs 'name' and 'triple'")

    windows = get_bool(table, "windows")
    return BuildTarget(
        name=name,
        triple=triple,
        output_subdir=get_str(table, "output_subdir") or f"plugin-{name}",
        suffix=get_str(table, "suffix") or name,
        windows=windows if windows is not None else "windows" in triple,
        setup=get_str(table, "setup"),
    )


def _parse_toml(path: Path) -> Result[StrDict, ConfigError]:
    import tomllib

    try:
        data_obj: object = tomllib.loads(path.read_bytes().decode("utf-8"))
    except FileNotFoundError:
        return Err(ConfigError(f"Config file not found: {path}", path=path))
    except PermissionError:
        return Err(ConfigError(f"Permission denied reading: {path}", path=path))
    except tomllib.TOMLDecodeError as e:
        return Err(ConfigError(f"Invalid TOML syntax: {e}", path=path))
    except UnicodeDecodeError as e:
        return Err(ConfigError(f"Error reading config: {e}", path=path))

    data = as_str_dict(data_obj)
    if data is None:
        return Err(ConfigError("Config root must be a TOML table", path=path))
    return Ok(data)


def load_config(path: Path) -> Result[Config, ConfigError]:
    """Load and parse configuration from a TOML file."""
    result = _parse_toml(path)
    if isinstance(result, Err):
        return result

    try:
        return Ok(Config.from_dict(result.value))
    except (KeyError, TypeError, ValueError) as e:
        return Err(ConfigError(f"Invalid config structure: {e}", path=path))


def load_config_or_default(path: Path) -> Result[Config, ConfigError]:
    """Load config if the file exists; a missing file means defaults.

    A present but invalid file is still an error: silently falling back
    would package with the wrong identity.
    """
    if not path.exists():
        return Ok(Config())
    return load_config(path)
