"""Pipeline configuration data structures and loading.

Provides immutable configuration loaded from a `patchferry.toml` file in the
workspace (or a path given on the command line). Every key is optional; the
defaults describe the gccrs -> GCC upstreaming setup.

Example file:

    marker = "gccrs: "
    upstream_branch = "github/gcc-patch-dev"
    source_branch = "github/master"
    scope = ["gcc/rust/", "gcc/testsuite/rust"]

    [build]
    jobs = 16
    test_recipe = "check-rust"

    [committer]
    name = "patchferry"
    email = "patchferry@example.org"
"""

import os
import tomllib
from abc import ABC, abstractmethod
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any

from patchferry.core.errors import ConfigurationError
from patchferry.core.git.abc import Identity

CONFIG_FILE_NAME = "patchferry.toml"


@dataclass(frozen=True)
class BuildConfig:
    """How each replayed commit is built and tested."""

    directory: Path = Path(".")
    jobs: int | None = field(default_factory=os.cpu_count)
    load: int | None = None
    test_recipe: str = "check-rust"
    failure_tokens: tuple[str, ...] = ("unexpected", "unresolved")


@dataclass(frozen=True)
class PullRequestConfig:
    labels: tuple[str, ...] = ("upstream",)
    reviewers: tuple[str, ...] = ()


@dataclass(frozen=True)
class PipelineConfig:
    """Immutable pipeline configuration.

    Loaded once at CLI entry point and stored in PipelineContext.
    """

    marker: str = "gccrs: "
    upstream_branch: str = "github/gcc-patch-dev"
    source_branch: str = "github/master"
    exclude_branch: str | None = "gcc/master"
    fetch_remotes: tuple[str, ...] = ("github", "gcc")
    scope: tuple[str, ...] = ("gcc/rust/", "gcc/testsuite/rust")
    push_remote: str = "origin"
    base_branch: str = "gcc-patch-dev"
    repository: str = "rust-gcc/gccrs"
    branch_prefix: str = "prepare"
    build: BuildConfig = field(default_factory=BuildConfig)
    committer: Identity | None = None
    pull_request: PullRequestConfig = field(default_factory=PullRequestConfig)

    @property
    def effective_exclude(self) -> str:
        """Revision whose history is never migrated (defaults to the upstream branch)."""
        if self.exclude_branch is None:
            return self.upstream_branch
        return self.exclude_branch

    def with_overrides(
        self, *, base_branch: str | None = None, repository: str | None = None
    ) -> "PipelineConfig":
        """Apply command-line overrides."""
        config = self
        if base_branch is not None:
            config = replace(config, base_branch=base_branch)
        if repository is not None:
            config = replace(config, repository=repository)
        return config


def _expect(value: Any, expected: type, key: str, source: str) -> Any:
    # bool is an int subclass; reject it where an int is expected
    if not isinstance(value, expected) or (expected is int and isinstance(value, bool)):
        raise ConfigurationError(
            f"Invalid value for '{key}' in {source}: expected {expected.__name__}, "
            f"got {type(value).__name__}"
        )
    return value


def _expect_str_list(value: Any, key: str, source: str) -> tuple[str, ...]:
    _expect(value, list, key, source)
    for item in value:
        _expect(item, str, key, source)
    return tuple(value)


def _check_keys(data: dict[str, Any], allowed: set[str], section: str, source: str) -> None:
    unknown = sorted(set(data) - allowed)
    if unknown:
        where = f"[{section}] in {source}" if section else source
        raise ConfigurationError(f"Unknown configuration keys {', '.join(unknown)} in {where}")


def parse_config(data: dict[str, Any], source: str) -> PipelineConfig:
    """Build a PipelineConfig from parsed TOML data.

    Args:
        data: Parsed TOML document
        source: Where the data came from, for error messages

    Raises:
        ConfigurationError: On unknown keys or values of the wrong type
    """
    defaults = PipelineConfig()
    top_level_str = {
        "marker",
        "upstream_branch",
        "source_branch",
        "exclude_branch",
        "push_remote",
        "base_branch",
        "repository",
        "branch_prefix",
    }
    top_level_list = {"fetch_remotes", "scope"}
    sections = {"build", "committer", "pull_request"}
    _check_keys(data, top_level_str | top_level_list | sections, "", source)

    values: dict[str, Any] = {}
    for key in top_level_str:
        if key in data:
            values[key] = _expect(data[key], str, key, source)
    for key in top_level_list:
        if key in data:
            values[key] = _expect_str_list(data[key], key, source)

    if "marker" in values and not values["marker"]:
        raise ConfigurationError(f"'marker' must not be empty in {source}")

    build_data = _expect(data.get("build", {}), dict, "build", source)
    _check_keys(
        build_data, {"directory", "jobs", "load", "test_recipe", "failure_tokens"}, "build", source
    )
    build = defaults.build
    if "directory" in build_data:
        build = replace(
            build, directory=Path(_expect(build_data["directory"], str, "build.directory", source))
        )
    if "jobs" in build_data:
        build = replace(build, jobs=_expect(build_data["jobs"], int, "build.jobs", source))
    if "load" in build_data:
        build = replace(build, load=_expect(build_data["load"], int, "build.load", source))
    if "test_recipe" in build_data:
        build = replace(
            build,
            test_recipe=_expect(build_data["test_recipe"], str, "build.test_recipe", source),
        )
    if "failure_tokens" in build_data:
        build = replace(
            build,
            failure_tokens=_expect_str_list(
                build_data["failure_tokens"], "build.failure_tokens", source
            ),
        )

    committer: Identity | None = None
    if "committer" in data:
        committer_data = _expect(data["committer"], dict, "committer", source)
        _check_keys(committer_data, {"name", "email"}, "committer", source)
        if "name" not in committer_data or "email" not in committer_data:
            raise ConfigurationError(f"[committer] needs both 'name' and 'email' in {source}")
        committer = Identity(
            name=_expect(committer_data["name"], str, "committer.name", source),
            email=_expect(committer_data["email"], str, "committer.email", source),
        )

    pr_data = _expect(data.get("pull_request", {}), dict, "pull_request", source)
    _check_keys(pr_data, {"labels", "reviewers"}, "pull_request", source)
    pull_request = defaults.pull_request
    if "labels" in pr_data:
        pull_request = replace(
            pull_request,
            labels=_expect_str_list(pr_data["labels"], "pull_request.labels", source),
        )
    if "reviewers" in pr_data:
        pull_request = replace(
            pull_request,
            reviewers=_expect_str_list(pr_data["reviewers"], "pull_request.reviewers", source),
        )

    return replace(
        defaults, build=build, committer=committer, pull_request=pull_request, **values
    )


class ConfigStore(ABC):
    """Abstract interface for configuration access.

    Enables in-memory implementations for tests without touching filesystem.
    """

    @abstractmethod
    def exists(self) -> bool:
        """Check if a configuration file exists."""
        ...

    @abstractmethod
    def load(self) -> PipelineConfig:
        """Load the configuration.

        Raises:
            ConfigurationError: If the file is missing, unreadable or invalid
        """
        ...

    @abstractmethod
    def path(self) -> Path:
        """Path of the configuration file (for error messages and debugging)."""
        ...


class FilesystemConfigStore(ConfigStore):
    """Production implementation reading a TOML file."""

    def __init__(self, config_path: Path) -> None:
        self._path = config_path

    def exists(self) -> bool:
        return self._path.exists()

    def load(self) -> PipelineConfig:
        if not self._path.exists():
            raise ConfigurationError(f"Configuration file not found at {self._path}")

        try:
            data = tomllib.loads(self._path.read_text(encoding="utf-8"))
        except tomllib.TOMLDecodeError as e:
            raise ConfigurationError(f"Invalid TOML in {self._path}: {e}") from e

        return parse_config(data, str(self._path))

    def path(self) -> Path:
        return self._path


class InMemoryConfigStore(ConfigStore):
    """Test implementation that stores config in memory without touching filesystem."""

    def __init__(self, config: PipelineConfig | None = None) -> None:
        """Initialize in-memory config store.

        Args:
            config: Initial config state (None = config doesn't exist)
        """
        self._config = config

    def exists(self) -> bool:
        return self._config is not None

    def load(self) -> PipelineConfig:
        if self._config is None:
            raise ConfigurationError(f"Configuration file not found at {self.path()}")
        return self._config

    def path(self) -> Path:
        return Path("/fake/patchferry.toml")


def load_config_or_default(store: ConfigStore) -> PipelineConfig:
    """Load the configuration, falling back to defaults when no file exists."""
    if not store.exists():
        return PipelineConfig()
    return store.load()
