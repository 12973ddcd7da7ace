"""Application context with dependency injection."""

from dataclasses import dataclass
from pathlib import Path

from patchferry.core.config import (
    CONFIG_FILE_NAME,
    ConfigStore,
    FilesystemConfigStore,
    PipelineConfig,
    load_config_or_default,
)
from patchferry.core.git.abc import Git
from patchferry.core.git.dry_run import DryRunGit
from patchferry.core.git.real import RealGit
from patchferry.core.github.abc import GitHub
from patchferry.core.github.dry_run import DryRunGitHub
from patchferry.core.github.real import RealGitHub
from patchferry.core.make.abc import Make
from patchferry.core.make.real import RealMake
from patchferry.core.time.abc import Time
from patchferry.core.time.real import RealTime


@dataclass(frozen=True)
class PipelineContext:
    """Immutable context holding all dependencies for a pipeline run.

    Created at CLI entry point and threaded through the application.
    Frozen to prevent accidental modification at runtime.
    """

    git: Git
    github: GitHub
    make: Make
    time: Time
    config: PipelineConfig
    cwd: Path  # Current working directory at CLI invocation
    dry_run: bool

    @staticmethod
    def for_test(
        git: Git | None = None,
        github: GitHub | None = None,
        make: Make | None = None,
        time: Time | None = None,
        config: PipelineConfig | None = None,
        cwd: Path | None = None,
        dry_run: bool = False,
    ) -> "PipelineContext":
        """Create test context with optional pre-configured integrations.

        Every integration left as None is replaced by its empty fake.

        Example:
            >>> from patchferry.core.git.fake import FakeGit
            >>> ctx = PipelineContext.for_test(git=FakeGit())
        """
        from patchferry.core.git.fake import FakeGit
        from patchferry.core.github.fake import FakeGitHub
        from patchferry.core.make.fake import FakeMake
        from tests.fakes.time import FakeTime

        return PipelineContext(
            git=git if git is not None else FakeGit(),
            github=github if github is not None else FakeGitHub(),
            make=make if make is not None else FakeMake(),
            time=time if time is not None else FakeTime(),
            config=config if config is not None else PipelineConfig(),
            # Avoid accidental use of the real cwd in tests
            cwd=cwd if cwd is not None else Path("/test/default/cwd"),
            dry_run=dry_run,
        )


def create_context(
    *,
    cwd: Path,
    dry_run: bool,
    config_store: ConfigStore | None = None,
) -> PipelineContext:
    """Create production context with real implementations.

    Called once at CLI entry point. Reads the configuration from
    `patchferry.toml` in cwd unless another store is given.

    Args:
        cwd: Workspace the pipeline runs in
        dry_run: If True, wrap integrations so pushes and PRs are only printed
        config_store: Where to read configuration from

    Raises:
        ConfigurationError: If the configuration file is invalid
    """
    if config_store is None:
        config_store = FilesystemConfigStore(cwd / CONFIG_FILE_NAME)
    config = load_config_or_default(config_store)

    git: Git = RealGit()
    github: GitHub = RealGitHub()
    if dry_run:
        git = DryRunGit(git)
        github = DryRunGitHub(github)

    return PipelineContext(
        git=git,
        github=github,
        make=RealMake(),
        time=RealTime(),
        config=config,
        cwd=cwd,
        dry_run=dry_run,
    )
