"""Build runner interface.

Builds and test runs are expected to fail from time to time; those failures
are returned as MakeResult values, not raised. Only a make binary that cannot
be spawned is an error.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class MakeResult:
    """Outcome of a make invocation.

    Attributes:
        success: True if make exited with status 0
        output: Captured stdout followed by stderr
    """

    success: bool
    output: str


class Make(ABC):
    """Abstract interface for running build and test recipes."""

    @abstractmethod
    def build(self, directory: Path, *, jobs: int | None, load: int | None) -> MakeResult:
        """Run the default make target in a directory.

        Args:
            directory: Build directory (passed as `make -C`)
            jobs: Parallel jobs (`-j`), or None for make's default
            load: Load average limit (`-l`), or None for no limit

        Raises:
            ToolError: If make cannot be spawned
        """
        ...

    @abstractmethod
    def test(
        self, directory: Path, recipe: str, *, jobs: int | None, load: int | None
    ) -> MakeResult:
        """Run a test recipe in a directory.

        The exit status alone is not trusted to signal regressions; callers
        inspect MakeResult.output as well.

        Raises:
            ToolError: If make cannot be spawned
        """
        ...
