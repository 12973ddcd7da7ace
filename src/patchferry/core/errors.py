"""Error taxonomy for the upstreaming pipeline.

Only build and test failures are routinely recovered, and those are not
exceptions at all: they are recorded as outcomes in the migration report.
Everything raised from this module aborts the run, except PublicationError,
which is caught by the pipeline and reported alongside the finished migration.
"""

from collections.abc import Sequence
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from patchferry.upstream.types import CommitOutcome


class PatchferryError(Exception):
    """Base class for all pipeline errors."""


class ConfigurationError(PatchferryError):
    """The workspace or configuration cannot support a run.

    Raised before any mutation happens: missing marker commit upstream, a
    correspondence title that cannot be found on the source branch, or an
    invalid configuration file.
    """


class ConflictError(PatchferryError):
    """A cherry-pick could not be applied onto the working branch.

    The working branch is left as-is for manual inspection. ``outcomes`` holds
    everything that was recorded before the conflicting commit and
    ``branch_name`` names the working branch, once known.
    """

    def __init__(
        self,
        commit_id: str,
        detail: str,
        outcomes: "Sequence[CommitOutcome]" = (),
        branch_name: str | None = None,
    ) -> None:
        self.commit_id = commit_id
        self.detail = detail
        self.outcomes: "tuple[CommitOutcome, ...]" = tuple(outcomes)
        self.branch_name = branch_name
        message = f"Failed to cherry-pick {commit_id}"
        if detail:
            message += f"\n{detail}"
        super().__init__(message)

    def with_outcomes(self, outcomes: "Sequence[CommitOutcome]") -> "ConflictError":
        """Return a copy of this error carrying the given partial outcomes."""
        return ConflictError(self.commit_id, self.detail, outcomes, self.branch_name)

    def on_branch(self, branch_name: str) -> "ConflictError":
        """Return a copy of this error naming the working branch."""
        return ConflictError(self.commit_id, self.detail, self.outcomes, branch_name)


class ToolError(PatchferryError, RuntimeError):
    """An external tool failed, could not be spawned, or produced malformed output."""


class PublicationError(PatchferryError):
    """Pushing the working branch or opening the pull request failed."""
