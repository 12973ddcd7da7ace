"""Data types shared by the migration pipeline stages."""

from dataclasses import dataclass
from enum import Enum

from patchferry.core.git.abc import CommitInfo


@dataclass(frozen=True)
class Correspondence:
    """Where the two histories line up.

    Attributes:
        title: Title of the last migrated commit, marker stripped, as it reads
            on the source branch
        upstream_commit_id: The last migrated commit on the upstream branch
        source_commit_id: The equivalent commit on the source branch
    """

    title: str
    upstream_commit_id: str
    source_commit_id: str


@dataclass(frozen=True)
class Candidate:
    """A commit eligible for migration.

    in_scope is False for cross-cutting commits, which touch files outside the
    configured path prefixes. They are migrated anyway and flagged for review.
    """

    commit: CommitInfo
    in_scope: bool


class Outcome(Enum):
    CLEAN = "clean"
    BUILD_FAILED = "build_failed"
    TEST_FAILED = "test_failed"


class MigrationStep(Enum):
    """Per-commit progress through the migration loop, in order."""

    PENDING = "pending"
    REPLAYED = "replayed"
    BUILT = "built"
    BUILD_FAILED = "build_failed"
    TESTED = "tested"
    TEST_FAILED = "test_failed"
    REWRITTEN = "rewritten"
    DONE = "done"


@dataclass(frozen=True)
class CommitOutcome:
    """Result of migrating one candidate, keyed by its original (pre-rewrite) id."""

    commit_id: str
    title: str
    in_scope: bool
    outcome: Outcome


@dataclass(frozen=True)
class MigrationReport:
    """Ordered outcomes of a run plus the title it started from."""

    correspondence_title: str
    outcomes: tuple[CommitOutcome, ...]

    @property
    def cross_cutting(self) -> tuple[CommitOutcome, ...]:
        return tuple(row for row in self.outcomes if not row.in_scope)

    @property
    def is_empty(self) -> bool:
        return not self.outcomes
