"""Replay candidates onto the working branch, validating and marking each one.

Commits are processed strictly one at a time, oldest first: each cherry-pick
depends on the tree left by the previous one and each build runs against that
tree. Build and test failures are recorded and the loop moves on. A
cherry-pick that does not apply ends the run.
"""

import logging
from collections.abc import Sequence
from pathlib import Path

from patchferry.core.config import BuildConfig
from patchferry.core.errors import ConflictError
from patchferry.core.git.abc import Git, Identity
from patchferry.core.make.abc import Make, MakeResult
from patchferry.upstream.types import (
    Candidate,
    CommitOutcome,
    MigrationReport,
    MigrationStep,
    Outcome,
)

logger = logging.getLogger(__name__)


def mark_message(message: str, marker: str) -> str:
    """Prefix the title of a message with the marker, leaving the body as-is.

    Messages whose title already starts with the marker are returned unchanged.
    """
    if message.startswith(marker):
        return message
    return marker + message


def has_test_failures(result: MakeResult, failure_tokens: Sequence[str]) -> bool:
    """Decide whether a test run failed.

    The test harness may exit 0 with isolated regressions, so the output is
    searched for failure tokens as well.
    """
    if not result.success:
        return True
    return any(token in result.output for token in failure_tokens)


def _step(commit_id: str, step: MigrationStep) -> None:
    logger.debug("%s: %s", commit_id, step.value)


def migrate_candidate(
    git: Git,
    make: Make,
    repo_root: Path,
    candidate: Candidate,
    *,
    marker: str,
    build: BuildConfig,
    committer: Identity | None,
) -> CommitOutcome:
    """Cherry-pick, build, test and mark a single commit.

    Raises:
        ConflictError: If the cherry-pick does not apply
    """
    commit = candidate.commit
    _step(commit.commit_id, MigrationStep.PENDING)
    logger.info("cherry-picking %s %s", commit.commit_id, commit.title)
    git.cherry_pick(repo_root, commit.commit_id)
    _step(commit.commit_id, MigrationStep.REPLAYED)

    build_dir = repo_root / build.directory
    outcome = Outcome.CLEAN
    build_result = make.build(build_dir, jobs=build.jobs, load=build.load)
    if not build_result.success:
        logger.warning("build failed for %s", commit.commit_id)
        _step(commit.commit_id, MigrationStep.BUILD_FAILED)
        outcome = Outcome.BUILD_FAILED
    else:
        _step(commit.commit_id, MigrationStep.BUILT)
        test_result = make.test(build_dir, build.test_recipe, jobs=build.jobs, load=build.load)
        if has_test_failures(test_result, build.failure_tokens):
            logger.warning("tests failed for %s", commit.commit_id)
            _step(commit.commit_id, MigrationStep.TEST_FAILED)
            outcome = Outcome.TEST_FAILED
        else:
            _step(commit.commit_id, MigrationStep.TESTED)

    new_message = mark_message(commit.message, marker)
    if new_message != commit.message:
        git.amend_commit_message(repo_root, new_message, committer=committer)
        _step(commit.commit_id, MigrationStep.REWRITTEN)
    else:
        logger.info("%s is already marked, keeping its message", commit.commit_id)

    _step(commit.commit_id, MigrationStep.DONE)
    return CommitOutcome(
        commit_id=commit.commit_id,
        title=commit.title,
        in_scope=candidate.in_scope,
        outcome=outcome,
    )


def migrate_candidates(
    git: Git,
    make: Make,
    repo_root: Path,
    candidates: Sequence[Candidate],
    *,
    correspondence_title: str,
    marker: str,
    build: BuildConfig,
    committer: Identity | None,
) -> MigrationReport:
    """Migrate every candidate in order onto the checked-out working branch.

    Raises:
        ConflictError: If a cherry-pick does not apply. The error carries the
            outcomes recorded before the conflicting commit.
    """
    outcomes: list[CommitOutcome] = []
    for index, candidate in enumerate(candidates, start=1):
        logger.info("[%d/%d] migrating %s", index, len(candidates), candidate.commit.commit_id)
        try:
            outcome = migrate_candidate(
                git,
                make,
                repo_root,
                candidate,
                marker=marker,
                build=build,
                committer=committer,
            )
        except ConflictError as e:
            logger.error("cherry-pick of %s failed, stopping", e.commit_id)
            raise e.with_outcomes(outcomes) from e
        outcomes.append(outcome)

    return MigrationReport(correspondence_title=correspondence_title, outcomes=tuple(outcomes))
