"""Enumerate the commits to migrate and flag those touching shared paths."""

import logging
import time
from collections.abc import Sequence
from pathlib import Path

from patchferry.core.git.abc import Git, RevListOptions
from patchferry.upstream.types import Candidate

logger = logging.getLogger(__name__)


def is_in_scope(paths: Sequence[str], scope: Sequence[str]) -> bool:
    """True if every path falls under one of the scope prefixes.

    A commit touching no files at all is considered in scope.
    """
    return all(any(path.startswith(prefix) for prefix in scope) for path in paths)


def classify_candidates(
    git: Git,
    repo_root: Path,
    *,
    start: str,
    end: str,
    exclude: str | None,
    scope: Sequence[str],
) -> tuple[Candidate, ...]:
    """List commits after start up to end, oldest first, without merges.

    Cross-cutting commits are kept in the result with in_scope=False; deciding
    whether they can ship is left to whoever reviews the report.

    Args:
        git: Git implementation
        repo_root: Workspace root
        start: Correspondence point (excluded)
        end: Head of the source branch (included)
        exclude: Revision whose history is never migrated
        scope: Path prefixes considered in scope
    """
    started = time.monotonic()
    commit_ids = git.rev_list(
        repo_root,
        RevListOptions(start=start, end=end, exclude=exclude, no_merges=True, reverse=True),
    )

    candidates: list[Candidate] = []
    for commit_id in commit_ids:
        commit = git.get_commit(repo_root, commit_id)
        if commit.is_merge:
            logger.debug("skipping merge commit %s", commit_id)
            continue

        parent = commit.parents[0] if commit.parents else None
        changed = git.get_changed_files(repo_root, commit_id, parent)
        in_scope = is_in_scope(changed, scope)
        if not in_scope:
            logger.debug("%s touches paths outside %s", commit_id, list(scope))
        candidates.append(Candidate(commit=commit, in_scope=in_scope))

    logger.info("commit collection took %.2f seconds", time.monotonic() - started)
    logger.info(
        "bringing over %d commits, %d of which touch paths outside the configured scope",
        len(candidates),
        sum(1 for candidate in candidates if not candidate.in_scope),
    )
    return tuple(candidates)
