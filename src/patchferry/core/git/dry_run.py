"""Dry-run Git wrapper.

Local history operations run for real so that the migration can be inspected;
only operations that reach a remote are skipped.
"""

import logging
from pathlib import Path

from patchferry.cli.output import user_output
from patchferry.core.git.abc import CommitInfo, Git, Identity, LogOptions, RevListOptions

logger = logging.getLogger(__name__)


class DryRunGit(Git):
    """Wrapper that prints remote operations instead of executing them.

    Usage:
        real_ops = RealGit()
        dry_run_ops = DryRunGit(real_ops)

        # Prints message instead of pushing
        dry_run_ops.push(repo_root, "origin", "refs/heads/prepare")
    """

    def __init__(self, wrapped: Git) -> None:
        """Create a dry-run wrapper around a Git implementation.

        Args:
            wrapped: The Git implementation to wrap (usually RealGit or FakeGit)
        """
        self._wrapped = wrapped

    def fetch(self, repo_root: Path, remote: str) -> None:
        """Fetching only updates remote-tracking refs, delegate."""
        self._wrapped.fetch(repo_root, remote)

    def log(self, repo_root: Path, options: LogOptions) -> list[CommitInfo]:
        return self._wrapped.log(repo_root, options)

    def rev_list(self, repo_root: Path, options: RevListOptions) -> list[str]:
        return self._wrapped.rev_list(repo_root, options)

    def get_commit(self, repo_root: Path, rev: str) -> CommitInfo:
        return self._wrapped.get_commit(repo_root, rev)

    def get_changed_files(
        self, repo_root: Path, commit_id: str, parent_id: str | None
    ) -> list[str]:
        return self._wrapped.get_changed_files(repo_root, commit_id, parent_id)

    def create_branch(self, repo_root: Path, branch_name: str, start_point: str) -> None:
        self._wrapped.create_branch(repo_root, branch_name, start_point)

    def switch_branch(self, repo_root: Path, branch: str) -> None:
        self._wrapped.switch_branch(repo_root, branch)

    def cherry_pick(self, repo_root: Path, commit_id: str) -> None:
        self._wrapped.cherry_pick(repo_root, commit_id)

    def amend_commit_message(
        self, repo_root: Path, message: str, *, committer: Identity | None
    ) -> None:
        self._wrapped.amend_commit_message(repo_root, message, committer=committer)

    def push(self, repo_root: Path, remote: str, refspec: str) -> None:
        """Print the push that would happen."""
        logger.debug("dry-run: skipping push of %s to %s", refspec, remote)
        user_output(f"[DRY RUN] Would push {refspec} to {remote}")
