"""Production Git implementation using subprocess.

This module provides the real Git implementation that executes actual git
commands via subprocess.
"""

import os
from pathlib import Path

from patchferry.core.errors import ConflictError, ToolError
from patchferry.core.git.abc import CommitInfo, Git, Identity, LogOptions, RevListOptions
from patchferry.core.subprocess import run_subprocess_with_context

# Fields are NUL separated, records are terminated by an ASCII record separator
# so that multi-line messages survive parsing.
_FIELD_SEP = "\x00"
_RECORD_SEP = "\x1e"
COMMIT_FORMAT = "%H%x00%P%x00%an%x00%ae%x00%B%x1e"


def parse_commit_records(output: str) -> list[CommitInfo]:
    """Parse `git log --format=COMMIT_FORMAT` output into commits.

    Raises:
        ToolError: If a record does not have the expected fields
    """
    commits: list[CommitInfo] = []
    for record in output.split(_RECORD_SEP):
        record = record.lstrip("\n")
        if not record.strip():
            continue

        parts = record.split(_FIELD_SEP, 4)
        if len(parts) != 5:
            raise ToolError(f"Malformed git log record: {record[:80]!r}")

        commit_id, parents, author_name, author_email, message = parts
        commits.append(
            CommitInfo(
                commit_id=commit_id,
                parents=tuple(parents.split()),
                author_name=author_name,
                author_email=author_email,
                message=message.rstrip("\n"),
            )
        )
    return commits


# ============================================================================
# Production Implementation
# ============================================================================


class RealGit(Git):
    """Production implementation using subprocess.

    All git operations execute actual git commands via subprocess.
    """

    def fetch(self, repo_root: Path, remote: str) -> None:
        """Fetch all refs of a remote."""
        run_subprocess_with_context(
            ["git", "fetch", remote],
            operation_context=f"fetch remote '{remote}'",
            cwd=repo_root,
        )

    def log(self, repo_root: Path, options: LogOptions) -> list[CommitInfo]:
        """List commits newest first."""
        cmd = ["git", "log", f"--format={COMMIT_FORMAT}"]
        if options.amount is not None:
            cmd.append(f"-{options.amount}")
        if options.skip:
            cmd.append(f"--skip={options.skip}")
        if options.grep is not None:
            cmd.extend(["--grep", options.grep])
            if options.extended_regexp:
                cmd.append("--extended-regexp")
        cmd.append(options.branch)
        cmd.extend(f"^{rev}" for rev in options.not_on)
        cmd.append("--")

        result = run_subprocess_with_context(
            cmd,
            operation_context=f"read log of '{options.branch}'",
            cwd=repo_root,
        )
        return parse_commit_records(result.stdout)

    def rev_list(self, repo_root: Path, options: RevListOptions) -> list[str]:
        """List commit ids in a range."""
        cmd = ["git", "rev-list", f"{options.start}..{options.end}"]
        if options.reverse:
            cmd.append("--reverse")
        if options.no_merges:
            cmd.append("--no-merges")
        if options.exclude is not None:
            cmd.append(f"^{options.exclude}")
        cmd.append("--")
        cmd.extend(options.paths)

        result = run_subprocess_with_context(
            cmd,
            operation_context=f"list commits in {options.start}..{options.end}",
            cwd=repo_root,
        )
        return [line.strip() for line in result.stdout.splitlines() if line.strip()]

    def get_commit(self, repo_root: Path, rev: str) -> CommitInfo:
        """Read a single commit."""
        result = run_subprocess_with_context(
            ["git", "show", "-s", f"--format={COMMIT_FORMAT}", rev, "--"],
            operation_context=f"read commit '{rev}'",
            cwd=repo_root,
        )
        commits = parse_commit_records(result.stdout)
        if len(commits) != 1:
            raise ToolError(f"Expected exactly one commit for '{rev}', got {len(commits)}")
        return commits[0]

    def get_changed_files(
        self, repo_root: Path, commit_id: str, parent_id: str | None
    ) -> list[str]:
        """List paths that differ between a commit and its parent."""
        cmd = ["git", "diff-tree", "--no-commit-id", "--name-only", "-r"]
        if parent_id is None:
            cmd.extend(["--root", commit_id])
        else:
            cmd.extend([parent_id, commit_id])

        result = run_subprocess_with_context(
            cmd,
            operation_context=f"list files changed by {commit_id}",
            cwd=repo_root,
        )
        return [line for line in result.stdout.splitlines() if line]

    def create_branch(self, repo_root: Path, branch_name: str, start_point: str) -> None:
        """Create a new branch without checking it out."""
        run_subprocess_with_context(
            ["git", "branch", branch_name, start_point],
            operation_context=f"create branch '{branch_name}' from '{start_point}'",
            cwd=repo_root,
        )

    def switch_branch(self, repo_root: Path, branch: str) -> None:
        """Switch the working tree to an existing branch."""
        run_subprocess_with_context(
            ["git", "switch", branch],
            operation_context=f"switch to branch '{branch}'",
            cwd=repo_root,
        )

    def cherry_pick(self, repo_root: Path, commit_id: str) -> None:
        """Apply a commit on top of the current branch.

        A failed cherry-pick is left in progress; nothing is aborted.
        """
        result = run_subprocess_with_context(
            ["git", "cherry-pick", commit_id],
            operation_context=f"cherry-pick {commit_id}",
            cwd=repo_root,
            check=False,
        )
        if result.returncode != 0:
            detail = result.stderr.strip() or result.stdout.strip()
            raise ConflictError(commit_id, detail)

    def amend_commit_message(
        self, repo_root: Path, message: str, *, committer: Identity | None
    ) -> None:
        """Replace the message of HEAD, keeping its tree, parents and author."""
        env = dict(os.environ)
        if committer is not None:
            env["GIT_COMMITTER_NAME"] = committer.name
            env["GIT_COMMITTER_EMAIL"] = committer.email

        run_subprocess_with_context(
            ["git", "commit", "--amend", "--no-verify", "--cleanup=verbatim", "-F", "-"],
            operation_context="amend commit message",
            cwd=repo_root,
            env=env,
            input=message if message.endswith("\n") else message + "\n",
        )

    def push(self, repo_root: Path, remote: str, refspec: str) -> None:
        """Push a refspec to a remote."""
        run_subprocess_with_context(
            ["git", "push", remote, refspec],
            operation_context=f"push '{refspec}' to remote '{remote}'",
            cwd=repo_root,
        )
