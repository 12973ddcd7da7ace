"""Fake Git implementation for testing.

FakeGit keeps an in-memory commit graph and emulates the handful of git
commands the pipeline needs, including cherry-pick and amend, so that whole
runs can be exercised without a repository on disk.
"""

import re
from pathlib import Path

from patchferry.core.errors import ConflictError, ToolError
from patchferry.core.git.abc import CommitInfo, Git, Identity, LogOptions, RevListOptions


class FakeGit(Git):
    """In-memory fake implementation of git operations.

    State Management:
    - Commit graph, branch heads and conflicts are provided via constructor
    - Mutations (cherry-pick, amend, branch creation) update the in-memory graph
    - Side effects on remotes are only recorded

    Commit order: ``commits`` is given oldest first. That order stands in for
    commit dates, so log() and rev_list() sort by it.

    Examples:
        >>> root = CommitInfo("r", (), "A", "a@x", "root")
        >>> git = FakeGit(commits=[root], branches={"main": "r"}, current_branch="main")
        >>> [c.title for c in git.log(Path("/repo"), LogOptions(branch="main"))]
        ['root']
    """

    def __init__(
        self,
        *,
        commits: list[CommitInfo] | None = None,
        branches: dict[str, str] | None = None,
        current_branch: str | None = None,
        changed_files: dict[str, list[str]] | None = None,
        conflicting_commits: set[str] | None = None,
        push_failure: str | None = None,
    ) -> None:
        """Create FakeGit with a pre-built commit graph.

        Args:
            commits: Commits, oldest first
            branches: Mapping of branch name to head commit id
            current_branch: Branch checked out in the working tree
            changed_files: Mapping of commit id to the paths it touches
            conflicting_commits: Commit ids whose cherry-pick fails
            push_failure: If set, push() raises ToolError with this message
        """
        self._order: list[str] = []
        self._commits: dict[str, CommitInfo] = {}
        for commit in commits or []:
            self._add_commit(commit)
        self._branches = dict(branches or {})
        self._current_branch = current_branch
        self._changed_files = {k: list(v) for k, v in (changed_files or {}).items()}
        self._conflicting_commits = set(conflicting_commits or set())
        self._push_failure = push_failure
        self._counter = 0

        self._fetched_remotes: list[str] = []
        self._created_branches: list[tuple[str, str]] = []
        self._cherry_picked: list[str] = []
        self._amended: list[tuple[str, Identity | None]] = []
        self._pushed: list[tuple[str, str]] = []

    def _add_commit(self, commit: CommitInfo) -> None:
        self._commits[commit.commit_id] = commit
        self._order.append(commit.commit_id)

    def _next_id(self, prefix: str) -> str:
        self._counter += 1
        return f"{prefix}{self._counter:04d}"

    def _resolve(self, rev: str) -> str:
        if rev in self._branches:
            return self._branches[rev]
        if rev in self._commits:
            return rev
        raise ToolError(f"Failed to resolve revision '{rev}'")

    def _ancestors(self, rev: str) -> set[str]:
        seen: set[str] = set()
        pending = [self._resolve(rev)]
        while pending:
            commit_id = pending.pop()
            if commit_id in seen:
                continue
            seen.add(commit_id)
            pending.extend(self._commits[commit_id].parents)
        return seen

    def _newest_first(self, commit_ids: set[str]) -> list[str]:
        return [commit_id for commit_id in reversed(self._order) if commit_id in commit_ids]

    def _head(self) -> str:
        if self._current_branch is None:
            raise ToolError("No branch is checked out")
        return self._branches[self._current_branch]

    # Runtime operations

    def fetch(self, repo_root: Path, remote: str) -> None:
        """Record the fetch; the graph is already complete."""
        self._fetched_remotes.append(remote)

    def log(self, repo_root: Path, options: LogOptions) -> list[CommitInfo]:
        """Walk the in-memory graph newest first, filtering like `git log --grep`."""
        reachable = self._ancestors(options.branch)
        for rev in options.not_on:
            reachable -= self._ancestors(rev)

        pattern = re.compile(options.grep) if options.grep is not None else None
        result: list[CommitInfo] = []
        skipped = 0
        for commit_id in self._newest_first(reachable):
            commit = self._commits[commit_id]
            if pattern is not None and not any(
                pattern.search(line) for line in commit.message.split("\n")
            ):
                continue
            if skipped < options.skip:
                skipped += 1
                continue
            result.append(commit)
            if options.amount is not None and len(result) >= options.amount:
                break
        return result

    def rev_list(self, repo_root: Path, options: RevListOptions) -> list[str]:
        """List commit ids reachable from end but not from start or exclude."""
        in_range = self._ancestors(options.end) - self._ancestors(options.start)
        if options.exclude is not None:
            in_range -= self._ancestors(options.exclude)

        ids = self._newest_first(in_range)
        if options.no_merges:
            ids = [commit_id for commit_id in ids if not self._commits[commit_id].is_merge]
        if options.paths:
            ids = [
                commit_id
                for commit_id in ids
                if any(
                    path.startswith(prefix)
                    for path in self._changed_files.get(commit_id, [])
                    for prefix in options.paths
                )
            ]
        if options.reverse:
            ids.reverse()
        return ids

    def get_commit(self, repo_root: Path, rev: str) -> CommitInfo:
        """Look up a commit by id or branch name."""
        return self._commits[self._resolve(rev)]

    def get_changed_files(
        self, repo_root: Path, commit_id: str, parent_id: str | None
    ) -> list[str]:
        """Return the pre-configured paths for a commit."""
        return list(self._changed_files.get(commit_id, []))

    def create_branch(self, repo_root: Path, branch_name: str, start_point: str) -> None:
        """Create a branch pointing at start_point."""
        if branch_name in self._branches:
            raise ToolError(f"Failed to create branch '{branch_name}': already exists")
        self._branches[branch_name] = self._resolve(start_point)
        self._created_branches.append((branch_name, start_point))

    def switch_branch(self, repo_root: Path, branch: str) -> None:
        """Check out an existing branch."""
        if branch not in self._branches:
            raise ToolError(f"Failed to switch to branch '{branch}': no such branch")
        self._current_branch = branch

    def cherry_pick(self, repo_root: Path, commit_id: str) -> None:
        """Copy a commit on top of the current branch under a new id."""
        if commit_id in self._conflicting_commits:
            raise ConflictError(commit_id, f"CONFLICT (content): could not apply {commit_id}")

        original = self._commits[self._resolve(commit_id)]
        picked = CommitInfo(
            commit_id=self._next_id("picked"),
            parents=(self._head(),),
            author_name=original.author_name,
            author_email=original.author_email,
            message=original.message,
        )
        self._add_commit(picked)
        self._changed_files[picked.commit_id] = list(self._changed_files.get(commit_id, []))
        self._branches[self._current_branch] = picked.commit_id  # type: ignore[index]
        self._cherry_picked.append(commit_id)

    def amend_commit_message(
        self, repo_root: Path, message: str, *, committer: Identity | None
    ) -> None:
        """Replace HEAD with a copy carrying the new message."""
        head = self._commits[self._head()]
        amended = CommitInfo(
            commit_id=self._next_id("amended"),
            parents=head.parents,
            author_name=head.author_name,
            author_email=head.author_email,
            message=message,
        )
        self._add_commit(amended)
        self._changed_files[amended.commit_id] = list(self._changed_files.get(head.commit_id, []))
        self._branches[self._current_branch] = amended.commit_id  # type: ignore[index]
        self._amended.append((message, committer))

    def push(self, repo_root: Path, remote: str, refspec: str) -> None:
        """Record the push, or fail if configured to."""
        if self._push_failure is not None:
            raise ToolError(self._push_failure)
        self._pushed.append((remote, refspec))

    # Read-only access for test assertions

    @property
    def current_branch(self) -> str | None:
        return self._current_branch

    @property
    def fetched_remotes(self) -> list[str]:
        return self._fetched_remotes

    @property
    def created_branches(self) -> list[tuple[str, str]]:
        return self._created_branches

    @property
    def cherry_picked(self) -> list[str]:
        return self._cherry_picked

    @property
    def amended(self) -> list[tuple[str, Identity | None]]:
        """Messages passed to amend_commit_message(), with the committer used."""
        return self._amended

    @property
    def pushed(self) -> list[tuple[str, str]]:
        return self._pushed

    def branch_log(self, branch: str) -> list[CommitInfo]:
        """Full history of a branch, newest first."""
        return [self._commits[c] for c in self._newest_first(self._ancestors(branch))]
