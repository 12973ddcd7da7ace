"""High-level git operations interface.

This module provides a clean abstraction over git subprocess calls, making the
pipeline testable without a real repository.

Architecture:
- Git: Abstract base class defining the interface
- RealGit: Production implementation using subprocess
- FakeGit: In-memory commit graph for tests
- DryRunGit: Wrapper that refuses to touch remotes

Command options are plain frozen dataclasses (LogOptions, RevListOptions)
instead of chained builders.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class CommitInfo:
    """A commit as read from git. Never mutated; a rewrite is a new CommitInfo."""

    commit_id: str
    parents: tuple[str, ...]
    author_name: str
    author_email: str
    message: str

    @property
    def title(self) -> str:
        """First line of the commit message."""
        return self.message.split("\n", 1)[0]

    @property
    def body(self) -> str:
        """Everything after the first line, untouched."""
        parts = self.message.split("\n", 1)
        if len(parts) == 1:
            return ""
        return parts[1]

    @property
    def is_merge(self) -> bool:
        return len(self.parents) > 1


@dataclass(frozen=True)
class Identity:
    """Name and email used for author or committer fields."""

    name: str
    email: str


@dataclass(frozen=True)
class LogOptions:
    """Options for `git log`.

    Attributes:
        branch: Revision to walk from (newest first)
        grep: Pattern matched against every message line
        extended_regexp: Interpret grep as a POSIX extended regex
        amount: Maximum number of commits to return
        skip: Number of matching commits to skip before returning any
        not_on: Revisions whose ancestors are excluded
    """

    branch: str
    grep: str | None = None
    extended_regexp: bool = False
    amount: int | None = None
    skip: int = 0
    not_on: tuple[str, ...] = ()


@dataclass(frozen=True)
class RevListOptions:
    """Options for `git rev-list start..end`.

    Attributes:
        start: Exclusive lower bound of the range
        end: Inclusive upper bound of the range
        exclude: Additional revision whose ancestors are hidden
        no_merges: Skip commits with more than one parent
        reverse: Oldest first
        paths: Only list commits touching these paths
    """

    start: str
    end: str
    exclude: str | None = None
    no_merges: bool = False
    reverse: bool = False
    paths: tuple[str, ...] = ()


# ============================================================================
# Abstract Interface
# ============================================================================


class Git(ABC):
    """Abstract interface for git operations.

    All implementations (real and fake) must implement this interface.
    This interface contains ONLY runtime operations - no test setup methods.
    """

    @abstractmethod
    def fetch(self, repo_root: Path, remote: str) -> None:
        """Fetch all refs of a remote."""
        ...

    @abstractmethod
    def log(self, repo_root: Path, options: LogOptions) -> list[CommitInfo]:
        """List commits newest first.

        Args:
            repo_root: Path to the repository root
            options: Which commits to walk and how to filter them

        Returns:
            Matching commits, newest first
        """
        ...

    @abstractmethod
    def rev_list(self, repo_root: Path, options: RevListOptions) -> list[str]:
        """List commit ids in a range.

        Args:
            repo_root: Path to the repository root
            options: Range and filters

        Returns:
            Commit ids, newest first unless options.reverse is set
        """
        ...

    @abstractmethod
    def get_commit(self, repo_root: Path, rev: str) -> CommitInfo:
        """Read a single commit.

        Raises:
            ToolError: If the revision does not resolve to a commit
        """
        ...

    @abstractmethod
    def get_changed_files(
        self, repo_root: Path, commit_id: str, parent_id: str | None
    ) -> list[str]:
        """List paths that differ between a commit and its parent.

        A root commit (parent_id None) reports every path it introduces.
        """
        ...

    @abstractmethod
    def create_branch(self, repo_root: Path, branch_name: str, start_point: str) -> None:
        """Create a new branch without checking it out."""
        ...

    @abstractmethod
    def switch_branch(self, repo_root: Path, branch: str) -> None:
        """Switch the working tree to an existing branch."""
        ...

    @abstractmethod
    def cherry_pick(self, repo_root: Path, commit_id: str) -> None:
        """Apply a commit on top of the current branch.

        Raises:
            ConflictError: If the commit does not apply cleanly. The working
                tree is left in its conflicted state.
        """
        ...

    @abstractmethod
    def amend_commit_message(
        self, repo_root: Path, message: str, *, committer: Identity | None
    ) -> None:
        """Replace the message of HEAD, keeping its tree, parents and author.

        Args:
            repo_root: Path to the repository root
            message: New message, stored verbatim
            committer: Identity to record as committer, or None for git's
                configured identity
        """
        ...

    @abstractmethod
    def push(self, repo_root: Path, remote: str, refspec: str) -> None:
        """Push a refspec to a remote."""
        ...
