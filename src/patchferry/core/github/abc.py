"""Abstract interface for the pull-request tracker."""

from abc import ABC, abstractmethod
from collections.abc import Sequence
from pathlib import Path


class GitHub(ABC):
    """Abstract interface for GitHub operations.

    All implementations (real and fake) must implement this interface.
    """

    @abstractmethod
    def create_pr(
        self,
        repo_root: Path,
        repository: str,
        *,
        title: str,
        head: str,
        base: str,
        body: str,
        labels: Sequence[str],
        reviewers: Sequence[str],
        token: str,
    ) -> str:
        """Open a pull request.

        Args:
            repo_root: Repository root directory
            repository: Target repository as "owner/repo"
            title: PR title
            head: Branch holding the changes
            base: Branch the PR targets
            body: PR body (markdown)
            labels: Labels to apply
            reviewers: GitHub logins to request review from
            token: Bearer token used to authenticate

        Returns:
            URL of the created pull request

        Raises:
            ToolError: If the pull request cannot be created
        """
        ...
