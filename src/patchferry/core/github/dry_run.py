"""No-op wrapper for GitHub operations."""

from collections.abc import Sequence
from pathlib import Path

from patchferry.cli.output import user_output
from patchferry.core.github.abc import GitHub


class DryRunGitHub(GitHub):
    """No-op wrapper for GitHub operations.

    Write operations print what would happen instead of executing.
    """

    def __init__(self, wrapped: GitHub) -> None:
        """Initialize dry-run wrapper with a real implementation.

        Args:
            wrapped: The real GitHub operations implementation to wrap
        """
        self._wrapped = wrapped

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
        """Print the pull request that would be opened."""
        user_output(f"[DRY RUN] Would open PR '{title}' on {repository}: {head} -> {base}")
        return f"https://github.com/{repository}/pull/(dry-run)"
