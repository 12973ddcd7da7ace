"""Fake GitHub implementation for testing."""

from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

from patchferry.core.errors import ToolError
from patchferry.core.github.abc import GitHub


@dataclass(frozen=True)
class CreatedPR:
    """A pull request recorded by FakeGitHub."""

    repository: str
    title: str
    head: str
    base: str
    body: str
    labels: tuple[str, ...]
    reviewers: tuple[str, ...]
    token: str


class FakeGitHub(GitHub):
    """In-memory fake that records pull requests instead of opening them."""

    def __init__(self, *, create_pr_failure: str | None = None) -> None:
        """Create FakeGitHub.

        Args:
            create_pr_failure: If set, create_pr() raises ToolError with this message
        """
        self._create_pr_failure = create_pr_failure
        self._created_prs: list[CreatedPR] = []

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
        """Record PR creation in mutation tracking list.

        Returns:
            A fake PR URL numbered by creation order
        """
        if self._create_pr_failure is not None:
            raise ToolError(self._create_pr_failure)

        self._created_prs.append(
            CreatedPR(
                repository=repository,
                title=title,
                head=head,
                base=base,
                body=body,
                labels=tuple(labels),
                reviewers=tuple(reviewers),
                token=token,
            )
        )
        return f"https://github.com/{repository}/pull/{len(self._created_prs)}"

    @property
    def created_prs(self) -> list[CreatedPR]:
        """Read-only access to tracked PR creations for test assertions."""
        return self._created_prs
