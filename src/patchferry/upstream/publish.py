"""Push the working branch and open the upstreaming pull request."""

import logging
from dataclasses import dataclass
from datetime import date
from pathlib import Path

from patchferry.core.config import PipelineConfig
from patchferry.core.errors import PublicationError, ToolError
from patchferry.core.git.abc import Git
from patchferry.core.github.abc import GitHub

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PublicationResult:
    """What the publication step did.

    pr_url is None when no token was supplied and the pull request was skipped.
    """

    branch_name: str
    pr_url: str | None


def pull_request_title(day: date) -> str:
    return f"Commits to upstream: {day.isoformat()}"


def publish(
    git: Git,
    github: GitHub,
    repo_root: Path,
    config: PipelineConfig,
    *,
    branch_name: str,
    body: str,
    token: str | None,
    day: date,
) -> PublicationResult:
    """Push branch_name to the push remote and open a pull request.

    Without a token the branch is still pushed but no pull request is opened;
    that omission is logged, not raised.

    Raises:
        PublicationError: If the push or the pull request creation fails
    """
    refspec = f"refs/heads/{branch_name}"
    try:
        git.push(repo_root, config.push_remote, refspec)
    except ToolError as e:
        raise PublicationError(f"Failed to push {branch_name} to {config.push_remote}\n{e}") from e
    logger.info("pushed %s to %s", branch_name, config.push_remote)

    if token is None:
        logger.warning("no GitHub token provided - skipping pull-request creation")
        return PublicationResult(branch_name=branch_name, pr_url=None)

    try:
        pr_url = github.create_pr(
            repo_root,
            config.repository,
            title=pull_request_title(day),
            head=branch_name,
            base=config.base_branch,
            body=body,
            labels=config.pull_request.labels,
            reviewers=config.pull_request.reviewers,
            token=token,
        )
    except ToolError as e:
        raise PublicationError(
            f"Failed to open pull request for {branch_name} on {config.repository}\n{e}"
        ) from e

    logger.info("opened pull request %s", pr_url)
    return PublicationResult(branch_name=branch_name, pr_url=pr_url)
