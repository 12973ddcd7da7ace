"""Real GitHub implementation using gh CLI."""

import os
from collections.abc import Sequence
from pathlib import Path

from patchferry.core.errors import ToolError
from patchferry.core.github.abc import GitHub
from patchferry.core.subprocess import run_subprocess_with_context


class RealGitHub(GitHub):
    """Real implementation using gh CLI.

    Authentication is passed per call through GH_TOKEN, so no prior
    `gh auth login` is needed on the machine running the job.
    """

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
        """Create a pull request using gh CLI."""
        cmd = [
            "gh",
            "pr",
            "create",
            "--repo",
            repository,
            "--head",
            head,
            "--base",
            base,
            "--title",
            title,
            "--body",
            body,
        ]
        for label in labels:
            cmd.extend(["--label", label])
        for reviewer in reviewers:
            cmd.extend(["--reviewer", reviewer])

        env = dict(os.environ)
        env["GH_TOKEN"] = token

        result = run_subprocess_with_context(
            cmd,
            operation_context=f"create pull request for branch '{head}' on {repository}",
            cwd=repo_root,
            env=env,
        )

        # gh prints the URL of the new PR as its last line of output
        lines = [line.strip() for line in result.stdout.splitlines() if line.strip()]
        if not lines:
            raise ToolError(f"gh pr create returned no URL for branch '{head}'")
        return lines[-1]
