"""Tests for the dry-run wrappers."""

from pathlib import Path

import pytest

from patchferry.core.git.dry_run import DryRunGit
from patchferry.core.github.dry_run import DryRunGitHub
from patchferry.core.github.fake import FakeGitHub
from tests.test_utils.builders import UPSTREAM, DivergedHistory

REPO = Path("/repo")


def test_dry_run_git_skips_push(capsys: pytest.CaptureFixture[str]) -> None:
    fake = DivergedHistory().build()
    git = DryRunGit(fake)

    git.push(REPO, "origin", "refs/heads/prepare-x")

    assert fake.pushed == []
    assert "[DRY RUN] Would push refs/heads/prepare-x to origin" in capsys.readouterr().err


def test_dry_run_git_still_rewrites_local_history() -> None:
    fake = DivergedHistory().add("a", "Add parser", []).build()
    git = DryRunGit(fake)

    git.create_branch(REPO, "prepare-x", UPSTREAM)
    git.switch_branch(REPO, "prepare-x")
    git.cherry_pick(REPO, "a")
    git.amend_commit_message(REPO, "gccrs: Add parser", committer=None)

    assert fake.cherry_picked == ["a"]
    assert fake.branch_log("prepare-x")[0].title == "gccrs: Add parser"


def test_dry_run_github_does_not_open_pr(capsys: pytest.CaptureFixture[str]) -> None:
    fake = FakeGitHub()
    github = DryRunGitHub(fake)

    url = github.create_pr(
        REPO,
        "rust-gcc/gccrs",
        title="Commits to upstream: 2024-03-14",
        head="prepare-x",
        base="gcc-patch-dev",
        body="",
        labels=["upstream"],
        reviewers=[],
        token="t",
    )

    assert fake.created_prs == []
    assert "dry-run" in url
    assert "[DRY RUN] Would open PR" in capsys.readouterr().err
