"""Tests for the upstream command."""

from pathlib import Path

import pytest
from click.testing import CliRunner

from patchferry.cli.cli import cli
from patchferry.core.context import PipelineContext
from patchferry.core.github.fake import FakeGitHub
from patchferry.core.make.abc import MakeResult
from patchferry.core.make.fake import FakeMake
from tests.test_utils.builders import DivergedHistory, config_for_history

BRANCH = "prepare-2024-03-14-1710408413589793"


def _history() -> DivergedHistory:
    return (
        DivergedHistory()
        .add("a", "Add parser", ["gcc/rust/parse/rust-parse.cc"])
        .add("b", "Update MAINTAINERS", ["MAINTAINERS"])
    )


def test_upstream_prints_report_and_opens_pr() -> None:
    runner = CliRunner()
    github = FakeGitHub()
    test_ctx = PipelineContext.for_test(
        git=_history().build(), github=github, config=config_for_history()
    )

    result = runner.invoke(
        cli, ["upstream", "--token", "ghp_secret"], obj=test_ctx, catch_exceptions=False
    )

    assert result.exit_code == 0, result.output
    # Report body goes to stdout, summary to stderr
    assert "|a|✅|✅|" in result.stdout
    assert "- b Update MAINTAINERS" in result.stdout
    assert "Upstream Prepared" in result.stderr
    assert "https://github.com/rust-gcc/gccrs/pull/1" in result.stderr
    assert BRANCH in result.stderr
    assert len(github.created_prs) == 1


def test_upstream_reads_token_from_environment() -> None:
    runner = CliRunner()
    github = FakeGitHub()
    test_ctx = PipelineContext.for_test(
        git=_history().build(), github=github, config=config_for_history()
    )

    result = runner.invoke(
        cli, ["upstream"], obj=test_ctx, env={"GITHUB_TOKEN": "ghp_env"}, catch_exceptions=False
    )

    assert result.exit_code == 0, result.output
    assert github.created_prs[0].token == "ghp_env"


def test_upstream_without_token_pushes_only() -> None:
    runner = CliRunner()
    git = _history().build()
    github = FakeGitHub()
    test_ctx = PipelineContext.for_test(git=git, github=github, config=config_for_history())

    result = runner.invoke(
        cli, ["upstream"], obj=test_ctx, env={"GITHUB_TOKEN": None}, catch_exceptions=False
    )

    assert result.exit_code == 0, result.output
    assert "pull request was not opened" in result.stderr
    assert git.pushed == [("origin", f"refs/heads/{BRANCH}")]
    assert github.created_prs == []


def test_upstream_base_and_repo_overrides() -> None:
    runner = CliRunner()
    github = FakeGitHub()
    test_ctx = PipelineContext.for_test(
        git=_history().build(), github=github, config=config_for_history()
    )

    result = runner.invoke(
        cli,
        ["upstream", "--token", "t", "--base", "staging", "--repo", "me/gccrs"],
        obj=test_ctx,
        catch_exceptions=False,
    )

    assert result.exit_code == 0, result.output
    [pr] = github.created_prs
    assert pr.base == "staging"
    assert pr.repository == "me/gccrs"


def test_upstream_build_failure_still_exits_zero() -> None:
    runner = CliRunner()
    test_ctx = PipelineContext.for_test(
        git=_history().build(),
        make=FakeMake(build_results=[MakeResult(False, "error: expected ';'")]),
        config=config_for_history(),
    )

    result = runner.invoke(cli, ["upstream", "--token", "t"], obj=test_ctx, catch_exceptions=False)

    assert result.exit_code == 0, result.output
    assert "|a|❌|❌|" in result.stdout
    assert "Build failed: 1" in result.stderr


def test_upstream_nothing_to_do() -> None:
    runner = CliRunner()
    git = DivergedHistory().build()
    test_ctx = PipelineContext.for_test(git=git, config=config_for_history())

    result = runner.invoke(cli, ["upstream", "--token", "t"], obj=test_ctx, catch_exceptions=False)

    assert result.exit_code == 0, result.output
    assert "Nothing to upstream since 'Add lexer'" in result.stderr
    assert result.stdout == ""
    assert git.pushed == []


def test_upstream_conflict_prints_partial_table_and_fails() -> None:
    runner = CliRunner()
    git = _history().conflict_on("b").build()
    test_ctx = PipelineContext.for_test(git=git, config=config_for_history())

    result = runner.invoke(cli, ["upstream", "--token", "t"], obj=test_ctx, catch_exceptions=False)

    assert result.exit_code == 1
    assert "|a|✅|✅|" in result.stdout
    assert "|b|" not in result.stdout
    assert f"Working branch '{BRANCH}' left in place" in result.stderr
    assert "Error: cherry-pick: Failed to cherry-pick b" in result.stderr
    assert git.pushed == []


def test_upstream_missing_marker_fails() -> None:
    runner = CliRunner()
    test_ctx = PipelineContext.for_test(
        git=_history().build(), config=config_for_history(marker="rustc: ")
    )

    result = runner.invoke(cli, ["upstream"], obj=test_ctx, catch_exceptions=False)

    assert result.exit_code == 1
    assert "Error: resolving correspondence:" in result.stderr


def test_upstream_publication_failure_exits_nonzero_after_report() -> None:
    runner = CliRunner()
    test_ctx = PipelineContext.for_test(
        git=_history().build(push_failure="remote: Permission denied"),
        config=config_for_history(),
    )

    result = runner.invoke(cli, ["upstream", "--token", "t"], obj=test_ctx, catch_exceptions=False)

    assert result.exit_code == 1
    assert "|a|✅|✅|" in result.stdout
    assert "Permission denied" in result.stderr
    assert "not published" in result.stderr


def test_upstream_invalid_config_file(tmp_path: Path) -> None:
    runner = CliRunner()
    config_path = tmp_path / "patchferry.toml"
    config_path.write_text("[build]\nthreads = 4\n", encoding="utf-8")

    result = runner.invoke(
        cli,
        ["upstream", "--workspace", str(tmp_path), "--config", str(config_path)],
        catch_exceptions=False,
    )

    assert result.exit_code == 1
    assert "Error: configuration:" in result.stderr
    assert "threads" in result.stderr


def test_upstream_relative_workspace_is_made_absolute(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    (tmp_path / "ws").mkdir()
    monkeypatch.chdir(tmp_path)
    runner = CliRunner()
    make = FakeMake()
    test_ctx = PipelineContext.for_test(
        git=_history().build(), make=make, config=config_for_history()
    )

    result = runner.invoke(
        cli, ["upstream", "-w", "ws", "--token", "t"], obj=test_ctx, catch_exceptions=False
    )

    assert result.exit_code == 0, result.output
    build_dirs = [directory for directory, _, _ in make.build_calls]
    assert build_dirs == [(tmp_path / "ws").resolve()] * 2
    assert all(directory.is_absolute() for directory in build_dirs)
