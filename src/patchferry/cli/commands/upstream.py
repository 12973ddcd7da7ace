"""Prepare fork commits for upstreaming and propose them as a pull request."""

import dataclasses
from pathlib import Path
from typing import NoReturn

import click
from rich.console import Console

from patchferry.cli.output import format_migration_summary, user_output
from patchferry.core.config import FilesystemConfigStore
from patchferry.core.context import PipelineContext, create_context
from patchferry.core.errors import ConfigurationError, ConflictError, ToolError
from patchferry.upstream.pipeline import run_upstream
from patchferry.upstream.report import render_table
from patchferry.upstream.types import MigrationReport


def _fail(step: str, message: str) -> NoReturn:
    user_output(click.style("Error: ", fg="red") + f"{step}: {message}")
    raise SystemExit(1)


@click.command("upstream")
@click.option(
    "-w",
    "--workspace",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    default=None,
    help="Git checkout to run in (defaults to the current directory).",
)
@click.option("--base", default=None, help="Branch the pull request targets.")
@click.option("--repo", "repository", default=None, help="Repository as OWNER/REPO.")
@click.option(
    "--token",
    envvar="GITHUB_TOKEN",
    default=None,
    help="GitHub token. Without one the branch is pushed but no PR is opened.",
)
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="Configuration file (defaults to patchferry.toml in the workspace).",
)
@click.option("--dry-run", is_flag=True, help="Migrate locally, only print the push and PR.")
@click.pass_context
def upstream_cmd(
    click_ctx: click.Context,
    workspace: Path | None,
    base: str | None,
    repository: str | None,
    token: str | None,
    config_path: Path | None,
    dry_run: bool,
) -> None:
    """Cherry-pick new fork commits onto the staging branch and open a PR.

    Finds the last commit already upstreamed (by its title marker), replays
    every newer commit from the source branch onto a fresh branch, builds and
    tests each one, marks its title, then pushes the branch and opens a pull
    request whose body reports the per-commit results.

    Build and test failures only show up in the report. A cherry-pick conflict
    stops the run and leaves the branch for inspection.
    """
    if workspace is not None:
        workspace = workspace.resolve()

    try:
        if click_ctx.obj is None:
            config_store = FilesystemConfigStore(config_path) if config_path is not None else None
            click_ctx.obj = create_context(
                cwd=workspace if workspace is not None else Path.cwd(),
                dry_run=dry_run,
                config_store=config_store,
            )
    except ConfigurationError as e:
        _fail("configuration", str(e))

    ctx: PipelineContext = click_ctx.obj
    ctx = dataclasses.replace(
        ctx, config=ctx.config.with_overrides(base_branch=base, repository=repository)
    )
    repo_root = workspace if workspace is not None else ctx.cwd

    try:
        result = run_upstream(ctx, repo_root, token=token)
    except ConfigurationError as e:
        _fail("resolving correspondence", str(e))
    except ConflictError as e:
        if e.outcomes:
            partial = MigrationReport(correspondence_title="", outcomes=e.outcomes)
            click.echo(render_table(partial))
        if e.branch_name is not None:
            user_output(f"Working branch '{e.branch_name}' left in place for inspection.")
        _fail("cherry-pick", str(e))
    except ToolError as e:
        _fail("external command", str(e))

    if result.branch_name is None:
        user_output(
            click.style("✓ ", fg="green")
            + f"Nothing to upstream since '{result.correspondence.title}'."
        )
        return

    if result.body is not None:
        click.echo(result.body, nl=False)

    pr_url = result.publication.pr_url if result.publication is not None else None
    if result.publication is not None and pr_url is None:
        user_output("No GitHub token provided - pull request was not opened.")

    Console(stderr=True).print(
        format_migration_summary(
            result.report,
            branch_name=result.branch_name,
            pr_url=pr_url,
            publication_error=result.publication_error,
        )
    )

    if result.publication_error is not None:
        raise SystemExit(1)
