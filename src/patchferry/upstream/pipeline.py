"""End-to-end upstreaming run.

fetch -> resolve correspondence -> classify candidates -> create working
branch -> migrate -> render report -> publish.
"""

import logging
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from pathlib import Path

from patchferry.core.context import PipelineContext
from patchferry.core.errors import ConflictError, PublicationError
from patchferry.upstream.classify import classify_candidates
from patchferry.upstream.correspondence import resolve_correspondence
from patchferry.upstream.migrate import migrate_candidates
from patchferry.upstream.publish import PublicationResult, publish
from patchferry.upstream.report import render_report
from patchferry.upstream.types import Correspondence, MigrationReport

logger = logging.getLogger(__name__)

_EPOCH = datetime(1970, 1, 1, tzinfo=UTC)


@dataclass(frozen=True)
class UpstreamResult:
    """Everything a run produced.

    branch_name is None when there was nothing to migrate. publication_error
    is set when the migration finished but could not be pushed or proposed.
    """

    correspondence: Correspondence
    report: MigrationReport
    branch_name: str | None
    body: str | None
    publication: PublicationResult | None
    publication_error: str | None


def working_branch_name(prefix: str, now: datetime) -> str:
    """Name unique across runs, including several on the same day."""
    micros = (now - _EPOCH) // timedelta(microseconds=1)
    return f"{prefix}-{now.date().isoformat()}-{micros}"


def run_upstream(ctx: PipelineContext, repo_root: Path, *, token: str | None) -> UpstreamResult:
    """Run the whole pipeline once against the workspace at repo_root.

    Raises:
        ConfigurationError: If the correspondence point cannot be established
        ConflictError: If a cherry-pick does not apply; names the working branch
        ToolError: If git or make fail unexpectedly
    """
    config = ctx.config

    for remote in config.fetch_remotes:
        logger.info("fetching remote %s", remote)
        ctx.git.fetch(repo_root, remote)

    correspondence = resolve_correspondence(
        ctx.git,
        repo_root,
        upstream_branch=config.upstream_branch,
        source_branch=config.source_branch,
        marker=config.marker,
        exclude=config.effective_exclude,
    )

    candidates = classify_candidates(
        ctx.git,
        repo_root,
        start=correspondence.source_commit_id,
        end=config.source_branch,
        exclude=config.effective_exclude,
        scope=config.scope,
    )
    if not candidates:
        logger.info("nothing new on %s since %r", config.source_branch, correspondence.title)
        return UpstreamResult(
            correspondence=correspondence,
            report=MigrationReport(correspondence_title=correspondence.title, outcomes=()),
            branch_name=None,
            body=None,
            publication=None,
            publication_error=None,
        )

    now = ctx.time.now()
    branch_name = working_branch_name(config.branch_prefix, now)
    logger.info("creating branch %s from %s", branch_name, config.upstream_branch)
    ctx.git.create_branch(repo_root, branch_name, config.upstream_branch)
    ctx.git.switch_branch(repo_root, branch_name)

    try:
        report = migrate_candidates(
            ctx.git,
            ctx.make,
            repo_root,
            candidates,
            correspondence_title=correspondence.title,
            marker=config.marker,
            build=config.build,
            committer=config.committer,
        )
    except ConflictError as e:
        logger.error("leaving %s in place for inspection", branch_name)
        raise e.on_branch(branch_name) from e

    body = render_report(report)

    publication: PublicationResult | None = None
    publication_error: str | None = None
    try:
        publication = publish(
            ctx.git,
            ctx.github,
            repo_root,
            config,
            branch_name=branch_name,
            body=body,
            token=token,
            day=now.date(),
        )
    except PublicationError as e:
        logger.error("publication failed: %s", e)
        publication_error = str(e)

    return UpstreamResult(
        correspondence=correspondence,
        report=report,
        branch_name=branch_name,
        body=body,
        publication=publication,
        publication_error=publication_error,
    )
