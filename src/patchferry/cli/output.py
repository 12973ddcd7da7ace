"""Output utilities for CLI commands with clear intent.

user_output() is for messages meant for a human and always goes to stderr so
that stdout stays free for the rendered report.
"""

import click
from rich.panel import Panel
from rich.text import Text

from patchferry.upstream.types import MigrationReport, Outcome


def user_output(message: str = "", *, nl: bool = True) -> None:
    """Print a human-facing message to stderr."""
    click.echo(message, err=True, nl=nl)


def format_migration_summary(
    report: MigrationReport,
    *,
    branch_name: str | None,
    pr_url: str | None,
    publication_error: str | None,
) -> Panel:
    """Format final summary box with per-outcome counts, branch and PR link.

    Args:
        report: Finished (or partial) migration report
        branch_name: Working branch created by the run, if any
        pr_url: URL of the opened pull request, if any
        publication_error: Message of a failed push or PR creation, if any

    Returns:
        Rich Panel with formatted summary
    """
    counts = {outcome: 0 for outcome in Outcome}
    for row in report.outcomes:
        counts[row.outcome] += 1

    lines: list[Text] = []
    lines.append(Text(f"Last upstreamed: {report.correspondence_title}"))
    lines.append(Text(f"✅ Clean: {counts[Outcome.CLEAN]}", style="green"))
    lines.append(Text(f"❌ Build failed: {counts[Outcome.BUILD_FAILED]}", style="red"))
    lines.append(Text(f"❌ Tests failed: {counts[Outcome.TEST_FAILED]}", style="red"))

    cross_cutting = report.cross_cutting
    if cross_cutting:
        lines.append(Text(f"⚠  Outside scope: {len(cross_cutting)}", style="yellow"))

    if branch_name is not None:
        lines.append(Text(f"🌿 Branch: {branch_name}"))
    if pr_url is not None:
        lines.append(Text(f"🔗 PR: {pr_url}", style="blue"))
    if publication_error is not None:
        lines.append(Text(""))
        lines.append(Text("Publication failed:", style="red bold"))
        lines.append(Text(publication_error, style="red"))

    content = Text("\n").join(lines)
    ok = publication_error is None
    return Panel(
        content,
        title="Upstream Prepared" if ok else "Upstream Prepared (not published)",
        border_style="green" if ok else "red",
        padding=(1, 2),
    )
