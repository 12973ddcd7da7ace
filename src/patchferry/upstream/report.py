"""Render a migration report as the markdown body of a pull request."""

from patchferry.upstream.types import MigrationReport, Outcome

SUCCESS = "✅"
FAILURE = "❌"

# A failed build means the tests never ran, so both gates show as failed.
_GLYPHS: dict[Outcome, tuple[str, str]] = {
    Outcome.CLEAN: (SUCCESS, SUCCESS),
    Outcome.BUILD_FAILED: (FAILURE, FAILURE),
    Outcome.TEST_FAILED: (SUCCESS, FAILURE),
}

TABLE_HEADER = "|Commit|Build|Test|\n|---|:-:|:-:|"


def status_glyphs(outcome: Outcome) -> tuple[str, str]:
    """Return the (build, test) glyphs for an outcome."""
    return _GLYPHS[outcome]


def render_table(report: MigrationReport) -> str:
    """One row per migrated commit, in replay order."""
    rows = [TABLE_HEADER]
    for row in report.outcomes:
        build, test = status_glyphs(row.outcome)
        rows.append(f"|{row.commit_id}|{build}|{test}|")
    return "\n".join(rows)


def render_report(report: MigrationReport) -> str:
    """Render the full pull-request body."""
    sections = [
        "This pull-request prepares commits for upstreaming: each one was "
        "cherry-picked onto the staging branch, built, tested and given the "
        "upstream title prefix.",
        f"The last commit upstreamed was:\n\n`{report.correspondence_title}`",
        f"The list of commits prepared is as follows:\n\n{render_table(report)}",
    ]

    cross_cutting = report.cross_cutting
    if cross_cutting:
        lines = [
            "Careful: these commits touch files outside the usual directories and "
            "might need to be held back depending on the current staging rules:",
            "",
        ]
        lines.extend(f"- {row.commit_id} {row.title}" for row in cross_cutting)
        sections.append("\n".join(lines))

    return "\n\n".join(sections) + "\n"
