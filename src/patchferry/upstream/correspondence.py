"""Find where the upstream and source histories correspond.

Commit ids differ between the two remotes, so the only link is the commit
title: every migrated commit carries the marker as a title prefix upstream and
otherwise keeps its source title verbatim. The last marked commit upstream,
with the marker stripped, names the correspondence point on the source branch.
"""

import logging
from pathlib import Path

from patchferry.core.errors import ConfigurationError
from patchferry.core.git.abc import CommitInfo, Git, LogOptions
from patchferry.upstream.types import Correspondence

logger = logging.getLogger(__name__)

# Characters with special meaning in a POSIX extended regular expression
_EXTENDED_REGEX_SPECIAL = set("\\.[]()*+?{}|^$")

_MARKER_SEARCH_PAGE_SIZE = 100


def escape_extended_regex(text: str) -> str:
    """Escape text so that `git log --grep --extended-regexp` matches it literally.

    >>> escape_extended_regex("Fix a[0] (x+y)*?")
    'Fix a\\\\[0\\\\] \\\\(x\\\\+y\\\\)\\\\*\\\\?'
    """
    return "".join(f"\\{char}" if char in _EXTENDED_REGEX_SPECIAL else char for char in text)


def find_last_migrated_commit(
    git: Git, repo_root: Path, upstream_branch: str, marker: str
) -> CommitInfo:
    """Return the newest commit on upstream_branch whose title starts with marker.

    The log is read a page at a time and reading stops at the first match.

    Raises:
        ConfigurationError: If no commit carries the marker. The first marked
            commit has to be seeded by hand.
    """
    skip = 0
    while True:
        commits = git.log(
            repo_root,
            LogOptions(
                branch=upstream_branch,
                grep="^" + escape_extended_regex(marker),
                extended_regexp=True,
                amount=_MARKER_SEARCH_PAGE_SIZE,
                skip=skip,
            ),
        )
        # --grep matches any message line, so re-check the title itself
        for commit in commits:
            if commit.title.startswith(marker):
                logger.info("last migrated commit: %s %s", commit.commit_id, commit.title)
                return commit
        if len(commits) < _MARKER_SEARCH_PAGE_SIZE:
            break
        skip += len(commits)

    raise ConfigurationError(
        f"No commit on '{upstream_branch}' has a title starting with {marker!r}. "
        "Seed the first migrated commit by hand before running the pipeline."
    )


def find_commit_by_title(
    git: Git, repo_root: Path, branch: str, title: str, *, exclude: str | None = None
) -> CommitInfo | None:
    """Return the newest commit on branch whose title equals title, if any.

    Commits reachable from exclude are never returned.
    """
    commits = git.log(
        repo_root,
        LogOptions(
            branch=branch,
            grep="^" + escape_extended_regex(title) + "$",
            extended_regexp=True,
            not_on=(exclude,) if exclude is not None else (),
        ),
    )
    for commit in commits:
        if commit.title == title:
            return commit
    return None


def resolve_correspondence(
    git: Git,
    repo_root: Path,
    *,
    upstream_branch: str,
    source_branch: str,
    marker: str,
    exclude: str | None,
) -> Correspondence:
    """Locate the source commit equivalent to the last migrated upstream commit.

    A commit that was already marked on the source branch keeps its title
    unchanged when migrated, so the full upstream title is tried when the
    stripped one is not found. Both searches skip commits reachable from
    exclude: the source branch merges upstream history, and a merged-in
    upstream copy of the commit is never a correspondence point.

    Raises:
        ConfigurationError: If no marked commit exists upstream, or if its
            title cannot be found on the source branch (the source commit was
            probably amended after migration)
    """
    last_migrated = find_last_migrated_commit(git, repo_root, upstream_branch, marker)
    stripped_title = last_migrated.title[len(marker) :]

    for title in (stripped_title, last_migrated.title):
        match = find_commit_by_title(git, repo_root, source_branch, title, exclude=exclude)
        if match is not None:
            logger.info("found equivalent commit on %s: %s", source_branch, match.commit_id)
            return Correspondence(
                title=title,
                upstream_commit_id=last_migrated.commit_id,
                source_commit_id=match.commit_id,
            )

    raise ConfigurationError(
        f"No commit on '{source_branch}' is titled {stripped_title!r}, matching "
        f"{last_migrated.commit_id} on '{upstream_branch}'. "
        "Was the commit reworded after it was migrated?"
    )
