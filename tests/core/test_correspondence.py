"""Tests for correspondence resolution between upstream and source histories."""

import re
from pathlib import Path

import pytest

from patchferry.core.errors import ConfigurationError
from patchferry.core.git.abc import CommitInfo, LogOptions
from patchferry.core.git.fake import FakeGit
from patchferry.upstream.correspondence import (
    escape_extended_regex,
    find_last_migrated_commit,
    resolve_correspondence,
)
from tests.test_utils.builders import (
    GCC,
    MARKER,
    SOURCE,
    UPSTREAM,
    DivergedHistory,
    make_commit,
)

REPO = Path("/repo")


def _resolve(git: FakeGit):
    return resolve_correspondence(
        git, REPO, upstream_branch=UPSTREAM, source_branch=SOURCE, marker=MARKER, exclude=GCC
    )


def test_resolves_last_migrated_commit_to_source_equivalent() -> None:
    git = DivergedHistory().add("s2", "Add parser", ["gcc/rust/parse/p.cc"]).build()

    result = _resolve(git)

    assert result.title == "Add lexer"
    assert result.upstream_commit_id == "u2"
    assert result.source_commit_id == "s1"


def test_resolved_title_exists_verbatim_on_source() -> None:
    git = DivergedHistory().add("s2", "Add parser", ["gcc/rust/parse/p.cc"]).build()

    result = _resolve(git)

    source_titles = [commit.title for commit in git.branch_log(SOURCE)]
    assert result.title in source_titles


def test_newest_marked_commit_wins() -> None:
    history = DivergedHistory()
    history.commits.extend(
        [
            make_commit("s2", "Add parser", ("s1",)),
            make_commit("u4", MARKER + "Add parser", ("u3",)),
        ]
    )
    history.source_head = "s2"
    git = FakeGit(
        commits=history.commits,
        branches={UPSTREAM: "u4", SOURCE: "s2", GCC: "u1"},
        current_branch=SOURCE,
    )

    result = _resolve(git)

    assert result.title == "Add parser"
    assert result.upstream_commit_id == "u4"
    assert result.source_commit_id == "s2"


def test_marker_in_body_line_does_not_count() -> None:
    history = DivergedHistory()
    history.commits.append(
        make_commit("u4", "c++: Unrelated\n\ngccrs: mentioned in passing", ("u3",))
    )
    git = FakeGit(
        commits=history.commits,
        branches={UPSTREAM: "u4", SOURCE: "s1"},
        current_branch=SOURCE,
    )

    last = find_last_migrated_commit(git, REPO, UPSTREAM, MARKER)

    assert last.commit_id == "u2"


def test_missing_marker_upstream_is_configuration_error() -> None:
    git = FakeGit(
        commits=[
            make_commit("u1", "Initial import"),
            make_commit("u2", "c++: Fix ICE", ("u1",)),
            make_commit("s1", "Add lexer"),
        ],
        branches={UPSTREAM: "u2", SOURCE: "s1"},
    )

    with pytest.raises(ConfigurationError, match="Seed the first migrated commit"):
        _resolve(git)


def test_reworded_source_commit_is_configuration_error() -> None:
    history = DivergedHistory()
    # s1 was amended downstream after being migrated
    history.commits[2] = make_commit("s1", "Add the lexer", ("s0",))
    git = history.build()

    with pytest.raises(ConfigurationError, match="reworded"):
        _resolve(git)


@pytest.mark.parametrize(
    "title",
    [
        "Fix a[0] (x+y)*? handling",
        "Handle $HOME and ^caret | pipes",
        "Use {2,3} repetitions.",
        r"Escape \d backslashes",
    ],
)
def test_titles_with_regex_metacharacters_resolve(title: str) -> None:
    git = DivergedHistory(migrated_title=title).build()

    result = _resolve(git)

    assert result.title == title
    assert result.source_commit_id == "s1"


def test_unescaped_lookalike_title_is_not_matched() -> None:
    # "Fix a[0]." read as a regex would also match "Fix a0x"
    history = DivergedHistory(migrated_title="Fix a[0].")
    history.add("s2", "Fix a0x", ["gcc/rust/a.cc"])
    git = history.build()

    result = _resolve(git)

    assert result.source_commit_id == "s1"


def test_pre_marked_source_commit_resolves_by_full_title() -> None:
    git = FakeGit(
        commits=[
            make_commit("s1", MARKER + "Add parser"),
            make_commit("u1", MARKER + "Add parser"),
        ],
        branches={UPSTREAM: "u1", SOURCE: "s1", GCC: "u1"},
    )

    result = _resolve(git)

    assert result.title == MARKER + "Add parser"
    assert result.source_commit_id == "s1"


@pytest.mark.parametrize(
    "text",
    [
        "plain title",
        "a.b",
        "x[1]",
        "(group)",
        "a+b*c?",
        "{1}",
        "a|b",
        "^start",
        "end$",
        "back\\slash",
    ],
)
def test_escaped_text_matches_only_itself(text: str) -> None:
    pattern = escape_extended_regex(text)

    assert re.fullmatch(pattern, text)


def test_escape_leaves_ordinary_characters_alone() -> None:
    assert escape_extended_regex("gccrs: Add lexer") == "gccrs: Add lexer"
    assert escape_extended_regex("a.b") == "a\\.b"


def _merged_gcc_history(*, source_title: str) -> FakeGit:
    """Source branch that merged gcc/master after the lexer was upstreamed.

    g1 is the upstream copy of the lexer commit, now reachable from source.
    """
    history = DivergedHistory()
    history.commits[2] = make_commit("s1", source_title, ("s0",))
    history.commits.extend(
        [
            make_commit("g1", MARKER + "Add lexer\n\nLex all the things.", ("u1",)),
            make_commit("m1", "Merge remote-tracking branch 'gcc/master'", ("s1", "g1")),
        ]
    )
    return FakeGit(
        commits=history.commits,
        branches={UPSTREAM: "u3", SOURCE: "m1", GCC: "g1"},
        current_branch=SOURCE,
    )


def test_merged_upstream_copy_is_not_a_correspondence_point() -> None:
    git = _merged_gcc_history(source_title="Add the lexer")

    with pytest.raises(ConfigurationError, match="reworded"):
        _resolve(git)


def test_merged_upstream_history_does_not_hide_source_commit() -> None:
    git = _merged_gcc_history(source_title="Add lexer")

    result = _resolve(git)

    assert result.title == "Add lexer"
    assert result.source_commit_id == "s1"


class _RecordingGit(FakeGit):
    def __init__(self, **kwargs: object) -> None:
        super().__init__(**kwargs)  # type: ignore[arg-type]
        self.log_calls: list[LogOptions] = []

    def log(self, repo_root: Path, options: LogOptions) -> list[CommitInfo]:
        self.log_calls.append(options)
        return super().log(repo_root, options)


def test_marker_search_reads_upstream_log_in_pages(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr("patchferry.upstream.correspondence._MARKER_SEARCH_PAGE_SIZE", 2)
    history = DivergedHistory()
    parent = "u3"
    # Newer upstream commits that only mention the marker in their body
    for index in range(3):
        commit_id = f"b{index}"
        history.commits.append(
            make_commit(commit_id, f"c++: Change {index}\n\ngccrs: see above", (parent,))
        )
        parent = commit_id
    git = _RecordingGit(commits=history.commits, branches={UPSTREAM: parent, SOURCE: "s1"})

    last = find_last_migrated_commit(git, REPO, UPSTREAM, MARKER)

    assert last.commit_id == "u2"
    assert [(call.amount, call.skip) for call in git.log_calls] == [(2, 0), (2, 2)]


def test_marker_search_stops_at_first_page_with_a_match() -> None:
    git = _RecordingGit(
        commits=DivergedHistory().commits,
        branches={UPSTREAM: "u3", SOURCE: "s1"},
    )

    find_last_migrated_commit(git, REPO, UPSTREAM, MARKER)

    assert len(git.log_calls) == 1
    assert git.log_calls[0].amount is not None
