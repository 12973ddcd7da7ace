"""Tests for candidate enumeration and path-scope classification."""

from pathlib import Path

from patchferry.core.git.abc import RevListOptions
from patchferry.core.git.fake import FakeGit
from patchferry.upstream.classify import classify_candidates, is_in_scope
from tests.test_utils.builders import GCC, SOURCE, DivergedHistory, make_commit

REPO = Path("/repo")
SCOPE = ("gcc/rust/", "gcc/testsuite/rust")


def _classify(git: FakeGit, start: str = "s1"):
    return classify_candidates(git, REPO, start=start, end=SOURCE, exclude=GCC, scope=SCOPE)


def test_in_scope_and_cross_cutting_commits_both_kept_in_order() -> None:
    git = (
        DivergedHistory()
        .add("a", "Add A", ["gcc/rust/a.cc", "gcc/testsuite/rust/compile/a.rs"])
        .add("b", "Add B", ["gcc/rust/b.cc", "gcc/Makefile.in"])
        .build()
    )

    candidates = _classify(git)

    assert [c.commit.commit_id for c in candidates] == ["a", "b"]
    assert [c.in_scope for c in candidates] == [True, False]


def test_candidates_are_oldest_first() -> None:
    history = DivergedHistory()
    for index in range(5):
        history.add(f"c{index}", f"Commit {index}", ["gcc/rust/x.cc"])
    git = history.build()

    candidates = _classify(git)

    assert [c.commit.commit_id for c in candidates] == ["c0", "c1", "c2", "c3", "c4"]


def test_merge_commits_are_dropped() -> None:
    history = DivergedHistory()
    history.add("a", "Add A", ["gcc/rust/a.cc"])
    history.commits.append(make_commit("side", "Side work", ("s1",)))
    history.changed_files["side"] = ["gcc/rust/side.cc"]
    history.add_merge("m", "side")
    history.add("b", "Add B", ["gcc/rust/b.cc"])
    git = history.build()

    candidates = _classify(git)

    ids = [c.commit.commit_id for c in candidates]
    assert "m" not in ids
    assert ids == ["a", "side", "b"]
    assert all(len(c.commit.parents) <= 1 for c in candidates)


class _MergeLeakingGit(FakeGit):
    """Lists merges even when asked not to, like a rev-list without --no-merges."""

    def rev_list(self, repo_root: Path, options: RevListOptions) -> list[str]:
        leaky = RevListOptions(
            start=options.start,
            end=options.end,
            exclude=options.exclude,
            no_merges=False,
            reverse=options.reverse,
            paths=options.paths,
        )
        return super().rev_list(repo_root, leaky)


def test_merge_commits_dropped_even_if_listed() -> None:
    history = DivergedHistory()
    history.commits.append(make_commit("side", "Side work", ("s1",)))
    history.add_merge("m", "side")
    git = _MergeLeakingGit(
        commits=history.commits,
        branches={SOURCE: history.source_head, GCC: "u1"},
        changed_files=history.changed_files,
    )

    candidates = _classify(git)

    assert [c.commit.commit_id for c in candidates] == ["side"]


def test_nothing_new_yields_empty_candidate_set() -> None:
    git = DivergedHistory().build()

    assert _classify(git) == ()


def test_commits_reachable_from_exclude_are_skipped() -> None:
    history = DivergedHistory().add("a", "Add A", ["gcc/rust/a.cc"])
    history.add("b", "Add B", ["gcc/rust/b.cc"])
    git = FakeGit(
        commits=history.commits,
        branches={SOURCE: "b", GCC: "a"},
        changed_files=history.changed_files,
    )

    candidates = _classify(git)

    assert [c.commit.commit_id for c in candidates] == ["b"]


def test_is_in_scope() -> None:
    assert is_in_scope(["gcc/rust/a.cc"], SCOPE)
    assert is_in_scope(["gcc/testsuite/rust/x.rs", "gcc/rust/b.h"], SCOPE)
    assert not is_in_scope(["gcc/rust/a.cc", "gcc/ChangeLog"], SCOPE)
    assert not is_in_scope(["libgrust/lib.rs"], SCOPE)
    assert is_in_scope([], SCOPE)
