"""Fake build runner for testing."""

from pathlib import Path

from patchferry.core.make.abc import Make, MakeResult


class FakeMake(Make):
    """In-memory fake that returns scripted results in call order.

    Results are consumed one per call; when a script runs out, a successful
    result with empty output is returned.

    Examples:
        # Second build fails, everything else passes
        >>> make = FakeMake(build_results=[MakeResult(True, ""), MakeResult(False, "error")])
    """

    def __init__(
        self,
        *,
        build_results: list[MakeResult] | None = None,
        test_results: list[MakeResult] | None = None,
    ) -> None:
        self._build_results = list(build_results or [])
        self._test_results = list(test_results or [])
        self._build_calls: list[tuple[Path, int | None, int | None]] = []
        self._test_calls: list[tuple[Path, str, int | None, int | None]] = []

    def build(self, directory: Path, *, jobs: int | None, load: int | None) -> MakeResult:
        self._build_calls.append((directory, jobs, load))
        if self._build_results:
            return self._build_results.pop(0)
        return MakeResult(success=True, output="")

    def test(
        self, directory: Path, recipe: str, *, jobs: int | None, load: int | None
    ) -> MakeResult:
        self._test_calls.append((directory, recipe, jobs, load))
        if self._test_results:
            return self._test_results.pop(0)
        return MakeResult(success=True, output="")

    @property
    def build_calls(self) -> list[tuple[Path, int | None, int | None]]:
        """Read-only access to tracked build() calls for test assertions."""
        return self._build_calls

    @property
    def test_calls(self) -> list[tuple[Path, str, int | None, int | None]]:
        """Read-only access to tracked test() calls for test assertions."""
        return self._test_calls
