"""Production build runner invoking make via subprocess."""

import logging
from pathlib import Path

from patchferry.core.make.abc import Make, MakeResult
from patchferry.core.subprocess import format_command, run_subprocess_with_context

logger = logging.getLogger(__name__)


def build_make_command(
    directory: Path, recipes: list[str], *, jobs: int | None, load: int | None
) -> list[str]:
    """Assemble a make command line."""
    cmd = ["make", "-C", str(directory)]
    if jobs is not None:
        cmd.append(f"-j{jobs}")
    if load is not None:
        cmd.append(f"-l{load}")
    cmd.extend(recipes)
    return cmd


class RealMake(Make):
    """Runs make synchronously with no timeout; a hung build hangs the run."""

    def _run(self, cmd: list[str], operation_context: str) -> MakeResult:
        # make -C alone selects the directory
        logger.info("running %s", format_command(cmd))
        result = run_subprocess_with_context(
            cmd,
            operation_context=operation_context,
            check=False,
        )
        output = (result.stdout or "") + (result.stderr or "")
        if result.returncode != 0:
            logger.warning("%s exited with status %d", format_command(cmd), result.returncode)
        return MakeResult(success=result.returncode == 0, output=output)

    def build(self, directory: Path, *, jobs: int | None, load: int | None) -> MakeResult:
        cmd = build_make_command(directory, [], jobs=jobs, load=load)
        return self._run(cmd, f"build in {directory}")

    def test(
        self, directory: Path, recipe: str, *, jobs: int | None, load: int | None
    ) -> MakeResult:
        cmd = build_make_command(directory, [recipe], jobs=jobs, load=load)
        return self._run(cmd, f"run '{recipe}' in {directory}")
