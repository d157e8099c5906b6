"""Wrappers around the external tools: stack and hpc.

Both are treated as black boxes driven through their command lines. Only
stdout is captured, and only where a stage needs it; stderr always goes
straight to the terminal so tool diagnostics reach the user unchanged.
"""

from __future__ import annotations

import subprocess
from pathlib import Path
from typing import Any, Sequence

from hpc_badge.core.logging import get_logger
from hpc_badge.errors import ToolError

logger = get_logger(__name__)


def run_command(
    command: Sequence[str],
    *,
    cwd: str | Path | None = None,
    capture_output: bool = False,
    description: str | None = None,
    **run_kwargs: Any,
) -> subprocess.CompletedProcess[str]:
    """Wrapper around subprocess.run with consistent error handling.

    Raises:
        ToolError: the executable could not be started or exited non-zero.
            A non-zero exit keeps the tool's return code.
    """

    desc = description or " ".join(str(part) for part in command[:2])
    logger.debug("Running: {}", " ".join(str(part) for part in command))
    try:
        completed = subprocess.run(
            [str(part) for part in command],
            cwd=str(cwd) if cwd is not None else None,
            stdout=subprocess.PIPE if capture_output else None,
            text=True,
            check=False,
            **run_kwargs,
        )
    except OSError as error:
        logger.error("Subprocess execution failed: {}", desc)
        raise ToolError(f"Failed to execute {desc}: {error}", command) from error

    if completed.returncode != 0:
        raise ToolError(
            f"{desc} exited with status {completed.returncode}",
            command,
            completed.returncode,
        )
    return completed


class StackTool:
    """The package build/test tool."""

    def __init__(self, executable: str = "stack", cwd: str | Path = "."):
        self.executable = executable
        self.cwd = Path(cwd)

    def _run(self, *args: str | Path, capture: bool = False, description: str | None = None):
        return run_command(
            [self.executable, *args],
            cwd=self.cwd,
            capture_output=capture,
            description=description or f"{self.executable} {args[0]}",
        )

    def clean(self) -> None:
        self._run("clean")

    def test_with_coverage(self) -> None:
        self._run("test", "--no-terminal", "--coverage")

    def report_all(self) -> None:
        self._run("hpc", "report", "--all", description=f"{self.executable} hpc report")

    def report(self, tix: Path, destdir: Path) -> None:
        """Render the HTML report for ``tix`` into ``destdir``."""
        self._run(
            "hpc",
            "report",
            "--all",
            "--destdir",
            destdir,
            tix,
            description=f"{self.executable} hpc report",
        )

    def path(self, flag: str) -> Path:
        completed = self._run(
            "path", flag, capture=True, description=f"{self.executable} path {flag}"
        )
        value = (completed.stdout or "").strip()
        if not value:
            raise ToolError(
                f"{self.executable} path {flag} printed nothing",
                [self.executable, "path", flag],
            )
        return Path(value)

    def dist_dir(self) -> Path:
        return self.path("--dist-dir")

    def local_hpc_root(self) -> Path:
        return self.path("--local-hpc-root")

    def hpc_dir(self) -> Path:
        """Directory holding the .mix files of the current build."""
        return self.dist_dir() / "hpc"


class HpcTool:
    """The coverage tool, run through ``stack exec hpc --``."""

    def __init__(self, stack: StackTool):
        self.stack = stack

    def _exec(self, mode: str, *args: str | Path) -> str:
        completed = run_command(
            [self.stack.executable, "exec", "hpc", "--", mode, *args],
            cwd=self.stack.cwd,
            capture_output=True,
            description=f"hpc {mode}",
        )
        return completed.stdout or ""

    def draft(self, hpcdir: Path, srcdir: Path, tix: Path) -> str:
        """Overlay marking every construct recorded in ``tix`` as covered."""
        return self._exec("draft", f"--hpcdir={hpcdir}", f"--srcdir={srcdir}", tix)

    def overlay(self, hpcdir: Path, srcdir: Path, overlay_file: Path) -> str:
        """Tix text produced by applying ``overlay_file``."""
        return self._exec(
            "overlay", f"--hpcdir={hpcdir}", f"--srcdir={srcdir}", overlay_file
        )
