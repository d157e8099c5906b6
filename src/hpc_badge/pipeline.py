"""Stage orchestration.

Each target is a file. A target is rebuilt when it is missing or older than
one of its inputs, and its inputs are brought up to date first, so asking
for the badge runs as much of the chain as needed:

    custom.tix -> draft.overlay
    template.overlay + custom.tix -> overlay.tix -> report -> badge.svg

Stages run one after the other in this process; each external tool call
blocks until the tool exits.
"""

from __future__ import annotations

import shutil
from pathlib import Path
from typing import Optional

from hpc_badge.badge import Badge, badge_from_report, write_badge
from hpc_badge.config.settings import (
    BADGE_SVG,
    DRAFT_OVERLAY,
    OVERLAY_TIX,
    TEMPLATE_OVERLAY,
    CoverageSettings,
)
from hpc_badge.core.logging import get_logger, log_operation
from hpc_badge.errors import MissingArtifactError
from hpc_badge.overlay import generate_draft, merge_overlay, resolve_template
from hpc_badge.package import PackageIdentifierResolver, StackPackageResolver
from hpc_badge.report import render_report
from hpc_badge.tools import HpcTool, StackTool

logger = get_logger(__name__)

COMBINED_TIX = Path("combined") / "custom" / "custom.tix"


def is_stale(target: Path, *sources: Path) -> bool:
    """True when ``target`` is missing or older than any existing source."""
    if not target.exists():
        return True
    target_mtime = target.stat().st_mtime
    return any(
        source.exists() and source.stat().st_mtime > target_mtime
        for source in sources
    )


class CoveragePipeline:
    """Make-like driver for the coverage stages.

    The tools and the package resolver are injected so they can be replaced
    in tests; by default they are built from ``settings``.
    """

    def __init__(
        self,
        settings: CoverageSettings,
        stack: Optional[StackTool] = None,
        hpc: Optional[HpcTool] = None,
        resolver: Optional[PackageIdentifierResolver] = None,
        force: bool = False,
    ):
        self.settings = settings
        self.srcdir = settings.srcdir.resolve()
        self.workdir = self._absolute(settings.workdir)
        self.destdir = self._absolute(settings.destdir)
        self._hpc_dir: Optional[Path] = None
        self._hpc_root: Optional[Path] = None
        self.stack = stack or StackTool(settings.stack_executable, self.srcdir)
        self.hpc = hpc or HpcTool(self.stack)
        self.resolver = resolver or StackPackageResolver(self.srcdir, self.hpc_dir)
        self.force = force

    @staticmethod
    def _absolute(path: Path, base: Optional[Path] = None) -> Path:
        return path if path.is_absolute() else (base or Path.cwd()) / path

    # --- locations -------------------------------------------------------

    @property
    def draft_path(self) -> Path:
        return self.workdir / DRAFT_OVERLAY

    @property
    def template_path(self) -> Path:
        return self.workdir / TEMPLATE_OVERLAY

    @property
    def overlay_path(self) -> Path:
        return self.workdir / OVERLAY_TIX

    @property
    def report_path(self) -> Path:
        return self.destdir / self.settings.report_index

    @property
    def badge_path(self) -> Path:
        return self.destdir / BADGE_SVG

    # stack prints paths relative to the package root
    def hpc_dir(self) -> Path:
        if self._hpc_dir is None:
            self._hpc_dir = self._absolute(self.stack.hpc_dir(), self.srcdir)
        return self._hpc_dir

    def hpc_root(self) -> Path:
        if self._hpc_root is None:
            self._hpc_root = self._absolute(self.stack.local_hpc_root(), self.srcdir)
        return self._hpc_root

    def trace_path(self) -> Path:
        return self.hpc_root() / COMBINED_TIX

    def _needs_build(self, target: Path, *sources: Path) -> bool:
        if self.force or is_stale(target, *sources):
            return True
        logger.debug("{} is up to date", target)
        return False

    # --- targets ---------------------------------------------------------

    def trace(self) -> Path:
        """Run the instrumented test suite unless a combined trace exists."""
        target = self.trace_path()
        if not self._needs_build(target):
            return target

        with log_operation("Running tests with coverage", srcdir=self.srcdir):
            self.stack.clean()
            for stale_tix in self.srcdir.glob("*.tix"):
                stale_tix.unlink()
            self.stack.test_with_coverage()
            self.stack.report_all()

        if not target.is_file():
            raise MissingArtifactError(
                f"Test run finished but no combined trace at {target}", target
            )
        return target

    def draft(self) -> Path:
        tix = self.trace()
        target = self.draft_path
        if self._needs_build(target, tix):
            with log_operation("Generating draft overlay", dest=target):
                generate_draft(self.hpc, self.hpc_dir(), self.srcdir, tix, target)
        return target

    def template(self) -> Path:
        return resolve_template(self.template_path, self.draft_path)

    def overlay(self) -> Path:
        # Checked before anything runs so a missing template fails fast.
        template = self.template()
        tix = self.trace()
        target = self.overlay_path
        if self._needs_build(target, template, tix):
            with log_operation("Merging overlay", template=template):
                merge_overlay(
                    self.hpc, self.resolver, template, self.hpc_dir(), self.srcdir, target
                )
        return target

    def report(self) -> Path:
        tix = self.overlay()
        target = self.report_path
        if self._needs_build(target, tix):
            with log_operation("Rendering HTML report", destdir=self.destdir):
                render_report(self.stack, tix, self.destdir, self.settings.report_index)
        return target

    def badge(self) -> Badge:
        report = self.report()
        target = self.badge_path
        if self._needs_build(target, report):
            with log_operation("Rendering badge", dest=target):
                return write_badge(report, target)
        return badge_from_report(report.read_text(encoding="utf-8", errors="replace"))

    def clean(self) -> None:
        """Remove generated traces and overlays and reset stack's build state.

        The overlay template is left alone.
        """
        with log_operation("Cleaning coverage artifacts", workdir=self.workdir):
            hpc_root = self.hpc_root()
            self.stack.clean()
            for path in (self.draft_path, self.overlay_path):
                path.unlink(missing_ok=True)
            if hpc_root.is_dir():
                for entry in hpc_root.iterdir():
                    if entry.is_dir() and not entry.is_symlink():
                        shutil.rmtree(entry)
                    else:
                        entry.unlink()
