"""Shared fixtures: a fake Haskell project and stand-ins for stack and hpc."""

from pathlib import Path

import pytest
from loguru import logger

from hpc_badge.config.settings import CoverageSettings
from hpc_badge.errors import ToolError
from hpc_badge.pipeline import CoveragePipeline

PACKAGE_NAME = "my-lib"
PACKAGE_ID = "my-lib-0.1.0.0-A1b2C3"

DRAFT_OUTPUT = (
    f'module "{PACKAGE_ID}:Data.Stack" {{\n'
    '     function "push" [] ;\n'
    "     tick function \"pop\" [] ;\n"
    "}\n"
    f'module "{PACKAGE_ID}:Data.Queue" {{\n'
    '     tick function "enqueue" [] ;\n'
    "}\n"
)


def report_html(*percentages) -> str:
    """Summary page laid out the way hpc renders it."""
    cells = "".join(
        f'<td align="right">{p}%</td><td>{p}/100</td>'
        '<td width=100><table cellpadding=0 cellspacing=0 width="100" class="bar">'
        f'<tr><td><table cellpadding=0 cellspacing=0 width="{p}"><tr>'
        '<td height=12 class="bar"></td></tr></table></td></tr></table></td>\n'
        for p in percentages
    )
    return (
        "<html><head><title>HPC Coverage report</title></head><body>\n"
        "<table class=\"dashboard\" width=\"100%\" border=1>\n"
        "<tr><th rowspan=2><a href=\"hpc_index.html\">module</a></th>"
        "<th colspan=3>Top Level Definitions</th><th colspan=3>Alternatives</th>"
        "<th colspan=3>Expressions</th></tr>\n"
        "<tr><td><a href=\"hpc_Data.Stack.hs.html\">Data.Stack</a></td>"
        '<td align="right">50%</td><td>1/2</td><td></td></tr>\n'
        "<tr></tr><tr style=\"background: #e0e0e0\">"
        "<th align=left>&nbsp;&nbsp;Program Coverage Total</th>\n"
        f"{cells}</tr>\n</table></body></html>\n"
    )


class FakeStack:
    """Records calls and produces the files stack would."""

    def __init__(self, root: Path, percentages=(90, 85, 95)):
        self.executable = "stack"
        self.cwd = root
        self.calls = []
        self.percentages = percentages
        self.fail_on = None
        self.fail_code = 1
        self._hpc_root = root / ".stack-work" / "install" / "hpc"
        self._dist_dir = root / ".stack-work" / "dist" / "x86_64-linux"

    def _call(self, name):
        self.calls.append(name)
        if self.fail_on == name:
            raise ToolError(f"stack {name} failed", ["stack", name], self.fail_code)

    def clean(self):
        self._call("clean")

    def test_with_coverage(self):
        self._call("test")
        (self._dist_dir / "hpc" / PACKAGE_ID).mkdir(parents=True, exist_ok=True)
        tix = self._hpc_root / "combined" / "custom" / "custom.tix"
        tix.parent.mkdir(parents=True, exist_ok=True)
        tix.write_text("Tix [ ]\n")

    def report_all(self):
        self._call("report_all")

    def report(self, tix, destdir):
        self._call("report")
        destdir.mkdir(parents=True, exist_ok=True)
        (destdir / "hpc_index.html").write_text(report_html(*self.percentages))

    def hpc_dir(self):
        return self._dist_dir / "hpc"

    def local_hpc_root(self):
        return self._hpc_root


class FakeHpc:
    def __init__(self):
        self.calls = []
        self.overlays = []
        self.fail_overlay = False

    def draft(self, hpcdir, srcdir, tix):
        self.calls.append("draft")
        return DRAFT_OUTPUT

    def overlay(self, hpcdir, srcdir, overlay_file):
        self.calls.append("overlay")
        self.overlays.append((overlay_file, overlay_file.read_text()))
        if self.fail_overlay:
            raise ToolError("hpc overlay exited with status 3", ["hpc"], 3)
        return "Tix [ TixModule ]\n"


@pytest.fixture
def project(tmp_path):
    """Source root holding a .cabal file."""
    root = tmp_path / "project"
    root.mkdir()
    (root / f"{PACKAGE_NAME}.cabal").write_text(
        f"cabal-version: 2.2\nname:           {PACKAGE_NAME}\nversion:        0.1.0.0\n"
    )
    return root


@pytest.fixture
def settings(project):
    return CoverageSettings(
        workdir=project / ".coverage",
        destdir=project / "dist" / "coverage",
        srcdir=project,
    )


@pytest.fixture
def stack(project):
    return FakeStack(project)


@pytest.fixture
def hpc():
    return FakeHpc()


@pytest.fixture
def pipeline(settings, stack, hpc):
    return CoveragePipeline(settings, stack=stack, hpc=hpc)


@pytest.fixture
def template(settings):
    path = settings.template_overlay
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text('module "Data.Stack" {\n     tick function "push" [] ;\n}\n')
    return path


@pytest.fixture(autouse=True)
def _reset_logging():
    """Drop loguru sinks added during a test (they may hold captured streams)."""
    yield
    logger.remove()
