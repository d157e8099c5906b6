"""HTML coverage report rendering."""

from pathlib import Path

from hpc_badge.errors import MissingArtifactError
from hpc_badge.tools import StackTool


def render_report(
    stack: StackTool, tix: Path, destdir: Path, index_name: str = "hpc_index.html"
) -> Path:
    """Render the report for ``tix`` into ``destdir`` and return its index page."""
    stack.report(tix, destdir)
    index = destdir / index_name
    if not index.is_file():
        raise MissingArtifactError(
            f"Report generation finished but {index} was not written", index
        )
    return index
