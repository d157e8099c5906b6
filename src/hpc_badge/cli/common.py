from __future__ import annotations

import json
import os
import sys
from typing import Any, Optional

import click

from hpc_badge.result import Result


def _json_dump(data: Any) -> str:
    return json.dumps(data, indent=2, ensure_ascii=False) + "\n"


def emit_json(payload: Any) -> None:
    click.echo(_json_dump(payload).rstrip(os.linesep))


def log_level_for(*, quiet: bool = False, verbose: bool = False) -> Optional[str]:
    """Console log level implied by the flags and the HPC_LOG variable.

    HPC_LOG=quiet or HPC_LOG=verbose has the same effect as the flag.
    Returns None when the configured level should be kept.
    """
    hpc_log = (os.environ.get("HPC_LOG") or "").strip().lower()
    quiet = quiet or hpc_log == "quiet"
    verbose = verbose or hpc_log == "verbose"

    if verbose:
        return "DEBUG"
    if quiet:
        return "ERROR"
    return None


def format_diagnostic(message: str, *, color: bool = True) -> str:
    """Multi-line error block, in red when the stream supports it."""
    block = os.linesep + message + os.linesep
    if not color:
        return block
    return click.style(block, fg="red")


def exit_with_message(message: str, *, code: int = 0) -> None:
    stream = sys.stderr if code else sys.stdout
    stream.write(message + os.linesep)
    stream.flush()
    raise SystemExit(code)


def finish(result: Result, message: str) -> None:
    """Print ``message`` for a successful Result, or fail with its error."""
    if result["ok"]:
        click.echo(message)
        return
    click.echo(format_diagnostic(result["error"] or "Unknown error"), err=True)
    raise SystemExit(result["code"])
