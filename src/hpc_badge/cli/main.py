"""Command line entry point: ``hpc-badge``.

Usage:
    hpc-badge draft                      # draft overlay in $WORKDIR
    hpc-badge report                     # HTML report in $DESTDIR (needs template.overlay)
    hpc-badge badge                      # badge.svg in $DESTDIR
    hpc-badge clean
    hpc-badge paths --json
"""

from pathlib import Path
from typing import Optional

import click

from hpc_badge import __version__
from hpc_badge.cli.common import emit_json, exit_with_message, finish, log_level_for
from hpc_badge.cli.handlers import (
    handle_badge,
    handle_clean,
    handle_draft,
    handle_paths,
    handle_report,
)
from hpc_badge.config.settings import CoverageSettings, load_settings
from hpc_badge.core.logging import setup_logging
from hpc_badge.errors import ConfigurationError
from hpc_badge.package import FixedPackageResolver
from hpc_badge.pipeline import CoveragePipeline


def _build_settings(**overrides) -> CoverageSettings:
    given = {key: value for key, value in overrides.items() if value is not None}
    try:
        return load_settings(**given)
    except ConfigurationError as error:
        exit_with_message(str(error), code=error.exit_code)


def _pipeline(ctx: click.Context) -> CoveragePipeline:
    obj = ctx.obj
    factory = obj.get("pipeline_factory", CoveragePipeline)
    resolver = None
    if obj.get("package_id"):
        resolver = FixedPackageResolver(obj["package_id"])
    return factory(obj["settings"], resolver=resolver, force=obj["force"])


@click.group()
@click.version_option(__version__, prog_name="hpc-badge")
@click.option(
    "--workdir",
    type=click.Path(path_type=Path),
    help="Directory for intermediate artifacts [env: WORKDIR, default: .coverage].",
)
@click.option(
    "--destdir",
    type=click.Path(path_type=Path),
    help="Directory for the report and badge [env: DESTDIR, default: dist/coverage].",
)
@click.option(
    "--srcdir",
    type=click.Path(path_type=Path, file_okay=False),
    help="Package source root [env: SRC_DIR, default: .].",
)
@click.option("--stack", "stack_executable", help="stack executable to use.")
@click.option(
    "--package-id",
    help="Use this package identifier instead of resolving it from the build.",
)
@click.option("--force", is_flag=True, help="Rebuild every stage, even if up to date.")
@click.option("-v", "--verbose", is_flag=True, help="Debug logging.")
@click.option("-q", "--quiet", is_flag=True, help="Only log errors.")
@click.pass_context
def cli(
    ctx: click.Context,
    workdir: Optional[Path],
    destdir: Optional[Path],
    srcdir: Optional[Path],
    stack_executable: Optional[str],
    package_id: Optional[str],
    force: bool,
    verbose: bool,
    quiet: bool,
):
    """Haskell Program Coverage reports and badges, driven by stack and hpc."""
    settings = _build_settings(
        workdir=workdir,
        destdir=destdir,
        srcdir=srcdir,
        stack_executable=stack_executable,
    )
    setup_logging(settings, level=log_level_for(quiet=quiet, verbose=verbose))

    ctx.ensure_object(dict)
    ctx.obj["settings"] = settings
    ctx.obj["force"] = force
    ctx.obj["package_id"] = package_id


@cli.command()
@click.pass_context
def draft(ctx: click.Context):
    """Run the tests and write a draft overlay marking everything covered."""
    result = handle_draft(_pipeline(ctx))
    finish(result, f"Draft overlay generated at: {(result['value'] or {}).get('path')}")


@cli.command()
@click.pass_context
def report(ctx: click.Context):
    """Render the HTML report using WORKDIR/template.overlay."""
    result = handle_report(_pipeline(ctx))
    finish(result, f"Report generated at: {(result['value'] or {}).get('path')}")


@cli.command()
@click.pass_context
def badge(ctx: click.Context):
    """Render the SVG coverage badge from the report."""
    result = handle_badge(_pipeline(ctx))
    value = result["value"] or {}
    finish(
        result,
        f"Coverage badge generated at: {value.get('path')} "
        f"({value.get('percentage')}%, #{value.get('color')})",
    )


@cli.command()
@click.pass_context
def clean(ctx: click.Context):
    """Remove traces and overlays and reset stack's build state."""
    finish(handle_clean(_pipeline(ctx)), "Coverage artifacts removed.")


@cli.command()
@click.option("--json", "as_json", is_flag=True, help="Print as JSON.")
@click.pass_context
def paths(ctx: click.Context, as_json: bool):
    """Show the resolved configuration paths."""
    result = handle_paths(ctx.obj["settings"])
    if as_json and result["ok"]:
        emit_json(result["value"])
        return
    lines = [f"{key}: {value}" for key, value in (result["value"] or {}).items()]
    finish(result, "\n".join(lines))


if __name__ == "__main__":
    cli()
