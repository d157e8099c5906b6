"""CLI command handlers.

Each handler takes an already configured pipeline, runs one target and
returns a Result, so the commands stay thin and can be tested without click.
"""

from hpc_badge.config.settings import CoverageSettings
from hpc_badge.pipeline import CoveragePipeline
from hpc_badge.result import Result, try_operation


def handle_draft(pipeline: CoveragePipeline) -> Result:
    """Build the draft overlay.

    Returns:
        Result containing the draft path
    """

    def run_draft():
        return {"path": str(pipeline.draft())}

    return try_operation(run_draft)


def handle_report(pipeline: CoveragePipeline) -> Result:
    """Build the HTML report; requires the overlay template.

    Returns:
        Result containing the report index path
    """

    def run_report():
        return {"path": str(pipeline.report())}

    return try_operation(run_report)


def handle_badge(pipeline: CoveragePipeline) -> Result:
    """Build the badge, and the report before it if needed.

    Returns:
        Result containing the badge path, the rounded percentage, its colour
        and the three report totals
    """

    def run_badge():
        badge = pipeline.badge()
        return {
            "path": str(pipeline.badge_path),
            "percentage": badge.percentage,
            "color": badge.color,
            "percentages": list(badge.percentages),
        }

    return try_operation(run_badge)


def handle_clean(pipeline: CoveragePipeline) -> Result:
    def run_clean():
        pipeline.clean()
        return {"status": "completed"}

    return try_operation(run_clean)


def handle_paths(settings: CoverageSettings) -> Result:
    return try_operation(settings.paths_summary)
