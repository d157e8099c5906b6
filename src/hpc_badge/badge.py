"""Coverage badge rendering.

The badge shows the mean of the three totals hpc reports (top-level
definitions, alternatives, expressions), rounded to an integer, on a colour
picked from a four-step ladder.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from pathlib import Path
from typing import Iterable, Tuple

from hpc_badge.errors import MissingArtifactError, ReportFormatError

TOTAL_MARKER = "Program Coverage Total"

GREEN = "2ecc71"
YELLOW = "f1c40f"
ORANGE = "e67e22"
RED = "e74c3c"

# Highest threshold first; a value must be strictly greater to qualify.
COLOR_LADDER: Tuple[Tuple[int, str], ...] = ((80, GREEN), (70, YELLOW), (60, ORANGE))

_PERCENT_CELL = re.compile(r">\s*(\d{1,3})%\s*</td>")

SVG_TEMPLATE = (
    '<svg xmlns="http://www.w3.org/2000/svg" xmlns:xlink="http://www.w3.org/1999/xlink" width="144" height="28">\n'
    '<g shape-rendering="crispEdges">\n'
    '<path fill="#555" d="M0 0h93v28H0z"/>\n'
    '<path fill="#{color}" d="M93 0h51v28H93z"/>\n'
    "</g>\n"
    '<g fill="#fff" text-anchor="middle" font-family="DejaVu Sans,Verdana,Geneva,sans-serif" font-size="100">\n'
    '<text x="465" y="175" transform="scale(.1)" textLength="690">COVERAGE</text>\n'
    '<text x="1185" y="175" font-weight="bold" transform="scale(.1)" textLength="270">{percentage}%</text>\n'
    "</g>\n"
    "</svg>\n"
)


def extract_percentages(html: str) -> Tuple[int, int, int]:
    """Read the three total percentages from an hpc report summary page.

    Raises:
        ReportFormatError: the marker is missing, or the total row does not
            hold exactly three percentages between 0 and 100.
    """
    text = html.replace("\r", " ").replace("\n", " ")
    _, marker, totals = text.partition(TOTAL_MARKER)
    if not marker:
        raise ReportFormatError(
            f"'{TOTAL_MARKER}' not found in the coverage report "
            "(did the tests run and the report render?)"
        )

    found = _PERCENT_CELL.findall(totals)
    if len(found) != 3:
        raise ReportFormatError(
            f"Expected 3 percentages after '{TOTAL_MARKER}', found {len(found)}"
        )

    values = tuple(int(value) for value in found)
    out_of_range = [value for value in values if value > 100]
    if out_of_range:
        raise ReportFormatError(f"Percentages out of range: {out_of_range}")
    return values  # type: ignore[return-value]


def mean_coverage(values: Iterable[float]) -> float:
    values = list(values)
    if not values:
        raise ReportFormatError("No coverage figures to average")
    return sum(values) / len(values)


def round_half_away(value: float) -> int:
    """Round to the nearest integer, halves away from zero (74.5 -> 75)."""
    return int(Decimal(str(value)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def badge_color(value: float) -> str:
    for threshold, color in COLOR_LADDER:
        if value > threshold:
            return color
    return RED


def render_svg(percentage: int, color: str) -> str:
    """Fill the fixed 144x28 badge template."""
    return SVG_TEMPLATE.format(percentage=percentage, color=color)


@dataclass(frozen=True)
class Badge:
    """Numbers behind a rendered badge."""

    percentages: Tuple[int, ...]
    mean: float
    percentage: int
    color: str

    @classmethod
    def from_percentages(cls, percentages: Iterable[int]) -> "Badge":
        percentages = tuple(percentages)
        mean = mean_coverage(percentages)
        percentage = round_half_away(mean)
        # The colour follows the number printed on the badge.
        return cls(
            percentages=percentages,
            mean=mean,
            percentage=percentage,
            color=badge_color(percentage),
        )

    @property
    def svg(self) -> str:
        return render_svg(self.percentage, self.color)


def badge_from_report(html: str) -> Badge:
    return Badge.from_percentages(extract_percentages(html))


def write_badge(report_path: Path, dest: Path) -> Badge:
    """Render the badge for the report at ``report_path`` into ``dest``.

    Nothing is written when the report cannot be read.
    """
    if not report_path.is_file():
        raise MissingArtifactError(
            f"Coverage report not found: {report_path}", report_path
        )
    badge = badge_from_report(report_path.read_text(encoding="utf-8", errors="replace"))
    dest.parent.mkdir(parents=True, exist_ok=True)
    dest.write_text(badge.svg, encoding="utf-8")
    return badge
