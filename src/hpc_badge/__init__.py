"""
Haskell Program Coverage reports and badges.

Drives stack and hpc to collect coverage, merge a hand-maintained overlay
template, render the HTML report and turn its totals into an SVG badge.
"""

__version__ = "1.0.0"
