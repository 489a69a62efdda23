"""Page comparison and diff rendering (depends on Pillow only)."""

from typtest.compare.diff import Origin, render_diff
from typtest.compare.pages import PageVerdict, Verdict, compare, compare_page, count_deviations

__all__ = [
    "Origin",
    "PageVerdict",
    "Verdict",
    "compare",
    "compare_page",
    "count_deviations",
    "render_diff",
]
