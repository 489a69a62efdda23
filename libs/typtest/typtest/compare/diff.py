"""Diff images for pages that failed comparison."""

from __future__ import annotations

from enum import Enum

from PIL import Image, ImageChops

from typtest.project.kinds import Direction


class Origin(Enum):
    """Corner both pages are anchored to on the diff canvas."""

    TOP_LEFT = "top-left"
    TOP_RIGHT = "top-right"

    @classmethod
    def for_direction(cls, direction: Direction) -> Origin:
        return cls.TOP_RIGHT if direction is Direction.RTL else cls.TOP_LEFT


def _offset(origin: Origin, canvas_width: int, width: int) -> tuple[int, int]:
    if origin is Origin.TOP_RIGHT:
        return (canvas_width - width, 0)
    return (0, 0)


def render_diff(
    candidate: Image.Image, reference: Image.Image, origin: Origin = Origin.TOP_LEFT
) -> Image.Image:
    """Draw *reference*, then blend *candidate* over it by difference.

    The canvas is black and as large as the larger of the two pages in each
    dimension; unchanged pixels come out black.
    """
    width = max(candidate.width, reference.width)
    height = max(candidate.height, reference.height)

    base = Image.new("RGB", (width, height), (0, 0, 0))
    base.paste(reference.convert("RGB"), _offset(origin, width, reference.width))

    overlay = Image.new("RGB", (width, height), (0, 0, 0))
    overlay.paste(candidate.convert("RGB"), _offset(origin, width, candidate.width))

    return ImageChops.difference(base, overlay)
