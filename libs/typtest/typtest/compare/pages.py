"""Pixel comparison of rendered pages."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from PIL import Image, ImageChops


@dataclass(frozen=True)
class PageVerdict:
    """Outcome for one page pair; ``page`` is 1-indexed."""

    page: int
    deviations: int
    max_deviations: int
    candidate_size: tuple[int, int]
    reference_size: tuple[int, int]

    @property
    def dimension_mismatch(self) -> bool:
        return self.candidate_size != self.reference_size

    @property
    def is_same(self) -> bool:
        return not self.dimension_mismatch and self.deviations <= self.max_deviations


@dataclass(frozen=True)
class Verdict:
    """Outcome of comparing two page sequences.

    ``pages`` is empty when the page counts differ, since no pixel work is
    done in that case.
    """

    candidate_pages: int
    reference_pages: int
    pages: tuple[PageVerdict, ...] = ()

    @property
    def page_count_mismatch(self) -> bool:
        return self.candidate_pages != self.reference_pages

    @property
    def is_same(self) -> bool:
        return not self.page_count_mismatch and all(p.is_same for p in self.pages)

    @property
    def different_pages(self) -> tuple[PageVerdict, ...]:
        return tuple(p for p in self.pages if not p.is_same)


def count_deviations(candidate: Image.Image, reference: Image.Image, max_delta: int) -> int:
    """Count pixels where any RGB channel differs by at least *max_delta*.

    Both images must have the same size. Identical pixels never count, even
    with a *max_delta* of zero.
    """
    threshold = max(max_delta, 1)
    delta = ImageChops.difference(candidate.convert("RGB"), reference.convert("RGB"))
    red, green, blue = delta.split()
    # Per-pixel maximum over the three channels.
    largest = ImageChops.lighter(ImageChops.lighter(red, green), blue)
    mask = largest.point(lambda v: 255 if v >= threshold else 0)
    return mask.histogram()[255]


def compare_page(
    page: int,
    candidate: Image.Image,
    reference: Image.Image,
    max_delta: int,
    max_deviations: int,
) -> PageVerdict:
    if candidate.size != reference.size:
        deviations = 0
    else:
        deviations = count_deviations(candidate, reference, max_delta)
    return PageVerdict(page, deviations, max_deviations, candidate.size, reference.size)


def compare(
    candidate: Sequence[Image.Image],
    reference: Sequence[Image.Image],
    max_delta: int,
    max_deviations: int,
) -> Verdict:
    """Compare rendered *candidate* pages against *reference* pages.

    Args:
        candidate: Pages of the document under test.
        reference: The expected pages.
        max_delta: Smallest channel difference that makes a pixel a deviation.
        max_deviations: Deviations a page may have and still be the same.
    """
    if len(candidate) != len(reference):
        return Verdict(len(candidate), len(reference))

    pages = tuple(
        compare_page(i, c, r, max_delta, max_deviations)
        for i, (c, r) in enumerate(zip(candidate, reference), start=1)
    )
    return Verdict(len(candidate), len(reference), pages)
