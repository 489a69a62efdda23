"""Tests for page comparison and diff rendering."""

from __future__ import annotations

from PIL import Image

from typtest.compare import Origin, compare, count_deviations, render_diff
from typtest.project.kinds import Direction


def page(color="white", size=(8, 8)) -> Image.Image:
    return Image.new("RGB", size, color)


def with_pixel(image: Image.Image, xy, color) -> Image.Image:
    copy = image.copy()
    copy.putpixel(xy, color)
    return copy


class TestCompare:
    def test_identical(self) -> None:
        verdict = compare([page(), page("red")], [page(), page("red")], 1, 0)
        assert verdict.is_same
        assert [p.deviations for p in verdict.pages] == [0, 0]

    def test_below_delta(self) -> None:
        reference = page((100, 100, 100))
        candidate = with_pixel(reference, (3, 3), (105, 100, 100))
        assert compare([candidate], [reference], max_delta=10, max_deviations=0).is_same

    def test_at_or_above_delta(self) -> None:
        reference = page((100, 100, 100))
        candidate = with_pixel(reference, (3, 3), (105, 100, 100))
        verdict = compare([candidate], [reference], max_delta=1, max_deviations=0)
        assert not verdict.is_same
        (different,) = verdict.different_pages
        assert (different.page, different.deviations) == (1, 1)
        assert compare([candidate], [reference], max_delta=5, max_deviations=0).pages[0].deviations == 1

    def test_each_channel_counts(self) -> None:
        reference = page((0, 0, 0))
        candidate = with_pixel(reference, (0, 0), (0, 0, 9))
        candidate = with_pixel(candidate, (1, 0), (0, 9, 0))
        assert count_deviations(candidate, reference, 9) == 2
        assert count_deviations(candidate, reference, 10) == 0

    def test_zero_delta_ignores_identical_pixels(self) -> None:
        assert count_deviations(page(), page(), 0) == 0

    def test_deviation_budget(self) -> None:
        reference = page("black")
        candidate = with_pixel(with_pixel(reference, (0, 0), (255, 255, 255)), (1, 1), (255, 255, 255))
        assert compare([candidate], [reference], 1, 2).is_same
        assert not compare([candidate], [reference], 1, 1).is_same

    def test_page_count_mismatch_skips_pixel_work(self) -> None:
        verdict = compare([page()], [page(), page()], 1, 0)
        assert verdict.page_count_mismatch
        assert not verdict.is_same
        assert verdict.pages == ()

    def test_dimension_mismatch_is_per_page(self) -> None:
        verdict = compare([page(), page(size=(8, 9))], [page(), page()], 1, 0)
        assert not verdict.is_same
        (different,) = verdict.different_pages
        assert different.page == 2
        assert different.dimension_mismatch
        assert different.candidate_size == (8, 9)


class TestDiff:
    def test_unchanged_pixels_are_black(self) -> None:
        reference = page("white")
        candidate = with_pixel(reference, (2, 2), (0, 0, 0))
        diff = render_diff(candidate, reference)
        assert diff.getpixel((0, 0)) == (0, 0, 0)
        assert diff.getpixel((2, 2)) == (255, 255, 255)

    def test_canvas_covers_both_pages(self) -> None:
        diff = render_diff(page(size=(4, 10)), page(size=(6, 3)))
        assert diff.size == (6, 10)

    def test_left_to_right_origin(self) -> None:
        diff = render_diff(page("white", (2, 2)), page("black", (4, 2)), Origin.TOP_LEFT)
        assert diff.getpixel((0, 0)) == (255, 255, 255)
        assert diff.getpixel((3, 0)) == (0, 0, 0)

    def test_right_to_left_origin(self) -> None:
        diff = render_diff(page("white", (2, 2)), page("black", (4, 2)), Origin.TOP_RIGHT)
        assert diff.getpixel((0, 0)) == (0, 0, 0)
        assert diff.getpixel((3, 0)) == (255, 255, 255)

    def test_origin_for_direction(self) -> None:
        assert Origin.for_direction(Direction.LTR) is Origin.TOP_LEFT
        assert Origin.for_direction(Direction.RTL) is Origin.TOP_RIGHT
