"""On-disk storage of reference and output pages.

Pages are stored as ``1.png`` to ``N.png``. Reference replacement writes to
a temporary sibling directory first and only renames it into place once
every page has been written.
"""

from __future__ import annotations

import re
import shutil
import tempfile
from collections.abc import Iterable, Sequence
from pathlib import Path

from PIL import Image, UnidentifiedImageError

from typtest.errors import ReferenceLoadError
from typtest.log import get_logger

logger = get_logger(__name__)

_PAGE_STEM = re.compile(r"[0-9]+")


def page_numbers(directory: Path) -> dict[int, Path]:
    """Map page numbers to the numbered PNG files in *directory*.

    Files that are not PNGs or whose stem is not an ASCII number are ignored.
    """
    pages: dict[int, Path] = {}
    for entry in directory.iterdir():
        if entry.is_file() and entry.suffix.lower() == ".png" and _PAGE_STEM.fullmatch(entry.stem):
            pages[int(entry.stem)] = entry
    return pages


def load_pages(directory: Path) -> list[Image.Image]:
    """Load the numbered pages of *directory* in order.

    Raises:
        ReferenceLoadError: If the directory cannot be read, the numbers are
            not exactly ``1..N``, or a page is not a readable image.
    """
    try:
        numbered = page_numbers(directory)
    except OSError as e:
        raise ReferenceLoadError(f"cannot read reference directory ({e.strerror})", directory) from e

    expected = set(range(1, len(numbered) + 1))
    if set(numbered) != expected:
        missing = sorted(expected - set(numbered))
        raise ReferenceLoadError(
            f"reference pages are not numbered 1..{len(numbered)} (missing {missing})", directory
        )

    pages = []
    for number in sorted(numbered):
        path = numbered[number]
        try:
            with Image.open(path) as image:
                image.load()
                pages.append(image.convert("RGB"))
        except (UnidentifiedImageError, OSError) as e:
            raise ReferenceLoadError(f"cannot load page {number}: {e}", path) from e
    return pages


def write_pages(directory: Path, pages: Iterable[Image.Image]) -> int:
    """Write *pages* as ``1.png``... into an existing *directory*."""
    count = 0
    for count, page in enumerate(pages, start=1):
        page.save(directory / f"{count}.png", format="PNG")
    return count


def replace_pages(directory: Path, pages: Sequence[Image.Image]) -> None:
    """Atomically replace the contents of *directory* with *pages*.

    On any failure before the final rename, *directory* is left untouched.
    """
    parent = directory.parent
    staging = Path(tempfile.mkdtemp(prefix=f".{directory.name}-", dir=parent))
    try:
        write_pages(staging, pages)
    except BaseException:
        shutil.rmtree(staging, ignore_errors=True)
        raise

    if directory.exists():
        retired = Path(tempfile.mkdtemp(prefix=f".{directory.name}-old-", dir=parent))
        retired.rmdir()
        directory.rename(retired)
        try:
            staging.rename(directory)
        except BaseException:
            retired.rename(directory)
            shutil.rmtree(staging, ignore_errors=True)
            raise
        shutil.rmtree(retired, ignore_errors=True)
    else:
        staging.rename(directory)
    logger.debug("replaced pages", path=str(directory), pages=len(pages))


def reset_dir(directory: Path) -> None:
    """Remove *directory* if present and create it empty."""
    remove_dir(directory)
    directory.mkdir(parents=True)


def remove_dir(directory: Path) -> None:
    if directory.exists():
        shutil.rmtree(directory)
