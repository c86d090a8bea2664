"""Discovery and ordering of the images inside a source directory."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path

SUPPORTED_EXTENSIONS = (".bmp", ".gif", ".jpg", ".jpeg", ".png", ".tif", ".tiff")

MIN_IMAGES = 2


class ImgDirError(Exception):
    """Base exception for imgdir2pdf errors."""


class DirectoryNotFoundError(ImgDirError):
    """Raised when a source path does not exist or is not a directory."""


class InsufficientImagesError(ImgDirError):
    """Raised when a directory holds fewer than two supported images."""


@dataclass(frozen=True)
class SourceFileEntry:
    """One image file queued for a page, with the key it was ordered by."""

    path: Path
    sort_key: str


def list_ordered(
    directory: Path | str,
    supported_extensions: Iterable[str] = SUPPORTED_EXTENSIONS,
) -> list[SourceFileEntry]:
    """Return the supported images at the top level of *directory*, ordered.

    Files are compared by their full name, extension included, ignoring case
    and without any numeric awareness: ``img10.jpg`` sorts before
    ``img2.jpg``. Zero-pad numbers to get the intended page order.

    Names are upper-cased before comparing, so ``_`` sorts after letters and
    ``.`` before ``_``: ``page.jpg`` < ``page_1.jpg`` and ``ab.jpg`` <
    ``a_b.jpg``. Names that differ only in case fall back to an ordinal
    comparison, so ``A.jpg`` comes before ``a.jpg``.

    Raises:
        DirectoryNotFoundError: If *directory* is missing or not a directory.
        InsufficientImagesError: If fewer than two supported images are found.
    """
    directory = Path(directory)
    if not directory.is_dir():
        raise DirectoryNotFoundError(f"Directory not found: {directory}")

    extensions = {ext.lower() for ext in supported_extensions}
    entries = [
        SourceFileEntry(path=p, sort_key=p.name.upper())
        for p in directory.iterdir()
        if p.suffix.lower() in extensions and p.is_file()
    ]

    if len(entries) < MIN_IMAGES:
        raise InsufficientImagesError(
            f"Contains less than {MIN_IMAGES} images: {directory}"
        )

    entries.sort(key=lambda e: (e.sort_key, e.path.name))
    return entries


def preflight(
    directories: Iterable[Path | str],
    supported_extensions: Iterable[str] = SUPPORTED_EXTENSIONS,
) -> None:
    """Check every directory before any of them is processed.

    Raises:
        DirectoryNotFoundError: On the first missing directory.
        InsufficientImagesError: On the first directory with too few images.
    """
    extensions = tuple(supported_extensions)
    for directory in directories:
        list_ordered(directory, extensions)
