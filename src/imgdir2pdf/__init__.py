"""imgdir2pdf: Turn directories of images into one PDF per directory."""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path

from .assembler import (
    CompositionError,
    DocumentWriteError,
    PdfAssembler,
    assemble_pdf,
)
from .batch import BatchResult, DirectoryOutcome, _resolve_pdf_path, run
from .composer import (
    DEFAULT_QUALITY,
    DEFAULT_RESAMPLE,
    RESAMPLE_FILTERS,
    ComposeResult,
    compose,
)
from .fileset import (
    SUPPORTED_EXTENSIONS,
    DirectoryNotFoundError,
    ImgDirError,
    InsufficientImagesError,
    SourceFileEntry,
    list_ordered,
    preflight,
)
from .resolution import (
    ImageDimensions,
    PageSize,
    ResolutionModel,
    compute,
    parse_positive,
    scale_to_fit,
)

__version__ = "0.1.0"

__all__ = [
    "__version__",
    "BatchResult",
    "ComposeResult",
    "CompositionError",
    "DEFAULT_QUALITY",
    "DEFAULT_RESAMPLE",
    "DirectoryNotFoundError",
    "DirectoryOutcome",
    "DocumentWriteError",
    "ImageDimensions",
    "ImgDirError",
    "InsufficientImagesError",
    "PageSize",
    "PdfAssembler",
    "RESAMPLE_FILTERS",
    "ResolutionModel",
    "SUPPORTED_EXTENSIONS",
    "SourceFileEntry",
    "assemble_pdf",
    "compose",
    "compute",
    "convert_directories",
    "list_ordered",
    "parse_positive",
    "preflight",
    "run",
    "scale_to_fit",
]


def convert_directories(
    directories: Sequence[Path | str],
    *,
    source_dpi: float,
    resize_divisor: float,
    quality: int = DEFAULT_QUALITY,
    resample: str = DEFAULT_RESAMPLE,
) -> BatchResult:
    """Convert each directory of images into a PDF next to it.

    This is the high-level convenience function that combines the resolution
    computation with a batch run.

    Args:
        directories: Directories to convert, in order.
        source_dpi: Resolution the source images were captured at.
        resize_divisor: Both pixel dimensions are divided by this value.
        quality: JPEG quality used when re-encoding pages.
        resample: Resampling filter name (``bicubic``, ``lanczos``,
            ``bilinear`` or ``hamming``).

    Returns:
        A :class:`BatchResult` with one outcome per directory.

    Raises:
        ValueError: If *source_dpi* or *resize_divisor* is not positive.
        DirectoryNotFoundError: If a directory does not exist.
        InsufficientImagesError: If a directory has fewer than two images.

    Example::

        from imgdir2pdf import convert_directories

        result = convert_directories(
            ["scans/chapter_01", "scans/chapter_02"],
            source_dpi=300,
            resize_divisor=2,
        )
        for outcome in result.outcomes:
            print(outcome.output_path, outcome.error or "ok")
    """
    resolution = compute(source_dpi=source_dpi, resize_divisor=resize_divisor)
    return run(
        directories,
        resolution=resolution,
        quality=quality,
        resample=resample,
    )
