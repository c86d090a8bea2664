"""Compose one PDF from an ordered set of images, one resized image per page."""

from __future__ import annotations

import io
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from pathlib import Path

from PIL import Image

from .assembler import CompositionError, PdfAssembler
from .fileset import SourceFileEntry
from .resolution import ImageDimensions, ResolutionModel

DEFAULT_QUALITY = 75
DEFAULT_RESAMPLE = "bicubic"

# Nearest-neighbour and box filters alias badly at the usual divisors.
RESAMPLE_FILTERS = {
    "bicubic": Image.Resampling.BICUBIC,
    "lanczos": Image.Resampling.LANCZOS,
    "bilinear": Image.Resampling.BILINEAR,
    "hamming": Image.Resampling.HAMMING,
}


@dataclass
class ComposeResult:
    """Result of composing one directory's PDF."""

    output_path: Path
    page_count: int
    pdf_size: int


def resolve_resample(name: str) -> Image.Resampling:
    """Map a filter name to the Pillow resampling constant.

    Raises:
        ValueError: If *name* is not one of :data:`RESAMPLE_FILTERS`.
    """
    try:
        return RESAMPLE_FILTERS[name.lower()]
    except KeyError:
        choices = ", ".join(RESAMPLE_FILTERS)
        raise ValueError(f"Unknown resampling filter {name!r} (choose from {choices})") from None


def encode_page(
    image: Image.Image,
    size: ImageDimensions,
    *,
    quality: int = DEFAULT_QUALITY,
    resample: Image.Resampling = Image.Resampling.BICUBIC,
) -> bytes:
    """Resample *image* to *size* and return it as JPEG bytes.

    The resampled pixels are pasted into a newly created buffer before
    encoding, so nothing carried by the decoded file (EXIF, ICC profile,
    resolution tags) reaches the encoder.
    """
    box = (size.width, size.height)
    with image.convert("RGBA") as rgba, rgba.resize(box, resample=resample) as resized:
        with Image.new("RGB", box) as canvas:
            canvas.paste(resized)
            buffer = io.BytesIO()
            canvas.save(buffer, format="JPEG", quality=quality)
    return buffer.getvalue()


def compose(
    *,
    entries: Sequence[SourceFileEntry],
    resolution: ResolutionModel,
    output_path: Path | str,
    quality: int = DEFAULT_QUALITY,
    resample: str = DEFAULT_RESAMPLE,
    on_page_done: Callable[[], None] | None = None,
) -> ComposeResult:
    """Build a PDF at *output_path* with one page per entry, in order.

    Every page is exactly as large as its resized image at
    ``resolution.output_dpi``. An existing file at *output_path* is
    overwritten; nothing is written if any image fails.

    Args:
        entries: Ordered images, as returned by :func:`~imgdir2pdf.fileset.list_ordered`.
        resolution: Batch-wide source DPI and resize divisor.
        output_path: Path of the PDF to write.
        quality: JPEG quality used when re-encoding each page.
        resample: Name of the resampling filter, see :data:`RESAMPLE_FILTERS`.
        on_page_done: Called once after each page is added.

    Returns:
        A :class:`ComposeResult` with the page count and PDF size.

    Raises:
        ValueError: If *entries* is empty or *resample* is unknown.
        CompositionError: If an image cannot be decoded, resized or encoded,
            or the PDF cannot be written.
    """
    if not entries:
        raise ValueError("entries must not be empty")

    resample_filter = resolve_resample(resample)
    output_path = Path(output_path)

    with PdfAssembler(output_path) as pdf:
        for index, entry in enumerate(entries):
            try:
                with Image.open(entry.path) as original:
                    resized = resolution.resized_dimensions(
                        ImageDimensions(width=original.width, height=original.height)
                    )
                    data = encode_page(
                        original,
                        resized,
                        quality=quality,
                        resample=resample_filter,
                    )
            except Exception as exc:  # Pillow raises SyntaxError for some damaged files
                raise CompositionError(f"{entry.path.name}: {exc}") from exc

            page_size = resolution.page_size(resized)

            # The size must be in place before the break creates the page.
            pdf.set_default_page_size(page_size)
            if index > 0:
                pdf.add_page_break()
            pdf.add_image(data, fit=page_size)

            if on_page_done is not None:
                on_page_done()

        pdf_size = pdf.close()

    return ComposeResult(
        output_path=output_path,
        page_count=len(entries),
        pdf_size=pdf_size,
    )
