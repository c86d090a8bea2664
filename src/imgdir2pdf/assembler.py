"""Assemble encoded page images into a single PDF file."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass
from pathlib import Path

import img2pdf

from .fileset import ImgDirError
from .resolution import ImageDimensions, PageSize, scale_to_fit

_IMG2PDF_ERRORS = (
    img2pdf.ImageOpenError,
    img2pdf.PdfTooLargeError,
    img2pdf.UnsupportedColorspaceError,
    img2pdf.JpegColorspaceError,
    img2pdf.AlphaChannelError,
    img2pdf.ExifOrientationError,
    img2pdf.NegativeDimensionError,
    ValueError,
)


class CompositionError(ImgDirError):
    """Raised when a directory's images cannot be turned into a PDF."""


class DocumentWriteError(CompositionError):
    """Raised when the PDF container cannot be serialized or written."""


@dataclass
class PlacedImage:
    """One page: its size and the image drawn on it."""

    page_size: PageSize
    data: bytes | None = None
    fit: PageSize | None = None


def _page_layouts(pages: list[PlacedImage]) -> Iterator[tuple[PageSize, PageSize]]:
    for page in pages:
        yield page.page_size, page.fit or page.page_size


def assemble_pdf(*, pages: list[PlacedImage], output_path: Path, nodate: bool = True) -> int:
    """Write *pages* to a PDF file, one embedded image per page.

    JPEG data is embedded without re-encoding. Each page gets exactly the
    size recorded on it. img2pdf's own writer is used: it only warns about
    pages under 3 pt and switches to UserUnit above 14400 pt, where the
    pikepdf writer would refuse the page.

    Args:
        pages: Ordered pages, each holding encoded image bytes.
        output_path: Path to write the output PDF. Overwritten if present.
        nodate: Leave creation and modification dates out of the PDF.

    Returns:
        Size of the written PDF in bytes.

    Raises:
        ValueError: If *pages* is empty or a page has no image.
        DocumentWriteError: If img2pdf rejects an image or the file cannot
            be written.
    """
    if not pages:
        raise ValueError("pages must not be empty")

    for number, page in enumerate(pages, start=1):
        if page.data is None:
            raise ValueError(f"page {number} has no image")

    layouts = _page_layouts(pages)

    # img2pdf calls this once per image, in order, and centres the image on
    # the page; an image that fills its page therefore sits at the origin.
    def layout_fun(imgwidthpx, imgheightpx, ndpi):
        page_size, box = next(layouts)
        width, height = scale_to_fit(
            ImageDimensions(width=imgwidthpx, height=imgheightpx), box
        )
        return page_size.width_points, page_size.height_points, width, height

    try:
        pdf_bytes = img2pdf.convert(
            [page.data for page in pages],
            layout_fun=layout_fun,
            nodate=nodate,
            first_frame_only=True,
            engine=img2pdf.Engine.internal,
        )
    except _IMG2PDF_ERRORS as exc:
        raise DocumentWriteError(f"Could not build {output_path.name}: {exc}") from exc

    output_path.parent.mkdir(parents=True, exist_ok=True)
    try:
        output_path.write_bytes(pdf_bytes)
    except OSError as exc:
        raise DocumentWriteError(f"Could not write {output_path}: {exc}") from exc

    return len(pdf_bytes)


class PdfAssembler:
    """Page-by-page PDF builder.

    The default page size applies to the next page that gets created, so it
    has to be set *before* :meth:`add_page_break`. Pages are held in memory
    and written on :meth:`close`; leaving a ``with`` block through an
    exception discards them and leaves any existing file untouched.

    Example::

        with PdfAssembler(output_path) as pdf:
            pdf.set_default_page_size(first_size)
            pdf.add_image(first_jpeg, fit=first_size)
            pdf.set_default_page_size(second_size)
            pdf.add_page_break()
            pdf.add_image(second_jpeg, fit=second_size)
    """

    def __init__(self, output_path: Path | str, *, nodate: bool = True) -> None:
        self.output_path = Path(output_path)
        self.nodate = nodate
        self.pdf_size: int | None = None
        self._default_page_size: PageSize | None = None
        self._pages: list[PlacedImage] = []
        self._closed = False

    def __enter__(self) -> PdfAssembler:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if exc_type is not None:
            self.discard()
        elif not self._closed:
            self.close()

    @property
    def page_count(self) -> int:
        return len(self._pages)

    def set_default_page_size(self, page_size: PageSize) -> None:
        self._check_open()
        self._default_page_size = page_size

    def add_page_break(self) -> None:
        """Start a new page sized by the current default page size."""
        self._check_open()
        self._new_page()

    def add_image(self, data: bytes, *, fit: PageSize) -> None:
        """Place *data* on the current page, scaled to fit inside *fit*.

        Raises:
            ValueError: If the current page already holds an image.
        """
        self._check_open()
        if not self._pages:
            self._new_page()
        page = self._pages[-1]
        if page.data is not None:
            raise ValueError(f"page {len(self._pages)} already has an image")
        page.data = data
        page.fit = fit

    def close(self) -> int:
        """Write the PDF and return its size in bytes."""
        self._check_open()
        self._closed = True
        self.pdf_size = assemble_pdf(
            pages=self._pages,
            output_path=self.output_path,
            nodate=self.nodate,
        )
        return self.pdf_size

    def discard(self) -> None:
        self._closed = True
        self._pages = []

    def _new_page(self) -> None:
        if self._default_page_size is None:
            raise ValueError("set_default_page_size() must be called before adding pages")
        self._pages.append(PlacedImage(page_size=self._default_page_size))

    def _check_open(self) -> None:
        if self._closed:
            raise ValueError("assembler is already closed")
