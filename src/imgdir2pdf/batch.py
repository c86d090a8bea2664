"""Run the conversion over a batch of directories, one PDF per directory."""

from __future__ import annotations

import os
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass, field
from pathlib import Path

from .composer import DEFAULT_QUALITY, DEFAULT_RESAMPLE, compose, resolve_resample
from .fileset import SUPPORTED_EXTENSIONS, list_ordered, preflight
from .resolution import ResolutionModel

PDF_SUFFIX = ".pdf"


@dataclass
class DirectoryOutcome:
    """What happened to one directory of the batch."""

    directory: Path
    output_path: Path | None = None
    page_count: int = 0
    pdf_size: int = 0
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class BatchResult:
    """Outcomes of a batch run, in the order the directories were given."""

    resolution: ResolutionModel
    outcomes: list[DirectoryOutcome] = field(default_factory=list)

    @property
    def successes(self) -> int:
        return sum(1 for o in self.outcomes if o.ok)

    @property
    def failures(self) -> int:
        return sum(1 for o in self.outcomes if not o.ok)


def _resolve_pdf_path(*, directory: Path | str) -> Path:
    """Return the PDF path that sits next to *directory*.

    The directory's own suffix, if any, is replaced: ``scans`` becomes
    ``scans.pdf`` and ``scans.2024`` becomes ``scans.pdf``. Symbolic links
    are not followed, so the PDF is named after the path as given.

    Raises:
        ValueError: If the path has no name, as for a filesystem root.
    """
    return Path(os.path.abspath(directory)).with_suffix(PDF_SUFFIX)


def run(
    directories: Sequence[Path | str],
    *,
    resolution: ResolutionModel,
    supported_extensions: Iterable[str] = SUPPORTED_EXTENSIONS,
    quality: int = DEFAULT_QUALITY,
    resample: str = DEFAULT_RESAMPLE,
    on_directory_start: Callable[[Path, int], None] | None = None,
    on_page_done: Callable[[], None] | None = None,
    on_directory_done: Callable[[DirectoryOutcome], None] | None = None,
) -> BatchResult:
    """Convert every directory in *directories* into a sibling PDF.

    All directories are checked before the first one is processed; if any
    check fails the error propagates and nothing is written. After that, a
    failure in one directory is recorded in its :class:`DirectoryOutcome`
    and the batch moves on to the next.

    Args:
        directories: Directories to convert, processed in this order.
        resolution: Source DPI and resize divisor shared by the whole batch.
        supported_extensions: File suffixes treated as images.
        quality: JPEG quality used when re-encoding pages.
        resample: Name of the resampling filter.
        on_directory_start: Called with the directory and its image count
            before composing it.
        on_page_done: Called once per page added.
        on_directory_done: Called with each directory's outcome.

    Returns:
        A :class:`BatchResult` with one outcome per directory.

    Raises:
        DirectoryNotFoundError: If a directory does not exist.
        InsufficientImagesError: If a directory has fewer than two images.
        ValueError: If *resample* is not a known filter.
    """
    extensions = tuple(supported_extensions)
    resolve_resample(resample)
    preflight(directories, extensions)

    result = BatchResult(resolution=resolution)

    for directory in directories:
        directory = Path(directory)
        outcome = DirectoryOutcome(directory=directory)

        try:
            outcome.output_path = _resolve_pdf_path(directory=directory)
            entries = list_ordered(directory, extensions)
            if on_directory_start is not None:
                on_directory_start(directory, len(entries))
            composed = compose(
                entries=entries,
                resolution=resolution,
                output_path=outcome.output_path,
                quality=quality,
                resample=resample,
                on_page_done=on_page_done,
            )
        except Exception as exc:
            outcome.error = str(exc) or type(exc).__name__
        else:
            outcome.page_count = composed.page_count
            outcome.pdf_size = composed.pdf_size

        result.outcomes.append(outcome)
        if on_directory_done is not None:
            on_directory_done(outcome)

    return result
