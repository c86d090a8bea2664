"""Command-line interface for imgdir2pdf."""

from __future__ import annotations

import argparse
import sys
import time
from pathlib import Path

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.progress import (
    BarColumn,
    MofNCompleteColumn,
    Progress,
    SpinnerColumn,
    TimeRemainingColumn,
)

from . import __version__
from .batch import BatchResult, DirectoryOutcome, run
from .composer import DEFAULT_QUALITY, DEFAULT_RESAMPLE, RESAMPLE_FILTERS
from .fileset import SUPPORTED_EXTENSIONS, ImgDirError, preflight
from .resolution import ResolutionModel, compute, parse_positive

EXIT_DIRECTORY_FAILED = 1
EXIT_VALIDATION_FAILED = 2
EXIT_INTERRUPTED = 130

_DPI_PROMPT = "Resolution of original images (DPI): "
_DIVISOR_PROMPT = "Divide image dimensions by: "


def _format_size(num_bytes: int) -> str:
    """Format a byte count as a human-readable string."""
    value = float(num_bytes)
    for unit in ("B", "KB", "MB", "GB"):
        if abs(value) < 1024:
            return f"{value:.1f} {unit}"
        value /= 1024
    return f"{value:.1f} TB"


def _positive_number(text: str) -> float:
    value = parse_positive(text)
    if value is None:
        raise argparse.ArgumentTypeError(f"must be a number greater than 0: {text!r}")
    return value


def _jpeg_quality(text: str) -> int:
    try:
        value = int(text)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not an integer: {text!r}") from None
    if not 1 <= value <= 95:
        raise argparse.ArgumentTypeError(f"must be between 1 and 95: {value}")
    return value


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="imgdir2pdf",
        description=(
            "Combine the images in each directory into a PDF next to it,"
            " one page per image, pages sized to the resized images."
        ),
        epilog=(
            "Supported images: "
            + " ".join(SUPPORTED_EXTENSIONS)
            + ". Files are ordered by name, ignoring case; zero-pad numbers"
            " (img_02.jpg, img_10.jpg) to keep pages in order."
        ),
    )
    parser.add_argument(
        "directories",
        nargs="*",
        type=Path,
        metavar="DIRECTORY",
        help="Directory of images; writes DIRECTORY.pdf beside it",
    )
    parser.add_argument(
        "--dpi",
        type=_positive_number,
        default=None,
        help="Resolution of the original images (prompted for if omitted)",
    )
    parser.add_argument(
        "--divisor",
        type=_positive_number,
        default=None,
        help="Divide image dimensions by this value (prompted for if omitted)",
    )
    parser.add_argument(
        "--quality",
        type=_jpeg_quality,
        default=DEFAULT_QUALITY,
        help=f"JPEG quality of the embedded pages (default: {DEFAULT_QUALITY})",
    )
    parser.add_argument(
        "--resample",
        choices=sorted(RESAMPLE_FILTERS),
        default=DEFAULT_RESAMPLE,
        help=f"Resampling filter used when resizing (default: {DEFAULT_RESAMPLE})",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    return parser


def _prompt_positive(console: Console, label: str) -> float:
    """Ask for *label* until the answer is a number greater than zero."""
    while True:
        value = parse_positive(console.input(label))
        if value is not None:
            return value


def _resolve_resolution(console: Console, args: argparse.Namespace) -> ResolutionModel:
    source_dpi = args.dpi if args.dpi is not None else _prompt_positive(console, _DPI_PROMPT)
    divisor = (
        args.divisor if args.divisor is not None else _prompt_positive(console, _DIVISOR_PROMPT)
    )
    return compute(source_dpi=source_dpi, resize_divisor=divisor)


def _run_with_progress(
    *,
    console: Console,
    directories: list[Path],
    resolution: ResolutionModel,
    quality: int,
    resample: str,
) -> BatchResult:
    """Run the batch with one progress bar per directory."""
    progress = Progress(
        SpinnerColumn(),
        "[progress.description]{task.description}",
        BarColumn(),
        MofNCompleteColumn(),
        TimeRemainingColumn(),
        console=console,
    )
    current: list[int] = []

    def on_directory_start(directory: Path, image_count: int) -> None:
        current[:] = [
            progress.add_task(
                description=f"Adding images from {directory.name}",
                total=image_count,
            )
        ]

    def on_page_done() -> None:
        progress.advance(task_id=current[0])

    def on_directory_done(outcome: DirectoryOutcome) -> None:
        if current:
            progress.remove_task(current.pop())
        if outcome.ok:
            progress.console.print(
                f"PDF file created: [bold]{escape(str(outcome.output_path))}[/bold]"
                f" ({outcome.page_count} pages, {_format_size(outcome.pdf_size)})"
            )
        else:
            progress.console.print(
                f"[yellow]Failed: {escape(str(outcome.directory))}:"
                f" {escape(outcome.error or '')}[/yellow]"
            )

    with progress:
        return run(
            directories,
            resolution=resolution,
            quality=quality,
            resample=resample,
            on_directory_start=on_directory_start,
            on_page_done=on_page_done,
            on_directory_done=on_directory_done,
        )


def _print_summary(console: Console, result: BatchResult, elapsed: float) -> None:
    total = len(result.outcomes)
    summary_lines = [
        f"[bold]Output DPI:[/bold] {result.resolution.output_dpi:g}",
        f"[bold]PDF files created:[/bold] {result.successes}/{total}",
    ]
    if result.failures:
        summary_lines.append(f"[bold red]Failed:[/bold red] {result.failures}")
        for outcome in result.outcomes:
            if not outcome.ok:
                summary_lines.append(f"  [red]- {escape(str(outcome.directory))}[/red]")
    total_bytes = sum(o.pdf_size for o in result.outcomes)
    summary_lines.append(f"[bold]Total size:[/bold] {_format_size(total_bytes)}")

    console.print(Panel(
        "\n".join(summary_lines),
        title=f"[bold green]Done in {elapsed:.1f}s[/bold green]",
        border_style="green" if not result.failures else "yellow",
    ))


def main(argv: list[str] | None = None) -> None:
    """Entry point for the ``imgdir2pdf`` CLI command."""
    console = Console()
    err_console = Console(stderr=True)
    parser = _build_parser()
    args = parser.parse_args(argv)

    if not args.directories:
        parser.print_usage()
        return

    try:
        preflight(args.directories)
        resolution = _resolve_resolution(console, args)
        start_time = time.monotonic()
        result = _run_with_progress(
            console=console,
            directories=args.directories,
            resolution=resolution,
            quality=args.quality,
            resample=args.resample,
        )
    except ImgDirError as exc:
        err_console.print(f"[bold red]Error:[/bold red] {escape(str(exc))}")
        sys.exit(EXIT_VALIDATION_FAILED)
    except (KeyboardInterrupt, EOFError):
        err_console.print("\n[dim]Interrupted.[/dim]")
        sys.exit(EXIT_INTERRUPTED)

    _print_summary(console, result, time.monotonic() - start_time)

    if result.failures:
        sys.exit(EXIT_DIRECTORY_FAILED)
