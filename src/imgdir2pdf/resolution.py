"""Pixel and page geometry derived from a source DPI and a resize divisor."""

from __future__ import annotations

import math
from dataclasses import dataclass, field

POINTS_PER_INCH = 72


@dataclass(frozen=True)
class ImageDimensions:
    """Pixel dimensions of an image, either as decoded or after resizing."""

    width: int
    height: int


@dataclass(frozen=True)
class PageSize:
    """Physical page dimensions in PDF points (1/72 inch)."""

    width_points: float
    height_points: float


@dataclass(frozen=True)
class ResolutionModel:
    """Source resolution and resize divisor shared by a whole batch run.

    ``output_dpi`` is derived from the two inputs and cannot be passed in.
    """

    source_dpi: float
    resize_divisor: float
    output_dpi: float = field(init=False)

    def __post_init__(self) -> None:
        for name in ("source_dpi", "resize_divisor"):
            value = getattr(self, name)
            if not _is_positive(value):
                raise ValueError(f"{name} must be a positive number, got {value!r}")
        object.__setattr__(
            self, "output_dpi", float(self.source_dpi) / float(self.resize_divisor)
        )

    def resized_dimensions(self, original: ImageDimensions) -> ImageDimensions:
        """Divide both axes by the divisor and round to the nearest integer.

        Raises:
            ValueError: If an axis rounds down to zero pixels.
        """
        width = round(original.width / self.resize_divisor)
        height = round(original.height / self.resize_divisor)
        if width < 1 or height < 1:
            raise ValueError(
                f"{original.width}x{original.height} image is too small"
                f" to divide by {self.resize_divisor:g}"
            )
        return ImageDimensions(width=width, height=height)

    def page_size(self, resized: ImageDimensions) -> PageSize:
        """Physical size of a page holding *resized* at ``output_dpi``."""
        return PageSize(
            width_points=resized.width * POINTS_PER_INCH / self.output_dpi,
            height_points=resized.height * POINTS_PER_INCH / self.output_dpi,
        )


def compute(source_dpi: float, resize_divisor: float) -> ResolutionModel:
    """Build the :class:`ResolutionModel` for a batch run.

    Raises:
        ValueError: If either value is not a finite number greater than zero.
    """
    return ResolutionModel(source_dpi=source_dpi, resize_divisor=resize_divisor)


def parse_positive(text: str | None) -> float | None:
    """Return *text* as a float if it is a finite number greater than zero.

    Anything else, including ``None``, yields ``None`` so that callers can
    keep asking until a usable value arrives.
    """
    if text is None:
        return None
    try:
        value = float(text.strip())
    except ValueError:
        return None
    return value if _is_positive(value) else None


def scale_to_fit(dimensions: ImageDimensions, box: PageSize) -> tuple[float, float]:
    """Largest ``(width, height)`` in points that keeps the aspect ratio of
    *dimensions* and fits inside *box*.

    When the aspect ratios match, the box itself is returned.
    """
    width_scale = box.width_points / dimensions.width
    height_scale = box.height_points / dimensions.height
    if width_scale <= height_scale:
        return box.width_points, min(dimensions.height * width_scale, box.height_points)
    return min(dimensions.width * height_scale, box.width_points), box.height_points


def _is_positive(value: object) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value) and value > 0
