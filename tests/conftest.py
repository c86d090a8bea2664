from __future__ import annotations

import struct
import zlib
from pathlib import Path
from typing import Callable

import pytest
from PIL import Image
from pypdf import PdfReader


def create_image(
    path: Path,
    *,
    width: int = 100,
    height: int = 100,
    mode: str = "RGB",
    color: object = "red",
    **save_kwargs,
) -> Path:
    """Write a solid-colour image; the format follows the file suffix."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with Image.new(mode, (width, height), color) as img:
        img.save(path, **save_kwargs)
    return path


def page_sizes(pdf_path: Path) -> list[tuple[float, float]]:
    reader = PdfReader(pdf_path)
    return [(float(p.mediabox.width), float(p.mediabox.height)) for p in reader.pages]


@pytest.fixture()
def image_dir(tmp_path: Path) -> Callable[..., Path]:
    """Create a directory holding solid-colour images of the given sizes."""

    def _create(name: str, sizes: dict[str, tuple[int, int]]) -> Path:
        directory = tmp_path / name
        directory.mkdir(parents=True, exist_ok=True)
        for filename, (width, height) in sizes.items():
            create_image(directory / filename, width=width, height=height)
        return directory

    return _create


def embedded_images(pdf_path: Path) -> list[tuple[str, bytes]]:
    """Return ``(filter, raw stream bytes)`` of the image on each page."""
    images = []
    for page in PdfReader(pdf_path).pages:
        xobjects = page["/Resources"]["/XObject"]
        for name in xobjects:
            xobj = xobjects[name].get_object()
            if xobj["/Subtype"] != "/Image":
                continue
            filters = xobj["/Filter"]
            if not isinstance(filters, str):
                filters = filters[0]
            images.append((str(filters), xobj.get_data()))
    return images


def _png_chunk(kind: bytes, data: bytes) -> bytes:
    crc = zlib.crc32(kind + data) & 0xFFFFFFFF
    return struct.pack(">I", len(data)) + kind + data + struct.pack(">I", crc)


def create_broken_png(path: Path, *, width: int = 64, height: int = 64) -> Path:
    """Write a PNG whose pixel data continues in a chunk with a garbage type.

    The header parses, so the file opens; decoding fails part-way through.
    """
    rows = b"".join(
        b"\x00" + bytes((x * y + y) % 256 for x in range(width * 3))
        for y in range(height)
    )
    compressed = zlib.compress(rows)
    half = len(compressed) // 2

    header = struct.pack(">IIBBBBB", width, height, 8, 2, 0, 0, 0)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(
        b"\x89PNG\r\n\x1a\n"
        + _png_chunk(b"IHDR", header)
        + _png_chunk(b"IDAT", compressed[:half])
        + _png_chunk(b"\x00\x01\x02\x03", compressed[half:])
        + _png_chunk(b"IEND", b"")
    )
    return path
