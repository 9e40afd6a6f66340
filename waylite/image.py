"""RGBA8 images decoded from PNG files."""

from __future__ import annotations

import os
import struct
import zlib
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator

from .assets import Asset

PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"

_COLOR_NAMES = {
    0: "Grayscale",
    2: "Rgb",
    3: "Indexed",
    4: "GrayscaleAlpha",
    6: "Rgba",
}
_CHANNELS = {2: 3, 6: 4}

# (x start, y start, x step, y step) of the seven Adam7 passes.
_ADAM7 = (
    (0, 0, 8, 8),
    (4, 0, 8, 8),
    (0, 4, 4, 8),
    (2, 0, 4, 4),
    (0, 2, 2, 4),
    (1, 0, 2, 2),
    (0, 1, 1, 2),
)

_IHDR = struct.Struct(">IIBBBBB")


class ImageError(ValueError):
    """An image file is malformed or uses an unsupported format."""


@dataclass(frozen=True)
class ImageAsset(Asset):
    """A decoded image: RGBA8 pixels, row-major, top to bottom."""

    pixels: bytes
    width: int
    height: int

    @classmethod
    def load(cls, path: str | os.PathLike[str]) -> "ImageAsset":
        """Read and decode the PNG file at ``path``."""
        path = Path(path)
        try:
            data = path.read_bytes()
        except OSError as exc:
            raise OSError(
                exc.errno, f"failed to open image: {path}: {exc.strerror}"
            ) from exc
        try:
            return decode_png(data)
        except ImageError as exc:
            raise ImageError(f"{path}: {exc}") from exc


@dataclass(frozen=True)
class _Header:
    width: int
    height: int
    channels: int
    interlaced: bool


def _chunks(data: bytes) -> Iterator[tuple[bytes, bytes]]:
    pos = len(PNG_SIGNATURE)
    while pos < len(data):
        if pos + 8 > len(data):
            raise ImageError("truncated chunk header")
        length, kind = struct.unpack_from(">I4s", data, pos)
        start = pos + 8
        end = start + length
        if end + 4 > len(data):
            raise ImageError(f"truncated {kind.decode('latin-1')} chunk")
        payload = data[start:end]
        (crc,) = struct.unpack_from(">I", data, end)
        if zlib.crc32(kind + payload) != crc:
            raise ImageError(f"CRC mismatch in {kind.decode('latin-1')} chunk")
        yield kind, payload
        pos = end + 4


def _parse_header(payload: bytes) -> _Header:
    if len(payload) != _IHDR.size:
        raise ImageError(f"IHDR chunk must be {_IHDR.size} bytes, got {len(payload)}")
    width, height, depth, color, compression, filtering, interlace = _IHDR.unpack(
        payload
    )
    if width == 0 or height == 0:
        raise ImageError(f"invalid image size {width}x{height}")
    if compression != 0 or filtering != 0:
        raise ImageError("unknown PNG compression or filter method")
    if interlace not in (0, 1):
        raise ImageError(f"unknown interlace method {interlace}")
    if color not in _CHANNELS:
        name = _COLOR_NAMES.get(color, str(color))
        raise ImageError(f"unsupported PNG color type: {name}")
    if depth != 8:
        raise ImageError(f"unsupported PNG bit depth: {depth}")
    return _Header(width, height, _CHANNELS[color], interlace == 1)


def _paeth(left: int, up: int, up_left: int) -> int:
    estimate = left + up - up_left
    to_left = abs(estimate - left)
    to_up = abs(estimate - up)
    to_up_left = abs(estimate - up_left)
    if to_left <= to_up and to_left <= to_up_left:
        return left
    return up if to_up <= to_up_left else up_left


def _unfilter_line(kind: int, line: bytearray, prev: bytes, bpp: int) -> None:
    if kind == 0:
        return
    if kind == 1:
        for i in range(bpp, len(line)):
            line[i] = (line[i] + line[i - bpp]) & 0xFF
    elif kind == 2:
        for i, up in enumerate(prev):
            line[i] = (line[i] + up) & 0xFF
    elif kind == 3:
        for i, up in enumerate(prev):
            left = line[i - bpp] if i >= bpp else 0
            line[i] = (line[i] + ((left + up) >> 1)) & 0xFF
    elif kind == 4:
        for i, up in enumerate(prev):
            left = line[i - bpp] if i >= bpp else 0
            up_left = prev[i - bpp] if i >= bpp else 0
            line[i] = (line[i] + _paeth(left, up, up_left)) & 0xFF
    else:
        raise ImageError(f"unknown scanline filter type {kind}")


def _unfilter(
    raw: bytes, pos: int, width: int, height: int, bpp: int
) -> tuple[bytearray, int]:
    stride = width * bpp
    prev = bytes(stride)
    out = bytearray()
    for _ in range(height):
        if pos + 1 + stride > len(raw):
            raise ImageError("image data is truncated")
        kind = raw[pos]
        line = bytearray(raw[pos + 1 : pos + 1 + stride])
        pos += 1 + stride
        _unfilter_line(kind, line, prev, bpp)
        out += line
        prev = bytes(line)
    return out, pos


def _deinterlace(raw: bytes, header: _Header) -> bytearray:
    width, height, bpp = header.width, header.height, header.channels
    full = bytearray(width * height * bpp)
    pos = 0
    for x0, y0, dx, dy in _ADAM7:
        pass_w = (width - x0 + dx - 1) // dx if width > x0 else 0
        pass_h = (height - y0 + dy - 1) // dy if height > y0 else 0
        if not pass_w or not pass_h:
            continue
        sub, pos = _unfilter(raw, pos, pass_w, pass_h, bpp)
        for row in range(pass_h):
            y = y0 + row * dy
            for col in range(pass_w):
                dst = (y * width + x0 + col * dx) * bpp
                src = (row * pass_w + col) * bpp
                full[dst : dst + bpp] = sub[src : src + bpp]
    return full


def _to_rgba(pixels: bytearray, count: int) -> bytes:
    rgba = bytearray(count * 4)
    rgba[0::4] = pixels[0::3]
    rgba[1::4] = pixels[1::3]
    rgba[2::4] = pixels[2::3]
    rgba[3::4] = b"\xff" * count
    return bytes(rgba)


def decode_png(data: bytes) -> ImageAsset:
    """Decode an 8-bit RGB or RGBA PNG into RGBA8 pixels; RGB gets full alpha."""
    data = bytes(data)
    if not data.startswith(PNG_SIGNATURE):
        raise ImageError("not a PNG file")
    header: _Header | None = None
    compressed: list[bytes] = []
    for kind, payload in _chunks(data):
        if kind == b"IHDR":
            header = _parse_header(payload)
        elif kind == b"IDAT":
            if header is None:
                raise ImageError("IDAT chunk before IHDR")
            compressed.append(payload)
        elif kind == b"IEND":
            break
    if header is None:
        raise ImageError("missing IHDR chunk")
    if not compressed:
        raise ImageError("no image data")
    try:
        raw = zlib.decompress(b"".join(compressed))
    except zlib.error as exc:
        raise ImageError(f"corrupt image data: {exc}") from exc

    if header.interlaced:
        pixels = _deinterlace(raw, header)
    else:
        pixels, _ = _unfilter(raw, 0, header.width, header.height, header.channels)

    count = header.width * header.height
    rgba = bytes(pixels) if header.channels == 4 else _to_rgba(pixels, count)
    return ImageAsset(rgba, header.width, header.height)