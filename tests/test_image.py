import struct
import zlib

import pytest

from waylite.assets import AssetManager
from waylite.image import PNG_SIGNATURE, ImageAsset, ImageError, decode_png


def _chunk(kind, payload):
    return (
        struct.pack(">I", len(payload))
        + kind
        + payload
        + struct.pack(">I", zlib.crc32(kind + payload))
    )


def _png(width, height, color_type, raw, bit_depth=8, interlace=0):
    ihdr = struct.pack(">IIBBBBB", width, height, bit_depth, color_type, 0, 0, interlace)
    return (
        PNG_SIGNATURE
        + _chunk(b"IHDR", ihdr)
        + _chunk(b"IDAT", zlib.compress(raw))
        + _chunk(b"IEND", b"")
    )


def _paeth(a, b, c):
    p = a + b - c
    pa, pb, pc = abs(p - a), abs(p - b), abs(p - c)
    if pa <= pb and pa <= pc:
        return a
    return b if pb <= pc else c


def _filter_rows(rows, ftype, bpp):
    out = bytearray()
    prev = bytes(len(rows[0]))
    for row in rows:
        out.append(ftype)
        for i, value in enumerate(row):
            left = row[i - bpp] if i >= bpp else 0
            up = prev[i]
            up_left = prev[i - bpp] if i >= bpp else 0
            pred = [0, left, up, (left + up) // 2, _paeth(left, up, up_left)][ftype]
            out.append((value - pred) & 0xFF)
        prev = row
    return bytes(out)


ROWS = [
    bytes([10, 200, 30, 255, 250, 5, 128, 64, 7, 99, 180, 1]),
    bytes([0, 1, 2, 3, 255, 254, 253, 252, 40, 80, 120, 160]),
]


@pytest.mark.parametrize("ftype", [0, 1, 2, 3, 4])
def test_rgba_round_trip_for_each_filter(ftype):
    image = decode_png(_png(3, 2, 6, _filter_rows(ROWS, ftype, 4)))
    assert (image.width, image.height) == (3, 2)
    assert image.pixels == ROWS[0] + ROWS[1]


@pytest.mark.parametrize("ftype", [0, 1, 4])
def test_rgb_is_expanded_with_opaque_alpha(ftype):
    rows = [bytes([1, 2, 3, 4, 5, 6]), bytes([7, 8, 9, 250, 251, 252])]
    image = decode_png(_png(2, 2, 2, _filter_rows(rows, ftype, 3)))
    assert image.pixels == bytes(
        [1, 2, 3, 255, 4, 5, 6, 255, 7, 8, 9, 255, 250, 251, 252, 255]
    )
    assert len(image.pixels) == image.width * image.height * 4


def test_interlaced_image_is_reassembled():
    p00, p10, p01, p11 = b"\x01\x02\x03", b"\x04\x05\x06", b"\x07\x08\x09", b"\x0a\x0b\x0c"
    raw = b"\x00" + p00 + b"\x00" + p10 + b"\x00" + p01 + p11
    image = decode_png(_png(2, 2, 2, raw, interlace=1))
    assert image.pixels == p00 + b"\xff" + p10 + b"\xff" + p01 + b"\xff" + p11 + b"\xff"


def test_bad_signature():
    with pytest.raises(ImageError, match="not a PNG"):
        decode_png(b"GIF89a" + bytes(20))


def test_crc_mismatch():
    data = bytearray(_png(1, 1, 6, b"\x00\x01\x02\x03\x04"))
    data[20] ^= 0xFF  # inside the IHDR payload
    with pytest.raises(ImageError, match="CRC"):
        decode_png(bytes(data))


def test_grayscale_is_unsupported():
    with pytest.raises(ImageError, match="color type"):
        decode_png(_png(1, 1, 0, b"\x00\x80"))


def test_indexed_is_unsupported():
    with pytest.raises(ImageError, match="Indexed"):
        decode_png(_png(1, 1, 3, b"\x00\x00"))


def test_sixteen_bit_rgba_is_unsupported():
    with pytest.raises(ImageError, match="bit depth"):
        decode_png(_png(1, 1, 6, b"\x00" + bytes(8), bit_depth=16))


def test_truncated_pixel_data():
    with pytest.raises(ImageError, match="truncated"):
        decode_png(_png(2, 2, 6, b"\x00" + bytes(8)))


def test_unknown_filter_type():
    with pytest.raises(ImageError, match="filter"):
        decode_png(_png(1, 1, 6, b"\x05\x01\x02\x03\x04"))


def test_corrupt_compressed_data():
    ihdr = struct.pack(">IIBBBBB", 1, 1, 8, 6, 0, 0, 0)
    data = PNG_SIGNATURE + _chunk(b"IHDR", ihdr) + _chunk(b"IDAT", b"garbage")
    with pytest.raises(ImageError, match="corrupt"):
        decode_png(data)


def test_idat_before_ihdr():
    data = PNG_SIGNATURE + _chunk(b"IDAT", zlib.compress(b"\x00"))
    with pytest.raises(ImageError, match="IHDR"):
        decode_png(data)


def test_missing_image_data():
    ihdr = struct.pack(">IIBBBBB", 1, 1, 8, 6, 0, 0, 0)
    data = PNG_SIGNATURE + _chunk(b"IHDR", ihdr) + _chunk(b"IEND", b"")
    with pytest.raises(ImageError, match="no image data"):
        decode_png(data)


def test_load_from_file(tmp_path):
    path = tmp_path / "logo.png"
    path.write_bytes(_png(3, 2, 6, _filter_rows(ROWS, 0, 4)))
    image = ImageAsset.load(path)
    assert image.pixels == ROWS[0] + ROWS[1]


def test_load_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError) as info:
        ImageAsset.load(tmp_path / "none.png")
    assert "failed to open image" in str(info.value)


def test_load_invalid_file_names_path(tmp_path):
    path = tmp_path / "broken.png"
    path.write_bytes(b"not an image")
    with pytest.raises(ImageError) as info:
        ImageAsset.load(path)
    assert "broken.png" in str(info.value)


def test_load_through_asset_manager(tmp_path):
    path = tmp_path / "logo.png"
    path.write_bytes(_png(3, 2, 6, _filter_rows(ROWS, 2, 4)))
    manager = AssetManager()
    handle = manager.load(ImageAsset, path)
    stored = manager.get(handle)
    assert (stored.width, stored.height) == (3, 2)
    assert stored.pixels == ROWS[0] + ROWS[1]