"""Wayland wire format: little-endian 32-bit words, padded strings and arrays.

A message starts with an 8-byte header: the sender object id, then a word
holding the total message size in the upper 16 bits and the opcode in the
lower 16 bits.
"""

from __future__ import annotations

import struct
from typing import BinaryIO

HEADER_SIZE = 8
MAX_MESSAGE_SIZE = 0xFFFF

_U32 = struct.Struct("<I")
_I32 = struct.Struct("<i")
_HEADER = struct.Struct("<II")


def _padding(length: int) -> int:
    """Bytes needed to bring ``length`` up to a multiple of four."""
    return -length % 4


def _check_bounds(data: bytes, offset: int, size: int) -> None:
    if offset < 0 or offset + size > len(data):
        raise ValueError(
            f"need {size} bytes at offset {offset}, buffer holds {len(data)}"
        )


def encode_u32(value: int) -> bytes:
    """Encode an unsigned 32-bit word."""
    if not 0 <= value <= 0xFFFFFFFF:
        raise ValueError(f"{value} does not fit in an unsigned 32-bit word")
    return _U32.pack(value)


def encode_int(value: int) -> bytes:
    """Encode a signed 32-bit word (``int`` and ``fixed`` arguments)."""
    if not -0x80000000 <= value <= 0x7FFFFFFF:
        raise ValueError(f"{value} does not fit in a signed 32-bit word")
    return _I32.pack(value)


def encode_string(text: str) -> bytes:
    """Encode a string: length including the NUL, bytes, NUL, padding."""
    raw = text.encode("utf-8") + b"\0"
    return encode_u32(len(raw)) + raw + bytes(_padding(len(raw)))


def encode_array(data: bytes) -> bytes:
    """Encode an array: byte length, contents, padding."""
    raw = bytes(data)
    return encode_u32(len(raw)) + raw + bytes(_padding(len(raw)))


def encode_message(object_id: int, opcode: int, args: bytes) -> bytes:
    """Frame ``args`` with a message header."""
    payload = bytes(args)
    total = HEADER_SIZE + len(payload)
    if total > MAX_MESSAGE_SIZE:
        raise ValueError(f"message of {total} bytes exceeds the wire limit")
    if not 0 <= opcode <= 0xFFFF:
        raise ValueError(f"opcode {opcode} does not fit in 16 bits")
    return encode_u32(object_id) + _U32.pack((total << 16) | opcode) + payload


def parse_header(header: bytes) -> tuple[int, int, int]:
    """Split an 8-byte header into ``(object_id, opcode, total_size)``."""
    if len(header) != HEADER_SIZE:
        raise ValueError(f"header must be {HEADER_SIZE} bytes, got {len(header)}")
    object_id, word = _HEADER.unpack(header)
    total = word >> 16
    if total < HEADER_SIZE:
        raise ValueError(f"message size {total} is smaller than its header")
    return object_id, word & 0xFFFF, total


def _read_exact(stream: BinaryIO, count: int) -> bytes:
    chunks = []
    remaining = count
    while remaining:
        chunk = stream.read(remaining)
        if not chunk:
            raise EOFError(f"stream ended {remaining} bytes short of a message")
        chunks.append(chunk)
        remaining -= len(chunk)
    return b"".join(chunks)


def read_message(stream: BinaryIO) -> tuple[int, int, bytes]:
    """Read one message from a binary stream as ``(object_id, opcode, body)``."""
    object_id, opcode, total = parse_header(_read_exact(stream, HEADER_SIZE))
    body = _read_exact(stream, total - HEADER_SIZE)
    return object_id, opcode, body


def read_u32(data: bytes, offset: int) -> int:
    """Read an unsigned 32-bit word at ``offset``."""
    _check_bounds(data, offset, 4)
    return _U32.unpack_from(data, offset)[0]


def read_int(data: bytes, offset: int) -> int:
    """Read a signed 32-bit word at ``offset``."""
    _check_bounds(data, offset, 4)
    return _I32.unpack_from(data, offset)[0]


def read_string(data: bytes, offset: int) -> tuple[str, int]:
    """Read a string at ``offset``; return it and the offset after its padding."""
    length = read_u32(data, offset)
    if length == 0:
        raise ValueError(f"null string at offset {offset}")
    start = offset + 4
    _check_bounds(data, start, length)
    text = data[start : start + length - 1].decode("utf-8", errors="replace")
    return text, start + length + _padding(length)


def read_array(data: bytes, offset: int) -> tuple[bytes, int]:
    """Read an array at ``offset``; return its bytes and the offset after padding."""
    length = read_u32(data, offset)
    start = offset + 4
    _check_bounds(data, start, length)
    return bytes(data[start : start + length]), start + length + _padding(length)