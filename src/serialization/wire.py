"""Protocol-buffers compatible wire encoding.

Only the two wire types used by the built-ins schema are supported:

- ``VARINT`` (0): base-128 little-endian groups, high bit set on all but the
  last byte. Negative int32 values are sign-extended to 64 bits and take ten
  bytes, as protobuf does.
- ``LENGTH_DELIMITED`` (2): varint byte length followed by the payload
  (strings, bytes, embedded messages).

A field key is ``(field_number << 3) | wire_type``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from serialization.errors import WireFormatError

if TYPE_CHECKING:
    from collections.abc import Iterator

VARINT = 0
LENGTH_DELIMITED = 2

_UINT64_MASK = (1 << 64) - 1
_MAX_VARINT_BYTES = 10


def encode_varint(value: int) -> bytes:
    if value < 0:
        value &= _UINT64_MASK
    out = bytearray()
    while True:
        byte = value & 0x7F
        value >>= 7
        if value:
            out.append(byte | 0x80)
        else:
            out.append(byte)
            return bytes(out)


def decode_varint(data: bytes, pos: int) -> tuple[int, int]:
    """Decode a varint at ``pos``; return ``(value, next_pos)``."""
    result = 0
    shift = 0
    for i in range(_MAX_VARINT_BYTES):
        if pos + i >= len(data):
            msg = f"truncated varint at offset {pos}"
            raise WireFormatError(msg)
        byte = data[pos + i]
        result |= (byte & 0x7F) << shift
        if not byte & 0x80:
            return result, pos + i + 1
        shift += 7
    msg = f"varint too long at offset {pos}"
    raise WireFormatError(msg)


def to_int32(value: int) -> int:
    """Reinterpret a decoded varint as a signed 32-bit value."""
    value &= 0xFFFFFFFF
    if value & 0x80000000:
        return value - (1 << 32)
    return value


class WireWriter:
    """Accumulates the fields of one message."""

    def __init__(self) -> None:
        self._buf = bytearray()

    def _key(self, field_number: int, wire_type: int) -> None:
        self._buf += encode_varint((field_number << 3) | wire_type)

    def int32(self, field_number: int, value: int) -> None:
        self._key(field_number, VARINT)
        self._buf += encode_varint(value)

    def boolean(self, field_number: int, value: bool) -> None:
        self.int32(field_number, 1 if value else 0)

    def length_delimited(self, field_number: int, value: bytes) -> None:
        self._key(field_number, LENGTH_DELIMITED)
        self._buf += encode_varint(len(value))
        self._buf += value

    def string(self, field_number: int, value: str) -> None:
        self.length_delimited(field_number, value.encode("utf-8"))

    def getvalue(self) -> bytes:
        return bytes(self._buf)


def write_delimited(payload: bytes) -> bytes:
    """Prefix ``payload`` with its varint length."""
    return encode_varint(len(payload)) + payload


def read_delimited(data: bytes, pos: int = 0) -> tuple[bytes, int]:
    length, pos = decode_varint(data, pos)
    end = pos + length
    if end > len(data):
        msg = f"delimited payload of {length} bytes exceeds buffer at offset {pos}"
        raise WireFormatError(msg)
    return data[pos:end], end


def iter_fields(data: bytes) -> Iterator[tuple[int, int, int | bytes]]:
    """Yield ``(field_number, wire_type, value)`` for every field in ``data``."""
    pos = 0
    while pos < len(data):
        key, pos = decode_varint(data, pos)
        field_number, wire_type = key >> 3, key & 0x7
        if field_number == 0:
            msg = f"invalid field number 0 at offset {pos}"
            raise WireFormatError(msg)
        if wire_type == VARINT:
            value, pos = decode_varint(data, pos)
            yield field_number, wire_type, value
        elif wire_type == LENGTH_DELIMITED:
            payload, pos = read_delimited(data, pos)
            yield field_number, wire_type, payload
        else:
            msg = f"unsupported wire type {wire_type} for field {field_number}"
            raise WireFormatError(msg)


__all__ = [
    "LENGTH_DELIMITED",
    "VARINT",
    "WireWriter",
    "decode_varint",
    "encode_varint",
    "iter_fields",
    "read_delimited",
    "to_int32",
    "write_delimited",
]
