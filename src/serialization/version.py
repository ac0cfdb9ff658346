"""Version header written in front of every combined built-ins file.

Layout: big-endian int32 component count, then each component as a
big-endian int32.
"""

from __future__ import annotations

import struct
from typing import TYPE_CHECKING

from serialization.errors import WireFormatError

if TYPE_CHECKING:
    from collections.abc import Sequence

_INT = struct.Struct(">i")


def write_version_envelope(version: Sequence[int], payload: bytes) -> bytes:
    header = bytearray(_INT.pack(len(version)))
    for component in version:
        header += _INT.pack(component)
    return bytes(header) + payload


def read_version_envelope(data: bytes) -> tuple[tuple[int, ...], bytes]:
    """Split a combined file into its version tuple and the payload bytes."""
    if len(data) < _INT.size:
        msg = "version header is truncated"
        raise WireFormatError(msg)
    (count,) = _INT.unpack_from(data, 0)
    end = _INT.size * (count + 1)
    if count < 0 or len(data) < end:
        msg = f"version header declares {count} components but file is {len(data)} bytes"
        raise WireFormatError(msg)
    version = tuple(
        _INT.unpack_from(data, _INT.size * (i + 1))[0] for i in range(count)
    )
    return version, data[end:]


__all__ = ["read_version_envelope", "write_version_envelope"]
