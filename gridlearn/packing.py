"""Conversion between Python numbers and their 8-byte little-endian form."""

import struct

_U64 = struct.Struct("<Q")
_F64 = struct.Struct("<d")


def _require_width(data: bytes) -> None:
    if len(data) < 8:
        raise ValueError(f"need at least 8 bytes, got {len(data)}")


def pack_u64(value: int) -> bytes:
    """Return the 8 little-endian bytes of an unsigned 64-bit integer."""
    return _U64.pack(value & 0xFFFFFFFFFFFFFFFF)


def unpack_u64(data: bytes) -> int:
    """Read an unsigned 64-bit integer from the first 8 bytes of ``data``."""
    _require_width(data)
    return _U64.unpack_from(data)[0]


def pack_float(value: float) -> bytes:
    """Return the 8 little-endian bytes of a float64."""
    return _F64.pack(value)


def unpack_float(data: bytes) -> float:
    """Read a float64 from the first 8 bytes of ``data``."""
    _require_width(data)
    return _F64.unpack_from(data)[0]