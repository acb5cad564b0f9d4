import math

import pytest

from gridlearn.packing import pack_float, pack_u64, unpack_float, unpack_u64


@pytest.mark.parametrize("value", [0xDEADBEEF, 1, 0, 2**64 - 1])
def test_u64_round_trip(value):
    assert unpack_u64(pack_u64(value)) == value


def test_u64_is_little_endian():
    assert pack_u64(1) == b"\x01" + b"\x00" * 7
    assert pack_u64(0xDEADBEEF) == b"\xef\xbe\xad\xde\x00\x00\x00\x00"


def test_float_round_trip():
    x = 1.2011
    assert unpack_float(pack_float(x)) == x


def test_float_bytes_match_ieee754():
    assert pack_float(1.0) == b"\x00\x00\x00\x00\x00\x00\xf0\x3f"
    assert math.isnan(unpack_float(pack_float(float("nan"))))


def test_unpack_reads_only_first_eight_bytes():
    assert unpack_u64(pack_u64(7) + b"\xff") == 7


def test_unpack_short_input_raises():
    with pytest.raises(ValueError):
        unpack_u64(b"\x01\x02")
    with pytest.raises(ValueError):
        unpack_float(b"")