import pytest

from gridlearn.attributes import BinaryAttribute, CategoricalAttribute, FloatAttribute
from gridlearn.groups import BinaryAttributeGroup, FixedAttributeGroup
from gridlearn.packing import pack_float, unpack_float


def _fixed_group(names, rows):
    group = FixedAttributeGroup(8)
    for name in names:
        group.add_attribute(FloatAttribute(name, precision=1))
    group.resize(rows * group.row_size_in_bytes())
    return group


def _binary_group(count, rows):
    group = BinaryAttributeGroup()
    for i in range(count):
        group.add_attribute(BinaryAttribute(str(i)))
    group.resize(rows * group.row_size_in_bytes())
    return group


def test_fixed_row_size_scales_with_attributes():
    group = _fixed_group(["a", "b", "c"], 0)
    assert group.row_size_in_bytes() == len(group.attributes()) * group.size


def test_fixed_set_get_round_trip():
    group = _fixed_group(["a", "b"], 3)
    values = [[1.5, 2.25], [-3.0, 0.0], [7.125, 8.5]]
    for row, row_values in enumerate(values):
        for col, value in enumerate(row_values):
            group.set(col, row, pack_float(value))
    for row, row_values in enumerate(values):
        for col, value in enumerate(row_values):
            assert unpack_float(group.get(col, row)) == value
    assert group.max_row == 3


def test_fixed_storage_length_follows_resize():
    group = _fixed_group(["a", "b"], 4)
    assert len(group.storage()) == 4 * group.row_size_in_bytes()
    group.resize(group.row_size_in_bytes())
    assert len(group.storage()) == 5 * group.row_size_in_bytes()


def test_fixed_set_wrong_length_raises():
    group = _fixed_group(["a"], 1)
    with pytest.raises(ValueError):
        group.set(0, 0, b"\x01\x02")


def test_fixed_set_outside_storage_raises():
    group = _fixed_group(["a"], 1)
    with pytest.raises(IndexError):
        group.set(0, 1, pack_float(1.0))
    with pytest.raises(IndexError):
        group.get(0, 1)


def test_fixed_format_row():
    group = _fixed_group(["a", "b"], 1)
    group.set(0, 0, pack_float(1.5))
    group.set(1, 0, pack_float(2.0))
    assert group.format_row(0) == "1.5 2.0"


def test_fixed_format_row_categorical():
    group = FixedAttributeGroup(8)
    attribute = CategoricalAttribute("species")
    group.add_attribute(attribute)
    group.resize(group.row_size_in_bytes())
    group.set(0, 0, attribute.get_sys_val_from_string("Iris-setosa"))
    assert group.format_row(0) == "Iris-setosa"


def test_resize_negative_raises():
    group = _fixed_group(["a"], 0)
    with pytest.raises(ValueError):
        group.resize(-1)


def test_attributes_returns_copy():
    group = _fixed_group(["a"], 0)
    listed = group.attributes()
    listed.append(FloatAttribute("b"))
    assert len(group.attributes()) == 1


def test_binary_row_size_rounds_up():
    assert _binary_group(8, 0).row_size_in_bytes() == 1
    assert _binary_group(9, 0).row_size_in_bytes() == 2


def test_binary_simple_bits():
    bits = [[1, 0, 0], [0, 1, 0], [0, 0, 1]]
    group = _binary_group(3, 3)
    for row, row_bits in enumerate(bits):
        for col, bit in enumerate(row_bits):
            group.set(col, row, bytes([bit]))
    for row, row_bits in enumerate(bits):
        for col, bit in enumerate(row_bits):
            value = group.get(col, row)
            assert len(value) == 1
            assert value[0] == bit


def test_binary_clearing_bit():
    group = _binary_group(3, 1)
    group.set(1, 0, b"\x01")
    group.set(1, 0, b"\x00")
    assert group.get(1, 0) == b"\x00"


def test_binary_nonzero_value_stored_as_one():
    group = _binary_group(2, 2)
    group.set(0, 1, b"\x05")
    assert group.get(0, 1) == b"\x01"
    assert group.get(1, 1) == b"\x00"
    assert group.max_row == 2


def test_binary_many_rows_spanning_bytes():
    group = _binary_group(10, 5)
    expected = {}
    for row in range(5):
        for col in range(10):
            bit = (row + col) % 3 == 0
            expected[(col, row)] = bit
            group.set(col, row, bytes([int(bit)]))
    for (col, row), bit in expected.items():
        assert group.get(col, row)[0] == int(bit)


def test_binary_outside_storage_raises():
    group = _binary_group(3, 1)
    with pytest.raises(IndexError):
        group.get(0, 1)


def test_binary_format_row():
    group = _binary_group(3, 1)
    group.set(2, 0, b"\x01")
    assert group.format_row(0) == "0 0 1"


def test_group_names():
    assert str(FixedAttributeGroup()) == "FixedAttributeGroup"
    assert str(BinaryAttributeGroup()) == "BinaryAttributeGroup"