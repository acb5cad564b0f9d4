import random

import pytest

from gridlearn.attributes import BinaryAttribute, CategoricalAttribute, FloatAttribute
from gridlearn.attrutil import resolve_all_attributes
from gridlearn.dense import (
    DenseInstances,
    SortDirection,
    new_dense_copy,
    new_structural_copy,
)
from gridlearn.groups import BinaryAttributeGroup, FixedAttributeGroup


def _binary_grid(values):
    inst = DenseInstances()
    for i in range(3):
        inst.add_attribute(BinaryAttribute(str(i)))
    by_name = {}
    for spec in resolve_all_attributes(inst):
        name = spec.attribute.name
        assert name in {"0", "1", "2"}
        by_name[name] = spec
    specs = [by_name["0"], by_name["1"], by_name["2"]]
    inst.extend(len(values))
    for row, bits in enumerate(values):
        for col, bit in enumerate(bits):
            inst.set(specs[col], row, bytes([bit]))
    return inst, specs


def _float_grid(name_values):
    inst = DenseInstances()
    specs = [inst.add_attribute(FloatAttribute(name)) for name, _ in name_values]
    rows = len(name_values[0][1])
    inst.extend(rows)
    for spec, (_, values) in zip(specs, name_values):
        for row, v in enumerate(values):
            inst.set(spec, row, spec.attribute.get_sys_val_from_string(v))
    return inst, specs


BITS = [[1, 0, 0], [0, 1, 0], [0, 0, 1]]


def test_bag_simple_value_lengths():
    inst, specs = _binary_grid(BITS)
    rows = list(inst.iter_rows(specs))
    assert len(rows) == 3
    for _, values in rows:
        assert [len(v) for v in values] == [1, 1, 1]


def test_bag_simple_values_round_trip():
    inst, specs = _binary_grid(BITS)
    for row, values in inst.iter_rows(specs):
        assert [v[0] for v in values] == BITS[row]


def test_bag_random_values_round_trip():
    rng = random.Random(1234)
    bits = [[1 if rng.gauss(0, 1) >= 0 else 0 for _ in range(3)] for _ in range(50)]
    inst, specs = _binary_grid(bits)
    seen = 0
    for row, values in inst.iter_rows(specs):
        assert [len(v) for v in values] == [1, 1, 1]
        assert [v[0] for v in values] == bits[row]
        seen += 1
    assert seen == 50


def test_default_group_names_and_kinds():
    inst = DenseInstances()
    inst.add_attribute(FloatAttribute("f"))
    inst.add_attribute(CategoricalAttribute("c"))
    inst.add_attribute(BinaryAttribute("b"))
    groups = inst.all_attribute_groups()
    assert sorted(groups) == ["BIN0", "CAT0", "FLOAT0"]
    assert isinstance(groups["FLOAT0"], FixedAttributeGroup)
    assert isinstance(groups["CAT0"], FixedAttributeGroup)
    assert isinstance(groups["BIN0"], BinaryAttributeGroup)


def test_add_attribute_returns_positions():
    inst = DenseInstances()
    a = inst.add_attribute(FloatAttribute("a"))
    c = inst.add_attribute(CategoricalAttribute("c"))
    b = inst.add_attribute(FloatAttribute("b"))
    assert (a.pond, a.position) == (0, 0)
    assert (c.pond, c.position) == (1, 0)
    assert (b.pond, b.position) == (0, 1)
    assert [x.name for x in inst.all_attributes()] == ["a", "b", "c"]


def test_add_attribute_unknown_type_raises():
    inst = DenseInstances()
    with pytest.raises(TypeError):
        inst.add_attribute(object())


def test_add_after_extend_raises():
    inst = DenseInstances()
    inst.add_attribute(FloatAttribute("a"))
    inst.extend(2)
    with pytest.raises(RuntimeError):
        inst.add_attribute(FloatAttribute("b"))
    with pytest.raises(RuntimeError):
        inst.create_attribute_group("late", 8)


def test_row_string_groups_values():
    inst = DenseInstances()
    a = inst.add_attribute(FloatAttribute("a"))
    c_attr = CategoricalAttribute("c")
    c = inst.add_attribute(c_attr)
    b = inst.add_attribute(FloatAttribute("b"))
    inst.extend(1)
    inst.set(a, 0, a.attribute.get_sys_val_from_string("1"))
    inst.set(b, 0, b.attribute.get_sys_val_from_string("2.5"))
    inst.set(c, 0, c_attr.get_sys_val_from_string("x"))
    assert inst.row_string(0) == "1.00 2.50 x"


def test_get_attribute_resolves_equal_attribute():
    inst = DenseInstances()
    original = FloatAttribute("a")
    inst.add_attribute(original)
    spec = inst.get_attribute(FloatAttribute("a"))
    assert spec.attribute is original


def test_get_attribute_missing_raises():
    inst = DenseInstances()
    inst.add_attribute(FloatAttribute("a"))
    with pytest.raises(LookupError):
        inst.get_attribute(FloatAttribute("missing"))


def test_class_attributes_add_and_remove():
    inst = DenseInstances()
    a = FloatAttribute("a")
    b = FloatAttribute("b")
    inst.add_attribute(a)
    inst.add_attribute(b)
    assert inst.all_class_attributes() == []
    inst.add_class_attribute(b)
    assert inst.all_class_attributes() == [b]
    inst.remove_class_attribute(b)
    assert inst.all_class_attributes() == []


def test_add_class_attribute_unknown_raises():
    inst = DenseInstances()
    with pytest.raises(LookupError):
        inst.add_class_attribute(FloatAttribute("x"))


def test_custom_group_and_compatibility():
    inst = DenseInstances()
    inst.create_attribute_group("mine", 8)
    spec = inst.add_attribute_to_attribute_group(FloatAttribute("a"), "mine")
    assert spec.position == 0
    assert inst.get_attribute_group("mine").attributes()[0].name == "a"
    with pytest.raises(ValueError):
        inst.add_attribute_to_attribute_group(CategoricalAttribute("c"), "mine")


def test_missing_group_raises():
    inst = DenseInstances()
    with pytest.raises(LookupError):
        inst.get_attribute_group("nope")
    with pytest.raises(LookupError):
        inst.add_attribute_to_attribute_group(FloatAttribute("a"), "nope")


def test_size_counts_attributes_and_rows():
    inst, _ = _float_grid([("a", ["1", "2", "3"]), ("b", ["4", "5", "6"])])
    assert inst.size() == (2, 3)
    inst.extend(2)
    assert inst.size() == (2, 5)


def test_swap_rows():
    inst, specs = _float_grid([("a", ["1", "2"]), ("b", ["3", "4"])])
    inst.swap_rows(0, 1)
    assert inst.row_string(0) == "2.00 4.00"
    assert inst.row_string(1) == "1.00 3.00"


def test_str_summary():
    inst, specs = _float_grid([("x", ["1", "2"])])
    inst.add_class_attribute(specs[0].attribute)
    assert str(inst) == (
        "Instances with 2 row(s) 1 attribute(s)\n"
        "Attributes: \n"
        "*\tFloatAttribute(x)\n"
        "\nData:\n"
        "\t1.00 \n"
        "\t2.00 \n"
        "All rows displayed"
    )


def test_str_truncates_long_data():
    inst, _ = _float_grid([("x", ["0"] * 35)])
    text = str(inst)
    assert text.endswith("\t...\n5 row(s) undisplayed")
    assert text.count("\t0.00 \n") == 30


def test_new_structural_copy_has_no_rows():
    inst, specs = _float_grid([("a", ["1"]), ("b", ["2"])])
    inst.add_class_attribute(specs[1].attribute)
    copy = new_structural_copy(inst)
    assert copy.size() == (2, 0)
    assert [a.name for a in copy.all_class_attributes()] == ["b"]


def test_new_dense_copy_copies_data():
    inst, specs = _float_grid([("a", ["1", "2"]), ("b", ["3", "4"])])
    copy = new_dense_copy(inst)
    assert copy.size() == (2, 2)
    assert copy.row_string(0) == "1.00 3.00"
    assert copy.row_string(1) == "2.00 4.00"
    copy.swap_rows(0, 1)
    assert inst.row_string(0) == "1.00 3.00"


def test_sort_direction_values():
    assert SortDirection.DESCENDING == 1
    assert SortDirection.ASCENDING == 2
    assert SortDirection(2) is SortDirection.ASCENDING