"""Attribute specifications and set operations on attribute lists."""

from dataclasses import dataclass

from .attributes import Attribute, FloatAttribute


@dataclass(frozen=True)
class AttributeSpec:
    """Where an attribute lives inside a grid: its group and its column there."""

    pond: int
    position: int
    attribute: Attribute

    def __str__(self) -> str:
        return (
            f"AttributeSpec(Attribute: '{self.attribute}', "
            f"Pond: {self.pond}/{self.position})"
        )


def _contains_equal(attribute: Attribute, others) -> bool:
    return any(attribute.equals(other) for other in others)


def non_class_float_attributes(grid) -> list[Attribute]:
    """Return the float attributes of ``grid`` that are not class attributes."""
    class_attributes = grid.all_class_attributes()
    return [
        attribute
        for attribute in grid.all_attributes()
        if isinstance(attribute, FloatAttribute)
        and not _contains_equal(attribute, class_attributes)
    ]


def non_class_attributes(grid) -> list[Attribute]:
    """Return the attributes of ``grid`` that are not class attributes."""
    return attribute_difference_references(
        grid.all_attributes(), grid.all_class_attributes()
    )


def resolve_attributes(grid, attributes) -> list[AttributeSpec]:
    """Look up the specification of every attribute, in the order given."""
    specs = []
    for attribute in attributes:
        try:
            specs.append(grid.get_attribute(attribute))
        except Exception as err:
            raise LookupError(f"Error resolving Attribute {attribute}: {err}") from err
    return specs


def resolve_all_attributes(grid) -> list[AttributeSpec]:
    """Look up the specification of every attribute of ``grid``."""
    return resolve_attributes(grid, grid.all_attributes())


def attribute_intersect(first, second) -> list[Attribute]:
    """Attributes of ``first`` equal to some attribute of ``second``, in order."""
    second = list(second)
    return [a for a in first if _contains_equal(a, second)]


def attribute_intersect_references(first, second) -> list[Attribute]:
    """Attributes that are the very same objects in both lists."""
    second_ids = {id(a) for a in second}
    seen: set[int] = set()
    result = []
    for attribute in first:
        key = id(attribute)
        if key in second_ids and key not in seen:
            seen.add(key)
            result.append(attribute)
    return result


def attribute_difference(first, second) -> list[Attribute]:
    """Attributes of ``first`` not equal to any attribute of ``second``, in order."""
    second = list(second)
    return [a for a in first if not _contains_equal(a, second)]


def attribute_difference_references(first, second) -> list[Attribute]:
    """Attributes of ``first`` whose objects do not occur in ``second``."""
    second_ids = {id(a) for a in second}
    seen: set[int] = set()
    result = []
    for attribute in first:
        key = id(attribute)
        if key not in second_ids and key not in seen:
            seen.add(key)
            result.append(attribute)
    return result