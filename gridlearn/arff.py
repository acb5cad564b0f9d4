"""Reading and writing data in the dense ARFF text format."""

import csv

from .attributes import Attribute, CategoricalAttribute, FloatAttribute
from .attrutil import non_class_attributes, resolve_attributes
from .csvio import estimate_precision
from .dense import DenseInstances


def _lines(stream):
    for raw in stream:
        yield raw.removesuffix("\n").removesuffix("\r")


def write_dense_arff(stream, grid, attributes, relation: str) -> None:
    """Write ``grid`` to a text stream as dense ARFF, columns in ``attributes`` order."""
    stream.write(f"@relation {relation}\n\n")
    specs = resolve_attributes(grid, attributes)
    for spec in specs:
        attribute = spec.attribute
        kind = "real"
        if isinstance(attribute, CategoricalAttribute):
            kind = "{" + ", ".join(attribute.get_values()) + "}"
        stream.write(f"@attribute {attribute.name} {kind}\n")
    stream.write("\n@data\n")
    for _, values in grid.iter_rows(specs):
        stream.write(
            ",".join(
                spec.attribute.get_string_from_sys_val(value)
                for spec, value in zip(specs, values)
            )
        )
        stream.write("\n")


def serialize_instances_to_dense_arff_with_attributes(grid, attributes, path, relation: str) -> None:
    """Write ``grid`` as dense ARFF to an existing file, header in the given order."""
    with open(path, "r+", encoding="utf-8", newline="") as stream:
        write_dense_arff(stream, grid, attributes, relation)
        stream.truncate()


def serialize_instances_to_dense_arff(grid, path, relation: str) -> None:
    """Write ``grid`` as dense ARFF to an existing file, class attributes last."""
    attributes = non_class_attributes(grid) + list(grid.all_class_attributes())
    serialize_instances_to_dense_arff_with_attributes(grid, attributes, path, relation)


def parse_arff_get_rows(path) -> int:
    """Return the number of data rows in an ARFF file."""
    counting = False
    count = 0
    with open(path, encoding="utf-8") as stream:
        for line in _lines(stream):
            if not line:
                continue
            if counting:
                if line[0] in "@%":
                    continue
                count += 1
            elif line[0] == "@" and line.lower() == "@data":
                counting = True
    return count


def _categories(fields: list[str], line: str) -> list[str]:
    if not fields[-1].endswith("}"):
        raise ValueError(f"Missing categorical bracket on line '{line}'")
    cats = list(fields[2:]) if len(fields) > 3 else fields[2].split(",")
    cats[0] = cats[0][1:]
    cats[-1] = cats[-1][:-1]
    cleaned = []
    for category in cats:
        category = category.strip()
        if category.endswith(","):
            category = category[:-1]
        cleaned.append(category)
    return cleaned


def _parse_attribute_line(line: str):
    if not line or line[0] != "@":
        return None
    fields = line.split()
    if len(fields) < 3 or fields[0].lower() != "@attribute":
        return None
    attribute: Attribute
    if fields[2].lower() == "real":
        attribute = FloatAttribute(precision=0)
    elif fields[2].startswith("{"):
        attribute = CategoricalAttribute()
        for category in _categories(fields, line):
            attribute.get_sys_val_from_string(category)
    else:
        raise ValueError(f"Unsupported Attribute type {fields[2]} on line '{line}'")
    attribute.name = fields[1]
    return attribute


def parse_arff_get_attributes(path) -> list[Attribute]:
    """Return the attributes declared in an ARFF header."""
    attributes = []
    with open(path, encoding="utf-8") as stream:
        for line in _lines(stream):
            attribute = _parse_attribute_line(line)
            if attribute is not None:
                attributes.append(attribute)
    precision = estimate_precision(path)
    for attribute in attributes:
        if isinstance(attribute, FloatAttribute):
            attribute.precision = precision
    return attributes


def build_instances_from_dense_arff(stream, attributes, grid) -> None:
    """Fill an allocated grid with the data rows of an ARFF text stream."""
    row = 0
    try:
        specs = resolve_attributes(grid, attributes)
        reading = False
        for line in _lines(stream):
            if line.startswith("%"):
                continue
            if not reading:
                if line.strip().lower() == "@data":
                    reading = True
                continue
            for record in csv.reader([line]):
                if not record:
                    continue
                if len(record) > len(specs):
                    raise IndexError(
                        f"record has {len(record)} field(s) but only {len(specs)} attribute(s)"
                    )
                for spec, raw in zip(specs, record):
                    value = raw.strip()
                    attribute = spec.attribute
                    if (
                        isinstance(attribute, CategoricalAttribute)
                        and attribute.get_sys_val(value) is None
                    ):
                        raise ValueError(f"Unexpected class on line '{line}'")
                    grid.set(spec, row, attribute.get_sys_val_from_string(value))
                row += 1
    except IndexError:
        raise
    except (ValueError, LookupError) as err:
        raise ValueError(f"Error at line {row} (error {err})") from err


def parse_dense_arff_to_instances(path) -> DenseInstances:
    """Read a dense ARFF file; the last declared attribute is the class."""
    rows = parse_arff_get_rows(path)
    attributes = parse_arff_get_attributes(path)
    if not attributes:
        raise ValueError(f"no attributes declared in {path}")
    grid = DenseInstances()
    for attribute in attributes:
        grid.add_attribute(attribute)
    grid.add_class_attribute(attributes[-1])
    grid.extend(rows)
    with open(path, encoding="utf-8") as stream:
        build_instances_from_dense_arff(stream, attributes, grid)
    return grid