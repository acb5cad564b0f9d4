"""Reading comma-separated data into :class:`DenseInstances`.

Every public function takes either a path or an open, seekable text
stream.  Paths are opened and closed by the function itself.
"""

import contextlib
import csv
import os
import re

from .attributes import Attribute, BinaryAttribute, CategoricalAttribute, FloatAttribute
from .attrutil import resolve_attributes
from .dense import DenseInstances, new_structural_copy

_NUMBER_RE = re.compile(r"[0-9]+(?:.[0-9]+)?")
_FLOAT_RE = re.compile(r"[-+]?[0-9]*\.?[0-9]+(?:[eE][-+]?[0-9]+)?")
_PRECISION_SAMPLE_LINES = 6


@contextlib.contextmanager
def _open_source(source):
    if isinstance(source, (str, os.PathLike)):
        with open(source, newline="", encoding="utf-8") as stream:
            yield stream
    else:
        yield source


def _records(stream):
    """Yield the non-empty CSV records of ``stream`` from its start.

    Every record must have as many fields as the first one.
    """
    stream.seek(0)
    reader = csv.reader(stream)
    width = None
    for record in reader:
        if not record:
            continue
        if width is None:
            width = len(record)
        elif len(record) != width:
            raise csv.Error(
                f"record on line {reader.line_num}: wrong number of fields "
                f"(expected {width}, got {len(record)})"
            )
        yield record


def _next_record(records) -> list[str]:
    try:
        return next(records)
    except StopIteration:
        raise ValueError("no CSV record to read") from None


def _count_rows(stream) -> int:
    return sum(1 for _ in _records(stream))


def _estimate_precision(stream) -> int:
    stream.seek(0)
    best = 0
    counted = 0
    for raw in stream:
        if counted >= _PRECISION_SAMPLE_LINES:
            break
        line = raw.removesuffix("\n").removesuffix("\r")
        if not line or line[0] in "@%":
            continue
        for match in _NUMBER_RE.findall(line):
            parts = match.split(".")
            if len(parts) == 2:
                best = max(best, len(parts[1]))
        counted += 1
    return best


def _sniff_names(stream, has_headers: bool) -> list[str]:
    headers = _next_record(_records(stream))
    if has_headers:
        return [header.strip() for header in headers]
    return [str(i) for i in range(len(headers))]


def _sniff_types(stream, has_headers: bool) -> list[Attribute]:
    records = _records(stream)
    if has_headers:
        _next_record(records)
    columns = _next_record(records)
    attributes: list[Attribute] = [
        FloatAttribute("") if _FLOAT_RE.fullmatch(entry.strip(" ")) else CategoricalAttribute()
        for entry in columns
    ]
    precision = _estimate_precision(stream)
    for attribute in attributes:
        if isinstance(attribute, FloatAttribute):
            attribute.precision = precision
    return attributes


def _get_attributes(stream, has_headers: bool) -> list[Attribute]:
    attributes = _sniff_types(stream, has_headers)
    for attribute, name in zip(attributes, _sniff_names(stream, has_headers)):
        attribute.name = name
    return attributes


def _build(stream, attributes, has_headers: bool, grid) -> None:
    row = 0
    try:
        specs = resolve_attributes(grid, attributes)
        skip_header = has_headers
        for record in _records(stream):
            if skip_header:
                skip_header = False
                continue
            if len(record) > len(specs):
                raise IndexError(
                    f"record has {len(record)} field(s) but only {len(specs)} attribute(s)"
                )
            for spec, value in zip(specs, record):
                if value == "":
                    continue
                grid.set(spec, row, spec.attribute.get_sys_val_from_string(value.strip()))
            row += 1
    except IndexError:
        raise
    except (ValueError, LookupError) as err:
        raise ValueError(f"error at line {row} (error {err})") from err


def _data_row_count(stream, has_headers: bool) -> int:
    rows = _count_rows(stream)
    return rows - 1 if has_headers else rows


def parse_csv_get_rows(source) -> int:
    """Return the number of records, a header row included."""
    with _open_source(source) as stream:
        return _count_rows(stream)


def estimate_precision(source) -> int:
    """Return the most digits seen after a decimal point in the first data lines."""
    with _open_source(source) as stream:
        return _estimate_precision(stream)


def parse_csv_get_attributes(source, has_headers: bool) -> list[Attribute]:
    """Return typed and named attributes for every column."""
    with _open_source(source) as stream:
        return _get_attributes(stream, has_headers)


def sniff_attribute_names(source, has_headers: bool) -> list[str]:
    """Return the header names, or column numbers if there is no header."""
    with _open_source(source) as stream:
        return _sniff_names(stream, has_headers)


def sniff_attribute_types(source, has_headers: bool) -> list[Attribute]:
    """Return unnamed attributes typed from the first data row."""
    with _open_source(source) as stream:
        return _sniff_types(stream, has_headers)


def build_instances_from_csv(source, attributes, has_headers: bool, grid) -> None:
    """Fill an allocated grid with the values of the CSV data rows.

    Empty fields are left untouched.
    """
    with _open_source(source) as stream:
        _build(stream, attributes, has_headers, grid)


def parse_csv_to_instances(source, has_headers: bool) -> DenseInstances:
    """Read CSV data into new instances; the last column is the class."""
    with _open_source(source) as stream:
        rows = _data_row_count(stream, has_headers)
        attributes = _get_attributes(stream, has_headers)
        grid = DenseInstances()
        for attribute in attributes:
            grid.add_attribute(attribute)
        grid.extend(rows)
        _build(stream, attributes, has_headers, grid)
        grid.add_class_attribute(attributes[-1])
        return grid


def match_attributes(attributes, template_attributes) -> list[Attribute]:
    """Replace each attribute by the last template attribute that is equal
    to it or has its name."""
    templates = list(template_attributes)
    matched = []
    for attribute in attributes:
        chosen = attribute
        for template in templates:
            if attribute.equals(template) or attribute.name == template.name:
                chosen = template
        matched.append(chosen)
    return matched


def parse_csv_to_templated_instances(source, has_headers: bool, template) -> DenseInstances:
    """Read CSV data using the attributes of an existing grid."""
    with _open_source(source) as stream:
        rows = _data_row_count(stream, has_headers)
        attributes = match_attributes(
            _get_attributes(stream, has_headers), template.all_attributes()
        )
        grid = new_structural_copy(template)
        grid.extend(rows)
        _build(stream, attributes, has_headers, grid)
        for attribute in template.all_class_attributes():
            grid.add_class_attribute(attribute)
        return grid


def parse_csv_to_instances_with_attribute_groups(
    source, attr_groups, class_attr_groups, attr_overrides, has_headers: bool
) -> DenseInstances:
    """Read CSV data, placing named attributes into named groups.

    ``attr_groups`` and ``class_attr_groups`` map attribute names to group
    names; attributes named in ``class_attr_groups`` become class
    attributes.  ``attr_overrides`` maps column numbers to attributes used
    instead of the sniffed ones.
    """
    attr_groups = dict(attr_groups or {})
    class_attr_groups = dict(class_attr_groups or {})
    attr_overrides = dict(attr_overrides or {})

    with _open_source(source) as stream:
        rows = _count_rows(stream)
        attributes = _get_attributes(stream, has_headers)
        attributes = [attr_overrides.get(i, a) for i, a in enumerate(attributes)]

        grid = DenseInstances()

        group_sizes: dict[str, int] = {}
        combined: dict[str, str] = {}
        for name, group in attr_groups.items():
            group_sizes[group] = 0
            combined[name] = group
        for name, group in class_attr_groups.items():
            group_sizes[group] = 8
            combined[name] = group

        for attribute in attributes:
            group = combined.get(attribute.name)
            if group is not None:
                group_sizes[group] = 0 if isinstance(attribute, BinaryAttribute) else 8

        for group, size in group_sizes.items():
            grid.create_attribute_group(group, size)

        for attribute in attributes:
            group = combined.get(attribute.name)
            if group is not None:
                grid.add_attribute_to_attribute_group(attribute, group)
            else:
                grid.add_attribute(attribute)
            if attribute.name in class_attr_groups:
                grid.add_class_attribute(attribute)

        grid.extend(rows)
        _build(stream, attributes, has_headers, grid)
        return grid