"""A data grid that stores every attribute value explicitly in byte groups."""

import enum
import mmap
import threading

from .attributes import Attribute, BinaryAttribute, CategoricalAttribute, FloatAttribute
from .attrutil import AttributeSpec, resolve_all_attributes
from .groups import AttributeGroup, BinaryAttributeGroup, FixedAttributeGroup

_PAGE_SIZE = mmap.PAGESIZE
_MAX_DISPLAYED_ROWS = 30


class SortDirection(enum.IntEnum):
    """Direction in which rows are ordered."""

    DESCENDING = 1
    ASCENDING = 2


class DenseInstances:
    """Rows of attribute values held in typed storage groups.

    Attributes are added first; :meth:`extend` then allocates rows, after
    which no further attributes can be added.  Iterating over rows with
    :meth:`iter_rows` yields ``(row_index, values)`` pairs.
    """

    def __init__(self):
        self._lock = threading.RLock()
        self._group_index: dict[str, int] = {}
        self._groups: list[AttributeGroup] = []
        self._fixed = False
        self._class_attrs: dict[AttributeSpec, bool] = {}
        self._max_row = 0
        self._attributes: list[Attribute] = []
        self._float_row_bytes = 0
        self._cat_row_bytes = 0
        self._bin_row_bits = 0

    # Attribute groups

    def _create_group(self, name: str, size: int) -> None:
        if self._fixed:
            raise RuntimeError("Can't add additional Attributes")
        group: AttributeGroup
        if size != 0:
            group = FixedAttributeGroup(size)
        else:
            group = BinaryAttributeGroup()
        self._group_index[name] = len(self._groups)
        self._groups.append(group)

    def create_attribute_group(self, name: str, size: int) -> None:
        """Add a named group; size 0 makes a bit-packed group, otherwise
        each attribute in it takes ``size`` bytes."""
        with self._lock:
            self._create_group(name, size)

    def all_attribute_groups(self) -> dict[str, AttributeGroup]:
        """Return every group keyed by its name."""
        with self._lock:
            return {name: self._groups[i] for name, i in self._group_index.items()}

    def get_attribute_group(self, name: str) -> AttributeGroup:
        """Return the group with the given name."""
        with self._lock:
            try:
                return self._groups[self._group_index[name]]
            except KeyError:
                raise LookupError(f"AttributeGroup '{name}' doesn't exist") from None

    # Attributes

    def add_attribute(self, attribute: Attribute) -> AttributeSpec:
        """Add an attribute to a default group suited to its type."""
        with self._lock:
            if self._fixed:
                raise RuntimeError("Can't add additional Attributes")
            binary = False
            if isinstance(attribute, CategoricalAttribute):
                self._cat_row_bytes += 8
                name = f"CAT{self._cat_row_bytes // _PAGE_SIZE}"
            elif isinstance(attribute, FloatAttribute):
                self._float_row_bytes += 8
                name = f"FLOAT{self._float_row_bytes // _PAGE_SIZE}"
            elif isinstance(attribute, BinaryAttribute):
                self._bin_row_bits += 1
                name = f"BIN{(self._bin_row_bits // 8) // _PAGE_SIZE}"
                binary = True
            else:
                raise TypeError("Unrecognised Attribute type")

            if name not in self._group_index:
                self._create_group(name, 0 if binary else 8)
            index = self._group_index[name]
            group = self._groups[index]
            group.add_attribute(attribute)
            self._attributes.append(attribute)
            return AttributeSpec(index, len(group.attributes()) - 1, attribute)

    def add_attribute_to_attribute_group(self, attribute: Attribute, group: str) -> AttributeSpec:
        """Add an attribute to a named group created beforehand."""
        with self._lock:
            if group not in self._group_index:
                raise LookupError(
                    f"AttributeGroup '{group}' doesn't exist. "
                    "Call create_attribute_group() first"
                )
            index = self._group_index[group]
            target = self._groups[index]
            for position, existing in enumerate(target.attributes()):
                if not existing.compatible(attribute):
                    raise ValueError(
                        f"Attribute {attribute} is not Compatible with {existing} "
                        f"in pond '{group}' (position {position})"
                    )
            target.add_attribute(attribute)
            self._attributes.append(attribute)
            return AttributeSpec(index, len(target.attributes()) - 1, attribute)

    def get_attribute(self, attribute: Attribute) -> AttributeSpec:
        """Return the specification of the stored attribute equal to ``attribute``."""
        with self._lock:
            for pond, group in enumerate(self._groups):
                for position, candidate in enumerate(group.attributes()):
                    if candidate.equals(attribute):
                        return AttributeSpec(pond, position, candidate)
        raise LookupError(f"Couldn't resolve {attribute}")

    def all_attributes(self) -> list[Attribute]:
        """Return every attribute, group by group."""
        with self._lock:
            return [a for group in self._groups for a in group.attributes()]

    def add_class_attribute(self, attribute: Attribute) -> None:
        """Mark an attribute as a class attribute."""
        spec = self.get_attribute(attribute)
        with self._lock:
            self._class_attrs[spec] = True

    def remove_class_attribute(self, attribute: Attribute) -> None:
        """Unmark an attribute as a class attribute."""
        spec = self.get_attribute(attribute)
        with self._lock:
            self._class_attrs[spec] = False

    def all_class_attributes(self) -> list[Attribute]:
        """Return the attributes currently marked as class attributes."""
        with self._lock:
            return [spec.attribute for spec, marked in self._class_attrs.items() if marked]

    # Storage

    def extend(self, rows: int) -> None:
        """Allocate room for ``rows`` more rows; attributes are fixed afterwards."""
        with self._lock:
            for group in self._groups:
                group.resize(rows * group.row_size_in_bytes())
            self._fixed = True
            self._max_row += rows

    def set(self, spec: AttributeSpec, row: int, value: bytes) -> None:
        """Store ``value`` for an attribute at a row."""
        self._groups[spec.pond].set(spec.position, row, value)

    def get(self, spec: AttributeSpec, row: int) -> bytes:
        """Return the stored bytes for an attribute at a row."""
        return self._groups[spec.pond].get(spec.position, row)

    def row_string(self, row: int) -> str:
        """Return the human-readable values of a row, group by group."""
        return " ".join(group.format_row(row) for group in self._groups)

    def iter_rows(self, specs):
        """Yield ``(row_index, values)`` for each row, values in ``specs`` order."""
        specs = list(specs)
        for row in range(self._max_row):
            yield row, [self._groups[s.pond].get(s.position, row) for s in specs]

    def size(self) -> tuple[int, int]:
        """Return the number of attributes and the number of allocated rows."""
        return len(self.all_attributes()), self._max_row

    def swap_rows(self, first: int, second: int) -> None:
        """Exchange the values of two rows."""
        for spec in resolve_all_attributes(self):
            a = self.get(spec, first)
            b = self.get(spec, second)
            self.set(spec, second, a)
            self.set(spec, first, b)

    def __str__(self) -> str:
        specs = resolve_all_attributes(self)
        cols, rows = self.size()
        parts = [
            f"Instances with {rows} row(s) {cols} attribute(s)\n",
            "Attributes: \n",
        ]
        for spec in specs:
            prefix = "*\t" if self._class_attrs.get(spec) else "\t"
            parts.append(f"{prefix}{spec.attribute}\n")
        parts.append("\nData:\n")
        shown = min(rows, _MAX_DISPLAYED_ROWS)
        for row in range(shown):
            values = "".join(
                f"{spec.attribute.get_string_from_sys_val(self.get(spec, row))} "
                for spec in specs
            )
            parts.append(f"\t{values}\n")
        missing = rows - shown
        if missing:
            parts.append(f"\t...\n{missing} row(s) undisplayed")
        else:
            parts.append("All rows displayed")
        return "".join(parts)


def _copy_structure(grid):
    result = DenseInstances()
    old_specs = []
    new_specs = []
    for attribute in grid.all_attributes():
        old_specs.append(grid.get_attribute(attribute))
        new_specs.append(result.add_attribute(attribute))
    for attribute in grid.all_class_attributes():
        result.add_class_attribute(attribute)
    return result, old_specs, new_specs


def new_structural_copy(grid) -> DenseInstances:
    """Return an empty DenseInstances with the same attributes as ``grid``."""
    result, _, _ = _copy_structure(grid)
    return result


def new_dense_copy(grid) -> DenseInstances:
    """Return a DenseInstances holding the same attributes and data as ``grid``."""
    result, old_specs, new_specs = _copy_structure(grid)
    _, rows = grid.size()
    result.extend(rows)
    for row, values in grid.iter_rows(old_specs):
        for spec, value in zip(new_specs, values):
            result.set(spec, row, value)
    return result