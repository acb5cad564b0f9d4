"""A read-only data grid backed by a two-dimensional float matrix."""

import numpy as np

from .attributes import Attribute, FloatAttribute
from .attrutil import AttributeSpec, resolve_all_attributes
from .packing import pack_float

_MAX_DISPLAYED_ROWS = 30


class MatrixInstances:
    """Float rows taken from a matrix; every column is a FloatAttribute
    named after its index."""

    def __init__(self, rows: int, cols: int, data):
        matrix = np.asarray(data, dtype=float)
        if matrix.ndim != 2:
            raise ValueError("data must be a two-dimensional matrix")
        if matrix.shape[0] < rows or matrix.shape[1] < cols:
            raise ValueError(
                f"matrix of shape {matrix.shape} is smaller than {rows}x{cols}"
            )
        self.data = matrix
        self._rows = rows
        self._attributes: list[Attribute] = [FloatAttribute(str(i)) for i in range(cols)]
        self._class_attrs: dict[int, bool] = {}

    def get_attribute(self, attribute: Attribute) -> AttributeSpec:
        """Return the specification of the column equal to ``attribute``."""
        for position, candidate in enumerate(self._attributes):
            if candidate.equals(attribute):
                return AttributeSpec(0, position, candidate)
        raise LookupError("Couldn't find a matching attribute")

    def all_attributes(self) -> list[Attribute]:
        """Return every column attribute."""
        return list(self._attributes)

    def add_class_attribute(self, attribute: Attribute) -> None:
        """Mark a column as a class attribute."""
        self._class_attrs[self.get_attribute(attribute).position] = True

    def remove_class_attribute(self, attribute: Attribute) -> None:
        """Unmark a column as a class attribute."""
        self._class_attrs[self.get_attribute(attribute).position] = False

    def all_class_attributes(self) -> list[Attribute]:
        """Return the columns marked as class attributes."""
        return [self._attributes[i] for i, marked in self._class_attrs.items() if marked]

    def get(self, spec: AttributeSpec, row: int) -> bytes:
        """Return the stored bytes of a value."""
        return pack_float(float(self.data[row, spec.position]))

    def iter_rows(self, specs):
        """Yield ``(row_index, values)`` for each row, values in ``specs`` order."""
        specs = list(specs)
        for row in range(self._rows):
            yield row, [pack_float(float(self.data[row, s.position])) for s in specs]

    def row_string(self, row: int) -> str:
        """Return the row number as text."""
        return str(row)

    def size(self) -> tuple[int, int]:
        """Return the number of attributes and the number of rows."""
        return len(self._attributes), self._rows

    def __str__(self) -> str:
        specs = resolve_all_attributes(self)
        cols, rows = self.size()
        parts = [
            f"Instances with {rows} row(s) {cols} attribute(s)\n",
            "Attributes: \n",
        ]
        for index, spec in enumerate(specs):
            prefix = "*\t" if self._class_attrs.get(index) else "\t"
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


def instances_from_matrix(rows: int, cols: int, data) -> MatrixInstances:
    """Wrap a ``rows`` by ``cols`` matrix as a data grid."""
    return MatrixInstances(rows, cols, data)