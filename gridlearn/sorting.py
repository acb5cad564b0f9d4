"""Reordering the rows of dense instances by the values of some attributes."""

from .attrutil import resolve_all_attributes
from .dense import DenseInstances, SortDirection


def _sort_key(values) -> bytes:
    key = bytearray(b"".join(values))
    if key:
        key[0] ^= 0x80
    return bytes(reversed(key))


def _ascending_order(grid, specs) -> list[int]:
    """Row numbers in the order a byte-wise radix sort would place them.

    Keys are built from the attributes in reverse order, so the first
    attribute is the most significant; ties keep their original order.
    """
    keys = [_sort_key(values) for _, values in grid.iter_rows(list(reversed(list(specs))))]
    return sorted(range(len(keys)), key=keys.__getitem__)


def sort(grid, direction, specs):
    """Sort the rows of ``grid`` in place by the attributes in ``specs``.

    The first attribute is the primary key.  Values are compared by their
    stored bytes, which orders non-negative floats and category indices.
    Returns ``grid``.
    """
    if not isinstance(grid, DenseInstances):
        raise TypeError("sorting is only supported for DenseInstances")
    order = _ascending_order(grid, specs)
    if direction == SortDirection.DESCENDING:
        order.reverse()
    all_specs = resolve_all_attributes(grid)
    snapshot = [values for _, values in grid.iter_rows(all_specs)]
    for new_row, old_row in enumerate(order):
        if new_row == old_row:
            continue
        for spec, value in zip(all_specs, snapshot[old_row]):
            grid.set(spec, new_row, value)
    return grid