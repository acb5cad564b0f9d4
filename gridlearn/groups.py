"""Row-major byte storage for columns of attributes that share a layout."""

from abc import ABC, abstractmethod

from .attributes import Attribute


class AttributeGroup(ABC):
    """A block of storage holding the values of several attributes per row."""

    def __init__(self, size: int):
        self.size = size
        self._attributes: list[Attribute] = []
        self._alloc = bytearray()
        self.max_row = 0

    def add_attribute(self, attribute: Attribute) -> None:
        """Append an attribute as the next column of this group."""
        self._attributes.append(attribute)

    def attributes(self) -> list[Attribute]:
        """Return the attributes of this group in column order."""
        return list(self._attributes)

    @abstractmethod
    def row_size_in_bytes(self) -> int:
        """Return how many bytes one row takes up."""

    def storage(self) -> bytes:
        """Return a copy of the underlying storage."""
        return bytes(self._alloc)

    @abstractmethod
    def get(self, col: int, row: int) -> bytes:
        """Return the stored value at a column and row."""

    @abstractmethod
    def set(self, col: int, row: int, value: bytes) -> None:
        """Store a value at a column and row."""

    def resize(self, add: int) -> None:
        """Grow the storage by ``add`` zeroed bytes."""
        if add < 0:
            raise ValueError(f"cannot shrink storage by {-add} byte(s)")
        self._alloc.extend(bytes(add))

    def format_row(self, row: int) -> str:
        """Return the human-readable values of a row, separated by spaces."""
        return " ".join(
            attribute.get_string_from_sys_val(self.get(col, row))
            for col, attribute in enumerate(self._attributes)
        )

    def _set_storage(self, data) -> None:
        self._alloc = bytearray(data)

    def _note_row(self, row: int) -> None:
        if row + 1 > self.max_row:
            self.max_row = row + 1

    def _check_span(self, offset: int, length: int, col: int, row: int) -> None:
        if offset < 0 or offset + length > len(self._alloc):
            raise IndexError(
                f"row {row}, column {col} lies outside the allocated storage "
                f"of {len(self._alloc)} byte(s)"
            )


class FixedAttributeGroup(AttributeGroup):
    """A group whose attributes each take a fixed number of bytes."""

    def __init__(self, size: int = 8):
        if size <= 0:
            raise ValueError("a fixed attribute group needs a positive size")
        super().__init__(size)

    def row_size_in_bytes(self) -> int:
        return len(self._attributes) * self.size

    def _offset(self, col: int, row: int) -> int:
        return row * self.row_size_in_bytes() + col * self.size

    def get(self, col: int, row: int) -> bytes:
        offset = self._offset(col, row)
        self._check_span(offset, self.size, col, row)
        return bytes(self._alloc[offset : offset + self.size])

    def set(self, col: int, row: int, value: bytes) -> None:
        if len(value) != self.size:
            raise ValueError(
                f"Tried to call set() with {len(value)} bytes, should be {self.size}"
            )
        offset = self._offset(col, row)
        self._check_span(offset, self.size, col, row)
        self._alloc[offset : offset + self.size] = value
        self._note_row(row)

    def __str__(self) -> str:
        return "FixedAttributeGroup"


class BinaryAttributeGroup(AttributeGroup):
    """A group that packs one bit per attribute."""

    def __init__(self):
        super().__init__(0)

    def row_size_in_bytes(self) -> int:
        return (len(self._attributes) + 7) // 8

    def _byte_offset(self, col: int, row: int) -> int:
        return row * self.row_size_in_bytes() + col // 8

    def get(self, col: int, row: int) -> bytes:
        offset = self._byte_offset(col, row)
        self._check_span(offset, 1, col, row)
        return b"\x01" if self._alloc[offset] & (1 << (col % 8)) else b"\x00"

    def set(self, col: int, row: int, value: bytes) -> None:
        offset = self._byte_offset(col, row)
        self._check_span(offset, 1, col, row)
        mask = 1 << (col % 8)
        if value[0] > 0:
            self._alloc[offset] |= mask
        else:
            self._alloc[offset] &= ~mask & 0xFF
        self._note_row(row)

    def __str__(self) -> str:
        return "BinaryAttributeGroup"