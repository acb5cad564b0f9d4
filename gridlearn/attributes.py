"""Typed column descriptions and their byte-level value encodings."""

import enum
import math
from abc import ABC, abstractmethod

from .packing import pack_float, pack_u64, unpack_float, unpack_u64


class AttributeType(enum.IntEnum):
    """General kind of an attribute."""

    CATEGORICAL = 0
    FLOAT64 = 1
    BINARY = 2


def _parse_float(value: str) -> float:
    if value != value.strip() or "_" in value:
        raise ValueError(f"invalid float syntax: {value!r}")
    try:
        return float(value)
    except ValueError:
        raise ValueError(f"invalid float syntax: {value!r}") from None


def _format_float(value: float, precision: int) -> str:
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "+Inf" if value > 0 else "-Inf"
    return f"{value:.{precision}f}"


class Attribute(ABC):
    """A named, typed column of a data grid.

    Attributes compare and hash by identity; use :meth:`equals` for
    semantic equality.
    """

    attr_type: AttributeType

    def __init__(self, name: str = ""):
        self.name = name

    @abstractmethod
    def get_sys_val_from_string(self, value: str) -> bytes:
        """Convert a human-readable value to its stored bytes."""

    @abstractmethod
    def get_string_from_sys_val(self, value: bytes) -> str:
        """Convert stored bytes to a human-readable value."""

    @abstractmethod
    def equals(self, other: "Attribute") -> bool:
        """Whether ``other`` has the same type, name and (if any) values."""

    @abstractmethod
    def compatible(self, other: "Attribute") -> bool:
        """Whether ``other`` can share storage with this attribute."""

    @abstractmethod
    def to_json(self) -> dict:
        """Return a JSON-ready dictionary describing this attribute."""

    @abstractmethod
    def load_json(self, data) -> None:
        """Load type-specific settings from the ``attr`` part of the JSON form."""

    def __repr__(self) -> str:
        return str(self)


class BinaryAttribute(Attribute):
    """An attribute that holds only 0 or 1, stored as a single byte."""

    attr_type = AttributeType.BINARY

    def get_sys_val_from_string(self, value: str) -> bytes:
        return bytes([1 if _parse_float(value) > 0 else 0])

    def get_string_from_sys_val(self, value: bytes) -> str:
        return "1" if value[0] > 0 else "0"

    def equals(self, other: Attribute) -> bool:
        return isinstance(other, BinaryAttribute) and other.name == self.name

    def compatible(self, other: Attribute) -> bool:
        return isinstance(other, BinaryAttribute)

    def to_json(self) -> dict:
        return {"type": "binary", "name": self.name}

    def load_json(self, data) -> None:
        return None

    def __str__(self) -> str:
        return f"BinaryAttribute({self.name})"


class CategoricalAttribute(Attribute):
    """An attribute holding discrete string values, stored as 8-byte indices."""

    attr_type = AttributeType.CATEGORICAL

    def __init__(self, name: str = "", values=None):
        super().__init__(name)
        self._values: list[str] = list(values) if values is not None else []

    def get_values(self) -> list[str]:
        """Return the values defined so far, in index order."""
        return list(self._values)

    def get_sys_val(self, value: str):
        """Return the stored bytes for ``value``, or ``None`` if it is unknown."""
        try:
            return pack_u64(self._values.index(value))
        except ValueError:
            return None

    def get_usr_val(self, sys_val: bytes) -> str:
        """Return the value at the index encoded in ``sys_val``."""
        return self._values[unpack_u64(sys_val)]

    def get_sys_val_from_string(self, value: str) -> bytes:
        """Return the stored bytes for ``value``, adding it if it is new."""
        try:
            index = self._values.index(value)
        except ValueError:
            self._values.append(value)
            index = len(self._values) - 1
        return pack_u64(index)

    def get_string_from_sys_val(self, value: bytes) -> str:
        index = unpack_u64(value)
        if index >= len(self._values):
            raise IndexError(f"Out of range: {index} in {len(self._values)} ({self})")
        return self._values[index]

    def equals(self, other: Attribute) -> bool:
        return (
            isinstance(other, CategoricalAttribute)
            and other.name == self.name
            and other._values == self._values
        )

    def compatible(self, other: Attribute) -> bool:
        return isinstance(other, CategoricalAttribute) and other._values == self._values

    def to_json(self) -> dict:
        return {
            "type": "categorical",
            "name": self.name,
            "attr": {"values": list(self._values)},
        }

    def load_json(self, data) -> None:
        if not isinstance(data, dict) or not isinstance(data.get("values"), list):
            raise ValueError("categorical attribute needs a list of values")
        self._values.extend(str(v) for v in data["values"])

    def __str__(self) -> str:
        return f'CategoricalAttribute("{self.name}", [{" ".join(self._values)}])'


class FloatAttribute(Attribute):
    """An attribute holding float64 values, printed with a fixed precision."""

    attr_type = AttributeType.FLOAT64

    def __init__(self, name: str = "", precision: int = 2):
        super().__init__(name)
        self.precision = precision

    def check_sys_val_from_string(self, value: str) -> bytes:
        """Parse ``value`` as a float; raise ``ValueError`` if it is not one."""
        return pack_float(_parse_float(value))

    def get_sys_val_from_string(self, value: str) -> bytes:
        return self.check_sys_val_from_string(value)

    def get_float_from_sys_val(self, value: bytes) -> float:
        """Decode stored bytes into a float."""
        return unpack_float(value)

    def get_string_from_sys_val(self, value: bytes) -> str:
        return _format_float(unpack_float(value), self.precision)

    def equals(self, other: Attribute) -> bool:
        return isinstance(other, FloatAttribute) and other.name == self.name

    def compatible(self, other: Attribute) -> bool:
        return isinstance(other, FloatAttribute)

    def to_json(self) -> dict:
        return {
            "type": "float",
            "name": self.name,
            "attr": {"precision": self.precision},
        }

    def load_json(self, data) -> None:
        if not isinstance(data, dict) or "precision" not in data:
            raise ValueError("Precision must be specified")
        self.precision = int(data["precision"])

    def __str__(self) -> str:
        return f"FloatAttribute({self.name})"