"""JSON serialisation of attributes."""

import json

from .attributes import Attribute, BinaryAttribute, CategoricalAttribute, FloatAttribute
from .errors import wrap_error

_ATTRIBUTE_TYPES = {
    "binary": BinaryAttribute,
    "float": FloatAttribute,
    "categorical": CategoricalAttribute,
}


def _dumps(value) -> bytes:
    return json.dumps(value, sort_keys=True, separators=(",", ":")).encode("utf-8")


def marshal_attribute(attribute: Attribute) -> dict:
    """Return the JSON form of an attribute as a plain dictionary."""
    return json.loads(_dumps(attribute.to_json()))


def serialize_attribute(attribute: Attribute) -> bytes:
    """Encode an attribute as JSON bytes."""
    return _dumps(attribute.to_json())


def serialize_attributes(attributes) -> bytes:
    """Encode a list of attributes as a JSON array."""
    return _dumps([attribute.to_json() for attribute in attributes])


def _attribute_from_mapping(raw) -> Attribute:
    if not isinstance(raw, dict):
        raise ValueError(f"attribute description must be a JSON object, got {raw!r}")
    kind = raw.get("type", "")
    try:
        attribute = _ATTRIBUTE_TYPES[kind]()
    except (KeyError, TypeError):
        raise ValueError(f"Unrecognised Attribute format: {kind}") from None
    try:
        attribute.load_json(raw.get("attr"))
    except ValueError as err:
        raise ValueError(f"Can't deserialize: {raw} (error: {err})") from err
    name = raw.get("name", "")
    attribute.name = name if isinstance(name, str) else str(name)
    return attribute


def deserialize_attribute(data) -> Attribute:
    """Decode an attribute from JSON bytes or text."""
    return _attribute_from_mapping(json.loads(data))


def deserialize_attributes(data) -> list[Attribute]:
    """Decode a JSON array of attributes."""
    try:
        raw = json.loads(data)
    except ValueError as err:
        raise ValueError(f"Failed to deserialize attributes: {err}") from err
    if not isinstance(raw, list):
        raise ValueError("Failed to deserialize attributes: expected a JSON array")
    return [_attribute_from_mapping(item) for item in raw]


def replace_deserialized_attribute(deserialized: Attribute, grid) -> Attribute:
    """Return the attribute of ``grid`` equal to ``deserialized``."""
    for attribute in grid.all_attributes():
        if attribute.equals(deserialized):
            return attribute
    raise wrap_error(LookupError(f"Unable to match {deserialized} in {grid}"))


def replace_deserialized_attributes(deserialized, grid) -> list[Attribute]:
    """Match every deserialized attribute with its counterpart in ``grid``."""
    return [replace_deserialized_attribute(attribute, grid) for attribute in deserialized]