"""Saving classifiers and their data to gzip-compressed tar archives."""

import json
import os
import tarfile
from dataclasses import dataclass, field

from .attrjson import deserialize_attribute, serialize_attribute
from .errors import LearnError, describe_error, wrap_error
from .instance_archive import (
    SERIALIZATION_FORMAT_VERSION,
    TarArchiveReader,
    _add_entry,
    deserialize_instances_from_tar,
    serialize_instances_to_tar,
)
from .packing import pack_u64, unpack_u64

_MANIFEST_NAME = "CLS_MANIFEST"
_MANIFEST = SERIALIZATION_FORMAT_VERSION.encode("ascii")


def _join(prefix: str, suffix: str) -> str:
    if prefix == "":
        return suffix
    return f"{prefix}/{suffix}"


@dataclass
class ClassifierMetadata:
    """What is written into METADATA in a classifier archive."""

    format_version: int = 1
    classifier_name: str = ""
    classifier_version: str = ""
    classifier_metadata: dict = field(default_factory=dict)

    def _to_dict(self) -> dict:
        return {
            "format_version": self.format_version,
            "classifier": self.classifier_name,
            "classifier_version": self.classifier_version,
            "classifier_metadata": self.classifier_metadata,
        }

    @classmethod
    def _from_dict(cls, data) -> "ClassifierMetadata":
        if not isinstance(data, dict):
            raise ValueError("METADATA must be a JSON object")
        extra = data.get("classifier_metadata") or {}
        if not isinstance(extra, dict):
            raise ValueError("classifier_metadata must be a JSON object")
        return cls(
            format_version=int(data.get("format_version", 0)),
            classifier_name=str(data.get("classifier", "")),
            classifier_version=str(data.get("classifier_version", "")),
            classifier_metadata=dict(extra),
        )


class ClassifierSerializer:
    """Writes named entries into a classifier archive."""

    def __init__(self, stream, archive: tarfile.TarFile):
        self._stream = stream
        self._archive = archive
        self._closed = False

    def __enter__(self) -> "ClassifierSerializer":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def close(self) -> None:
        """Finish the archive and close the file."""
        if self._closed:
            return
        self._closed = True
        try:
            self._archive.close()
            self._stream.flush()
            os.fsync(self._stream.fileno())
        finally:
            self._stream.close()

    def prefix(self, prefix: str, suffix: str) -> str:
        """Join an entry prefix and name."""
        return _join(prefix, suffix)

    def write_bytes_for_key(self, key: str, data: bytes) -> None:
        """Add an entry holding ``data``."""
        try:
            _add_entry(self._archive, key, bytes(data))
        except (OSError, tarfile.TarError) as err:
            raise OSError(f"Could not write data for '{key}': {err}") from err

    def write_u64_for_key(self, key: str, value: int) -> None:
        """Add an entry holding the 8 bytes of an unsigned integer."""
        self.write_bytes_for_key(key, pack_u64(value))

    def write_json_for_key(self, key: str, value) -> None:
        """Add an entry holding ``value`` encoded as JSON."""
        self.write_bytes_for_key(key, json.dumps(value).encode("utf-8"))

    def write_attribute_for_key(self, key: str, attribute) -> None:
        """Add an entry holding a serialised attribute."""
        self.write_bytes_for_key(key, serialize_attribute(attribute))

    def write_attributes_for_key(self, key: str, attributes) -> None:
        """Add a count entry and one entry per attribute under ``key``."""
        attributes = list(attributes)
        try:
            self.write_u64_for_key(self.prefix(key, "ATTR_COUNT"), len(attributes))
        except OSError as err:
            raise describe_error("Unable to write ATTR_COUNT", err) from err
        for index, attribute in enumerate(attributes):
            try:
                self.write_attribute_for_key(self.prefix(key, str(index)), attribute)
            except OSError as err:
                raise describe_error("Unable to write Attribute", err) from err

    def write_instances_for_key(self, key: str, grid, include_data: bool) -> None:
        """Add the entries describing ``grid``, named with ``key`` as prefix."""
        serialize_instances_to_tar(grid, self._archive, key, include_data)

    def write_metadata_at_prefix(self, prefix: str, metadata: ClassifierMetadata) -> None:
        """Add a METADATA entry under ``prefix``."""
        self.write_json_for_key(self.prefix(prefix, "METADATA"), metadata._to_dict())


class ClassifierDeserializer:
    """Reads named entries from a classifier archive."""

    def __init__(self, stream):
        self._stream = stream
        self._reader = TarArchiveReader(stream)
        self.metadata = ClassifierMetadata()

    def __enter__(self) -> "ClassifierDeserializer":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def close(self) -> None:
        """Close the underlying file."""
        self._stream.close()

    def prefix(self, prefix: str, suffix: str) -> str:
        """Join an entry prefix and name."""
        return _join(prefix, suffix)

    def read_metadata_at_prefix(self, prefix: str) -> ClassifierMetadata:
        """Read the METADATA entry under ``prefix``."""
        return ClassifierMetadata._from_dict(
            self.get_json_for_key(self.prefix(prefix, "METADATA"))
        )

    def get_bytes_for_key(self, key: str) -> bytes:
        """Return the contents of an entry."""
        return self._reader.get_named_file(key)

    def get_string_for_key(self, key: str) -> str:
        """Return the contents of an entry as text."""
        return self.get_bytes_for_key(key).decode("utf-8")

    def get_json_for_key(self, key: str):
        """Return the decoded JSON contents of an entry."""
        return json.loads(self.get_bytes_for_key(key))

    def get_instances_for_key(self, key: str):
        """Rebuild instances stored with ``key`` as prefix."""
        return deserialize_instances_from_tar(self._reader, key)

    def get_u64_for_key(self, key: str) -> int:
        """Return an unsigned integer stored in an entry."""
        return unpack_u64(self.get_bytes_for_key(key))

    def get_attribute_for_key(self, key: str):
        """Return the attribute stored in an entry."""
        try:
            data = self.get_bytes_for_key(key)
        except LearnError as err:
            raise wrap_error(err) from err
        try:
            return deserialize_attribute(data)
        except ValueError as err:
            raise wrap_error(err) from err

    def get_attributes_for_key(self, key: str) -> list:
        """Return the attribute list stored under ``key``."""
        try:
            count = self.get_u64_for_key(self.prefix(key, "ATTR_COUNT"))
        except (LearnError, ValueError) as err:
            raise describe_error("Unable to read ATTR_COUNT", err) from err
        result = []
        for index in range(count):
            try:
                result.append(self.get_attribute_for_key(self.prefix(key, str(index))))
            except LearnError as err:
                raise describe_error("Unable to read Attribute", err) from err
        return result


def create_serialized_classifier_stub(path, metadata: ClassifierMetadata) -> ClassifierSerializer:
    """Create (or truncate) an archive at ``path`` holding the manifest and metadata."""
    stream = open(path, "w+b")
    try:
        archive = tarfile.open(fileobj=stream, mode="w:gz")
        serializer = ClassifierSerializer(stream, archive)
        try:
            _add_entry(archive, _MANIFEST_NAME, _MANIFEST)
        except (OSError, tarfile.TarError) as err:
            raise OSError(f"Could not write CLS_MANIFEST: {err}") from err
        try:
            serializer.write_metadata_at_prefix("", metadata)
        except (TypeError, ValueError) as err:
            raise ValueError(f"JSON marshal error: {err}") from err
    except BaseException:
        stream.close()
        raise
    return serializer


def read_serialized_classifier_stub(path) -> ClassifierDeserializer:
    """Open an archive written by :func:`create_serialized_classifier_stub`."""
    try:
        stream = open(path, "rb")
    except OSError as err:
        raise describe_error("Can't open file", err) from err
    deserializer = ClassifierDeserializer(stream)
    try:
        try:
            manifest = deserializer.get_bytes_for_key(_MANIFEST_NAME)
        except LearnError as err:
            raise describe_error("Error reading CLS_MANIFEST", err) from err
        if manifest != _MANIFEST:
            raise ValueError(
                f"Unsupported CLS_MANIFEST: {manifest.decode('utf-8', 'replace')}"
            )
        try:
            metadata = deserializer.read_metadata_at_prefix("")
        except (LearnError, ValueError) as err:
            raise ValueError(f"Error whilst reading METADATA: {err}") from err
        if metadata.format_version != 1:
            raise ValueError("METADATA: wrong format_version for this version of gridlearn")
        deserializer.metadata = metadata
    except BaseException:
        stream.close()
        raise
    return deserializer