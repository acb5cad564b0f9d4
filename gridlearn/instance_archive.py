"""Storing instances in gzip-compressed tar archives and as CSV."""

import csv
import io
import logging
import os
import tarfile

from .attrjson import deserialize_attributes, serialize_attributes
from .attrutil import non_class_attributes, resolve_attributes
from .dense import DenseInstances
from .errors import LearnError, describe_error, wrap_error
from .packing import pack_u64, unpack_u64

SERIALIZATION_FORMAT_VERSION = "gridlearn 1.0"
_MANIFEST = SERIALIZATION_FORMAT_VERSION.encode("ascii")
_READ_ERRORS = (tarfile.TarError, OSError, EOFError)

_log = logging.getLogger(__name__)


class TarArchiveReader:
    """Access by name to the entries of a seekable gzip-compressed tar stream."""

    def __init__(self, stream):
        self.stream = stream

    def open(self) -> tarfile.TarFile:
        """Return a tar reader positioned at the start of the archive."""
        self.stream.seek(0)
        try:
            return tarfile.open(fileobj=self.stream, mode="r:gz")
        except _READ_ERRORS as err:
            raise wrap_error(err) from err

    def get_named_file(self, name: str) -> bytes:
        """Return the contents of the first entry called ``name``."""
        try:
            with self.open() as archive:
                for member in archive:
                    if member.name != name:
                        continue
                    extracted = archive.extractfile(member)
                    data = extracted.read() if extracted is not None else b""
                    if len(data) < member.size:
                        _log.warning(
                            "Size mismatch, got %d byte(s) for %s, expected %d",
                            len(data), member.name, member.size,
                        )
                    return data
        except _READ_ERRORS as err:
            raise wrap_error(err) from err
        raise wrap_error(LookupError(f"Not found (looking for {name})"))


def _add_entry(archive: tarfile.TarFile, name: str, data: bytes) -> None:
    info = tarfile.TarInfo(name)
    info.size = len(data)
    archive.addfile(info, io.BytesIO(data))


def _ordered_attributes(grid):
    return non_class_attributes(grid) + list(grid.all_class_attributes())


def serialize_instances_to_tar(grid, archive, prefix: str, include_data: bool) -> None:
    """Write ``grid`` as MANIFEST, DIMS, CATTRS, ATTRS and DATA entries.

    Entry names start with ``prefix``.  Without data the DATA entry is empty.
    """

    def p(name: str) -> str:
        return f"{prefix}{name}"

    _add_entry(archive, p("MANIFEST"), _MANIFEST)
    attr_count, row_count = grid.size()
    _add_entry(archive, p("DIMS"), pack_u64(attr_count) + pack_u64(row_count))

    class_attributes = list(grid.all_class_attributes())
    normal_attributes = non_class_attributes(grid)
    _add_entry(archive, p("CATTRS"), serialize_attributes(class_attributes))
    _add_entry(archive, p("ATTRS"), serialize_attributes(normal_attributes))

    all_attributes = normal_attributes + class_attributes
    if len(all_attributes) != attr_count:
        raise wrap_error(
            ValueError(
                f"Error resolving all Attributes: resolved {len(all_attributes)}, "
                f"expected {attr_count}"
            )
        )
    data = b""
    if include_data:
        specs = resolve_attributes(grid, all_attributes)
        data = b"".join(b"".join(values) for _, values in grid.iter_rows(specs))
    _add_entry(archive, p("DATA"), data)


def serialize_instances(grid, stream) -> None:
    """Write ``grid`` to a binary stream as a gzip-compressed tar archive."""
    with tarfile.open(fileobj=stream, mode="w:gz") as archive:
        serialize_instances_to_tar(grid, archive, "", True)


def serialize_instances_to_file(grid, path) -> None:
    """Write ``grid`` as an archive into an existing file."""
    with open(path, "r+b") as stream:
        serialize_instances(grid, stream)
        stream.truncate()
        stream.flush()
        os.fsync(stream.fileno())


def write_instances_csv(grid, stream) -> None:
    """Write a header row and every data row of ``grid`` as CSV, class columns last."""
    writer = csv.writer(stream, lineterminator="\n")
    attributes = _ordered_attributes(grid)
    writer.writerow([attribute.name for attribute in attributes])
    specs = resolve_attributes(grid, attributes)
    for _, values in grid.iter_rows(specs):
        writer.writerow(
            [a.get_string_from_sys_val(v) for a, v in zip(attributes, values)]
        )


def serialize_instances_to_csv(grid, path) -> None:
    """Write ``grid`` as CSV into an existing file."""
    with open(path, "r+", encoding="utf-8", newline="") as stream:
        write_instances_csv(grid, stream)
        stream.truncate()


def _read_attributes(reader, key: str, read_message: str, parse_message: str):
    try:
        raw = reader.get_named_file(key)
    except LearnError as err:
        raise describe_error(read_message, err) from err
    try:
        return deserialize_attributes(raw)
    except ValueError as err:
        raise describe_error(parse_message, err) from err


def _read_data(reader, name: str) -> bytes:
    try:
        with reader.open() as archive:
            for member in archive:
                if member.name == name:
                    extracted = archive.extractfile(member)
                    return extracted.read() if extracted is not None else b""
    except _READ_ERRORS as err:
        raise wrap_error(ValueError(f"Error seeking to DATA section: {err}")) from err
    raise wrap_error(LookupError("DATA section missing!"))


def deserialize_instances_from_tar(reader: TarArchiveReader, prefix: str) -> DenseInstances:
    """Rebuild instances from the entries under ``prefix`` of an archive."""

    def p(name: str) -> str:
        return f"{prefix}{name}"

    manifest = reader.get_named_file(p("MANIFEST"))
    if manifest != _MANIFEST:
        raise ValueError(f"Unsupported MANIFEST: {manifest.decode('utf-8', 'replace')}")

    try:
        dims = reader.get_named_file(p("DIMS"))
    except LearnError as err:
        raise wrap_error(ValueError(f"Unable to read DIMS: {err}")) from err
    if len(dims) < 16:
        raise wrap_error(ValueError("DIMS: must be 16 bytes"))
    attr_count = unpack_u64(dims[0:8])
    row_count = unpack_u64(dims[8:16])

    class_attributes = _read_attributes(
        reader, p("CATTRS"), "Unable to read CATTRS", "Class Attribute deserialization error"
    )
    normal_attributes = _read_attributes(
        reader, p("ATTRS"), "Unable to read ATTRS", "Unable to deserialize normal attributes"
    )

    grid = DenseInstances()
    for attribute in normal_attributes:
        grid.add_attribute(attribute)
    for attribute in class_attributes:
        grid.add_attribute(attribute)
        try:
            grid.add_class_attribute(attribute)
        except LookupError as err:
            raise describe_error(
                f"Could not set Attribute '{attribute}' as a class Attribute", err
            ) from err

    all_attributes = normal_attributes + class_attributes
    if len(all_attributes) != attr_count:
        raise wrap_error(
            ValueError(
                f"DIMS declares {attr_count} attribute(s) but {len(all_attributes)} were stored"
            )
        )
    grid.extend(row_count)

    data = _read_data(reader, p("DATA"))
    specs = resolve_attributes(grid, all_attributes)
    offset = 0
    for row in range(row_count):
        for spec in specs:
            width = len(grid.get(spec, row))
            chunk = data[offset : offset + width]
            if len(chunk) != width:
                raise wrap_error(
                    ValueError(f"Expected {width} bytes (read {len(chunk)}) on row {row}")
                )
            grid.set(spec, row, chunk)
            offset += width
    return grid


def deserialize_instances(stream) -> DenseInstances:
    """Read instances from a seekable binary stream holding an archive."""
    return deserialize_instances_from_tar(TarArchiveReader(stream), "")