# gridlearn

`gridlearn` holds tabular datasets for machine-learning code. Every column is
described by an attribute (float, categorical or binary). Values are kept in
compact byte-packed storage, grouped by type.

## What it provides

- `gridlearn.attributes`: `FloatAttribute`, `CategoricalAttribute` and
  `BinaryAttribute`. Each one converts between human-readable strings and
  packed system values (`get_sys_val_from_string`, `get_string_from_sys_val`).
  Float values are 8-byte little-endian float64s. Categories are 8-byte
  indices. Binary values are a single byte.
- `gridlearn.groups`: `FixedAttributeGroup` (a fixed number of bytes per value)
  and `BinaryAttributeGroup` (one bit per value), which do the row storage.
- `gridlearn.dense`: `DenseInstances`, a grid of rows and attributes. It
  supports class attributes, named attribute groups, `iter_rows`, `row_string`
  and `swap_rows`. `new_structural_copy` and `new_dense_copy` copy a grid.
  Add attributes first; `extend(rows)` then allocates the rows, and no further
  attributes can be added after that.
- `gridlearn.csvio`: CSV reading with type sniffing.
  - `parse_csv_to_instances` marks the last column as the class attribute.
  - `parse_csv_to_templated_instances` reads using the attributes of an
    existing grid.
  - `parse_csv_to_instances_with_attribute_groups` places named attributes
    into named groups.
  - Every function accepts either a path or a seekable text stream.
  - Float columns are printed with the largest number of decimal places found
    in the first six data lines (`estimate_precision`).
- `gridlearn.arff`: dense ARFF reading (`parse_dense_arff_to_instances`,
  `parse_arff_get_attributes`, `parse_arff_get_rows`) and writing
  (`write_dense_arff`, `serialize_instances_to_dense_arff`).
- `gridlearn.sorting`: `sort(grid, direction, specs)` reorders the rows of a
  `DenseInstances` in place. The first spec is the primary key. Values are
  compared by their stored bytes, which orders non-negative floats and
  category indices.
- `gridlearn.instance_archive`: grids stored as gzip-compressed tar archives
  (`serialize_instances`, `deserialize_instances`, `TarArchiveReader`), and as
  CSV with class columns last (`write_instances_csv`,
  `serialize_instances_to_csv`).
- `gridlearn.classifier_archive`: archives for saving models.
  - `create_serialized_classifier_stub` returns a `ClassifierSerializer`.
  - `read_serialized_classifier_stub` returns a `ClassifierDeserializer`.
  - Both work with `ClassifierMetadata` and can store bytes, integers, JSON,
    attributes and whole grids under named keys.
- `gridlearn.attrjson`: JSON serialisation of attributes.
- `gridlearn.attrutil`: `AttributeSpec`, `resolve_attributes` and set
  operations on attribute lists.
- `gridlearn.matrix`: `MatrixInstances` and `instances_from_matrix`, a
  read-only grid over a two-dimensional numpy array. Its columns are float
  attributes named `"0"`, `"1"`, and so on.
- `gridlearn.packing`: `pack_u64`, `unpack_u64`, `pack_float`, `unpack_float`.
- `gridlearn.errors`: `LearnError`, which wraps another error with a
  description. When the environment variable `GRIDLEARN_FULL_DEBUG` is `true`,
  its message includes the call stack inside the package.

## Example

```python
from gridlearn.attrutil import resolve_all_attributes
from gridlearn.csvio import parse_csv_to_instances
from gridlearn.dense import SortDirection
from gridlearn.sorting import sort

grid = parse_csv_to_instances("iris_headers.csv", True)
print(grid.row_string(0))

specs = resolve_all_attributes(grid)
sort(grid, SortDirection.ASCENDING, specs[:-1])
print(grid.row_string(0))
```

Archive round trip:

```python
from gridlearn.instance_archive import deserialize_instances, serialize_instances

with open("grid.tar.gz", "wb") as out:
    serialize_instances(grid, out)
with open("grid.tar.gz", "rb") as src:
    restored = deserialize_instances(src)
```

The following functions write into a file that must already exist, and
truncate whatever is left over:

- `serialize_instances_to_file`
- `serialize_instances_to_csv`
- `serialize_instances_to_dense_arff`

## What it does not do

- It contains no learning algorithms, only the data structures and file
  formats they work on.
- There is no helper for turning grid rows back into numpy matrices. Read
  values with `iter_rows` and `unpack_float` instead.
- `sort` only works on `DenseInstances`.
- `MatrixInstances` cannot be written to.

## Tests

The `test` extra installs pytest, which runs the suite in `tests/`.