"""Load table schemas from TOML files.

Each file describes one table layout as an array of tables:

    [[fields]]
    name = "name_str"
    type = "string_id"
    offset = 0

    [[fields]]
    name = "damage"
    type = "u16"
    size = 4          # array capacity; byte length when type = "str"
    offset = 2

Schemas are offset-checked as they load, so authoring mistakes surface
before any table is decoded.
"""
from __future__ import annotations

import sys
from pathlib import Path
from typing import Any

from datatbls.bin import values
from datatbls.bin.fields import Field, Schema
from datatbls.errors import SchemaError

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib


def _is_count(value: Any) -> bool:
    """TOML booleans are ints in Python; offsets and sizes must be real integers."""
    return isinstance(value, int) and not isinstance(value, bool) and value >= 0


def _build_value(name: str, raw: dict[str, Any]) -> values.Value:
    kind = raw.get("type")
    size = raw.get("size")

    if kind not in values.KINDS:
        raise SchemaError(f"field {name!r}: unknown type {kind!r}")
    if size is not None and not _is_count(size):
        raise SchemaError(f"field {name!r}: size must be a non-negative integer")

    if kind == values.TEXT:
        if size is None:
            raise SchemaError(f"field {name!r}: type 'str' needs a size")
        return values.text(size)
    if kind in (values.STRING_ID, values.ITEM_CODE):
        if size is not None:
            raise SchemaError(f"field {name!r}: {kind} cannot be an array")
        return values.Value(kind)
    if size is not None:
        return values.array(kind, size)
    return values.scalar(kind)


def parse_schema(data: dict[str, Any], name: str = "", validate: bool = True) -> Schema:
    """Build a Schema from already-parsed TOML data."""
    raw_fields = data.get("fields")
    if not isinstance(raw_fields, list):
        raise SchemaError(f"schema {name!r}: missing [[fields]] array")

    fields = []
    for i, raw in enumerate(raw_fields):
        if not isinstance(raw, dict):
            raise SchemaError(f"schema {name!r}: field #{i} is not a table")
        try:
            field_name = raw["name"]
            offset = raw["offset"]
        except KeyError as e:
            raise SchemaError(f"schema {name!r}: field #{i} is missing {e.args[0]!r}") from e
        if not _is_count(offset):
            raise SchemaError(f"field {field_name!r}: offset must be a non-negative integer")
        fields.append(Field(field_name, _build_value(field_name, raw), offset))

    schema = Schema(fields, name=name)
    if validate:
        schema.validate()
    return schema


def load_schema(path: Path, validate: bool = True) -> Schema:
    """Read and (by default) offset-check one schema file."""
    path = Path(path)
    with open(path, "rb") as f:
        try:
            data = tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            raise SchemaError(f"{path.name}: {e}") from e
    return parse_schema(data, name=path.stem, validate=validate)


def load_schema_dir(schema_dir: Path, validate: bool = True) -> dict[str, Schema]:
    """Load every ``*.toml`` schema in a directory, keyed by file stem."""
    return {
        p.stem: load_schema(p, validate=validate)
        for p in sorted(Path(schema_dir).glob("*.toml"))
    }
