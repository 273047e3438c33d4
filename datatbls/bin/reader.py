"""Reader for fixed-layout .bin record tables.

Table format:
  Header: record_count (uint32)
  Body:   record_count records, each the field encodings in schema order with no padding.

Decoding is purely sequential; declared field offsets are checked once by
validate_fields_offset, never used to seek.
"""
from __future__ import annotations

import io
import logging
import struct
from pathlib import Path
from typing import BinaryIO, Iterator, Mapping, Optional

from datatbls.bin.fields import Field, Schema
from datatbls.bin.values import Value, read_exact
from datatbls.errors import UnknownField

log = logging.getLogger(__name__)

_UINT32 = struct.Struct("<I")


class Record:
    """One decoded row. Field lookup goes through the schema's shared index."""

    __slots__ = ("fields", "_index")

    def __init__(self, fields: tuple[Field, ...], index: Mapping[str, int]):
        self.fields = fields
        self._index = index

    def get(self, name: str) -> Field:
        pos = self._index.get(name)
        if pos is None:
            raise UnknownField(name)
        return self.fields[pos]

    def value(self, name: str) -> Value:
        return self.get(name).value

    def __contains__(self, name: str) -> bool:
        return name in self._index

    def __iter__(self) -> Iterator[Field]:
        return iter(self.fields)

    def __len__(self) -> int:
        return len(self.fields)

    def __repr__(self) -> str:
        return f"Record({', '.join(f'{f.name}={f.value!r}' for f in self.fields)})"


class Table:
    """Decoded records of one .bin file."""

    def __init__(self, schema: Schema, records: Optional[list[Record]] = None):
        self.schema = schema
        self.records: list[Record] = records if records is not None else []

    def __iter__(self) -> Iterator[Record]:
        return iter(self.records)

    def __len__(self) -> int:
        return len(self.records)

    def __getitem__(self, i: int) -> Record:
        return self.records[i]


def decode(schema: Schema, stream: BinaryIO) -> Table:
    """Decode a record-count header and that many records from ``stream``.

    The schema must already have passed validate_fields_offset.
    """
    record_count = _UINT32.unpack(read_exact(stream, 4, "record count"))[0]
    table = Table(schema)

    for i in range(record_count):
        where = f"record {i}"
        fields = tuple(f.read(stream, where) for f in schema.fields)
        table.records.append(Record(fields, schema.index))

    return table


class BinFile:
    """A .bin table on disk paired with the schema that describes it."""

    def __init__(self, path: Path, schema: Schema):
        self.path = Path(path)
        self.schema = schema

    @classmethod
    def open(cls, path: Path, schema: Schema) -> BinFile:
        return cls(path, schema)

    def read(self) -> Table:
        with open(self.path, "rb") as f:
            data = f.read()
        table = decode(self.schema, io.BytesIO(data))
        log.debug("%s: %d records (%s)", self.path.name, len(table), self.schema.name)
        return table
