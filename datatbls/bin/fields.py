"""Schema fields and the offset self-check."""
from __future__ import annotations

from dataclasses import dataclass, replace
from types import MappingProxyType
from typing import BinaryIO, Iterable, Iterator, Mapping

from datatbls.bin.values import Value
from datatbls.errors import SchemaError, SchemaOffsetError


@dataclass(frozen=True, slots=True)
class Field:
    """A named value at a declared byte offset within a record."""
    name: str
    value: Value
    offset: int

    def read(self, stream: BinaryIO, where: str = "") -> Field:
        """Decode this field from the current stream position."""
        label = f"{where} field {self.name!r}" if where else f"field {self.name!r}"
        return replace(self, value=self.value.decode(stream, label))


def validate_fields_offset(fields: Iterable[Field]) -> None:
    """Check that every declared offset equals the sum of the preceding widths.

    Meant to run once per schema at startup, before any table is opened.
    Raises SchemaOffsetError on the first field that does not line up.
    """
    offset = 0
    for f in fields:
        if f.offset != offset:
            raise SchemaOffsetError(f.name, f.offset, offset)
        offset += f.value.width


class Schema:
    """Ordered field layout shared by every record of one table.

    The name -> position map is built here once and handed to each Record.
    """

    def __init__(self, fields: Iterable[Field], name: str = ""):
        self.name = name
        self.fields: tuple[Field, ...] = tuple(fields)
        index: dict[str, int] = {}
        for i, f in enumerate(self.fields):
            if f.name in index:
                raise SchemaError(f"duplicate field name {f.name!r} in schema {name!r}")
            index[f.name] = i
        self.index: Mapping[str, int] = MappingProxyType(index)

    def validate(self) -> Schema:
        validate_fields_offset(self.fields)
        return self

    @property
    def record_size(self) -> int:
        return sum(f.value.width for f in self.fields)

    def __iter__(self) -> Iterator[Field]:
        return iter(self.fields)

    def __len__(self) -> int:
        return len(self.fields)

    def __repr__(self) -> str:
        return f"Schema({self.name!r}, {len(self.fields)} fields, {self.record_size} bytes)"
