"""Exception hierarchy for table and string table decoding."""
from __future__ import annotations


class DataTblsError(Exception):
    """Base class for all datatbls errors."""


class SchemaError(DataTblsError):
    """A schema is malformed (bad TOML, unknown type, duplicate field name)."""


class SchemaOffsetError(SchemaError):
    """A field's declared offset does not match the sum of preceding widths."""

    def __init__(self, field_name: str, offset: int, expected: int):
        self.field_name = field_name
        self.offset = offset
        self.expected = expected
        super().__init__(
            f"field {field_name} offset is 0x{offset:X}, expect 0x{expected:X}"
        )


class DecodeError(DataTblsError, ValueError):
    """Bad data in a table or string table file."""


class TruncatedStream(DecodeError):
    """Fewer bytes remain than a field or structure needs."""

    def __init__(self, where: str, needed: int, available: int):
        self.where = where
        self.needed = needed
        self.available = available
        super().__init__(f"{where}: need {needed} bytes, only {available} left")


class MalformedText(DecodeError):
    """Text bytes are not valid UTF-8 (or ASCII, for item codes)."""


class CapacityMismatch(DecodeError):
    """An array's capacity differs from the schema-declared capacity."""


class TypeMismatch(DataTblsError, TypeError):
    """A value was accessed as a kind it is not."""


class UnknownField(DataTblsError, KeyError):
    """A record lookup used a name the schema does not define."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(name)

    def __str__(self) -> str:
        return f"{self.name} not exists"
