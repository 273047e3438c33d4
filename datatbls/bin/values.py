"""Value kinds for fixed-layout .bin record tables.

Every field of a record holds one Value. A Value is tagged by ``kind``:

  i8 i16 i32 u8 u16 u32   little-endian integers (scalar, or array when ``size`` is set)
  string_id               uint16 index into the string tables
  item_code               4 ASCII bytes, trailing NULs trimmed
  str                     fixed-size text cell of ``size`` bytes, NUL-trimmed, UTF-8

The wire width of each value is fixed by its kind and size, so a record is
just the concatenation of its field encodings.
"""
from __future__ import annotations

import struct
from dataclasses import dataclass, replace
from typing import Any, BinaryIO, Optional

from datatbls.errors import CapacityMismatch, MalformedText, TruncatedStream, TypeMismatch


# kind -> (struct code, element width, display name)
_NUMERIC = {
    "i8": ("b", 1, "Int8"),
    "i16": ("h", 2, "Int16"),
    "i32": ("i", 4, "Int32"),
    "u8": ("B", 1, "UInt8"),
    "u16": ("H", 2, "UInt16"),
    "u32": ("I", 4, "UInt32"),
}

STRING_ID = "string_id"
ITEM_CODE = "item_code"
TEXT = "str"

KINDS = frozenset(_NUMERIC) | {STRING_ID, ITEM_CODE, TEXT}

_UINT16 = struct.Struct("<H")


def read_exact(stream: BinaryIO, size: int, where: str) -> bytes:
    """Read exactly ``size`` bytes or raise TruncatedStream."""
    data = stream.read(size)
    if len(data) != size:
        raise TruncatedStream(where, size, len(data))
    return data


@dataclass(frozen=True, slots=True)
class Value:
    """One decoded cell: scalar, fixed-capacity array, string id, item code or text."""
    kind: str
    size: Optional[int] = None   # array capacity, or byte length of a text cell
    data: Any = None

    def __post_init__(self):
        if self.kind not in KINDS:
            raise ValueError(f"unknown value kind {self.kind!r}")
        if self.kind == TEXT and self.size is None:
            raise ValueError("text cells need a byte size")
        if self.size is not None and self.kind in (STRING_ID, ITEM_CODE):
            raise ValueError(f"{self.kind} cannot be an array")
        if self.data is None:
            object.__setattr__(self, "data", self.default())

    @property
    def is_array(self) -> bool:
        return self.size is not None and self.kind in _NUMERIC

    @property
    def width(self) -> int:
        """Number of bytes this value occupies on disk."""
        if self.kind == TEXT:
            return self.size
        if self.kind == STRING_ID:
            return 2
        if self.kind == ITEM_CODE:
            return 4
        element = _NUMERIC[self.kind][1]
        return element * self.size if self.is_array else element

    @property
    def display_name(self) -> str:
        if self.kind == STRING_ID:
            return "StringId"
        if self.kind == ITEM_CODE:
            return "ItemCode"
        if self.kind == TEXT:
            return "String"
        name = _NUMERIC[self.kind][2]
        return f"{name}Array" if self.is_array else name

    def default(self) -> Any:
        """Zero value for this kind and shape."""
        if self.kind in (TEXT, ITEM_CODE):
            return ""
        if self.is_array:
            return [0] * self.size
        return 0

    def reset(self) -> Value:
        return replace(self, data=self.default())

    def decode(self, stream: BinaryIO, where: str = "value") -> Value:
        """Read this value's bytes from ``stream`` and return the decoded copy."""
        raw = read_exact(stream, self.width, where)

        if self.kind == TEXT:
            try:
                text = raw.rstrip(b"\x00").decode("utf-8")
            except UnicodeDecodeError as e:
                raise MalformedText(f"{where}: invalid UTF-8 in text cell: {e}") from e
            return replace(self, data=text)

        if self.kind == ITEM_CODE:
            try:
                code = raw.rstrip(b"\x00").decode("ascii")
            except UnicodeDecodeError as e:
                raise MalformedText(f"{where}: item code {raw!r} is not ASCII") from e
            return replace(self, data=code)

        if self.kind == STRING_ID:
            return replace(self, data=_UINT16.unpack(raw)[0])

        code = _NUMERIC[self.kind][0]
        if not self.is_array:
            return replace(self, data=struct.unpack(f"<{code}", raw)[0])

        if len(self.data) != self.size:
            raise CapacityMismatch(
                f"{where}: array holds {len(self.data)} elements, schema declares {self.size}"
            )
        items = list(struct.unpack(f"<{self.size}{code}", raw))
        return replace(self, data=items)

    # -- Checked accessors --

    def _expect(self, wanted: str, ok: bool):
        if not ok:
            raise TypeMismatch(f"expected {wanted}, value is {self!r}")

    def as_int(self) -> int:
        self._expect("integer", self.kind in _NUMERIC and not self.is_array)
        return self.data

    def as_array(self) -> list[int]:
        self._expect("array", self.is_array)
        return self.data

    def as_str_id(self) -> int:
        self._expect("string id", self.kind == STRING_ID)
        return self.data

    def as_item_code(self) -> str:
        self._expect("item code", self.kind == ITEM_CODE)
        return self.data

    def as_str(self) -> str:
        self._expect("text", self.kind == TEXT)
        return self.data

    def __repr__(self) -> str:
        if self.kind == TEXT:
            return f"String: {self.data}"
        if self.kind == ITEM_CODE:
            return f"ItemCode: {self.data}"
        if self.is_array:
            return f"{self.display_name}({self.size}): {self.data}"
        digits = self.width * 2
        return f"{self.display_name}: 0x{self.data & ((1 << self.width * 8) - 1):0{digits}X} ({self.data})"


def scalar(kind: str) -> Value:
    return Value(kind)


def array(kind: str, capacity: int) -> Value:
    if kind not in _NUMERIC:
        raise ValueError(f"arrays of {kind!r} are not supported")
    return Value(kind, capacity)


def text(size: int) -> Value:
    return Value(TEXT, size)


def string_id() -> Value:
    return Value(STRING_ID)


def item_code() -> Value:
    return Value(ITEM_CODE)
