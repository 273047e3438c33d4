"""Parse hashed .tbl string table files.

String table format (all integers little-endian):
  Header (21 bytes): crc(uint16) + count(uint16) + hash_table_size(uint32) + unknown(uint8)
                     + string_start_offset(uint32) + max_miss_times(uint32) + string_end_offset(uint32).
  Indirection:       count * uint16, slot number of logical entry i.
  Slots (17 bytes):  used(uint8) + index(uint16) + hash_value(uint32) + key_offset(uint32)
                     + value_offset(uint32) + value_length(uint16), starting right after the indirection array.
  Blobs:             null-terminated key and value strings at absolute file offsets.

Slots are laid out in hash-bucket order; the indirection array recovers the
logical order 0..count.
"""
from __future__ import annotations

import logging
import struct
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO

from datatbls.errors import MalformedText, TruncatedStream

log = logging.getLogger(__name__)

_HEADER = struct.Struct("<HHIBIII")   # crc(2) + count(2) + hash_size(4) + unk(1) + str_start(4) + max_miss(4) + str_end(4)
_SLOT = struct.Struct("<BHIIIH")      # used(1) + index(2) + hash(4) + key_off(4) + val_off(4) + val_len(2)


@dataclass(slots=True)
class StringTableHeader:
    crc: int
    count: int
    hash_table_size: int
    unknown_08: int
    string_start_offset: int
    max_miss_times: int
    string_end_offset: int

    def __str__(self) -> str:
        return "\n".join([
            f"crc                 = 0x{self.crc:04X}",
            f"count               = 0x{self.count:04X}",
            f"hash_table_size     = 0x{self.hash_table_size:08X}",
            f"unknown_08          = 0x{self.unknown_08:02X}",
            f"string_start_offset = 0x{self.string_start_offset:08X}",
            f"max_miss_times      = 0x{self.max_miss_times:08X}",
            f"string_end_offset   = 0x{self.string_end_offset:08X}",
        ])


@dataclass(slots=True)
class StringTableSlot:
    """One 17-byte hash bucket node."""
    used: int
    index: int
    hash_value: int
    key_offset: int
    value_offset: int
    value_length: int


@dataclass(frozen=True, slots=True)
class StringTableEntry:
    key: str
    value: str


def _check(data: bytes, offset: int, size: int, where: str) -> None:
    available = max(len(data) - offset, 0)
    if size > available:
        raise TruncatedStream(where, size, available)


def read_header(data: bytes) -> StringTableHeader:
    _check(data, 0, _HEADER.size, "string table header")
    return StringTableHeader(*_HEADER.unpack_from(data, 0))


def _read_cstring(data: bytes, offset: int, where: str) -> str:
    """Read a NUL-terminated UTF-8 string starting at an absolute offset."""
    if offset >= len(data):
        raise TruncatedStream(where, 1, 0)
    end = data.find(b"\x00", offset)
    if end == -1:
        end = len(data)
    try:
        return data[offset:end].decode("utf-8")
    except UnicodeDecodeError as e:
        raise MalformedText(f"{where}: invalid UTF-8: {e}") from e


def parse_string_table(data: bytes) -> list[StringTableEntry]:
    """Parse a whole .tbl file into entries in logical index order."""
    header = read_header(data)
    count = header.count

    _check(data, _HEADER.size, count * 2, "indirection array")
    slot_numbers = struct.unpack_from(f"<{count}H", data, _HEADER.size)
    node_start = _HEADER.size + count * 2

    entries = []
    for i in range(count):
        slot_offset = node_start + slot_numbers[i] * _SLOT.size
        _check(data, slot_offset, _SLOT.size, f"entry {i} slot")
        slot = StringTableSlot(*_SLOT.unpack_from(data, slot_offset))

        key = _read_cstring(data, slot.key_offset, f"entry {i} key")
        value = _read_cstring(data, slot.value_offset, f"entry {i} value")
        entries.append(StringTableEntry(key=key, value=value.replace("\n", "\\n")))

    return entries


def decode_string_table(stream: BinaryIO) -> list[StringTableEntry]:
    """Parse a string table from a binary stream positioned at its start."""
    return parse_string_table(stream.read())


class StringTable:
    """A .tbl file on disk."""

    def __init__(self, path: Path):
        self.path = Path(path)

    @classmethod
    def open(cls, path: Path) -> StringTable:
        return cls(path)

    def read_header(self) -> StringTableHeader:
        with open(self.path, "rb") as f:
            return read_header(f.read(_HEADER.size))

    def read(self) -> list[StringTableEntry]:
        with open(self.path, "rb") as f:
            entries = decode_string_table(f)
        log.debug("%s: %d entries", self.path.name, len(entries))
        return entries


def main():
    """Test: dump a string table."""
    import sys
    import time
    if len(sys.argv) < 2:
        print("Usage: python -m datatbls.strings.loader <path/to/string.tbl>")
        sys.exit(1)

    table = StringTable(Path(sys.argv[1]))
    print(table.read_header())

    start = time.perf_counter()
    entries = table.read()
    elapsed = time.perf_counter() - start

    print(f"\nLoaded {len(entries):,} entries in {elapsed:.2f}s\n")
    for i, kv in enumerate(entries[:20]):
        print(f"{i:04}: {{'{kv.key}': '{kv.value}'}}")


if __name__ == "__main__":
    main()
