"""Global string id -> text resolution across the five string tables.

Ids are 16-bit and partitioned into bands, each served by one table:

  0      - 9999     string.tbl           id
  10000  - 19999    patchstring.tbl      id - 10000, or entry 500 when out of range
  20000  - 29999    expansionstring.tbl  id - 20000
  0x86E8 - 0xFC18   DuckModString.tbl    -(int16(id) + 1000)
  0xFC19 - 0xFFFE   DuckPermString.tbl   -(int16(id) + 2)

Anything else (including 0xFFFF) is unresolved. The duck band formulas
reproduce the game's signed arithmetic as-is.

Tables are loaded once and only read afterwards; there is no locking.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from datatbls.strings.loader import StringTable, StringTableEntry

log = logging.getLogger(__name__)

PATCH_FALLBACK_INDEX = 500

BASE_BAND = range(0, 10000)
PATCH_BAND = range(10000, 20000)
EXPANSION_BAND = range(20000, 30000)
DUCK_MOD_BAND = range(0x86E8, 0xFC19)
DUCK_PERM_BAND = range(0xFC19, 0xFFFF)


def _int16(value: int) -> int:
    return value - 0x10000 if value & 0x8000 else value


def _entry_at(table: list[StringTableEntry], index: int) -> Optional[StringTableEntry]:
    if 0 <= index < len(table):
        return table[index]
    return None


class StringIndexResolver:
    """Looks up string ids in base, patch, expansion, duck-mod and duck-perm tables.

    Missing tables are treated as empty: every id routed to them is unresolved.
    """

    def __init__(
        self,
        string: Optional[list[StringTableEntry]] = None,
        patch: Optional[list[StringTableEntry]] = None,
        expansion: Optional[list[StringTableEntry]] = None,
        duck_mod: Optional[list[StringTableEntry]] = None,
        duck_perm: Optional[list[StringTableEntry]] = None,
    ):
        self.string = string or []
        self.patch = patch or []
        self.expansion = expansion or []
        self.duck_mod = duck_mod or []
        self.duck_perm = duck_perm or []

    @classmethod
    def from_files(
        cls,
        string: Path,
        patch: Path,
        expansion: Path,
        duck_mod: Optional[Path] = None,
        duck_perm: Optional[Path] = None,
    ) -> StringIndexResolver:
        """Load the three required tables and whichever duck tables are given."""
        resolver = cls(
            string=StringTable.open(string).read(),
            patch=StringTable.open(patch).read(),
            expansion=StringTable.open(expansion).read(),
        )
        if duck_mod is not None:
            resolver.duck_mod = StringTable.open(duck_mod).read()
        if duck_perm is not None:
            resolver.duck_perm = StringTable.open(duck_perm).read()
        log.debug("string tables loaded: %s", resolver.counts())
        return resolver

    def counts(self) -> dict[str, int]:
        return {
            "string": len(self.string),
            "patch": len(self.patch),
            "expansion": len(self.expansion),
            "duck_mod": len(self.duck_mod),
            "duck_perm": len(self.duck_perm),
        }

    def resolve_entry(self, string_id: int) -> Optional[StringTableEntry]:
        """Return the table entry an id points at, or None if unresolved."""
        if not 0 <= string_id <= 0xFFFF:
            raise ValueError(f"string id out of 16-bit range: {string_id}")

        if string_id in BASE_BAND:
            return _entry_at(self.string, string_id)

        if string_id in PATCH_BAND:
            index = string_id - 10000
            if index >= len(self.patch):
                index = PATCH_FALLBACK_INDEX
            return _entry_at(self.patch, index)

        if string_id in EXPANSION_BAND:
            return _entry_at(self.expansion, string_id - 20000)

        if string_id in DUCK_MOD_BAND:
            return _entry_at(self.duck_mod, -(_int16(string_id) + 1000))

        if string_id in DUCK_PERM_BAND:
            return _entry_at(self.duck_perm, -(_int16(string_id) + 2))

        return None

    def resolve(self, string_id: int) -> Optional[str]:
        """Return the text for an id, or None if unresolved."""
        entry = self.resolve_entry(string_id)
        return entry.value if entry is not None else None
