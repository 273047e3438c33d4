"""Default paths and constants for the game's data directory."""
from __future__ import annotations

from pathlib import Path
from typing import Optional

DEFAULT_LANGUAGE = "chi"

# Item tables share one schema ("items") and number their rows from these class id bases
ITEM_TABLES = {
    "weapons": 1,
    "armor": 1001,
    "misc": 2001,
}
ITEM_SCHEMA = "items"

# Field names that are layout filler, not data
PAD_PREFIX = "__pad"


def find_path(base: Path, *parts: str) -> Path:
    """Join path components, matching each existing one case-insensitively.

    MPQ dumps keep whatever case the archive listed (DATA/Global/EXCEL vs
    data/global/excel), so exact joins miss files on case-sensitive systems.
    Components that don't exist are joined as given.
    """
    path = base
    for part in parts:
        candidate = path / part
        if not candidate.exists() and path.is_dir():
            lower = part.lower()
            for child in path.iterdir():
                if child.name.lower() == lower:
                    candidate = child
                    break
        path = candidate
    return path


def derive_string_table_paths(data_dir: Path, language: str = DEFAULT_LANGUAGE) -> dict[str, Optional[Path]]:
    """Return the five string table paths. Duck tables are None when missing."""
    local = ("local", "lng", language)
    duck = ("duck", "lng", language)
    paths: dict[str, Optional[Path]] = {
        "string": find_path(data_dir, *local, "string.tbl"),
        "patch": find_path(data_dir, *local, "patchstring.tbl"),
        "expansion": find_path(data_dir, *local, "expansionstring.tbl"),
        "duck_mod": find_path(data_dir, *duck, "DuckModString.tbl"),
        "duck_perm": find_path(data_dir, *duck, "DuckPermString.tbl"),
    }
    for name in ("duck_mod", "duck_perm"):
        if not paths[name].exists():
            paths[name] = None
    return paths


def derive_bin_path(data_dir: Path, table: str) -> Path:
    """Path of an excel table, e.g. ``weapons`` -> data/global/excel/weapons.bin."""
    return find_path(data_dir, "global", "excel", f"{table}.bin")


def derive_schema_dir(data_dir: Path) -> Path:
    """Default schema directory: a ``schemas`` folder next to the data dir."""
    return data_dir.parent / "schemas"
