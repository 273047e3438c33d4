"""Load string tables and excel tables from a game data directory."""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from datatbls.bin.fields import Schema
from datatbls.bin.reader import BinFile, Record, Table
from datatbls.config import DEFAULT_LANGUAGE, ITEM_SCHEMA, ITEM_TABLES, derive_bin_path, derive_string_table_paths
from datatbls.strings.resolve import StringIndexResolver

log = logging.getLogger(__name__)


class ItemTable:
    """An item .bin table and the class id its rows start from."""

    def __init__(self, start_index: int):
        self.start_index = start_index
        self.table: Optional[Table] = None

    def load(self, path: Path, schema: Schema) -> Table:
        self.table = BinFile.open(path, schema).read()
        return self.table

    @property
    def records(self) -> list[Record]:
        return self.table.records if self.table is not None else []


class DataTables:
    """String resolver plus every decoded table of one data directory."""

    def __init__(self):
        self.strings = StringIndexResolver()
        self.items: dict[str, ItemTable] = {
            name: ItemTable(start) for name, start in ITEM_TABLES.items()
        }
        self.tables: dict[str, Table] = {}

    def load(self, data_dir: Path, schemas: dict[str, Schema],
             language: str = DEFAULT_LANGUAGE) -> None:
        self.load_strings(data_dir, language)
        self.load_tables(data_dir, schemas)

    def load_strings(self, data_dir: Path, language: str = DEFAULT_LANGUAGE) -> StringIndexResolver:
        paths = derive_string_table_paths(data_dir, language)
        self.strings = StringIndexResolver.from_files(**paths)
        return self.strings

    def load_tables(self, data_dir: Path, schemas: dict[str, Schema]) -> None:
        """Decode item tables with the shared items schema and any other table with a matching schema."""
        item_schema = schemas.get(ITEM_SCHEMA)
        if item_schema is not None:
            for name, item_table in self.items.items():
                path = derive_bin_path(data_dir, name)
                if path.exists():
                    self.tables[name] = item_table.load(path, item_schema)
                else:
                    log.debug("no %s table at %s", name, path)

        for name, schema in schemas.items():
            if name == ITEM_SCHEMA or name in self.tables:
                continue
            path = derive_bin_path(data_dir, name)
            if path.exists():
                self.tables[name] = BinFile.open(path, schema).read()
            else:
                log.debug("schema %s has no table at %s", name, path)

    def get_string_by_index(self, string_id: int) -> Optional[str]:
        return self.strings.resolve(string_id)

    def item_ids(self, name_field: str = "name_str") -> list[tuple[int, str]]:
        """(class id, name) for every weapon, armor and misc item.

        Class ids count up from 0 across the three tables in that order. Rows
        whose name doesn't resolve or is blank keep their id but are not listed.
        """
        result = []
        class_id = -1
        for item_table in self.items.values():
            for record in item_table.records:
                class_id += 1
                name = self.strings.resolve(record.value(name_field).as_str_id())
                if name is None or not name.strip():
                    continue
                result.append((class_id, name.rstrip()))
        return result
