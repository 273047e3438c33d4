"""Dump decoded tables and string tables as Python-literal text."""
from __future__ import annotations

import json
from typing import Iterable, Optional

from datatbls.bin.reader import Record
from datatbls.bin.values import ITEM_CODE, STRING_ID, TEXT, Value
from datatbls.config import PAD_PREFIX
from datatbls.strings.loader import StringTableEntry
from datatbls.strings.resolve import StringIndexResolver


def format_value(value: Value, strings: Optional[StringIndexResolver] = None) -> str:
    """Display text for one value; string ids are resolved when possible."""
    if value.kind == STRING_ID:
        text = strings.resolve(value.data) if strings is not None else None
        if text is not None:
            return text
        return f"StringId<0x{value.data:04X}>"
    if value.kind in (ITEM_CODE, TEXT):
        return value.data
    return repr(value)


def _literal(text: str) -> str:
    return json.dumps(text, ensure_ascii=False)


def dump_fields(records: Iterable[Record], strings: Optional[StringIndexResolver] = None) -> str:
    """Render records as a ``fields = [...]`` list of dicts, padding fields omitted."""
    lines = ["fields = ["]
    for record in records:
        lines.append("    {")
        for f in record:
            if f.name.startswith(PAD_PREFIX):
                continue
            lines.append(f"        '{f.name}': {_literal(format_value(f.value, strings))},")
        lines.append("    },")
    lines.append("]")
    return "\n".join(lines)


def dump_string_table(entries: Iterable[StringTableEntry]) -> str:
    return "\n".join(
        f"{i:04}: {{'{kv.key}': '{kv.value}'}}" for i, kv in enumerate(entries)
    )
