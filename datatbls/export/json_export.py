"""Export decoded tables as JSON."""
from __future__ import annotations

import json
from typing import Any, Optional

from datatbls.bin.reader import Table
from datatbls.bin.values import STRING_ID, Value
from datatbls.config import PAD_PREFIX
from datatbls.strings.resolve import StringIndexResolver


def _json_value(value: Value, strings: Optional[StringIndexResolver]) -> Any:
    if value.kind == STRING_ID:
        return {
            "string_id": value.data,
            "text": strings.resolve(value.data) if strings is not None else None,
        }
    return value.data


def export_json(table: Table, strings: Optional[StringIndexResolver] = None) -> str:
    """Export records as JSON string."""
    data = []
    for record in table:
        data.append({
            f.name: _json_value(f.value, strings)
            for f in record
            if not f.name.startswith(PAD_PREFIX)
        })
    return json.dumps(data, indent=2, ensure_ascii=False)
