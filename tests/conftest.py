import struct

import pytest


def build_string_table(pairs, slots=None, crc=0x1234):
    """Assemble .tbl bytes: header, indirection array, 17-byte slots, then blobs.

    ``slots[i]`` is the bucket slot that logical entry i is stored in.
    Keys/values may be str (UTF-8 encoded) or raw bytes.
    """
    count = len(pairs)
    slots = list(slots) if slots is not None else list(range(count))
    table_size = max(slots, default=-1) + 1
    node_start = 21 + 2 * count
    blob_start = node_start + table_size * 17

    nodes = bytearray(table_size * 17)
    blob = bytearray()
    for i, (key, value) in enumerate(pairs):
        key = key.encode("utf-8") if isinstance(key, str) else key
        value = value.encode("utf-8") if isinstance(value, str) else value
        key_offset = blob_start + len(blob)
        blob += key + b"\x00"
        value_offset = blob_start + len(blob)
        blob += value + b"\x00"
        struct.pack_into("<BHIIIH", nodes, slots[i] * 17, 1, i, 0xDEADBEEF,
                         key_offset, value_offset, len(value))

    header = struct.pack("<HHIBIII", crc, count, table_size, 1, blob_start, 8,
                         blob_start + len(blob))
    return header + struct.pack(f"<{count}H", *slots) + bytes(nodes) + bytes(blob)


@pytest.fixture
def make_string_table():
    return build_string_table


ITEMS_SCHEMA = """
[[fields]]
name = "name_str"
type = "string_id"
offset = 0

[[fields]]
name = "code"
type = "item_code"
offset = 2

[[fields]]
name = "level"
type = "u8"
offset = 6

[[fields]]
name = "__pad07"
type = "u8"
size = 1
offset = 7
"""


def build_items(*rows):
    data = struct.pack("<I", len(rows))
    for name_str, code, level in rows:
        data += struct.pack("<H4sBx", name_str, code, level)
    return data


@pytest.fixture
def game_data(tmp_path):
    """A data dir laid out like an MPQ dump, with mixed-case folder names."""
    data_dir = tmp_path / "DATA"
    lng = data_dir / "LOCAL" / "lng" / "CHI"
    lng.mkdir(parents=True)
    (lng / "string.tbl").write_bytes(build_string_table(
        [("w0", "Short Sword"), ("w1", "Hand Axe"), ("a0", "Cap  "), ("blank", " ")],
        slots=[2, 0, 3, 1],
    ))
    (lng / "patchstring.tbl").write_bytes(build_string_table([("p0", "Patched")]))
    (lng / "expansionstring.tbl").write_bytes(build_string_table([("e0", "Expanded")]))

    duck = data_dir / "duck" / "lng" / "chi"
    duck.mkdir(parents=True)
    (duck / "DuckModString.tbl").write_bytes(build_string_table([("m0", "Duck Mod")]))

    excel = data_dir / "Global" / "EXCEL"
    excel.mkdir(parents=True)
    (excel / "weapons.bin").write_bytes(build_items((0, b"ssd\x00", 1), (1, b"axe\x00", 3)))
    (excel / "armor.bin").write_bytes(build_items((3, b"blk\x00", 2), (2, b"cap\x00", 1)))

    schema_dir = tmp_path / "schemas"
    schema_dir.mkdir()
    (schema_dir / "items.toml").write_text(ITEMS_SCHEMA)
    return data_dir
