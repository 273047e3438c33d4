import pytest

from datatbls.bin.schema_config import load_schema, load_schema_dir, parse_schema
from datatbls.errors import SchemaError, SchemaOffsetError

ITEMS_TOML = """
[[fields]]
name = "name_str"
type = "string_id"
offset = 0

[[fields]]
name = "code"
type = "item_code"
offset = 2

[[fields]]
name = "damage"
type = "u16"
size = 2
offset = 6

[[fields]]
name = "flavor"
type = "str"
size = 6
offset = 10

[[fields]]
name = "level"
type = "i8"
offset = 16
"""


def test_load_schema(tmp_path):
    path = tmp_path / "items.toml"
    path.write_text(ITEMS_TOML)

    schema = load_schema(path)

    assert schema.name == "items"
    assert [f.name for f in schema] == ["name_str", "code", "damage", "flavor", "level"]
    assert schema.fields[2].value.is_array
    assert schema.fields[2].value.size == 2
    assert schema.fields[3].value.width == 6
    assert schema.record_size == 17


def test_offsets_checked_on_load(tmp_path):
    path = tmp_path / "bad.toml"
    path.write_text(ITEMS_TOML.replace("offset = 16", "offset = 15"))
    with pytest.raises(SchemaOffsetError) as exc:
        load_schema(path)
    assert exc.value.field_name == "level"


def test_validation_can_be_deferred(tmp_path):
    path = tmp_path / "bad.toml"
    path.write_text(ITEMS_TOML.replace("offset = 16", "offset = 15"))
    schema = load_schema(path, validate=False)
    with pytest.raises(SchemaOffsetError):
        schema.validate()


@pytest.mark.parametrize("field", [
    {"name": "x", "type": "f32", "offset": 0},
    {"name": "x", "type": "str", "offset": 0},
    {"name": "x", "type": "string_id", "size": 2, "offset": 0},
    {"name": "x", "type": "u8", "size": -1, "offset": 0},
    {"name": "x", "type": "u8"},
    {"type": "u8", "offset": 0},
    {"name": "x", "type": "u8", "offset": "0"},
    {"name": "x", "type": "u8", "offset": False},
    {"name": "x", "type": "u8", "size": True, "offset": 0},
    {"name": "x", "type": "str", "size": True, "offset": 0},
])
def test_bad_field_definitions(field):
    with pytest.raises(SchemaError):
        parse_schema({"fields": [field]}, name="t")


def test_missing_fields_array():
    with pytest.raises(SchemaError):
        parse_schema({}, name="t")


def test_bad_toml(tmp_path):
    path = tmp_path / "broken.toml"
    path.write_text("[[fields]\nname = ")
    with pytest.raises(SchemaError):
        load_schema(path)


def test_load_schema_dir(tmp_path):
    (tmp_path / "items.toml").write_text(ITEMS_TOML)
    (tmp_path / "skills.toml").write_text('[[fields]]\nname = "id"\ntype = "u16"\noffset = 0\n')
    (tmp_path / "notes.txt").write_text("ignored")

    schemas = load_schema_dir(tmp_path)

    assert sorted(schemas) == ["items", "skills"]
    assert schemas["skills"].record_size == 2


@pytest.mark.parametrize("entry", [1, "x", ["name", "x"]])
def test_field_entries_must_be_tables(entry):
    with pytest.raises(SchemaError) as exc:
        parse_schema({"fields": [entry]}, name="t")
    assert "field #0 is not a table" in str(exc.value)


def test_non_table_field_reported_by_cli(tmp_path):
    from click.testing import CliRunner

    from datatbls.cli import cli

    path = tmp_path / "scalars.toml"
    path.write_text("fields = [1, 2]\n")
    result = CliRunner().invoke(cli, ["validate", str(path)])

    assert result.exit_code == 1
    assert "field #0 is not a table" in result.output
