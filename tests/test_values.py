import io

import pytest

from datatbls.bin import values
from datatbls.bin.values import Value
from datatbls.errors import CapacityMismatch, MalformedText, TruncatedStream, TypeMismatch


def test_widths():
    assert values.scalar("i8").width == 1
    assert values.scalar("u16").width == 2
    assert values.scalar("i32").width == 4
    assert values.array("u16", 4).width == 8
    assert values.array("i32", 3).width == 12
    assert values.string_id().width == 2
    assert values.item_code().width == 4
    assert values.text(8).width == 8


def test_defaults_are_zero():
    assert values.scalar("u32").data == 0
    assert values.array("u8", 3).data == [0, 0, 0]
    assert values.text(4).data == ""
    assert values.item_code().data == ""


def test_text_cell_is_nul_trimmed():
    v = values.text(8).decode(io.BytesIO(b"AB\x00\x00\x00\x00\x00\x00"))
    assert v.as_str() == "AB"


def test_text_cell_utf8():
    raw = "剑".encode("utf-8") + b"\x00" * 3
    assert values.text(6).decode(io.BytesIO(raw)).as_str() == "剑"


def test_u16_array_little_endian():
    v = values.array("u16", 4).decode(io.BytesIO(bytes.fromhex("0100020003000400")))
    assert v.as_array() == [1, 2, 3, 4]


def test_signed_scalars():
    stream = io.BytesIO(b"\xff" + b"\xfe\xff" + b"\xfd\xff\xff\xff")
    assert values.scalar("i8").decode(stream).as_int() == -1
    assert values.scalar("i16").decode(stream).as_int() == -2
    assert values.scalar("i32").decode(stream).as_int() == -3


def test_string_id_and_item_code():
    stream = io.BytesIO(b"\x10\x27" + b"hax\x00")
    assert values.string_id().decode(stream).as_str_id() == 10000
    assert values.item_code().decode(stream).as_item_code() == "hax"


def test_decode_returns_copy():
    template = values.scalar("u8")
    decoded = template.decode(io.BytesIO(b"\x07"))
    assert decoded.data == 7
    assert template.data == 0


def test_invalid_utf8_text():
    with pytest.raises(MalformedText):
        values.text(2).decode(io.BytesIO(b"\xff\xfe"))


def test_non_ascii_item_code():
    with pytest.raises(MalformedText):
        values.item_code().decode(io.BytesIO(b"\x80abc"))


def test_truncated():
    with pytest.raises(TruncatedStream) as exc:
        values.scalar("u32").decode(io.BytesIO(b"\x01\x02"), "field 'x'")
    assert exc.value.needed == 4
    assert exc.value.available == 2
    assert "field 'x'" in str(exc.value)


def test_capacity_mismatch():
    broken = Value("u8", 4, data=[0, 0])
    with pytest.raises(CapacityMismatch):
        broken.decode(io.BytesIO(b"\x01\x02\x03\x04"))


def test_wrong_kind_access():
    with pytest.raises(TypeMismatch):
        values.array("u8", 2).as_int()
    with pytest.raises(TypeMismatch):
        values.scalar("u16").as_str_id()
    with pytest.raises(TypeMismatch):
        values.string_id().as_int()
    with pytest.raises(TypeMismatch):
        values.text(4).as_array()


def test_invalid_shapes():
    with pytest.raises(ValueError):
        Value("f32")
    with pytest.raises(ValueError):
        Value(values.TEXT)
    with pytest.raises(ValueError):
        values.array("string_id", 2)


def test_repr():
    assert repr(Value("u16", data=16)) == "UInt16: 0x0010 (16)"
    assert repr(Value("i8", data=-1)) == "Int8: 0xFF (-1)"
    assert repr(Value("u8", 3, data=[1, 2, 3])) == "UInt8Array(3): [1, 2, 3]"
    assert repr(Value(values.STRING_ID, data=0x1234)) == "StringId: 0x1234 (4660)"
