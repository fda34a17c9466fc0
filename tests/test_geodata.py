import io

import pytest

from trojango.geodata import CodeNotFoundError, GeodataError, decode, emit_bytes

GEOIP_TEST = bytes([10, 4, 84, 69, 83, 84, 18, 8, 10, 4, 127, 0, 0, 0, 16, 8])
GEOSITE_TEST = bytes(
    [10, 4, 84, 69, 83, 84, 18, 20, 8, 3, 18, 16, 116, 101, 115, 116, 46, 101,
     120, 97, 109, 112, 108, 101, 46, 99, 111, 109]
)


def _varint(n):
    out = bytearray()
    while n > 0x7F:
        out.append((n & 0x7F) | 0x80)
        n >>= 7
    out.append(n)
    return bytes(out)


def _entry(msg):
    return b"\x0a" + _varint(len(msg)) + msg


def _geo(code, body=b""):
    return b"\x0a" + _varint(len(code)) + code + body


def _big_entry():
    return _geo(b"BIG", b"\x12" + _varint(200) + bytes(200))


def _geoip_list():
    return (
        _entry(_geo(b"CN", b"\x12\x08\x0a\x04\x01\x00\x00\x00\x10\x08"))
        + _entry(_big_entry())
        + _entry(GEOIP_TEST)
        + _entry(_geo(b"PRIVATE"))
    )


def test_geoip_test_entry_is_found_case_insensitively():
    assert emit_bytes(io.BytesIO(_geoip_list()), "test") == GEOIP_TEST


def test_geosite_test_entry_from_file(tmp_path):
    path = tmp_path / "geosite.dat"
    path.write_bytes(_entry(_geo(b"CN")) + _entry(GEOSITE_TEST))
    assert decode(path, "test") == GEOSITE_TEST


def test_entry_with_multibyte_length_is_returned_whole():
    data = _entry(_geo(b"CN")) + _entry(_big_entry()) + _entry(GEOIP_TEST)
    assert emit_bytes(io.BytesIO(data), "big") == _big_entry()


def test_first_and_last_entries():
    data = _geoip_list()
    assert emit_bytes(io.BytesIO(data), "CN").startswith(_geo(b"CN"))
    assert emit_bytes(io.BytesIO(data), "private") == _geo(b"PRIVATE")


def test_missing_code_raises_code_not_found():
    with pytest.raises(CodeNotFoundError) as info:
        emit_bytes(io.BytesIO(_geoip_list()), "nowhere")
    assert str(info.value) == "code not found"


def test_empty_stream_is_code_not_found():
    with pytest.raises(CodeNotFoundError):
        emit_bytes(io.BytesIO(b""), "test")


def test_wrong_tag_is_invalid_file():
    with pytest.raises(GeodataError) as info:
        emit_bytes(io.BytesIO(b"\x12\x02ab"), "test")
    assert str(info.value) == "invalid geodata file"
    assert not isinstance(info.value, CodeNotFoundError)


def test_truncated_code_is_a_read_error():
    data = b"\x0a\x06\x0a\x04TE"
    with pytest.raises(GeodataError) as info:
        emit_bytes(io.BytesIO(data), "test")
    assert str(info.value) == "failed to read expected length of bytes"


def test_overlong_varint_is_rejected():
    data = b"\x0a" + b"\xff" * 10 + b"\x01"
    with pytest.raises(GeodataError) as info:
        emit_bytes(io.BytesIO(data), "test")
    assert str(info.value) == "invalid geodata varint length"


def test_missing_file_raises_oserror(tmp_path):
    with pytest.raises(FileNotFoundError):
        decode(tmp_path / "absent.dat", "test")