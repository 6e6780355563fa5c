import dataclasses
import io

import pytest

from mk11unpack.header import (
    EXPECTED_ENGINE_VERSION,
    EXPECTED_FILE_VERSION,
    EXPECTED_LICENSEE_VERSION,
    EXPECTED_MAGIC,
    HEADER_SIZE,
    FileHeader,
    HeaderError,
    ObjectFlag,
    compression_flag_names,
    object_flag_names,
)


def make_header(**changes):
    header = FileHeader(
        magic=EXPECTED_MAGIC,
        file_version=EXPECTED_FILE_VERSION,
        licensee_version=EXPECTED_LICENSEE_VERSION,
        decompressed_start=10,
        shader_version=20,
        engine_version=EXPECTED_ENGINE_VERSION,
        midway_team_fourcc=b"MK11",
        midway_team_version=0x50,
        cooked_version=30,
        main_package_name=b"None",
        package_flags=0,
        name_table_count=3,
        name_table_offset=200,
        export_table_count=4,
        export_table_offset=300,
        import_table_count=5,
        import_table_offset=400,
        bulk_data_offset=500,
        guid=(0x12345678, 0x9ABCDEF0, 0x11112222, 0x33334444),
        compression_flag=0x100,
        number_of_packages=2,
    )
    return dataclasses.replace(header, **changes)


def test_round_trip():
    header = make_header()
    raw = header.to_bytes()
    assert len(raw) == HEADER_SIZE
    assert FileHeader.read(io.BytesIO(raw)) == header


def test_magic_bytes_on_disk():
    raw = make_header().to_bytes()
    assert raw[:4] == bytes([0xC1, 0x83, 0x2A, 0x9E])
    assert raw[4:6] == bytes([0x01, 0x03])


def test_read_leaves_stream_after_header():
    stream = io.BytesIO(make_header().to_bytes() + b"rest")
    FileHeader.read(stream)
    assert stream.read() == b"rest"


def test_short_read_raises():
    with pytest.raises(EOFError):
        FileHeader.read(io.BytesIO(make_header().to_bytes()[:-1]))


@pytest.mark.parametrize(
    "changes, message",
    [
        ({"magic": 0}, "Magic Mismatch"),
        ({"engine_version": 1}, "Engine Version Mismatch"),
        ({"file_version": 0}, "File Version Mismatch"),
        ({"licensee_version": 0}, "Licensee Mismatch"),
    ],
)
def test_validate_errors(changes, message):
    with pytest.raises(HeaderError, match=message):
        make_header(**changes).validate()


def test_validate_order_magic_first():
    with pytest.raises(HeaderError, match="Magic Mismatch"):
        make_header(magic=1, engine_version=1).validate()


def test_read_rejects_bad_header():
    raw = make_header(licensee_version=1).to_bytes()
    with pytest.raises(HeaderError):
        FileHeader.read(io.BytesIO(raw))


def test_guid_string():
    assert make_header().guid_string() == "12345678-9ABC-DEF0-1111-222233334444"


def test_object_flag_names():
    flags = ObjectFlag.RF_Public | ObjectFlag.RF_Transient
    assert object_flag_names(flags) == ["RF_Public", "RF_Transient"]
    assert object_flag_names(0) == []


def test_compression_flag_names():
    assert compression_flag_names(0x101) == ["ZLIB", "OODLE"]
    assert compression_flag_names(0x8) == []


def test_describe_contents():
    text = make_header(package_flags=int(ObjectFlag.RF_Public)).describe()
    lines = text.split("\n")
    assert lines[0] == "File Info: "
    assert "\tMagic: 9E2A83C1" in lines
    assert "\tEngine Version: 1E7" in lines
    assert "\tPackage Flags: 1 ( RF_Public )" in lines
    assert "\tCompression Flag: 100 ( OODLE )" in lines
    assert "\tMidway Team FourCC: MK11" in lines
    assert f"\tFile GUID: {make_header().guid_string()}" in lines
    assert lines[-1] == "\tPackages Count: 2"