import io
import os
import struct
import zlib

import pytest

from mk11unpack.legacy import MAGIC, FormatError, dump, main, read_package

HEADER_END = 0x68
PAYLOAD_1 = zlib.compress(b"hello" * 10)
PAYLOAD_2 = zlib.compress(b"world" * 4)
CHUNKS = [(PAYLOAD_1, 50), (PAYLOAD_2, 20)]


def _header(
    file_version=b"\x01\x03",
    script=b"\x9d\x00",
    engine=b"\xe7\x01\x00\x00",
    cooking=b"\x50\x00\x00\x00",
    magic=MAGIC,
):
    head = magic + file_version + script
    head = head.ljust(0x10, b"\0") + engine + b"MK11" + cooking
    return head.ljust(HEADER_END, b"\0")


def _package_record(name, decompressed_size, subpackages, compressed_segments=1):
    raw = name.encode() + b"\0"
    record = struct.pack("<I", len(raw)) + raw
    record += struct.pack("<QQQQI", 0, decompressed_size, 0, 0, compressed_segments)
    for dec, start in subpackages:
        record += struct.pack("<QQQQ", 0, dec, start, 0)
    return record


def _segment_block(chunks):
    comp_total = sum(len(p) for p, _ in chunks)
    dec_total = sum(d for _, d in chunks)
    block = MAGIC + bytes(12) + struct.pack("<QQ", comp_total, dec_total)
    block += b"".join(struct.pack("<QQ", len(p), d) for p, d in chunks)
    return block + b"".join(p for p, _ in chunks)


def _footer(name="Internal"):
    raw = name.encode() + b"\0"
    return bytes(0x18) + struct.pack("<I", len(raw)) + raw


def build_archive(chunks=CHUNKS, name="Main", extra=None, header=None):
    dec_total = sum(d for _, d in chunks)

    def table(start):
        body = struct.pack("<I", 1) + _package_record(name, dec_total, [(dec_total, start)])
        if extra:
            body += struct.pack("<I", 1) + _package_record(extra, 10, [(10, 0)])
        else:
            body += struct.pack("<I", 0)
        return body + _footer()

    start = HEADER_END + len(table(0))
    return (header or _header()) + table(start) + _segment_block(chunks)


def _write(tmp_path, data, name="Init.xxx"):
    path = tmp_path / name
    path.write_bytes(data)
    return str(path)


def test_dump_writes_one_file_per_chunk(tmp_path):
    path = _write(tmp_path, build_archive())
    written = dump(path)
    assert [os.path.basename(p) for p in written] == ["1_Main_1_1.cmp", "1_Main_1_2.cmp"]
    assert all(os.path.dirname(p) == path + "_out" for p in written)
    with open(written[0], "rb") as f:
        assert f.read() == (50).to_bytes(8, "little") + PAYLOAD_1
    with open(written[1], "rb") as f:
        assert f.read() == (20).to_bytes(8, "little") + PAYLOAD_2


def test_dumped_chunks_decompress_to_declared_size(tmp_path):
    written = dump(_write(tmp_path, build_archive()))
    for file_path, (_, size) in zip(written, CHUNKS):
        with open(file_path, "rb") as f:
            raw = f.read()
        assert int.from_bytes(raw[:8], "little") == size
        assert len(zlib.decompress(raw[8:])) == size


def test_dump_reports_internal_name_and_compression_type(tmp_path, capsys):
    dump(_write(tmp_path, build_archive()))
    out = capsys.readouterr().out
    assert "Internal Package Name: Internal" in out
    assert "Compression Type: 78 9c " in out
    assert "\tName: Main" in out


def test_read_package_restores_position(tmp_path):
    data = build_archive()
    stream = io.BytesIO(data)
    stream.seek(HEADER_END + 4)
    written = read_package(stream, 0, str(tmp_path), False)
    assert len(written) == 2
    record = _package_record("Main", 70, [(70, 0)])
    assert stream.tell() == HEADER_END + 4 + len(record)


def test_read_package_psf_writes_nothing(tmp_path):
    record = _package_record("Extra", 10, [(10, 0)])
    stream = io.BytesIO(record)
    assert read_package(stream, 3, str(tmp_path), True) == []
    assert stream.tell() == len(record)
    assert list(tmp_path.iterdir()) == []


def test_invalid_segment_is_skipped(tmp_path, capsys):
    data = bytearray(build_archive())
    block_start = len(data) - len(_segment_block(CHUNKS))
    data[block_start : block_start + 4] = b"XXXX"
    assert dump(_write(tmp_path, bytes(data))) == []
    assert "Invalid Segment. Skipping..." in capsys.readouterr().err


def test_overflow_warning(tmp_path, capsys):
    stream = io.BytesIO(_package_record("P", 5, [(8, 0)]))
    read_package(stream, 0, str(tmp_path), True)
    err = capsys.readouterr().err
    assert "Warning: Decompressed Data Overflow." in err
    assert "Expected size: 5 but got 8" in err


def test_zero_sized_segment_is_rejected(tmp_path):
    stream = io.BytesIO(_package_record("P", 5, [(0, 0)]))
    with pytest.raises(FormatError):
        read_package(stream, 0, str(tmp_path), True)


def test_truncated_record_is_rejected(tmp_path):
    stream = io.BytesIO(_package_record("P", 5, [(5, 0)])[:-6])
    with pytest.raises(FormatError):
        read_package(stream, 0, str(tmp_path), True)


def test_bad_magic(tmp_path):
    path = _write(tmp_path, build_archive(header=_header(magic=b"ABCD")))
    with pytest.raises(FormatError, match="Not a Mortal Kombat 11 Package file"):
        dump(path)


def test_unsupported_file_version(tmp_path):
    path = _write(tmp_path, build_archive(header=_header(file_version=b"\x02\x03")))
    with pytest.raises(FormatError, match="Not a supported file version."):
        dump(path)


def test_unsupported_script_version(tmp_path):
    path = _write(tmp_path, build_archive(header=_header(script=b"\x9e\x00")))
    with pytest.raises(FormatError):
        dump(path)


def test_compressed_data_package_is_recognised(tmp_path, capsys):
    path = _write(tmp_path, build_archive(header=_header(file_version=b"\x00\x00")))
    assert dump(path) == []
    assert "Compressed Data Package" in capsys.readouterr().out


def test_additional_packages_are_listed_but_not_dumped(tmp_path, capsys):
    written = dump(_write(tmp_path, build_archive(extra="Extra")))
    assert len(written) == 2
    out = capsys.readouterr().out
    assert "Additional 1 Packages Exist in .PSF file" in out
    assert "Package 2:" in out
    assert "Internal Package Name: Internal" in out


def test_main_without_arguments():
    assert main([]) == -1


def test_main_missing_file(tmp_path, capsys):
    missing = str(tmp_path / "absent.xxx")
    assert main([missing]) == -1
    assert f"Error opening file {missing}" in capsys.readouterr().err


def test_main_bad_file(tmp_path):
    path = _write(tmp_path, b"nope" * 40)
    assert main([path]) == -1


def test_main_success(tmp_path):
    path = _write(tmp_path, build_archive())
    assert main([path]) == 0
    assert sorted(os.listdir(path + "_out")) == ["1_Main_1_1.cmp", "1_Main_1_2.cmp"]