import zlib

import pytest

from mk11unpack.compression import (
    CompressionError,
    CompressionFlag,
    UnsupportedCompression,
    ZlibCodec,
    codec_for_flag,
)


@pytest.mark.parametrize("payload", [b"", b"a", b"hello world" * 100, bytes(range(256))])
def test_zlib_round_trip(payload):
    codec = ZlibCodec()
    assert codec.decompress(codec.compress(payload), len(payload)) == payload


def test_zlib_output_readable_by_standard_zlib():
    payload = b"segment data" * 10
    assert zlib.decompress(ZlibCodec().compress(payload)) == payload


def test_zlib_decompress_foreign_stream():
    payload = b"x" * 0x20000
    assert ZlibCodec().decompress(zlib.compress(payload, 9), len(payload)) == payload


def test_zlib_short_output_is_padded():
    codec = ZlibCodec()
    result = codec.decompress(codec.compress(b"abc"), 6)
    assert len(result) == 6
    assert result.startswith(b"abc")


def test_zlib_buffer_too_small():
    codec = ZlibCodec()
    with pytest.raises(CompressionError):
        codec.decompress(codec.compress(b"abcdef"), 3)


def test_zlib_garbage():
    with pytest.raises(CompressionError):
        ZlibCodec().decompress(b"not zlib data", 10)


def test_zlib_truncated_stream():
    data = zlib.compress(b"abcdefgh" * 50)
    with pytest.raises(CompressionError):
        ZlibCodec().decompress(data[:-6], 400)


def test_codec_for_zlib_flag():
    codec = codec_for_flag(CompressionFlag.ZLIB, "")
    assert isinstance(codec, ZlibCodec)
    assert codec.decompress(codec.compress(b"data"), 4) == b"data"


def test_codec_for_oodle_flag_is_unsupported():
    with pytest.raises(UnsupportedCompression):
        codec_for_flag(0x100, "")


@pytest.mark.parametrize("flag", [0, 2, 4, 8, 0x101])
def test_other_flags_unsupported(flag):
    with pytest.raises(UnsupportedCompression):
        codec_for_flag(flag, "")


def test_unsupported_is_compression_error():
    with pytest.raises(CompressionError):
        codec_for_flag(CompressionFlag.LZO, "")