"""Chunk codecs used by the archive format."""

from __future__ import annotations

import enum
import os
import zlib
from abc import ABC, abstractmethod

OODLE_LIBRARY = "oo2core_5_win64.dll"


class CompressionFlag(enum.IntFlag):
    """Compression method stored in the file header."""

    NONE = 0x0000
    ZLIB = 0x0001
    LZO = 0x0002
    LZX = 0x0004
    PFS = 0x0008
    OODLE = 0x0100


class CompressionError(Exception):
    """Raised when a chunk cannot be compressed or decompressed."""


class UnsupportedCompression(CompressionError):
    """Raised when the archive uses a method this package cannot handle."""


class Codec(ABC):
    """A compression method for archive chunks."""

    @abstractmethod
    def compress(self, data: bytes) -> bytes:
        """Return ``data`` compressed."""

    @abstractmethod
    def decompress(self, data: bytes, decompressed_size: int) -> bytes:
        """Return exactly ``decompressed_size`` bytes decoded from ``data``."""


class ZlibCodec(Codec):
    """Zlib chunks, written with compression level 0."""

    compression_level = 0

    def compress(self, data: bytes) -> bytes:
        return zlib.compress(data, self.compression_level)

    def decompress(self, data: bytes, decompressed_size: int) -> bytes:
        decoder = zlib.decompressobj()
        try:
            output = decoder.decompress(data, decompressed_size)
        except zlib.error as exc:
            raise CompressionError("Decompression Error") from exc
        if decoder.unconsumed_tail or not decoder.eof:
            raise CompressionError("Decompression Error")
        return output.ljust(decompressed_size, b"\0")


def codec_for_flag(flag: int, dll_folder: str = "") -> Codec:
    """Return the codec for a header compression flag."""
    if flag == CompressionFlag.ZLIB:
        return ZlibCodec()
    if flag == CompressionFlag.OODLE:
        library = dll_folder or os.path.join(".", OODLE_LIBRARY)
        raise UnsupportedCompression(
            f"Oodle compression requires the native library {library}, "
            "which cannot be used here"
        )
    raise UnsupportedCompression("Unsupported Compression!")