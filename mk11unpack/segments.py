"""Package, sub-package, segment and compressed chunk records of an archive."""

from __future__ import annotations

import os
import struct
from dataclasses import dataclass, field
from typing import BinaryIO

from mk11unpack.options import int_to_le_bytes

_CHUNK = struct.Struct("<QQ")
_SEGMENT = struct.Struct("<QQQQ")
_SUBPACKAGE = struct.Struct("<QQQQ")
_PACKAGE = struct.Struct("<QQQQI")
_U32 = struct.Struct("<I")


def _read_exact(stream: BinaryIO, size: int) -> bytes:
    data = stream.read(size)
    if len(data) != size:
        raise EOFError(f"expected {size} bytes, got {len(data)}")
    return data


def _c_string(raw: bytes) -> str:
    return raw.split(b"\0", 1)[0].decode("latin-1")


@dataclass
class CompressedSegment:
    """One compressed chunk and where its data lives in the archive."""

    id: int
    compressed_size: int
    decompressed_size: int
    data_location: int
    data: bytes | None = field(default=None, repr=False)

    @classmethod
    def read(cls, stream: BinaryIO, id: int, data_location: int) -> CompressedSegment:
        """Read the chunk's size pair from ``stream``."""
        compressed, decompressed = _CHUNK.unpack(_read_exact(stream, _CHUNK.size))
        return cls(id, compressed, decompressed, data_location)

    def read_data(self, stream: BinaryIO) -> bytes:
        """Load and return the chunk's compressed bytes."""
        stream.seek(self.data_location)
        self.data = _read_exact(stream, self.compressed_size)
        return self.data

    def pack(self, data: bytes) -> bytes:
        """Return the decompressed size as 8 little-endian bytes followed by ``data``."""
        if len(data) < self.compressed_size:
            raise ValueError(
                f"chunk needs {self.compressed_size} bytes of data, got {len(data)}"
            )
        return int_to_le_bytes(self.decompressed_size, 8) + bytes(
            data[: self.compressed_size]
        )

    def describe(self) -> str:
        """Return a human-readable summary of the chunk."""
        return (
            f"\t\tCompressed Segment #{self.id}: \n"
            f"\t\t\tCompressed Size: {self.compressed_size}\n"
            f"\t\t\tDecompressed Size: {self.decompressed_size}\n"
            f"\t\t\tData Location: {self.data_location}"
        )


@dataclass
class SegmentInfo:
    """Header of a compressed block together with its chunk table."""

    id: int
    magic: int
    max_chunk_size: int
    compressed_size: int
    decompressed_size: int
    compressed_segments: list[CompressedSegment] = field(default_factory=list)

    @classmethod
    def read(cls, stream: BinaryIO, id: int) -> SegmentInfo:
        """Read a block header and chunk table, then skip past the block data."""
        magic, max_size, compressed, decompressed = _SEGMENT.unpack(
            _read_exact(stream, _SEGMENT.size)
        )
        if max_size == 0:
            raise ValueError("segment declares a zero maximum chunk size")
        count = -(-decompressed // max_size)
        location = stream.tell() + count * _CHUNK.size
        chunks = []
        for index in range(count):
            chunk = CompressedSegment.read(stream, index, location)
            chunks.append(chunk)
            location += chunk.compressed_size
        stream.seek(compressed, os.SEEK_CUR)
        return cls(id, magic, max_size, compressed, decompressed, chunks)

    def describe(self) -> str:
        """Return a human-readable summary of the block."""
        return (
            "\t\tInfo:\n"
            f"\t\tMaximum Segment Decompressed Size: {self.max_chunk_size}\n"
            f"\t\tFull Compressed Size: {self.compressed_size}\n"
            f"\t\tFull Decompressed Size: {self.decompressed_size}\n"
            f"\t\tCompressed Segments Found: {len(self.compressed_segments)}"
        )


@dataclass
class SubPackage:
    """Position and size of one compressed block."""

    id: int
    decompressed_offset: int
    decompressed_size: int
    start_offset: int
    segment_size: int
    segment: SegmentInfo | None = None

    @classmethod
    def read(cls, stream: BinaryIO, id: int) -> SubPackage:
        """Read the sub-package record from ``stream``."""
        fields = _SUBPACKAGE.unpack(_read_exact(stream, _SUBPACKAGE.size))
        return cls(id, *fields)

    def read_segment(self, stream: BinaryIO) -> SegmentInfo:
        """Read the block this sub-package points to and keep it."""
        self.segment = SegmentInfo.read(stream, self.id)
        return self.segment

    def describe(self) -> str:
        """Return a human-readable summary of the sub-package."""
        return (
            f"\tSubPackage #{self.id}:\n"
            f"\t\tData Decompressed Offset: {self.decompressed_offset}\n"
            f"\t\tDecompressed Size: {self.decompressed_size}\n"
            f"\t\tStart Offset: {self.start_offset}\n"
            f"\t\tSegment Size: {self.segment_size}"
        )


@dataclass
class Package:
    """A named group of compressed blocks."""

    id: int
    name: str
    decompressed_offset: int
    decompressed_size: int
    start_offset: int
    segment_size: int
    subpackages: list[SubPackage] = field(default_factory=list)

    @classmethod
    def read(cls, stream: BinaryIO, id: int) -> Package:
        """Read a package record and its sub-package records."""
        (name_len,) = _U32.unpack(_read_exact(stream, _U32.size))
        name = _c_string(_read_exact(stream, name_len))
        offset, size, start, segment_size, count = _PACKAGE.unpack(
            _read_exact(stream, _PACKAGE.size)
        )
        subpackages = [SubPackage.read(stream, index) for index in range(count)]
        return cls(id, name, offset, size, start, segment_size, subpackages)

    def describe(self) -> str:
        """Return a human-readable summary of the package."""
        return (
            f"Package #{self.id}:\n"
            f"\tName: {self.name}\n"
            f"\tData Decompressed Offset: {self.decompressed_offset}\n"
            f"\tDecompressed Size: {self.decompressed_size}\n"
            f"\tStart Offset: {self.start_offset}\n"
            f"\tSegment Size: {self.segment_size}\n"
            f"\tSubPackages Count: {len(self.subpackages)}"
        )