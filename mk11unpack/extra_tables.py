"""Tables describing data stored in companion and bulk-data files."""

from __future__ import annotations

import struct
from dataclasses import dataclass, field
from typing import BinaryIO

_ENTRY = struct.Struct("<QQQQ")
_HEADER = struct.Struct("<III")
_U32 = struct.Struct("<I")


def _read_exact(stream: BinaryIO, size: int) -> bytes:
    data = stream.read(size)
    if len(data) != size:
        raise EOFError(f"expected {size} bytes, got {len(data)}")
    return data


@dataclass
class ExtraTableEntry:
    """Sizes and offsets of one stored item."""

    id: int
    decompressed_size: int
    compressed_size: int
    decompressed_offset: int
    compressed_offset: int

    @classmethod
    def read(cls, stream: BinaryIO, id: int) -> ExtraTableEntry:
        """Read one entry from ``stream``."""
        return cls(id, *_ENTRY.unpack(_read_exact(stream, _ENTRY.size)))

    def to_bytes(self) -> bytes:
        """Return the entry in its on-disk form."""
        return _ENTRY.pack(
            self.decompressed_size,
            self.compressed_size,
            self.decompressed_offset,
            self.compressed_offset,
        )

    def describe(self) -> str:
        """Return a human-readable summary of the entry."""
        return (
            f"\t\tEntry #{self.id}\n"
            f"\t\t\tDecompressed Size: {self.decompressed_size}\n"
            f"\t\t\tCompressed Size: {self.compressed_size}\n"
            f"\t\t\tDecompressed Offset: {self.decompressed_offset}\n"
            f"\t\t\tCompressed Offset: {self.compressed_offset}\n"
        )


@dataclass
class ExtraTable:
    """A named list of stored items and the compression they use."""

    id: int
    unk1: int
    unk2: int
    name_len: int
    name: str
    entries: list[ExtraTableEntry] = field(default_factory=list)
    compression_flag: int = 0

    @classmethod
    def read(cls, stream: BinaryIO, id: int) -> ExtraTable:
        """Read one table from ``stream``."""
        unk1, unk2, name_len = _HEADER.unpack(_read_exact(stream, _HEADER.size))
        name = _read_exact(stream, name_len).split(b"\0", 1)[0].decode("latin-1")
        (count,) = _U32.unpack(_read_exact(stream, _U32.size))
        entries = [ExtraTableEntry.read(stream, index) for index in range(count)]
        (flag,) = _U32.unpack(_read_exact(stream, _U32.size))
        return cls(id, unk1, unk2, name_len, name, entries, flag)

    def to_bytes(self) -> bytes:
        """Return the table in its on-disk form, with a NUL-terminated name."""
        return b"".join(
            [
                _HEADER.pack(self.unk1, self.unk2, self.name_len),
                self.name.encode("latin-1") + b"\0",
                _U32.pack(len(self.entries)),
                *(entry.to_bytes() for entry in self.entries),
                _U32.pack(self.compression_flag),
            ]
        )

    def describe(self) -> str:
        """Return a human-readable summary of the table and its entries."""
        return (
            f"\tTable #{self.id}\n"
            f"\t\tUnk1: {self.unk1}\n"
            f"\t\tUnk2: {self.unk2}\n"
            f"\t\tName: {self.name}\n"
            f"\t\tNumber of Table Entries: {len(self.entries)}\n"
            + "".join(entry.describe() for entry in self.entries)
            + f"\t\tCompression Flag: {self.compression_flag}"
        )