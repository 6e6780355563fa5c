"""Name, export and import tables of an unpacked archive."""

from __future__ import annotations

import struct
from dataclasses import dataclass, field
from typing import BinaryIO, Iterable, Iterator, Optional

_U32 = struct.Struct("<I")
_EXPORT = struct.Struct("<iiiIiQ16sIIIQQI")
_IMPORT = struct.Struct("<5i")


def _read_exact(stream: BinaryIO, size: int) -> bytes:
    data = stream.read(size)
    if len(data) != size:
        raise EOFError(f"expected {size} bytes, got {len(data)}")
    return data


def _ref(entry: Optional[TableEntry]) -> str:
    return f" ({entry.fullname})" if entry is not None else ""


def _describe_all(entries: Iterable[object]) -> str:
    return "".join(f"{entry.describe()}\n" for entry in entries)  # type: ignore[attr-defined]


class TableEntry:
    """Common view of table entries used when building object paths."""

    fullname: str = "None"
    fullpath: str = "/"
    outer: Optional[TableEntry] = None


class _Table:
    entries: list

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self) -> Iterator:
        return iter(self.entries)

    def __getitem__(self, index: int):
        return self.entries[index]


@dataclass
class NameTableEntry(TableEntry):
    """One name string."""

    id: int
    name: str

    @classmethod
    def read(cls, stream: BinaryIO, id: int) -> NameTableEntry:
        """Read a length-prefixed name from ``stream``."""
        (length,) = _U32.unpack(_read_exact(stream, _U32.size))
        raw = _read_exact(stream, length)
        return cls(id, raw.split(b"\0", 1)[0].decode("latin-1"))

    def describe(self) -> str:
        """Return the entry as ``id: name``."""
        return f"{self.id}: {self.name}"


@dataclass
class NameTable(_Table):
    """All names of an unpacked archive."""

    location: int = 0
    entries: list[NameTableEntry] = field(default_factory=list)

    @classmethod
    def read(cls, stream: BinaryIO, location: int, count: int) -> NameTable:
        """Read ``count`` names starting at ``location``."""
        stream.seek(location)
        return cls(location, [NameTableEntry.read(stream, i) for i in range(count)])

    def describe(self) -> str:
        """Return one line per name."""
        return _describe_all(self.entries)


@dataclass
class ExportTableEntry(TableEntry):
    """An object stored in the archive."""

    id: int
    class_index: int
    outer_index: int
    name_index: int
    name_suffix: int
    super_index: int
    flags: int
    guid: bytes
    main_package_index: int
    unk1: int
    size: int
    offset: int
    unk2: int
    unk3: int
    fullname: str = ""
    main_package: str = ""
    fullpath: str = ""
    class_ref: Optional[TableEntry] = field(default=None, repr=False, compare=False)
    outer: Optional[TableEntry] = field(default=None, repr=False, compare=False)
    super_ref: Optional[TableEntry] = field(default=None, repr=False, compare=False)
    data: Optional[bytes] = field(default=None, repr=False, compare=False)

    @classmethod
    def read(cls, stream: BinaryIO, id: int) -> ExportTableEntry:
        """Read one export record from ``stream``."""
        return cls(id, *_EXPORT.unpack(_read_exact(stream, _EXPORT.size)))

    def read_data(self, stream: BinaryIO) -> bytes:
        """Load and return the object's bytes."""
        stream.seek(self.offset)
        self.data = _read_exact(stream, self.size)
        return self.data

    def describe(self) -> str:
        """Return a human-readable summary of the export."""
        return (
            f"Entry #{self.id}:\n"
            f"\tClass: {self.class_index}{_ref(self.class_ref)}\n"
            f"\tOuter Class: {self.outer_index}{_ref(self.outer)}\n"
            f"\tName: {self.name_index} ({self.fullname})\n"
            f"\tName Suffix: {self.name_suffix}\n"
            f"\tSuper Class: {self.super_index}{_ref(self.super_ref)}\n"
            f"\tObject Flags: {self.flags} ()\n"
            f"\tHeader Package Name: {self.main_package_index} ({self.main_package})\n"
            f"\tunk1 (prob suffix): {self.unk1}\n"
            f"\tSize: {self.size}\n"
            f"\tOffset: {self.offset}\n"
            f"\tunk2: {self.unk2} ()\n"
            f"\tunk3: {self.unk3} ()\n"
            f"\tFull Path: {self.fullpath}"
        )


@dataclass
class ExportTable(_Table):
    """All exports of an unpacked archive."""

    location: int = 0
    entries: list[ExportTableEntry] = field(default_factory=list)

    @classmethod
    def read(cls, stream: BinaryIO, location: int, count: int) -> ExportTable:
        """Read ``count`` exports starting at ``location``."""
        stream.seek(location)
        return cls(location, [ExportTableEntry.read(stream, i) for i in range(count)])

    def describe(self) -> str:
        """Return every export, each followed by a newline."""
        return _describe_all(self.entries)


@dataclass
class ImportTableEntry(TableEntry):
    """An object the archive refers to but does not contain."""

    id: int
    outer_index: int
    class_name_index: int
    class_name_suffix: int
    class_package_index: int
    name_index: int
    fullname: str = ""
    class_package_name: str = ""
    object_name: str = ""
    fullpath: str = ""
    outer: Optional[TableEntry] = field(default=None, repr=False, compare=False)

    @classmethod
    def read(cls, stream: BinaryIO, id: int) -> ImportTableEntry:
        """Read one import record from ``stream``."""
        return cls(id, *_IMPORT.unpack(_read_exact(stream, _IMPORT.size)))

    def describe(self) -> str:
        """Return a human-readable summary of the import."""
        return (
            f"Entry #{self.id}: \n"
            f"\tOuter Package: {self.outer_index}{_ref(self.outer)}\n"
            f"\tClass Name: {self.class_name_index} ({self.fullname})\n"
            f"\tClass Name Suffix: {self.class_name_suffix}\n"
            f"\tClass Package: {self.class_package_index} ({self.class_package_name})\n"
            f"\tObject Name: {self.name_index} ({self.object_name})\n"
            f"\tFull Path: {self.fullpath}"
        )


@dataclass
class ImportTable(_Table):
    """All imports of an unpacked archive."""

    location: int = 0
    entries: list[ImportTableEntry] = field(default_factory=list)

    @classmethod
    def read(cls, stream: BinaryIO, location: int, count: int) -> ImportTable:
        """Read ``count`` imports starting at ``location``."""
        stream.seek(location)
        return cls(location, [ImportTableEntry.read(stream, i) for i in range(count)])

    def describe(self) -> str:
        """Return every import, each followed by a newline."""
        return _describe_all(self.entries)