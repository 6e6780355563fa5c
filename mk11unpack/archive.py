"""A whole archive: header, package records, extra tables and object tables."""

from __future__ import annotations

import os
import struct
import sys
from dataclasses import dataclass, field
from typing import BinaryIO, Optional

from mk11unpack.extra_tables import ExtraTable
from mk11unpack.header import FileHeader
from mk11unpack.paths import FileLayout, join, mkdirs
from mk11unpack.segments import Package
from mk11unpack.tables import ExportTable, ImportTable, NameTable, TableEntry

_U32 = struct.Struct("<I")

UNKNOWN_GAP = 0x18
# Compression flag, package count padding and the unknown gap, all zeroed.
UPK_PADDING = 4 + 8 + 0x18


def _read_exact(stream: BinaryIO, size: int) -> bytes:
    data = stream.read(size)
    if len(data) != size:
        raise EOFError(f"expected {size} bytes, got {len(data)}")
    return data


def _read_u32(stream: BinaryIO) -> int:
    (value,) = _U32.unpack(_read_exact(stream, _U32.size))
    return value


def _read_extra_tables(stream: BinaryIO) -> list[ExtraTable]:
    count = _read_u32(stream)
    return [ExtraTable.read(stream, index) for index in range(count)]


def _warn(message: str) -> None:
    print(message, file=sys.stderr)


@dataclass
class MK11File:
    """A parsed archive and, once read, the tables of its unpacked data."""

    header: FileHeader
    packages: list[Package]
    extra_packages: list[Package]
    internal_file_name: str
    psf_tables: list[ExtraTable]
    bulk_tables: list[ExtraTable]
    load_psf: bool = True
    has_psf: bool = False
    name_table: NameTable = field(default_factory=NameTable)
    export_table: ExportTable = field(default_factory=ExportTable)
    import_table: ImportTable = field(default_factory=ImportTable)

    @classmethod
    def read(
        cls,
        stream: BinaryIO,
        psf_stream: Optional[BinaryIO] = None,
        load_psf: bool = True,
    ) -> MK11File:
        """Read the archive from ``stream`` and its companion data file, if any."""
        header = FileHeader.read(stream)
        packages = [Package.read(stream, index) for index in range(header.number_of_packages)]
        extra_count = _read_u32(stream)
        extra_packages = [
            Package.read(stream, header.number_of_packages + index)
            for index in range(extra_count)
        ]
        stream.seek(UNKNOWN_GAP, os.SEEK_CUR)
        name_len = _read_u32(stream)
        internal = _read_exact(stream, name_len).split(b"\0", 1)[0].decode("latin-1")
        psf_tables = _read_extra_tables(stream)
        bulk_tables = _read_extra_tables(stream)

        for package in packages:
            for subpackage in package.subpackages:
                subpackage.read_segment(stream)

        archive = cls(
            header=header,
            packages=packages,
            extra_packages=extra_packages,
            internal_file_name=internal,
            psf_tables=psf_tables,
            bulk_tables=bulk_tables,
            load_psf=load_psf,
        )
        archive._read_extra_segments(psf_stream)
        return archive

    def _read_extra_segments(self, psf_stream: Optional[BinaryIO]) -> None:
        if not self.extra_packages:
            _warn("PSF File Not Required.")
            return
        if psf_stream is None:
            _warn("Couldn't find required PSF File... Skipping.")
            return
        self.has_psf = self.load_psf
        for package in self.extra_packages:
            for subpackage in package.subpackages:
                subpackage.read_segment(psf_stream)

    def describe(self) -> str:
        """Return a human-readable summary of the archive."""
        return (
            f"{self.header.describe()}\n"
            f"\tExtra Packages Count: {len(self.extra_packages):X}\n"
            f"\tInternal File Name: {self.internal_file_name}\n"
            f"\tExtra Packages Table Count: {len(self.psf_tables):X}\n"
            f"\tBulk Packages Table Count: {len(self.bulk_tables):X}"
        )

    def upk_header(self) -> bytes:
        """Return the bytes that precede the decompressed data in an unpacked file."""
        name = self.internal_file_name.encode("latin-1") + b"\0"
        return b"".join(
            [
                self.header.to_bytes()[:-8],
                bytes(UPK_PADDING),
                _U32.pack(len(name)),
                name,
                _U32.pack(len(self.psf_tables)),
                *(table.to_bytes() for table in self.psf_tables),
                _U32.pack(len(self.bulk_tables)),
                *(table.to_bytes() for table in self.bulk_tables),
            ]
        )

    def read_tables(self, upk_stream: BinaryIO) -> None:
        """Read the name, export and import tables and resolve their references."""
        header = self.header
        self.name_table = NameTable.read(
            upk_stream, header.name_table_offset, header.name_table_count
        )
        self.export_table = ExportTable.read(
            upk_stream, header.export_table_offset, header.export_table_count
        )
        self.import_table = ImportTable.read(
            upk_stream, header.import_table_offset, header.import_table_count
        )
        self._resolve_names()
        self._resolve_references()
        self._resolve_paths()

    def object_name(self, name_index: int, name_suffix: int) -> str:
        """Return a name table entry, with ``_<suffix - 1>`` appended for a suffix."""
        name = self.name_table[name_index].name
        return f"{name}_{name_suffix - 1}" if name_suffix else name

    def resolve_object(self, value: int) -> Optional[TableEntry]:
        """Return the import (negative), export (positive) or nothing (zero) ``value`` refers to."""
        if value < 0:
            return self.import_table[-value - 1]
        if value > 0:
            return self.export_table[value - 1]
        return None

    def _resolve_names(self) -> None:
        for export in self.export_table:
            export.fullname = self.object_name(export.name_index, export.name_suffix)
            export.main_package = self.object_name(export.main_package_index, export.unk1)
        for entry in self.import_table:
            entry.object_name = self.object_name(entry.name_index, 0)
            entry.class_package_name = self.object_name(entry.class_package_index, 0)
            entry.fullname = self.object_name(entry.class_name_index, entry.class_name_suffix)

    def _resolve_references(self) -> None:
        for export in self.export_table:
            export.class_ref = self.resolve_object(export.class_index)
            export.outer = self.resolve_object(export.outer_index)
            export.super_ref = self.resolve_object(export.super_index)
        for entry in self.import_table:
            entry.outer = self.resolve_object(entry.outer_index)

    @staticmethod
    def _prefix_outers(name: str, outer: Optional[TableEntry]) -> str:
        seen: set[int] = set()
        while outer is not None:
            if id(outer) in seen:
                raise ValueError(f"cyclic outer reference while resolving {name!r}")
            seen.add(id(outer))
            name = join(outer.fullname, name)
            outer = outer.outer
        return name

    def _resolve_paths(self) -> None:
        for export in self.export_table:
            name = export.fullname
            if export.class_ref is not None:
                name += "." + export.class_ref.fullname
            export.fullpath = self._prefix_outers(name, export.outer)
        for entry in self.import_table:
            name = f"{entry.object_name}.{entry.fullname}"
            entry.fullpath = self._prefix_outers(name, entry.outer)

    def extract_exports(self, upk_stream: BinaryIO, layout: FileLayout) -> list[str]:
        """Write every export's data to its own file and return the paths written."""
        written = []
        for export in self.export_table:
            data = export.read_data(upk_stream)
            full_path = join(layout.folder_out_name, layout.extracted_folder, export.fullpath)
            print(f"Extracting: {full_path}", file=sys.stderr)
            mkdirs(full_path)
            with open(full_path, "wb") as out:
                out.write(data)
            export.data = None
            written.append(full_path)
        return written