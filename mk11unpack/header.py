"""Fixed-size file header at the start of an archive."""

from __future__ import annotations

import enum
import struct
from dataclasses import dataclass
from typing import BinaryIO

from mk11unpack.compression import CompressionFlag

EXPECTED_MAGIC = 0x9E2A83C1
EXPECTED_ENGINE_VERSION = 0x01E7
EXPECTED_FILE_VERSION = 0x0301
EXPECTED_LICENSEE_VERSION = 0x9D

MAX_DEC_SIZE = 0x20000

_HEADER = struct.Struct("<IHHIII4sII4sIIQIQIQQ4III")
HEADER_SIZE = _HEADER.size


class HeaderError(ValueError):
    """Raised when a file header is not one this package supports."""


class PackageFlag(enum.IntFlag):
    """Package flags known from the engine."""

    PKG_None = 0x00000000
    PKG_NewlyCreated = 0x00000001
    PKG_ClientOptional = 0x00000002
    PKG_ServerSideOnly = 0x00000004
    PKG_CompiledIn = 0x00000010
    PKG_ForDiffing = 0x00000020
    PKG_EditorOnly = 0x00000040
    PKG_Developer = 0x00000080
    PKG_UncookedOnly = 0x00000100
    PKG_ContainsMapData = 0x00004000
    PKG_Compiling = 0x00010000
    PKG_ContainsMap = 0x00020000
    PKG_RequiresLocalizationGather = 0x00040000
    PKG_PlayInEditor = 0x00100000
    PKG_ContainsScript = 0x00200000
    PKG_DisallowExport = 0x00400000
    PKG_ReloadingForCooker = 0x40000000
    PKG_FilterEditorOnly = 0x80000000


class ObjectFlag(enum.IntFlag):
    """Object flags, used to describe the header's flag word."""

    RF_NoFlags = 0x00000000
    RF_Public = 0x00000001
    RF_Standalone = 0x00000002
    RF_MarkAsNative = 0x00000004
    RF_Transactional = 0x00000008
    RF_ClassDefaultObject = 0x00000010
    RF_ArchetypeObject = 0x00000020
    RF_Transient = 0x00000040
    RF_MarkAsRootSet = 0x00000080
    RF_TagGarbageTemp = 0x00000100
    RF_NeedInitialization = 0x00000200
    RF_NeedLoad = 0x00000400
    RF_KeepForCooker = 0x00000800
    RF_NeedPostLoad = 0x00001000
    RF_NeedPostLoadSubobjects = 0x00002000
    RF_NewerVersionExists = 0x00004000
    RF_BeginDestroyed = 0x00008000
    RF_FinishDestroyed = 0x00010000
    RF_BeingRegenerated = 0x00020000
    RF_DefaultSubObject = 0x00040000
    RF_WasLoaded = 0x00080000
    RF_TextExportTransient = 0x00100000
    RF_LoadCompleted = 0x00200000
    RF_InheritableComponentTemplate = 0x00400000
    RF_DuplicateTransient = 0x00800000
    RF_StrongRefOnFrame = 0x01000000
    RF_NonPIEDuplicateTransient = 0x02000000
    RF_Dynamic = 0x04000000
    RF_WillBeLoaded = 0x08000000


_DESCRIBED_COMPRESSION = (
    CompressionFlag.ZLIB,
    CompressionFlag.LZO,
    CompressionFlag.LZX,
    CompressionFlag.OODLE,
)


def object_flag_names(flags: int) -> list[str]:
    """Return the names of the object flags set in ``flags``, lowest bit first."""
    return [
        name
        for name, member in ObjectFlag.__members__.items()
        if member.value and flags & member.value
    ]


def compression_flag_names(flags: int) -> list[str]:
    """Return the names of the described compression methods set in ``flags``."""
    return [flag.name for flag in _DESCRIBED_COMPRESSION if flags & flag.value]


def _flag_list(names: list[str]) -> str:
    return "( " + "".join(f"{name} " for name in names) + ")"


@dataclass
class FileHeader:
    """The archive header: versions, table locations and package count."""

    magic: int
    file_version: int
    licensee_version: int
    decompressed_start: int
    shader_version: int
    engine_version: int
    midway_team_fourcc: bytes
    midway_team_version: int
    cooked_version: int
    main_package_name: bytes
    package_flags: int
    name_table_count: int
    name_table_offset: int
    export_table_count: int
    export_table_offset: int
    import_table_count: int
    import_table_offset: int
    bulk_data_offset: int
    guid: tuple[int, int, int, int]
    compression_flag: int
    number_of_packages: int

    @classmethod
    def read(cls, stream: BinaryIO) -> FileHeader:
        """Read and validate a header from ``stream``."""
        raw = stream.read(HEADER_SIZE)
        if len(raw) != HEADER_SIZE:
            raise EOFError(f"expected {HEADER_SIZE} bytes, got {len(raw)}")
        values = _HEADER.unpack(raw)
        header = cls(
            *values[:18],
            guid=tuple(values[18:22]),  # type: ignore[arg-type]
            compression_flag=values[22],
            number_of_packages=values[23],
        )
        header.validate()
        return header

    def validate(self) -> None:
        """Raise HeaderError unless the versions are the supported ones."""
        if self.magic != EXPECTED_MAGIC:
            raise HeaderError("Magic Mismatch")
        if self.engine_version != EXPECTED_ENGINE_VERSION:
            raise HeaderError("Engine Version Mismatch")
        if self.file_version != EXPECTED_FILE_VERSION:
            raise HeaderError("File Version Mismatch")
        if self.licensee_version != EXPECTED_LICENSEE_VERSION:
            raise HeaderError("Licensee Mismatch")

    def to_bytes(self) -> bytes:
        """Return the header in its on-disk form."""
        return _HEADER.pack(
            self.magic,
            self.file_version,
            self.licensee_version,
            self.decompressed_start,
            self.shader_version,
            self.engine_version,
            self.midway_team_fourcc,
            self.midway_team_version,
            self.cooked_version,
            self.main_package_name,
            self.package_flags,
            self.name_table_count,
            self.name_table_offset,
            self.export_table_count,
            self.export_table_offset,
            self.import_table_count,
            self.import_table_offset,
            self.bulk_data_offset,
            *self.guid,
            self.compression_flag,
            self.number_of_packages,
        )

    def guid_string(self) -> str:
        """Return the file identifier in upper-case dashed hexadecimal form."""
        g0, g1, g2, g3 = self.guid
        return (
            f"{g0:08X}-{(g1 >> 16) & 0xFFFF:04X}-{g1 & 0xFFFF:04X}-"
            f"{(g2 >> 16) & 0xFFFF:04X}-{g2 & 0xFFFF:04X}{g3:08X}"
        )

    def describe(self) -> str:
        """Return a human-readable summary of the header."""
        fourcc = self.midway_team_fourcc.decode("latin-1")
        package = self.main_package_name.decode("latin-1")
        return (
            "File Info: \n"
            f"\tMagic: {self.magic:X}\n"
            f"\tVersion (file/licensee): {self.file_version:X}/{self.licensee_version:X}\n"
            f"\tDecompressed Data Start Location: {self.decompressed_start:X}\n"
            f"\tShader Version: {self.shader_version:X}\n"
            f"\tEngine Version: {self.engine_version:X}\n"
            f"\tMidway Team FourCC: {fourcc}\n"
            f"\tMidway Team Version: {self.midway_team_version:X}\n"
            f"\tCooked Version: {self.cooked_version:X}\n"
            f"\tPackage Flags: {self.package_flags:X} "
            f"{_flag_list(object_flag_names(self.package_flags))}\n"
            "\tTable Data:\n"
            f"\t\tName Table Entries: {self.name_table_count:X}\n"
            f"\t\tName Table Decompressed Offset: {self.name_table_offset:X}\n"
            f"\t\tExport Table Entries: {self.export_table_count:X}\n"
            f"\t\tExport Table Decompressed Offset: {self.export_table_offset:X}\n"
            f"\t\tImport Table Entries: {self.import_table_count:X}\n"
            f"\t\tImport Table Decompressed Offset: {self.import_table_offset:X}\n"
            f"\tBulk Data Decompressed Offset: {self.bulk_data_offset:X}\n"
            f"\tFile GUID: {self.guid_string()}\n"
            f"\tCompression Flag: {self.compression_flag:X} "
            f"{_flag_list(compression_flag_names(self.compression_flag))}\n"
            f"\tPackage: {package}\n"
            f"\tPackages Count: {self.number_of_packages:X}"
        )